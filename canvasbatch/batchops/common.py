"""Common response helpers and error types for batch operations"""

from typing import Any, Dict, Optional


class CanvasBatchError(Exception):
    """Base class for batch-level errors"""


class BatchValidationError(CanvasBatchError):
    """A descriptor violates its field constraints; the batch is not sent"""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index


class BatchTransportError(CanvasBatchError):
    """The single round trip to the canvas failed as a whole"""


class MalformedReplyError(BatchTransportError):
    """The canvas replied with something that is not a usable batch reply"""


class CanvasUnavailableError(BatchTransportError):
    """The canvas D-Bus service or its batch action is not reachable"""


def create_success_response(message: str, **data) -> Dict[str, Any]:
    """Create a standardized success response"""
    response_data = {"message": message}
    response_data.update(data)
    return {
        "status": "success",
        "data": response_data
    }


def create_error_response(error_message: str, **data) -> Dict[str, Any]:
    """Create a standardized error response"""
    response_data = {"error": error_message}
    response_data.update(data)
    return {
        "status": "error",
        "data": response_data
    }


def response_error_text(response: Dict[str, Any]) -> str:
    """Extract the error text from a standardized error response"""
    data = response.get("data")
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return "Unknown error"
