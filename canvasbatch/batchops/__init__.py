"""
Canvas Batch Operations Package
Contains the batch core shared by the MCP server and the CLI client:

    envelope = build_command_envelope(commands, stop_on_error=True)
    result = submit_batch(envelope, get_connection)
    text = format_report(result)

Per-item failures are data in the returned BatchResult, never exceptions.
"""

from .aggregate import BatchResult, BatchState, OperationOutcome, aggregate_reply, empty_result
from .common import (
    BatchTransportError,
    BatchValidationError,
    CanvasBatchError,
    CanvasUnavailableError,
    MalformedReplyError,
)
from .envelope import (
    BatchEnvelope,
    build_command_envelope,
    build_element_envelope,
    validate_commands,
    validate_elements,
)
from .models import BundledCommand, ElementDescriptor, ElementStyles, RGBAColor
from .pipeline import submit_batch
from .report import format_report

__all__ = [
    "BatchEnvelope",
    "BatchResult",
    "BatchState",
    "BatchTransportError",
    "BatchValidationError",
    "BundledCommand",
    "CanvasBatchError",
    "CanvasUnavailableError",
    "ElementDescriptor",
    "ElementStyles",
    "MalformedReplyError",
    "OperationOutcome",
    "RGBAColor",
    "aggregate_reply",
    "build_command_envelope",
    "build_element_envelope",
    "empty_result",
    "format_report",
    "submit_batch",
    "validate_commands",
    "validate_elements",
]
