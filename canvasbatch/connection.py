"""
Canvas connection
Single logical channel to the canvas batch action over D-Bus.

The request goes out as a JSON params file, the canvas action is activated with
gdbus, and the reply comes back through a per-request response file. One request
is outstanding at a time; the shared params file assumes that.
"""

import json
import logging
import os
import subprocess
import tempfile
from typing import Any, Dict, Optional

from .batchops.common import CanvasUnavailableError, create_error_response, create_success_response

logger = logging.getLogger(__name__)

# Channel configuration
DEFAULT_DBUS_SERVICE = "org.inkscape.Inkscape"
DEFAULT_DBUS_PATH = "/org/inkscape/Inkscape"
DEFAULT_DBUS_INTERFACE = "org.gtk.Actions"
DEFAULT_ACTION_NAME = "org.khema.inkscape.mcp.batch"
DEFAULT_TIMEOUT = 30
AVAILABILITY_TIMEOUT = 5
PARAMS_FILE_NAME = "mcp_params.json"


class CanvasConnection:
    """Manages the D-Bus channel to the canvas batch action"""

    def __init__(
        self,
        dbus_service: str = DEFAULT_DBUS_SERVICE,
        dbus_path: str = DEFAULT_DBUS_PATH,
        dbus_interface: str = DEFAULT_DBUS_INTERFACE,
        action_name: str = DEFAULT_ACTION_NAME,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.dbus_service = dbus_service
        self.dbus_path = dbus_path
        self.dbus_interface = dbus_interface
        self.action_name = action_name
        self.timeout = timeout
        self.params_file = os.path.join(tempfile.gettempdir(), PARAMS_FILE_NAME)

    def _gdbus_command(self, method: str, *args: str) -> list:
        return [
            "gdbus",
            "call",
            "--session",
            "--dest",
            self.dbus_service,
            "--object-path",
            self.dbus_path,
            "--method",
            f"{self.dbus_interface}.{method}",
            *args,
        ]

    def is_available(self) -> bool:
        """Check if the canvas is running and the batch action is registered"""
        try:
            result = subprocess.run(
                self._gdbus_command("List"),
                capture_output=True,
                text=True,
                timeout=AVAILABILITY_TIMEOUT,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.error(f"Error checking canvas availability: {e}")
            return False

        if result.returncode != 0:
            logger.warning("Canvas D-Bus service not available")
            return False

        return self.action_name in result.stdout

    def _read_response(self, response_file: str) -> Dict[str, Any]:
        if not os.path.exists(response_file) or os.path.getsize(response_file) == 0:
            return create_error_response("No reply received from canvas")

        try:
            with open(response_file, "r") as f:
                response = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read response file: {e}")
            return create_error_response(f"Response file error: {e}")

        if not isinstance(response, dict):
            return create_error_response(f"Unexpected reply from canvas: {type(response).__name__}")

        # Replies may come bare or already wrapped in the status envelope
        if "status" in response:
            return response
        reply = dict(response)
        message = reply.pop("message", "Batch executed")
        return create_success_response(message, **reply)

    def execute_operation(self, operation_data: Dict[str, Any]) -> Dict[str, Any]:
        """Run one batch request and return the status envelope; never raises for channel errors"""
        response_fd, response_file = tempfile.mkstemp(suffix=".json", prefix="mcp_response_")
        os.close(response_fd)

        try:
            request = dict(operation_data)
            request["response_file"] = response_file

            with open(self.params_file, "w") as f:
                json.dump(request, f)
            logger.debug(f"Wrote request for {request.get('command')} to {self.params_file}")

            result = subprocess.run(
                self._gdbus_command("Activate", self.action_name, "[]", "{}"),
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )

            if result.returncode != 0:
                logger.error(f"D-Bus command failed: {result.stderr}")
                return create_error_response(f"D-Bus call failed: {result.stderr.strip()}")

            return self._read_response(response_file)

        except subprocess.TimeoutExpired:
            logger.error("Operation timed out")
            return create_error_response(f"Operation timed out after {self.timeout}s")
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Operation execution error: {e}")
            return create_error_response(str(e))
        finally:
            if os.path.exists(response_file):
                os.remove(response_file)


def get_available_connection(connection: Optional[CanvasConnection] = None, **kwargs) -> CanvasConnection:
    """Return a connection whose action is reachable, or raise CanvasUnavailableError"""
    connection = connection or CanvasConnection(**kwargs)
    if not connection.is_available():
        raise CanvasUnavailableError(
            "Canvas is not running or the batch MCP extension is not available. "
            "Please start the canvas application and ensure the batch extension is installed."
        )
    return connection
