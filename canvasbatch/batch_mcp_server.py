#!/usr/bin/env python3
"""
Canvas Batch MCP Server
Model Context Protocol server for batched canvas operations via D-Bus extension

Provides two tools that turn many canvas operations into a single round trip:
element creation in bulk, and bundled execution of arbitrary canvas commands
with priority ordering and optional stop-on-first-error.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from mcp.server.fastmcp import Context, FastMCP

from .batchops import (
    BatchValidationError,
    CanvasBatchError,
    build_command_envelope,
    build_element_envelope,
    format_report,
    submit_batch,
)
from .connection import DEFAULT_ACTION_NAME, DEFAULT_TIMEOUT, CanvasConnection, get_available_connection

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("CanvasBatchMCP")


def configured_timeout() -> float:
    """Round-trip timeout from CANVASBATCH_TIMEOUT; raises CanvasBatchError on a bad value"""
    raw = os.environ.get("CANVASBATCH_TIMEOUT")
    if raw is None:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        timeout = 0
    if timeout <= 0:
        raise CanvasBatchError(f"Invalid CANVASBATCH_TIMEOUT: {raw!r} (expected a positive number of seconds)")
    return timeout


# Global connection instance
_canvas_connection: Optional[CanvasConnection] = None


def get_canvas_connection() -> CanvasConnection:
    """Get or create the canvas connection; raises CanvasUnavailableError if unreachable"""
    global _canvas_connection

    if _canvas_connection is None:
        _canvas_connection = CanvasConnection(
            action_name=os.environ.get("CANVASBATCH_ACTION_NAME", DEFAULT_ACTION_NAME),
            timeout=configured_timeout(),
        )

    return get_available_connection(_canvas_connection)


@asynccontextmanager
async def server_lifespan(server: FastMCP) -> AsyncIterator[Dict[str, Any]]:
    """Manage server startup and shutdown lifecycle"""
    logger.info("Canvas batch MCP server starting up")

    try:
        # Test connection on startup
        try:
            get_canvas_connection()
            logger.info("Successfully connected to canvas on startup")
        except CanvasBatchError as e:
            logger.warning(f"Could not connect to canvas on startup: {e}")
            logger.warning(
                "Make sure the canvas is running with the batch MCP extension before using tools"
            )

        yield {}
    finally:
        logger.info("Canvas batch MCP server shut down")


# Create the MCP server
mcp = FastMCP("CanvasBatchMCP", lifespan=server_lifespan)


@mcp.tool()
def batch_create_elements(ctx: Context, elements: Optional[List[Dict[str, Any]]] = None) -> str:
    """
    Create multiple elements in one operation for improved performance.

    Each element: type (rectangle | frame | text), x, y, and optionally width,
    height, text, name, parentId and styles {fillColor, strokeColor,
    strokeWeight, cornerRadius, fontSize, fontWeight}. Colors are
    {r, g, b, a} with channels between 0 and 1.

    Elements are created in the order given, so parentId may refer to a frame
    created earlier in the same batch.

    Example:
    elements=[
        {"type": "rectangle", "x": 100, "y": 1500, "width": 200, "height": 100,
         "styles": {"fillColor": {"r": 1, "g": 0, "b": 0, "a": 1}}},
        {"type": "text", "x": 150, "y": 1750, "text": "Batch Created Elements",
         "styles": {"fontSize": 18, "fontWeight": 600}}
    ]

    Returns a summary with created node IDs and, if any, the failures.
    """
    try:
        envelope = build_element_envelope(elements)
    except BatchValidationError as e:
        logger.warning(f"Rejected element batch: {e}")
        return f"❌ {e}"

    try:
        result = submit_batch(envelope, get_canvas_connection)
    except CanvasBatchError as e:
        return f"❌ Error creating elements in batch: {e}"

    return format_report(result)


@mcp.tool()
def execute_bundled_commands(
    ctx: Context, commands: Optional[List[Dict[str, Any]]] = None, stop_on_error: bool = False
) -> str:
    """
    Execute multiple canvas commands in a single batch for improved performance.

    Each command: {"command": name, "params": {...}, "priority": "high" | "normal" | "low"}.
    Commands run high priority first, then normal, then low; within a priority
    they keep the order given. Results are always reported in the order given.

    stop_on_error: when true, execution halts at the first failing command and
    the remaining commands are not attempted.

    Example:
    commands=[
        {"command": "create_frame", "params": {"x": 400, "y": 100, "width": 300, "height": 200}, "priority": "high"},
        {"command": "create_text", "params": {"x": 450, "y": 150, "text": "Title"}},
        {"command": "create_rectangle", "params": {"x": 450, "y": 200, "width": 200, "height": 50}, "priority": "low"}
    ]
    """
    try:
        envelope = build_command_envelope(commands, stop_on_error=stop_on_error)
    except BatchValidationError as e:
        logger.warning(f"Rejected command batch: {e}")
        return f"❌ {e}"

    try:
        result = submit_batch(envelope, get_canvas_connection)
    except CanvasBatchError as e:
        return f"❌ Error executing bundled commands: {e}"

    return format_report(result)


def main():
    """Run the Canvas Batch MCP server"""
    logger.info("Starting Canvas Batch MCP Server...")
    mcp.run()


if __name__ == "__main__":
    main()
