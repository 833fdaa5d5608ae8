"""Shared pytest fixtures for canvas batch tests.

The canvas itself is replaced by FakeCanvas, which records every request and
replays a canned reply, so no D-Bus session is needed.
"""

from typing import Any, Dict, List, Optional

import pytest

from canvasbatch.batchops.common import create_error_response, create_success_response


class FakeCanvas:
    """Stands in for CanvasConnection: one execute_operation call per batch"""

    def __init__(self, reply: Optional[Dict[str, Any]] = None, response: Optional[Dict[str, Any]] = None):
        self.reply = reply or {}
        self.response = response
        self.requests: List[Dict[str, Any]] = []

    def execute_operation(self, operation_data: Dict[str, Any]) -> Dict[str, Any]:
        self.requests.append(operation_data)
        if self.response is not None:
            return self.response
        reply = dict(self.reply)
        message = reply.pop("message", "Batch executed")
        return create_success_response(message, **reply)


@pytest.fixture
def fake_canvas():
    """Factory for a FakeCanvas replaying the given reply"""

    def _make(reply=None, response=None):
        return FakeCanvas(reply=reply, response=response)

    return _make


@pytest.fixture
def failing_canvas():
    return FakeCanvas(response=create_error_response("D-Bus call failed: connection refused"))


@pytest.fixture
def sample_elements():
    """Two rectangles and a text node"""
    return [
        {
            "type": "rectangle",
            "x": 100,
            "y": 1500,
            "width": 200,
            "height": 100,
            "name": "Batch Rectangle 1",
            "styles": {"fillColor": {"r": 1, "g": 0, "b": 0, "a": 1}, "cornerRadius": 8},
        },
        {
            "type": "rectangle",
            "x": 100,
            "y": 1620,
            "width": 200,
            "height": 100,
            "name": "Batch Rectangle 2",
            "styles": {"fillColor": {"r": 0, "g": 1, "b": 0, "a": 1}, "cornerRadius": 8},
        },
        {
            "type": "text",
            "x": 150,
            "y": 1750,
            "text": "Batch Created Elements",
            "name": "Batch Text",
            "styles": {"fontSize": 18, "fontWeight": 600},
        },
    ]


@pytest.fixture
def sample_commands():
    """high create_frame, normal create_text, low create_rectangle"""
    return [
        {
            "command": "create_frame",
            "params": {"x": 400, "y": 100, "width": 300, "height": 200, "name": "Bundled Frame"},
            "priority": "high",
        },
        {
            "command": "create_text",
            "params": {"x": 450, "y": 150, "text": "Bundled Commands Test", "fontSize": 16},
            "priority": "normal",
        },
        {
            "command": "create_rectangle",
            "params": {"x": 450, "y": 200, "width": 200, "height": 50, "name": "Bundled Rectangle"},
            "priority": "low",
        },
    ]
