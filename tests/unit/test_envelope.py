"""Unit tests for descriptor validation and Batch Envelope construction."""

import pytest

from canvasbatch.batchops import (
    BatchValidationError,
    BundledCommand,
    ElementDescriptor,
    build_command_envelope,
    build_element_envelope,
    validate_commands,
    validate_elements,
)
from canvasbatch.batchops.envelope import sequence_by_priority


class TestElementValidation:
    """Field-level constraints on element descriptors."""

    def test_accepts_wire_names(self, sample_elements):
        elements = validate_elements(sample_elements)
        assert len(elements) == 3
        assert elements[0].styles.fill_color.r == 1
        assert elements[0].styles.corner_radius == 8
        assert elements[2].styles.font_weight == 600

    def test_accepts_python_names_and_instances(self):
        descriptor = ElementDescriptor(type="frame", x=0, y=0, parent_id="1:2")
        elements = validate_elements([descriptor, {"type": "text", "x": 1, "y": 2, "parent_id": "1:3"}])
        assert elements[0] is descriptor
        assert elements[1].parent_id == "1:3"

    def test_none_is_empty(self):
        assert validate_elements(None) == []

    @pytest.mark.parametrize(
        "element",
        [
            {"type": "circle", "x": 0, "y": 0},
            {"type": "rectangle", "x": 0},
            {"type": "rectangle", "x": 0, "y": 0, "styles": {"fillColor": {"r": 1.5, "g": 0, "b": 0}}},
            {"type": "rectangle", "x": 0, "y": 0, "styles": {"strokeColor": {"r": 0, "g": 0, "b": 0, "a": -0.1}}},
            {"type": "rectangle", "x": 0, "y": 0, "styles": {"strokeWeight": 0}},
            {"type": "text", "x": 0, "y": 0, "styles": {"fontSize": -4}},
            {"type": "frame", "x": 0, "y": 0, "styles": {"cornerRadius": -1}},
        ],
    )
    def test_rejects_constraint_violations(self, element):
        with pytest.raises(BatchValidationError):
            validate_elements([element])

    def test_error_names_offending_index(self, sample_elements):
        sample_elements[1]["styles"]["fillColor"]["g"] = 2
        with pytest.raises(BatchValidationError) as exc_info:
            validate_elements(sample_elements)
        assert exc_info.value.index == 1
        assert "index 1" in str(exc_info.value)
        assert "fillColor" in str(exc_info.value)

    def test_rejects_non_list(self):
        with pytest.raises(BatchValidationError):
            validate_elements({"type": "text", "x": 0, "y": 0})

    def test_parent_reference_is_not_resolved(self):
        elements = validate_elements([{"type": "text", "x": 0, "y": 0, "parentId": "does-not-exist"}])
        assert elements[0].parent_id == "does-not-exist"


class TestCommandValidation:
    """Bundled command descriptors."""

    def test_params_are_opaque(self):
        commands = validate_commands([{"command": "anything", "params": [1, "two", {"three": None}]}])
        assert commands[0].params == [1, "two", {"three": None}]

    def test_priority_defaults_to_normal(self):
        command = BundledCommand(command="create_text")
        assert command.priority is None
        assert command.effective_priority == "normal"

    def test_rejects_unknown_priority(self):
        with pytest.raises(BatchValidationError) as exc_info:
            validate_commands([{"command": "a"}, {"command": "b", "priority": "urgent"}])
        assert exc_info.value.index == 1

    def test_rejects_missing_command_name(self):
        with pytest.raises(BatchValidationError):
            validate_commands([{"params": {}}])


class TestPrioritySequencer:
    """Execution order for bundled commands."""

    def test_high_normal_low(self, sample_commands):
        commands = validate_commands(list(reversed(sample_commands)))
        assert sequence_by_priority(commands) == [2, 1, 0]

    def test_stable_within_priority(self):
        commands = validate_commands([
            {"command": "a", "priority": "low"},
            {"command": "b"},
            {"command": "c", "priority": "high"},
            {"command": "d", "priority": "normal"},
            {"command": "e", "priority": "high"},
            {"command": "f", "priority": "low"},
        ])
        order = [commands[i].command for i in sequence_by_priority(commands)]
        assert order == ["c", "e", "b", "d", "a", "f"]


class TestBatchEnvelope:
    """Envelope construction and outbound payloads."""

    def test_element_payload_keeps_submission_order(self, sample_elements):
        envelope = build_element_envelope(sample_elements)
        payload = envelope.to_payload()
        assert envelope.kind == "elements"
        assert envelope.sequence == [0, 1, 2]
        assert [e["name"] for e in payload["elements"]] == [
            "Batch Rectangle 1",
            "Batch Rectangle 2",
            "Batch Text",
        ]
        assert payload["elements"][0]["styles"]["fillColor"] == {"r": 1, "g": 0, "b": 0, "a": 1}
        assert "parentId" not in payload["elements"][0]

    def test_element_payload_uses_wire_aliases(self):
        envelope = build_element_envelope([{"type": "text", "x": 0, "y": 0, "parent_id": "1:1"}])
        assert envelope.to_payload()["elements"][0]["parentId"] == "1:1"

    def test_command_payload_in_sequence_order_with_index(self):
        envelope = build_command_envelope(
            [
                {"command": "create_rectangle", "params": {"x": 1}, "priority": "low"},
                {"command": "create_frame", "params": {"x": 2}, "priority": "high"},
                {"command": "create_text", "params": {"x": 3}},
            ],
            stop_on_error=True,
        )
        payload = envelope.to_payload()
        assert payload["stopOnError"] is True
        assert [(c["command"], c["index"]) for c in payload["commands"]] == [
            ("create_frame", 1),
            ("create_text", 2),
            ("create_rectangle", 0),
        ]
        assert payload["commands"][1]["priority"] == "normal"

    def test_items_keep_submission_order(self, sample_commands):
        envelope = build_command_envelope(list(reversed(sample_commands)))
        assert [c.command for c in envelope.items] == ["create_rectangle", "create_text", "create_frame"]
        assert envelope.stop_on_error is False

    def test_operation_data(self, sample_commands):
        envelope = build_command_envelope(sample_commands)
        data = envelope.to_operation_data()
        assert data["command"] == "execute_bundled_commands"
        assert data["params"]["stopOnError"] is False

    def test_empty(self):
        assert build_element_envelope([]).is_empty()
        assert build_command_envelope(None).is_empty()

    def test_item_name(self, sample_elements):
        envelope = build_element_envelope(sample_elements)
        assert envelope.item_name(2) == "text"
        assert envelope.item_name(7) is None
