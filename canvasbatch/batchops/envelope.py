"""Batch Envelope construction, descriptor validation and priority sequencing"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from .common import BatchValidationError
from .models import BundledCommand, ElementDescriptor

logger = logging.getLogger(__name__)

ELEMENTS = "elements"
COMMANDS = "commands"

# Remote action names, one per batch kind
REMOTE_COMMANDS = {
    ELEMENTS: "batch_create_elements",
    COMMANDS: "execute_bundled_commands",
}


def _describe_validation_error(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(loc) for loc in detail.get("loc", ()))
        parts.append(f"{location}: {detail.get('msg')}" if location else str(detail.get("msg")))
    return "; ".join(parts)


def _validate_items(items: Optional[Iterable[Any]], model, label: str) -> List[Any]:
    if items is None:
        return []
    if isinstance(items, (str, bytes, dict)):
        raise BatchValidationError(f"Expected a list of {label}s, got {type(items).__name__}")

    validated = []
    for index, item in enumerate(items):
        if isinstance(item, model):
            validated.append(item)
            continue
        try:
            validated.append(model.model_validate(item))
        except ValidationError as e:
            raise BatchValidationError(
                f"Invalid {label} at index {index}: {_describe_validation_error(e)}",
                index=index,
            ) from e
    return validated


def validate_elements(elements: Optional[Iterable[Union[ElementDescriptor, Dict[str, Any]]]]) -> List[ElementDescriptor]:
    """Validate element descriptors; raises BatchValidationError on the first bad one"""
    return _validate_items(elements, ElementDescriptor, "element")


def validate_commands(commands: Optional[Iterable[Union[BundledCommand, Dict[str, Any]]]]) -> List[BundledCommand]:
    """Validate bundled commands; raises BatchValidationError on the first bad one"""
    return _validate_items(commands, BundledCommand, "command")


class BatchEnvelope(BaseModel):
    """
    Descriptors for one round trip plus the batch-level policy.

    ``items`` keeps submission order. ``sequence`` holds the original indices
    in the order the canvas should attempt them; reporting always goes back
    through the original index.
    """

    kind: str
    items: List[Union[ElementDescriptor, BundledCommand]] = Field(default_factory=list)
    sequence: List[int] = Field(default_factory=list)
    stop_on_error: Optional[bool] = None

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def remote_command(self) -> str:
        return REMOTE_COMMANDS[self.kind]

    def is_empty(self) -> bool:
        return not self.items

    def item_name(self, index: int) -> Optional[str]:
        """Kind or command name of the item submitted at ``index``"""
        if 0 <= index < len(self.items):
            item = self.items[index]
            return item.command if isinstance(item, BundledCommand) else item.type
        return None

    def to_payload(self) -> Dict[str, Any]:
        """Request body as the canvas expects it"""
        if self.kind == ELEMENTS:
            return {"elements": [self.items[i].to_wire() for i in self.sequence]}

        commands = []
        for index in self.sequence:
            item = self.items[index]
            commands.append({
                "command": item.command,
                "params": item.params,
                "priority": item.effective_priority,
                "index": index,
            })
        return {"commands": commands, "stopOnError": bool(self.stop_on_error)}

    def to_operation_data(self) -> Dict[str, Any]:
        """Channel envelope written to the params file"""
        return {"command": self.remote_command, "params": self.to_payload()}


def sequence_by_priority(commands: List[BundledCommand]) -> List[int]:
    """Indices ordered high -> normal -> low, submission order within a class"""
    return sorted(range(len(commands)), key=lambda i: (commands[i].rank, i))


def build_element_envelope(elements) -> BatchEnvelope:
    """Validate elements and wrap them for a single round trip.

    Elements are sent in submission order so a parentId can point at a node
    created earlier in the same batch.
    """
    items = validate_elements(elements)
    logger.debug(f"Built element envelope with {len(items)} items")
    return BatchEnvelope(kind=ELEMENTS, items=items, sequence=list(range(len(items))))


def build_command_envelope(commands, stop_on_error: bool = False) -> BatchEnvelope:
    """Validate bundled commands and order them by priority for execution"""
    items = validate_commands(commands)
    sequence = sequence_by_priority(items)
    logger.debug(f"Built command envelope with {len(items)} items, sequence={sequence}")
    return BatchEnvelope(
        kind=COMMANDS,
        items=items,
        sequence=sequence,
        stop_on_error=bool(stop_on_error),
    )
