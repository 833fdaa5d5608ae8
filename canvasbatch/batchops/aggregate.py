"""
Result aggregation

Turns the canvas reply for one batch into caller-facing counters and an
outcome list in submission order. The reply is a weakly typed external
contract, so it is parsed into a strict record with explicit defaults.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .common import MalformedReplyError
from .envelope import COMMANDS, BatchEnvelope

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error"
UNKNOWN_NAME = "Unknown"


class BatchState(str, Enum):
    ALL_ATTEMPTED = "all_attempted"
    STOPPED_EARLY = "stopped_early"


class ReplyItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool = False
    node_id: Optional[str] = Field(default=None, alias="nodeId")
    type: Optional[str] = None
    command: Optional[str] = None
    result: Any = None
    error: Optional[str] = None
    index: Optional[int] = None

    @field_validator("success", mode="before")
    @classmethod
    def _none_is_false(cls, value):
        return False if value is None else value

    @field_validator("node_id", "error", mode="before")
    @classmethod
    def _stringify(cls, value):
        return None if value is None else str(value)


class ExecutorReply(BaseModel):
    """Strict view of a batch reply; every counter defaults to zero"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool = False
    message: str = ""
    created_count: int = Field(default=0, alias="createdCount")
    completed_count: int = Field(default=0, alias="completedCount")
    failed_count: int = Field(default=0, alias="failedCount")
    results: List[ReplyItem] = Field(default_factory=list)

    @field_validator("created_count", "completed_count", "failed_count", mode="before")
    @classmethod
    def _none_is_zero(cls, value):
        return 0 if value is None else value

    @field_validator("success", mode="before")
    @classmethod
    def _none_is_false(cls, value):
        return False if value is None else value

    @field_validator("message", mode="before")
    @classmethod
    def _none_is_blank(cls, value):
        return "" if value is None else str(value)

    @field_validator("results", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return [] if value is None else value


class OperationOutcome(BaseModel):
    """Terminal outcome of one submitted item: succeeded or failed, nothing else"""

    index: int
    name: str
    success: bool
    node_id: Optional[str] = None
    result: Any = None
    error: Optional[str] = None


class BatchResult(BaseModel):
    kind: str
    total: int = 0
    succeeded_count: int = 0
    failed_count: int = 0
    message: str = ""
    outcomes: List[OperationOutcome] = Field(default_factory=list)
    state: BatchState = BatchState.ALL_ATTEMPTED
    not_attempted: int = 0

    @property
    def succeeded(self) -> List[OperationOutcome]:
        return [o for o in self.outcomes if o.success]

    @property
    def failed(self) -> List[OperationOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def stopped_early(self) -> bool:
        return self.state == BatchState.STOPPED_EARLY


def empty_result(envelope: BatchEnvelope) -> BatchResult:
    """Informational result for a batch with nothing to do"""
    return BatchResult(kind=envelope.kind)


def parse_reply(reply: Any) -> ExecutorReply:
    if not isinstance(reply, dict):
        raise MalformedReplyError(f"Expected a JSON object from the canvas, got {type(reply).__name__}")
    try:
        return ExecutorReply.model_validate(reply)
    except ValidationError as e:
        raise MalformedReplyError(f"Malformed batch reply: {e.error_count()} invalid field(s)") from e


def _correlate(envelope: BatchEnvelope, items: List[ReplyItem]) -> List[int]:
    """Original index for each reply item; each submitted index is claimed at most once.

    Valid echoed indices are claimed first. The rest map through the execution
    sequence by position, or to the next unclaimed index in sequence order.
    Items beyond what was submitted get indices past the end.
    """
    claimed = set()
    indices: List[Optional[int]] = [None] * len(items)
    for position, item in enumerate(items):
        if item.index is not None and 0 <= item.index < envelope.total and item.index not in claimed:
            indices[position] = item.index
            claimed.add(item.index)

    spare = (i for i in envelope.sequence if i not in claimed)
    overflow = envelope.total
    for position, index in enumerate(indices):
        if index is not None:
            continue
        if position < len(envelope.sequence) and envelope.sequence[position] not in claimed:
            index = envelope.sequence[position]
        else:
            index = next((i for i in spare if i not in claimed), None)
        if index is None:
            index = overflow
            overflow += 1
        claimed.add(index)
        indices[position] = index
    return indices


def aggregate_reply(envelope: BatchEnvelope, reply: Any) -> BatchResult:
    """
    Build the caller-facing result for one batch.

    Args:
        envelope: The envelope that was sent
        reply: Raw reply data from the canvas

    Returns:
        BatchResult with outcomes re-sorted to submission order

    Raises:
        MalformedReplyError: reply is not an object or has unusable field types
    """
    parsed = parse_reply(reply)

    outcomes = []
    indices = _correlate(envelope, parsed.results)
    for item, index in zip(parsed.results, indices):
        name = item.command if envelope.kind == COMMANDS else item.type
        outcomes.append(OperationOutcome(
            index=index,
            name=name or envelope.item_name(index) or UNKNOWN_NAME,
            success=item.success,
            node_id=item.node_id,
            result=item.result,
            error=None if item.success else (item.error or UNKNOWN_ERROR),
        ))
    outcomes.sort(key=lambda o: o.index)

    if envelope.kind == COMMANDS:
        succeeded_count = parsed.completed_count
    else:
        succeeded_count = parsed.created_count
    failed_count = parsed.failed_count

    # The reply does not flag skipped items; infer them from what came back
    attempted = len(parsed.results) if parsed.results else succeeded_count + failed_count
    not_attempted = max(envelope.total - attempted, 0)

    state = BatchState.ALL_ATTEMPTED
    if envelope.stop_on_error and failed_count > 0 and not_attempted > 0:
        state = BatchState.STOPPED_EARLY

    logger.info(
        f"Aggregated {envelope.remote_command}: {succeeded_count} succeeded, "
        f"{failed_count} failed, {not_attempted} not attempted of {envelope.total}"
    )

    return BatchResult(
        kind=envelope.kind,
        total=envelope.total,
        succeeded_count=succeeded_count,
        failed_count=failed_count,
        message=parsed.message,
        outcomes=outcomes,
        state=state,
        not_attempted=not_attempted,
    )
