"""Render an aggregated batch result as text for the AI client"""

from typing import Dict, Optional

from .aggregate import UNKNOWN_ERROR, BatchResult
from .envelope import COMMANDS, ELEMENTS

LABELS: Dict[str, Dict[str, str]] = {
    ELEMENTS: {
        "title": "Batch element creation complete",
        "noun": "element",
        "succeeded": "{ok} of {total} elements created successfully",
        "failed": "{failed} {noun} failed to create",
        "succeeded_header": "Created Elements",
        "failed_header": "Failed Elements",
        "empty": "No elements provided to create",
    },
    COMMANDS: {
        "title": "Bundled commands execution complete",
        "noun": "command",
        "succeeded": "{ok} of {total} commands executed successfully",
        "failed": "{failed} {noun} failed",
        "succeeded_header": "Successful Commands",
        "failed_header": "Failed Commands",
        "empty": "No commands provided to execute",
    },
}


def _plural(noun: str, count: int) -> str:
    return noun if count == 1 else f"{noun}s"


def format_report(result: Optional[BatchResult], kind: str = ELEMENTS) -> str:
    """Format a batch result; empty or missing input yields the empty-batch message"""
    labels = LABELS[result.kind if result is not None else kind]

    if result is None or result.total == 0:
        return f"ℹ️ {labels['empty']} (0 of 0 {labels['noun']}s succeeded)"

    any_failed = bool(result.failed_count or result.failed)
    lines = [
        f"{'⚠️' if any_failed else '✅'} {labels['title']}:",
        "- " + labels["succeeded"].format(ok=result.succeeded_count, total=result.total),
        "- " + labels["failed"].format(
            failed=result.failed_count,
            noun=_plural(labels["noun"], result.failed_count),
        ),
    ]
    if result.stopped_early:
        lines.append(
            f"- {result.not_attempted} {_plural(labels['noun'], result.not_attempted)} "
            "not attempted (stopped on first error)"
        )

    succeeded = result.succeeded
    if succeeded:
        lines.append("")
        lines.append(f"**{labels['succeeded_header']}**:")
        for outcome in succeeded:
            if result.kind == ELEMENTS:
                lines.append(f"- {outcome.name} ({outcome.node_id or 'no-id'})")
            else:
                lines.append(f"- {outcome.name}")

    failed = result.failed
    if failed or result.failed_count > 0:
        lines.append("")
        lines.append(f"**{labels['failed_header']}**:")
        for outcome in failed:
            lines.append(f"- {outcome.name}: {outcome.error or UNKNOWN_ERROR}")
        if not failed:
            lines.append("- (no per-item details returned)")

    return "\n".join(lines)
