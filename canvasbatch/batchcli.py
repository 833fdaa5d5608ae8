#!/usr/bin/env python3
"""
Canvas Batch CLI Client
Command-line interface for submitting batches to the canvas via D-Bus

Usage:
    canvasbatch-cli '{"elements": [{"type": "rectangle", "x": 0, "y": 0, "width": 10, "height": 10}]}'
    canvasbatch-cli -i batch.json --stop-on-error
    cat batch.json | canvasbatch-cli --parse-out --pretty
"""

import argparse
import json
import sys
from typing import Any, Dict

from .batchops import (
    BatchValidationError,
    CanvasBatchError,
    build_command_envelope,
    build_element_envelope,
    format_report,
    submit_batch,
)
from .connection import DEFAULT_ACTION_NAME, DEFAULT_TIMEOUT, CanvasConnection, get_available_connection


def load_batch(content: str) -> Dict[str, Any]:
    """Parse batch JSON; a bare list is read as elements"""
    data = json.loads(content)
    if isinstance(data, list):
        return {"elements": data}
    if not isinstance(data, dict) or not ("elements" in data or "commands" in data):
        raise ValueError('Batch must be a list of elements or an object with "elements" or "commands"')
    return data


def build_envelope(batch: Dict[str, Any], stop_on_error: bool = False):
    if "commands" in batch:
        return build_command_envelope(
            batch["commands"],
            stop_on_error=stop_on_error or bool(batch.get("stopOnError", False)),
        )
    return build_element_envelope(batch["elements"])


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Canvas Batch CLI Client - Submit batched canvas operations via D-Bus",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create several elements in one round trip
  canvasbatch-cli '[{"type": "frame", "x": 0, "y": 0, "width": 300, "height": 200, "name": "Card"},
                    {"type": "text", "x": 20, "y": 20, "text": "Hello"}]'

  # Bundled commands, halting at the first failure
  canvasbatch-cli --stop-on-error '{"commands": [
      {"command": "create_frame", "params": {"x": 400, "y": 100}, "priority": "high"},
      {"command": "create_rectangle", "params": {"x": 450, "y": 200}, "priority": "low"}]}'

  # Validate and show the outbound request without sending it
  canvasbatch-cli --dry-run --pretty -i batch.json
        """
    )

    parser.add_argument('batch', nargs='*', help='Batch JSON')
    parser.add_argument('-i', '--input', help='Read batch JSON from file')
    parser.add_argument('--stop-on-error', action='store_true',
                        help='Halt bundled commands at the first failure')
    parser.add_argument('--parse-out', action='store_true',
                        help='Print the aggregated result as JSON')
    parser.add_argument('--pretty', action='store_true',
                        help='Pretty print JSON output')
    parser.add_argument('--dry-run', action='store_true',
                        help='Validate and print the request without contacting the canvas')
    parser.add_argument('--action-name', default=DEFAULT_ACTION_NAME,
                        help='D-Bus action of the canvas batch extension')
    parser.add_argument('--timeout', type=float, default=DEFAULT_TIMEOUT,
                        help='Seconds to wait for the canvas reply')

    args = parser.parse_args(argv)
    indent = 2 if args.pretty else None

    # Determine input source
    if args.input:
        try:
            with open(args.input, 'r') as f:
                content = f.read()
        except OSError as e:
            print(f"Error reading file {args.input}: {e}", file=sys.stderr)
            return 1
    elif args.batch:
        content = ' '.join(args.batch)
    elif not sys.stdin.isatty():
        content = sys.stdin.read()
    else:
        parser.print_help()
        return 1

    try:
        envelope = build_envelope(load_batch(content), args.stop_on_error)
    except (ValueError, BatchValidationError) as e:
        print(f"Invalid batch: {e}", file=sys.stderr)
        return 1

    if args.dry_run:
        print(json.dumps(envelope.to_operation_data(), indent=indent))
        return 0

    connection = CanvasConnection(action_name=args.action_name, timeout=args.timeout)
    try:
        result = submit_batch(envelope, lambda: get_available_connection(connection))
    except CanvasBatchError as e:
        print(f"Batch failed: {e}", file=sys.stderr)
        return 1

    if args.parse_out:
        output = result.model_dump(mode="json")
        output["stopped_early"] = result.stopped_early
        print(json.dumps(output, indent=indent))
    else:
        print(format_report(result))

    return 1 if result.failed_count or result.failed else 0


if __name__ == '__main__':
    sys.exit(main())
