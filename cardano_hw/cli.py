"""Command line interface for inspecting and streaming transaction outputs."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from .config import ConfigurationError, load_bridge_config, set_default_config_path
from .hexdata import HexLengthError
from .outputs import OutputWithData, send_output, transform_output
from .params import ValidationError
from .transport import BridgeTransport, RecordingTransport, TransportError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class CLIError(RuntimeError):
    """Raised when CLI arguments are invalid."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cardano hardware wallet output tooling")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML config file (default: ~/.cardano-hw.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    transform_parser = subparsers.add_parser(
        "transform", help="validate an output description and print the device records"
    )
    transform_parser.add_argument(
        "output_json", help="Path to a JSON output description, or - for stdin"
    )

    send_parser = subparsers.add_parser(
        "send", help="stream an output to the device through the bridge"
    )
    send_parser.add_argument(
        "output_json", help="Path to a JSON output description, or - for stdin"
    )
    send_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the ordered messages instead of contacting the bridge",
    )
    send_parser.add_argument("--session", default=None, help="Acquired bridge session id")
    send_parser.add_argument(
        "--bridge-url", default=None, help="Bridge URL, e.g. http://127.0.0.1:21325"
    )
    return parser


def _read_output_json(source: str) -> dict[str, Any]:
    try:
        raw = sys.stdin.read() if source == "-" else Path(source).read_text()
    except OSError as exc:
        raise CLIError(f"Unable to read {source}: {exc}") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CLIError(f"Invalid output JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise CLIError("Output JSON must be an object")
    return data


def _load_output(source: str) -> OutputWithData:
    return transform_output(_read_output_json(source))


def cmd_transform(args: argparse.Namespace) -> None:
    output_with_data = _load_output(args.output_json)
    print(json.dumps(output_with_data.to_dict(), indent=2))


def cmd_send(args: argparse.Namespace) -> None:
    output_with_data = _load_output(args.output_json)

    if args.dry_run:
        recorder = RecordingTransport()
        send_output(recorder, output_with_data)
        plan = [
            {"type": message_type, "expect": expected_type, "message": payload}
            for message_type, expected_type, payload in recorder.calls
        ]
        print(json.dumps(plan, indent=2))
        return

    overrides = {"session": args.session, "url": args.bridge_url}
    config = load_bridge_config(overrides=overrides)
    transport = BridgeTransport(config)
    send_output(transport, output_with_data)
    logger.info("Output acknowledged by device on session %s", config.session)


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.config:
        set_default_config_path(args.config)
    try:
        if args.command == "transform":
            cmd_transform(args)
        elif args.command == "send":
            cmd_send(args)
        else:  # pragma: no cover - argparse enforces choices
            raise CLIError(f"Unknown command: {args.command}")
    except KeyboardInterrupt:  # pragma: no cover - interactive use
        logger.info("Interrupted by user")
    except (
        CLIError,
        ConfigurationError,
        TransportError,
        ValidationError,
        HexLengthError,
    ) as exc:
        parser.exit(1, f"error: {exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
