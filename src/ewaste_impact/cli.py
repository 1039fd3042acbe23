"""Command-line utilities for ewaste_impact."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .config_loader import load_config
from .device_catalog import load_default_catalog
from .errors import EwasteImpactError
from .impact import ImpactCalculator
from .logging_pipeline import configure_structured_logging, shutdown_listeners
from .reference_data import get_device_types
from .schemas import ImpactRecord, validate_request


def _read_stdin() -> str | None:
    """Read JSON payload from stdin if available."""
    try:
        if sys.stdin and not sys.stdin.isatty():
            return sys.stdin.read()
    except OSError as e:
        print(f"Error reading stdin: {e}", file=sys.stderr)
    return None


def _load_json(path: str | None, stdin_payload: str | None) -> dict[str, object]:
    """Load JSON data from file or stdin."""
    if path:
        text = Path(path).read_text(encoding="utf-8")
        return _parse_json_dict(text)
    if stdin_payload:
        return _parse_json_dict(stdin_payload)
    raise ValueError("No input provided. Use --input or pipe JSON via stdin.")


def _parse_json_dict(payload: str) -> dict[str, object]:
    """Parse a JSON string and ensure the result is a dictionary."""

    data = json.loads(payload)
    if not isinstance(data, dict):
        raise ValueError("Input JSON must be an object at the top level.")
    return {str(key): value for key, value in data.items()}


def _emit(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _build_calculator(args: argparse.Namespace) -> ImpactCalculator:
    """Create the calculator for a ``calculate`` invocation."""

    config = load_config(args.config)
    if args.no_narrative:
        config.narrative.enabled = False
    return ImpactCalculator(region=args.region, config=config)


def _run_calculate(args: argparse.Namespace) -> int:
    data = _load_json(args.input, None if args.input else _read_stdin())
    validation = validate_request(data)
    if validation.request is None:
        for error in validation.errors:
            print(error, file=sys.stderr)
        return 1

    calculator = _build_calculator(args)
    result = asyncio.run(calculator.calculate(validation.request))
    if args.record:
        record = ImpactRecord.from_result(validation.request, result)
        _emit(record.model_dump_json_ready())
    else:
        _emit(result.to_dict())
    return 0


def _run_device_types(_args: argparse.Namespace) -> int:
    _emit(get_device_types())
    return 0


def _run_devices(args: argparse.Namespace) -> int:
    records = load_default_catalog().list_devices(args.type)
    _emit([record.to_dict() for record in records])
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``ewaste-impact``."""

    parser = argparse.ArgumentParser(
        prog="ewaste-impact",
        description="Estimate the environmental impact of an electronic device.",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit structured JSON logs on stderr.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    calculate = subparsers.add_parser(
        "calculate", help="Calculate the impact of one device."
    )
    calculate.add_argument(
        "--input",
        "-i",
        help="Path to a JSON request. If omitted, reads from stdin.",
    )
    calculate.add_argument(
        "--config", "-c", help="Path to a JSON or YAML configuration file."
    )
    calculate.add_argument(
        "--region", "-r", help="Default grid region for the calculation."
    )
    calculate.add_argument(
        "--no-narrative",
        action="store_true",
        help="Always use the deterministic summary and recommendations.",
    )
    calculate.add_argument(
        "--record",
        action="store_true",
        help="Print the versioned persistence record instead of the result.",
    )
    calculate.set_defaults(handler=_run_calculate)

    device_types = subparsers.add_parser(
        "device-types", help="List supported device categories."
    )
    device_types.set_defaults(handler=_run_device_types)

    devices = subparsers.add_parser("devices", help="List catalog devices.")
    devices.add_argument("--type", "-t", help="Restrict to one device category.")
    devices.set_defaults(handler=_run_devices)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the ``ewaste-impact`` command line."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:  # pragma: no cover - controlled via tests
        exit_code = int(exc.code) if isinstance(exc.code, int) else 1
        return 0 if exit_code == 0 else 1

    level = getattr(logging, args.log_level)
    listeners = []
    if args.log_json:
        listeners.append(configure_structured_logging(level=level))
    else:
        logging.basicConfig(level=level, stream=sys.stderr)

    try:
        return args.handler(args)
    except (EwasteImpactError, ValueError, OSError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    finally:
        shutdown_listeners(listeners)


if __name__ == "__main__":
    raise SystemExit(main())
