"""CLI entry point: ``macalias create`` / ``macalias parse``."""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import UTC, datetime
from pathlib import Path

from ._types import Timestamp
from .builder import create
from .errors import AliasError
from .parser import AliasInfo, format_alias, parse_alias

# TargetDescriptor fields that hold Mac dates
_DATE_KEYS = ("volume_created", "created")


def enable_logging(level: str = "WARNING") -> None:
    """Send ``macalias`` log records at *level* and above to stderr."""
    log = logging.getLogger("macalias")
    log.setLevel(level)
    out = logging.StreamHandler()
    out.setLevel(level)
    out.setFormatter(logging.Formatter("[%(levelname)s] %(name)s - %(message)s"))
    log.addHandler(out)


def _config_date(key: str, val: object) -> Timestamp:
    """Date from the JSON config.

    Numbers are Mac seconds.  Strings are Mac seconds in decimal or ``0x``
    hex, or an ISO 8601 date (UTC unless it carries an offset).  ``null``
    and ``""`` leave the date unset.
    """
    if val is None or val == "":
        return None
    if isinstance(val, int) and not isinstance(val, bool):
        return val
    if not isinstance(val, str):
        raise ValueError(f"{key}: expected Mac seconds or a date string, got {val!r}")
    text = val.strip()
    if text.isdigit():
        return int(text)
    if text[:2].lower() == "0x":
        return int(text, 16)
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(
            f"{key}: {val!r} is neither Mac seconds nor an ISO 8601 date"
        ) from None
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)


def _cmd_create(args: argparse.Namespace) -> None:
    # JSON config as base (keys match create() kwargs / TargetDescriptor fields)
    cfg: dict = {}
    if args.from_json:
        cfg = json.loads(Path(args.from_json).read_text())

    if args.alias_path is not None:
        cfg["alias_path"] = args.alias_path
    elif "alias_path" not in cfg:
        cfg["alias_path"] = args.output
    if args.application is not None:
        cfg["application"] = args.application

    for key in _DATE_KEYS:
        if key in cfg:
            cfg[key] = _config_date(key, cfg[key])

    data = create(args.target, **cfg)
    out = Path(args.output)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(data)
    print(f"[+] Written {len(data)} bytes -> {out}")


def _json_default(obj: object) -> object:
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, bytes):
        return obj.hex()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _serialize_alias_info(info: AliasInfo) -> dict:
    """Convert AliasInfo to a JSON-friendly dict."""
    d = asdict(info)
    # JSON object keys must be strings; unknown tags are keyed by number
    d["extra"] = {str(k): v for k, v in d["extra"].items()}
    return d


def _cmd_parse(args: argparse.Namespace) -> None:
    # One JSON document per file with --json, otherwise one titled report each
    for n, path in enumerate(args.files):
        info = parse_alias(path)
        if args.json:
            print(json.dumps(_serialize_alias_info(info), indent=2, default=_json_default))
            continue
        if n:
            print()
        print(f"Alias record: {path}")
        print(format_alias(info))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="macalias",
        description="Create and parse classic Mac OS alias records",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    sub = parser.add_subparsers(dest="command")

    # -- create --
    cp = sub.add_parser(
        "create",
        help="Create an alias record for a file or directory",
        epilog=(
            "Descriptor fields (volume_name, drive_type, file_type, creator, "
            "created, ...) can be overridden via --from-json. JSON keys match "
            "create() kwargs directly."
        ),
    )
    cp.add_argument("target", help="Path of the file or directory to alias")
    cp.add_argument("-o", "--output", default="alias.dat", help="Output file path")
    cp.add_argument(
        "-j",
        "--from-json",
        default="",
        metavar="FILE",
        help="JSON config file (keys match create kwargs)",
    )
    cp.add_argument(
        "--alias-path",
        default=None,
        help="Where the alias will live (defaults to the output path)",
    )
    cp.add_argument(
        "--application", default=None, help="Four-char application signature"
    )

    # -- parse --
    pp = sub.add_parser("parse", help="Parse and display alias record(s)")
    pp.add_argument("files", nargs="+", help="Alias record file(s) to parse")
    pp.add_argument("--json", action="store_true", help="Output as JSON")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(1)

    enable_logging("DEBUG" if args.verbose else "WARNING")

    try:
        if args.command == "create":
            _cmd_create(args)
        elif args.command == "parse":
            _cmd_parse(args)
    except (AliasError, OSError, ValueError) as exc:
        print(f"[-] {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
