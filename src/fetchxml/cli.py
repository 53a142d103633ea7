from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Tuple

from .errors import FetchXmlError
from .layout import generate_default_layout, merge_layout, parse_layout_xml, serialize_layout_xml
from .logging_config import configure_logging
from .query import Diagnostic, IdGenerator, ParseResult, parse_fetch_xml, serialize_fetch_xml, validate_query
from .settings import FetchXmlSettings, load_settings

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="fetchxml", description="FetchXML query utilities")
    parser.add_argument("--config", type=Path, default=None, help="Path to a fetchxml TOML config")
    parser.add_argument("--log-level", default=None, help="Logging level (default from config)")
    sub = parser.add_subparsers(dest="command", required=True)

    fmt = sub.add_parser("format", help="Parse and re-serialize a FetchXML document")
    fmt.add_argument("file", type=Path, help="FetchXML file, or - for stdin")
    fmt.add_argument("--primary-id", action="store_true", help="Inject the root entity primary id attribute")

    check = sub.add_parser("check", help="Report parse warnings and advisory validation findings")
    check.add_argument("file", type=Path, help="FetchXML file, or - for stdin")
    check.add_argument("--strict", action="store_true", help="Exit with status 1 when any warning is found")

    layout = sub.add_parser("layout", help="Print the grid layout for a FetchXML query")
    layout.add_argument("file", type=Path, help="FetchXML file, or - for stdin")
    layout.add_argument("--layout", type=Path, default=None, help="Existing layout XML to merge with the query")
    layout.add_argument(
        "--types",
        type=Path,
        default=None,
        help='JSON file mapping entity -> attribute -> metadata type, e.g. {"account": {"name": "String"}}',
    )
    return parser.parse_args(argv)


def _read(path: Path) -> str:
    if str(path) == "-":
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")


def _format_diagnostic(diagnostic: Diagnostic) -> str:
    location = ""
    if diagnostic.line is not None:
        location = f" (line {diagnostic.line}, column {diagnostic.column})"
    return f"{diagnostic.severity.value}: {diagnostic.code}: {diagnostic.message}{location}"


def _report(diagnostics: List[Diagnostic]) -> None:
    for diagnostic in diagnostics:
        print(_format_diagnostic(diagnostic), file=sys.stderr)


def _load_types(path: Path | None) -> Dict[Tuple[str, str], str]:
    if path is None:
        return {}
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict) or not all(isinstance(attributes, dict) for attributes in raw.values()):
        raise ValueError(f"Attribute types file {path} must map entity -> attribute -> type")
    return {
        (str(entity), str(attribute)): str(attr_type)
        for entity, attributes in raw.items()
        for attribute, attr_type in attributes.items()
    }


def _parse(text: str, settings: FetchXmlSettings) -> ParseResult:
    result = parse_fetch_xml(text, id_generator=IdGenerator(prefix=settings.parser.id_prefix))
    _report(result.errors)
    return result


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        settings = load_settings(config_path=args.config)
    except FetchXmlError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    configure_logging(
        level=args.log_level or settings.logging.level,
        log_file=settings.logging.file,
        jsonl=settings.logging.jsonl,
    )

    try:
        text = _read(args.file)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    result = _parse(text, settings)
    if not result.success or result.tree is None:
        return 1

    if args.command == "format":
        _report(result.warnings)
        print(
            serialize_fetch_xml(
                result.tree,
                indent=settings.serializer.indent,
                include_primary_id=args.primary_id or settings.serializer.include_primary_id,
            )
        )
        return 0

    if args.command == "check":
        findings = list(result.warnings) + validate_query(result.tree).warnings()
        _report(findings)
        logger.info("Checked %s: %d finding(s)", args.file, len(findings))
        return 1 if args.strict and findings else 0

    if args.command == "layout":
        _report(result.warnings)
        try:
            types = _load_types(args.types)
            layout_text = _read(args.layout) if args.layout is not None else None
        except (OSError, ValueError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        widths = settings.layout.width_table()
        if layout_text is not None:
            try:
                existing = parse_layout_xml(layout_text, default_width=settings.layout.default_width)
            except FetchXmlError as exc:
                print(f"error: {exc}", file=sys.stderr)
                return 1
            config = merge_layout(existing, result.tree, types, widths=widths)
        else:
            config = generate_default_layout(result.tree, types, widths=widths, grid_name=settings.layout.grid_name)
        print(serialize_layout_xml(config))
        return 0

    raise SystemExit(f"Unknown command: {args.command}")


if __name__ == "__main__":
    sys.exit(main())
