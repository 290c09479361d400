"""Command-line interface for the JMI converter.

WHY: Model exports are often post-processed offline: a flat element dump
from the server needs to become a keyed map for a script or a nested
tree for a reviewer. The CLI runs the same query boundary the server
uses against a JSON file, so offline output matches what the API would
have returned.

HOW: Uses argparse to accept an input file, its JMI level, the output
formats, key field, id filter and flags. The input is loaded and
flattened to JMI1 records, then each requested format is produced by
handle_query() with an in-memory fetch function standing in for the
persistence layer. Results are written next to the input (or to
--output-dir) as {stem}-jmi{N}.json.

RULES:
- Positional argument: input JSON file path
- --from names the input's level (default: jmi1)
- --formats: comma-separated format tokens (default: all registered)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (-jmi3-2.json)
- Status output goes to stderr (not stdout)
- Any query error prints the error detail and exits with status 1
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from jmi_converter import config
from jmi_converter.boundary.handler import handle_query
from jmi_converter.boundary.models import ElementQuery
from jmi_converter.core.conversions import convert, load_representation
from jmi_converter.core.errors import JMIError, UnsupportedFormat
from jmi_converter.formatters import FORMATTERS


def _status(msg: str) -> None:
    """Print a status line to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _free_path(output_dir: Path, filename: str) -> Path:
    """Return output_dir/filename, numbered when that name is taken.

    WHY: Converting the same export twice must keep the earlier result.

    RULES:
    - First choice is the plain name (elements-jmi3.json)
    - Then the number goes before the extension: elements-jmi3-2.json,
      elements-jmi3-3.json, ...
    """
    candidate = output_dir / filename
    number = 2
    while candidate.exists():
        plain = Path(filename)
        candidate = output_dir / "{}-{}{}".format(plain.stem, number, plain.suffix)
        number += 1
    return candidate


def _parse_format_list(value: Optional[str]) -> List[str]:
    """Split --formats into tokens; every registered format when omitted."""
    if not value:
        return list(FORMATTERS)
    tokens = [token.strip() for token in value.split(",") if token.strip()]
    unknown = [token for token in tokens if token not in FORMATTERS]
    if unknown:
        _fail("Unknown format '{}'. Available formats: {}".format(
            unknown[0], ", ".join(sorted(FORMATTERS))
        ))
    return tokens


def load_records(path: Path, level: str) -> List[Dict[str, Any]]:
    """Read a JMI file at any level and return its elements as JMI1 wire records.

    JMI2 input comes back in id-ascending order, JMI3 input in pre-order
    with siblings sorted by id.
    """
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    if level == "jmi1":
        if not isinstance(raw, list):
            raise UnsupportedFormat("jmi1", "Input is not a list of elements.")
        return raw
    representation = load_representation(level, raw)
    return [element.to_dict() for element in convert(level, 1, representation)]


def make_fetch(records: List[Dict[str, Any]]):
    """In-memory stand-in for the persistence collaborator.

    Non-object entries always pass the id filter so record validation
    rejects them like any other malformed record.
    """

    def fetch(ids: Optional[List[str]]) -> List[Mapping[str, Any]]:
        if ids is None:
            return list(records)
        wanted = set(ids)
        return [r for r in records if not isinstance(r, Mapping) or r.get("id") in wanted]

    return fetch


def run(args: argparse.Namespace) -> List[Path]:
    """Execute one CLI conversion and return the written paths."""
    input_path = Path(args.input_file).resolve()
    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))

    output_dir = input_path.parent
    if args.output_dir:
        output_dir = Path(args.output_dir).resolve()
        if not output_dir.is_dir():
            _fail("Output directory does not exist: {}".format(output_dir))

    if args.source_format not in FORMATTERS:
        _fail("Unknown input format '{}'. Available formats: {}".format(
            args.source_format, ", ".join(sorted(FORMATTERS))
        ))
    tokens = _parse_format_list(args.formats)

    _status("Loading {} ({})...".format(input_path.name, args.source_format))
    try:
        records = load_records(input_path, args.source_format)
    except json.JSONDecodeError as exc:
        _fail("Input is not valid JSON: {}".format(exc))
    except JMIError as exc:
        _fail(exc.message)
    _status("  {} elements".format(len(records)))

    fetch = make_fetch(records)
    saved: List[Path] = []
    for token in tokens:
        _status("  Running {} formatter...".format(FORMATTERS[token]().name))
        result = handle_query(ElementQuery(
            format=token,
            key_field=args.key_field,
            ids=args.ids,
            include_archived=args.include_archived,
            minified=args.minified,
            validate_hierarchy=args.validate,
        ), fetch)
        if result.status_code != 200:
            detail = json.loads(result.content).get("detail", result.content)
            _fail("{} (status {})".format(detail, result.status_code))

        path = _free_path(output_dir, "{}-{}.json".format(input_path.stem, token))
        path.write_text(result.content, encoding="utf-8")
        saved.append(path)
        _status("  Saved: {}".format(path.name))

    _status("Done: {} file(s) in {}".format(len(saved), output_dir))
    return saved


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="jmi_converter",
        description="Convert model element exports between JMI representations "
                    "(flat list, keyed map, nested tree).",
    )

    parser.add_argument(
        "input_file",
        help="Path to the JSON file holding the elements.",
    )

    parser.add_argument(
        "--from",
        dest="source_format",
        default="jmi1",
        help="JMI format of the input file (default: %(default)s).",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Output format tokens, comma-separated ({}; default: every one).".format(
            ", ".join(sorted(FORMATTERS))
        ),
    )

    parser.add_argument(
        "--key-field",
        default=config.DEFAULT_KEY_FIELD,
        help="Element field used as key in JMI2/JMI3 output (default: %(default)s).",
    )

    parser.add_argument(
        "--ids",
        default=None,
        help="Comma-separated element ids to include (default: all).",
    )

    parser.add_argument(
        "--include-archived",
        action="store_true",
        help="Keep archived elements in the output.",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Fail on a parent cycle or a null parent on any element but the model root.",
    )

    parser.add_argument(
        "--minified",
        action="store_true",
        help="Write compact JSON.",
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Where to write the converted files (default: next to the input).",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug details of indexing and conversion.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m jmi_converter`` and the console script.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    run(args)


if __name__ == "__main__":
    main()
