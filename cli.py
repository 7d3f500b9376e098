"""CLI entry point for serializing a form AST into hidden form fields."""

import argparse
import json
import logging
import sys
from pathlib import Path

from schema.loader import load_ast
from serializer.errors import SerializationError
from serializer.options import INDEXING_EXPLICIT, INDEXING_MODES, SerializerOptions
from serializer.registry import default_registry, load_field_types
from serializer.serialize import MODE_AST, MODE_DATA, serialize
from utils.hidden_inputs import render_hidden_inputs


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Serialize a form AST (JSON or YAML) into bracketed form fields"
    )
    parser.add_argument(
        "input",
        type=Path,
        help="Path to the AST file (.json, .yaml or .yml)",
    )
    parser.add_argument(
        "-p", "--prefix",
        default=None,
        help="Namespace every field name under this key",
    )
    parser.add_argument(
        "-t", "--field-type",
        dest="field_types",
        action="append",
        default=[],
        help="Extra leaf field type (repeatable)",
    )
    parser.add_argument(
        "--field-types-file",
        type=Path,
        default=None,
        help="YAML file with extra leaf and structural field types",
    )
    parser.add_argument(
        "--mode",
        choices=(MODE_AST, MODE_DATA),
        default=MODE_AST,
        help="Walk the AST directly, or reduce it to a data object first",
    )
    parser.add_argument(
        "--indexing",
        choices=INDEXING_MODES,
        default=INDEXING_EXPLICIT,
        help="Write numeric indexes for repetitions, or empty brackets",
    )
    parser.add_argument(
        "--list-placeholder",
        action="store_true",
        help="Emit a placeholder field before each map inside a list",
    )
    parser.add_argument(
        "--html",
        action="store_true",
        help="Print hidden <input> elements instead of JSON",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Write output to this file (default: print to stdout)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )

    options = SerializerOptions(
        prefix=args.prefix,
        additional_field_types=tuple(args.field_types),
        indexing=args.indexing,
        list_of_maps_placeholder=args.list_placeholder,
    )

    try:
        registry = (
            load_field_types(args.field_types_file)
            if args.field_types_file
            else default_registry()
        )
        nodes = load_ast(args.input, max_depth=options.max_depth)
        pairs = serialize(nodes, options, registry, mode=args.mode)
    except (FileNotFoundError, ValueError, SerializationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.html:
        text = str(render_hidden_inputs(pairs)) + "\n"
    else:
        text = json.dumps([[pair.name, pair.value] for pair in pairs], indent=2, default=str) + "\n"

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text, encoding="utf-8")
        print(f"{len(pairs)} fields written to {args.output}")
    else:
        sys.stdout.write(text)

    return 0


if __name__ == "__main__":
    sys.exit(main())
