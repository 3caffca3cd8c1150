"""CLI entrypoints for skelgen commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .errors import ParseError
from .logging import configure_logging, get_logger
from .transform import TransformResult, transform

logger = get_logger("cli")


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_document_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", help="Path to the source document to transform.")
    parser.add_argument(
        "-m",
        "--marker",
        action="append",
        default=[],
        help="Attribute name that marks a declaration for augmentation (repeatable).",
    )
    parser.add_argument(
        "-D",
        "--define",
        action="append",
        default=[],
        help="Conditional compilation symbol to treat as defined (repeatable).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to .skelgen.yml or its directory (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skelgen",
        description="Reduce a source document to the scope skeleton around marked declarations.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    transform_parser = subparsers.add_parser(
        "transform",
        help="Write the imports and ancestor skeleton of a document.",
    )
    _add_verbose_option(transform_parser, suppress_default=True)
    _add_document_options(transform_parser)
    transform_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the result to this file instead of stdout.",
    )
    transform_parser.add_argument(
        "--indent",
        type=int,
        default=None,
        help="Spaces per indentation level (overrides the configuration).",
    )

    triggers_parser = subparsers.add_parser(
        "triggers",
        help="Print the marked declarations of a document as JSON.",
    )
    _add_verbose_option(triggers_parser, suppress_default=True)
    _add_document_options(triggers_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP transform service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for skelgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return

    result = _run_transform(parser, args)
    if args.command == "transform":
        if args.output:
            output = Path(args.output)
            output.write_text(result.text, encoding="utf-8")
            logger.info("Skeleton written to %s", output)
        else:
            print(result.text)
    elif args.command == "triggers":
        print(json.dumps([trigger.to_dict() for trigger in result.triggers], indent=2))
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_transform(parser: argparse.ArgumentParser, args: argparse.Namespace) -> TransformResult:
    try:
        config = load_config(Path(args.config) if args.config else Path.cwd())
    except ConfigError as exc:
        parser.exit(1, f"skelgen: {exc}\n")

    indent = getattr(args, "indent", None)
    if indent is not None and indent < 0:
        parser.error("--indent must not be negative")
    options = config.to_options(
        extra_markers=args.marker,
        extra_symbols=args.define,
        indent=indent,
    )
    if not options.markers:
        logger.warning("No marker names configured; output will contain imports only")

    path = Path(args.path)
    try:
        source = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        parser.exit(1, f"skelgen: file not found: {path}\n")
    except (OSError, UnicodeDecodeError) as exc:
        parser.exit(1, f"skelgen: cannot read {path}: {exc}\n")

    try:
        return transform(source, options)
    except ParseError as exc:
        parser.exit(1, f"{path}:{exc.line}:{exc.column}: error: {exc.message}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
