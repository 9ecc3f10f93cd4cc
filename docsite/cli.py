"""CLI entrypoints for docsite commands."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from .errors import DocsiteError
from .generator import GenerationResult, split_by_kind
from .logging import configure_logging
from .orchestrator import Orchestrator


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


def _add_project_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--root",
        default=".",
        help="Project root containing docs.yml (defaults to current directory).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Explicit configuration file, relative to the project root.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log records to this file.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsite",
        description="Generate a static documentation site from Markdown, TypeScript and UI components.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Extract and render documents without writing the site.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_project_options(generate_parser)

    build_parser = subparsers.add_parser(
        "build",
        help="Generate documents and write the static site.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_project_options(build_parser)
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docsite commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        log_file=Path(args.log_file) if args.log_file else None,
    )

    orchestrator = Orchestrator(
        args.root,
        config_file=Path(args.config) if args.config else None,
    )

    if args.command == "generate":
        try:
            result = asyncio.run(orchestrator.generate())
        except DocsiteError as exc:
            parser.exit(1, f"docsite generate failed: {exc}\n")
        _report(result)
    elif args.command == "build":
        try:
            outcome = asyncio.run(orchestrator.build())
        except DocsiteError as exc:
            parser.exit(1, f"docsite build failed: {exc}\n")
        _report(outcome.generation)
        print(f"Site written to {outcome.config.out_dir}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _report(result: GenerationResult) -> None:
    grouped = split_by_kind(result.docs)
    print(
        f"Generated {len(result.docs)} documents "
        f"({len(grouped['prose'])} prose, {len(grouped['api'])} api, {len(grouped['component'])} component)"
    )
    for failure in result.failures:
        print(f"  skipped {failure.category} {failure.path}: {failure.message}")


if __name__ == "__main__":  # pragma: no cover
    main()
