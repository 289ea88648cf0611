"""CLI entrypoints for luaudoc commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Sequence

from .config import ConfigError
from .logging import configure_logging, get_logger, log_diagnostics
from .models import Diagnostic
from .orchestrator import Orchestrator
from .reference import ReferenceDocumentError


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


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    _add_verbose_option(parser, suppress_default=True)
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project root or path to .luaudoc.yml (defaults to current directory).",
    )


def _add_fail_on_warning_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--fail-on-warning",
        action="store_true",
        help="Exit with a non-zero status when any warning is reported.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="luaudoc",
        description="Extract Luau doc comments and render reference pages.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser(
        "extract",
        help="Extract the reference document from Lua/Luau sources.",
    )
    _add_common_options(extract_parser)
    _add_fail_on_warning_option(extract_parser)

    render_parser = subparsers.add_parser(
        "render",
        help="Render reference pages from an extracted document.",
    )
    _add_common_options(render_parser)
    _add_fail_on_warning_option(render_parser)

    build_parser = subparsers.add_parser(
        "build",
        help="Extract and render in one pass.",
    )
    _add_common_options(build_parser)
    _add_fail_on_warning_option(build_parser)

    return parser


def main(argv: List[str] | None = None) -> None:
    """CLI entrypoint for luaudoc commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))
    logger = get_logger("cli")
    orchestrator = Orchestrator()

    try:
        config = orchestrator.load(Path(args.path))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    diagnostics: List[Diagnostic] = []
    try:
        if args.command == "extract":
            extracted = orchestrator.run_extract(config)
            diagnostics = extracted.diagnostics
            print(f"Reference written to {_relativize(extracted.output)}")
        elif args.command == "render":
            rendered = orchestrator.run_render(config)
            diagnostics = rendered.diagnostics
            print(_render_summary(rendered.out_dir, rendered.written, rendered.deleted))
        elif args.command == "build":
            built = orchestrator.run_build(config)
            diagnostics = built.diagnostics
            print(f"Reference written to {_relativize(built.extract.output)}")
            print(_render_summary(built.render.out_dir, built.render.written, built.render.deleted))
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except ReferenceDocumentError as exc:
        parser.exit(1, f"{exc}\n")
    except OSError as exc:
        parser.exit(1, f"luaudoc {args.command} failed: {exc}\nRun with --verbose for more details.\n")

    log_diagnostics(logger, diagnostics)
    code = exit_code(diagnostics, fail_on_warning=bool(getattr(args, "fail_on_warning", False)))
    if code:
        parser.exit(code, f"luaudoc {args.command} reported {len(diagnostics)} diagnostic(s)\n")


def exit_code(diagnostics: Sequence[Diagnostic], *, fail_on_warning: bool) -> int:
    """Diagnostics only fail the run when the caller opts in."""
    if fail_on_warning and diagnostics:
        return 1
    return 0


def _render_summary(out_dir: Path, written: Sequence[str], deleted: Sequence[str]) -> str:
    return (
        f"Reference pages updated in {_relativize(out_dir)} "
        f"({len(written)} written, {len(deleted)} removed)"
    )


def _relativize(path: Path | None) -> str:
    if path is None:
        return "(not written)"
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
