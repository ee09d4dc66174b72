"""CLI entrypoints for docsmith commands."""

from __future__ import annotations

import argparse
import getpass
import sys
from pathlib import Path

from .config import save_api_key
from .errors import DocsmithError
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


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsmith",
        description="Generate README files from repository metadata and an LLM.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug-level logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    configure_parser = subparsers.add_parser(
        "configure",
        help="Set up the API key used for README generation.",
    )
    _add_verbose_option(configure_parser, suppress_default=True)

    docify_parser = subparsers.add_parser(
        "docify",
        help="Generate README.md for a repository.",
    )
    _add_verbose_option(docify_parser, suppress_default=True)
    docify_parser.add_argument(
        "url",
        nargs="?",
        default=None,
        help="GitHub repository URL (defaults to the git repository in the current directory).",
    )
    docify_parser.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        help="Print the README to the console instead of writing it.",
    )
    docify_parser.add_argument(
        "-p",
        "--prompt",
        default="",
        help="Extra instructions appended to the generation prompt.",
    )
    docify_parser.add_argument(
        "--style",
        default=None,
        help="Force a shields.io badge style (e.g. flat, flat-square, for-the-badge).",
    )
    docify_parser.add_argument(
        "--debug",
        action="store_true",
        help="Log the full prompt sent to the model.",
    )

    return parser


def confirm_overwrite(path: Path) -> bool:
    """Ask on the terminal before replacing an existing file."""
    try:
        answer = input(f"{path} already exists. Overwrite it? [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docsmith commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    debug = bool(getattr(args, "debug", False))
    configure_logging(verbose=bool(args.verbose) or debug, log_file=args.log_file)

    if args.command == "configure":
        _run_configure(parser)
    elif args.command == "docify":
        orchestrator = Orchestrator(confirm=confirm_overwrite)
        try:
            result = orchestrator.docify(
                args.url,
                dry_run=bool(args.dry_run),
                extra_instructions=args.prompt,
                badge_style=args.style,
                debug=debug,
            )
        except DocsmithError as exc:
            parser.exit(1, _format_error(exc))
        except Exception as exc:  # pragma: no cover - defensive guard
            parser.exit(1, f"docsmith docify failed: {exc}\nRun with --verbose for more details.\n")

        outcome = result.outcome
        if outcome.dry_run:
            print('This was a dry run. Run "docsmith docify" without --dry-run to save the file.')
        elif outcome.written:
            print(f"README generated at {_relativize(outcome.path)}")
        else:
            print("Operation cancelled; existing README left unchanged.")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_configure(parser: argparse.ArgumentParser) -> None:
    print("docsmith needs an API key for AI content generation (Google Gemini by default).")
    try:
        api_key = getpass.getpass("Enter your API key: ").strip()
    except (EOFError, KeyboardInterrupt):
        parser.exit(1, "\nConfiguration cancelled.\n")
    if len(api_key) < 10:
        parser.exit(1, "API key seems too short. Please check and try again.\n")
    try:
        path = save_api_key(api_key)
    except DocsmithError as exc:
        parser.exit(1, _format_error(exc))
    print(f"API key saved to {path}")


def _format_error(exc: DocsmithError) -> str:
    message = f"Error: {exc}\n"
    if exc.hint:
        message += f"Tip: {exc.hint}\n"
    return message


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
