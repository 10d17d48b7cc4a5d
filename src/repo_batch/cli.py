"""Command line entry points for repo-batch."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Sequence, TextIO

from . import __version__
from .batch import BatchRunner
from .config import BatchSettings, get_settings
from .discovery import TARGET_MODES, discover_targets, resolve_root
from .errors import ConfigurationError
from .operation import OperationRunner
from .prompts import CachingInputProvider, ResponseTable, TerminalInputProvider
from .report import EXIT_CONFIGURATION, EXIT_FAILURES
from .responses import load_responses
from .session import BatchSession
from .transcript import Transcript

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging for the batch runner."""

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _interrupt_on_sigterm(signum, frame) -> None:
    raise KeyboardInterrupt(f"terminated by signal {signum}")


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description=(
            "Run an operation in every repository under a directory, replaying "
            "answers to repeated prompts. Arguments after '--' go to the operation."
        ),
    )
    parser.add_argument("operation", help="Path (or PATH name) of the executable to run per repository")
    parser.add_argument(
        "--auto-respond",
        action="store_true",
        help="Remember every answer without asking for confirmation",
    )
    parser.add_argument(
        "--target-dir",
        choices=TARGET_MODES,
        default="current",
        help="Look for repositories in the current directory or its parent (default: current)",
    )
    parser.add_argument("--root", type=Path, help="Directory to scan instead of --target-dir")
    parser.add_argument("--responses", type=Path, help="YAML file of answers to preload")
    parser.add_argument("--log-dir", type=Path, help="Directory for the run log (default: settings)")
    parser.add_argument("--no-log", action="store_true", help="Do not write a log file")
    parser.add_argument(
        "--make-executable",
        action="store_true",
        help="chmod +x the operation if it is not executable",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose diagnostics")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def split_operation_args(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split ``argv`` at the first ``--`` into runner and operation arguments."""

    argv = list(argv)
    if "--" in argv:
        index = argv.index("--")
        return argv[:index], argv[index + 1 :]
    return argv, []


def execute(
    args: argparse.Namespace,
    settings: BatchSettings | None = None,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    cwd: Path | None = None,
) -> int:
    """Run one batch and return the process exit code."""

    settings = settings or get_settings()
    try:
        operation = OperationRunner(
            args.operation,
            args=getattr(args, "operation_args", ()),
            ask_prefix=settings.ask_prefix,
            skip_prefix=settings.skip_prefix,
            terminate_timeout=settings.terminate_timeout,
            prompt_idle_timeout=settings.prompt_idle_timeout,
            make_executable=args.make_executable,
        )
        root = resolve_root(args.target_dir, cwd=cwd, root=args.root)
        preloaded = load_responses(args.responses) if args.responses else []
        discovery = discover_targets(root, marker=settings.marker)
    except ConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CONFIGURATION

    log_dir = None if args.no_log else (args.log_dir or settings.log_dir)
    with Transcript.for_run(log_dir, console=stdout) as transcript:
        session = BatchSession(
            root=root,
            transcript=transcript,
            auto_respond=args.auto_respond,
            target_mode=args.target_dir,
            responses=ResponseTable(preloaded),
        )
        provider = CachingInputProvider(
            TerminalInputProvider(stdin=stdin, stdout=stdout),
            session.responses,
            auto_respond=args.auto_respond,
            transcript=transcript,
        )
        try:
            report = BatchRunner(operation, provider).run(session, discovery)
        except KeyboardInterrupt:
            transcript.warning("run aborted between targets")
            return EXIT_FAILURES
        logger.debug(
            "Batch finished",
            extra={
                "total": report.total,
                "failures": len(report.failures),
                "log_file": str(transcript.log_file) if transcript.log_file else None,
            },
        )
    return report.exit_code


def main(argv: Sequence[str] | None = None, *, force_parent: bool = False) -> None:
    """Entry point for ``batch-run``."""

    runner_argv, operation_argv = split_operation_args(sys.argv[1:] if argv is None else argv)
    parser = build_parser("batch-run-parent" if force_parent else None)
    args = parser.parse_args(runner_argv)
    args.operation_args = operation_argv
    if force_parent:
        args.target_dir = "parent"

    settings = get_settings()
    configure_logging("DEBUG" if args.verbose else settings.log_level)

    # SIGTERM takes the same path as Ctrl-C: stop the operation, still report.
    previous_handler = signal.signal(signal.SIGTERM, _interrupt_on_sigterm)
    try:
        exit_code = execute(args, settings)
    finally:
        signal.signal(signal.SIGTERM, previous_handler)
    if exit_code:
        raise SystemExit(exit_code)


def main_parent(argv: Sequence[str] | None = None) -> None:
    """Entry point for ``batch-run-parent``: scan the parent directory."""

    main(argv, force_parent=True)


if __name__ == "__main__":
    main()
