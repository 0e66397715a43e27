import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import build_configuration
from .errors import ValidationError
from .models import MoveStatus
from .reader import LIST_FORMATS
from .runner import EXIT_VALIDATION, Runner
from .transfer import BACKENDS

log = logging.getLogger("listmover")

_STATUS_STYLES = {
    MoveStatus.SUCCESS: "green",
    MoveStatus.WARNING: "yellow",
    MoveStatus.SKIPPED: "cyan",
    MoveStatus.NOT_FOUND: "magenta",
    MoveStatus.ERROR: "bold red",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="listmover",
        description="Move the files named in a list under a target root, "
                    "keeping their full directory structure, and write a CSV report.",
    )
    parser.add_argument("target_root", nargs="?", help="Existing directory to move into.")
    parser.add_argument("list_file", nargs="?", help="Text or CSV file listing absolute source paths.")
    parser.add_argument("--start", dest="start_offset", type=int,
                        help="1-based entry to start from (header excluded). Default: 1")
    parser.add_argument("--report", dest="report_path",
                        help="Report CSV path. Default: move_report_<timestamp>.csv")
    parser.add_argument("--format", dest="list_format", choices=LIST_FORMATS,
                        help="List file format. Default: text")
    parser.add_argument("--column", help="Path column for --format csv. Default: Path")
    parser.add_argument("--encoding", help="List file encoding. Default: utf-8-sig")
    parser.add_argument("--allow-dirs", action="store_const", const=True,
                        help="Move directory entries too (files only by default).")
    parser.add_argument("--backend", choices=sorted(BACKENDS),
                        help="Transfer mechanism. Default: native")
    parser.add_argument("--retries", type=int, help="robocopy /R value. Default: 1")
    parser.add_argument("--wait", dest="wait_seconds", type=int, help="robocopy /W value. Default: 1")
    parser.add_argument("--threads", type=int, help="robocopy /MT value. Default: 8")
    parser.add_argument("--exclude-list", dest="exclude_list_path",
                        help="Migrate each listed directory as a whole tree, skipping the paths in this file.")
    parser.add_argument("--append-report", action="store_const", const=True,
                        help="Append to an existing report instead of overwriting it.")
    parser.add_argument("--no-verify-source", dest="verify_source_removed",
                        action="store_const", const=False,
                        help="Do not require the source to be gone after a move.")
    parser.add_argument("--dry-run", action="store_const", const=True,
                        help="Report what would be moved without touching anything.")
    parser.add_argument("--config", type=Path, help="JSON settings file (CLI arguments win).")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug output.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Warnings and errors only.")
    return parser


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False, markup=False)],
        force=True,
    )


def render_summary(counts: Dict[MoveStatus, int], report_path: Optional[Path],
                   console: Optional[Console] = None) -> None:
    console = console or Console()
    table = Table(title="Run summary")
    table.add_column("Status")
    table.add_column("Count", justify="right")
    for status, count in counts.items():
        table.add_row(f"[{_STATUS_STYLES[status]}]{status.value}[/]", str(count))
    table.add_row("[bold]TOTAL[/]", str(sum(counts.values())))
    console.print(table)
    if report_path is not None:
        console.print(f"Report: [bold]{escape(str(report_path))}[/]")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.quiet)

    overrides = {
        key: value for key, value in vars(args).items()
        if key not in ("config", "verbose", "quiet", "list_file")
    }
    overrides["list_path"] = args.list_file

    try:
        config = build_configuration(overrides, args.config)
    except ValidationError as e:
        log.error("Invalid configuration: %s", e)
        return EXIT_VALIDATION

    if config.dry_run:
        log.warning("Dry run: nothing will be moved")

    runner = Runner(config)
    code = runner.run()
    if runner.report_written and not args.quiet:
        render_summary(runner.recorder.summary(), config.report_path)
    return code


if __name__ == "__main__":
    sys.exit(main())
