import logging
from typing import List, Optional, Tuple

from .config import RunConfiguration, default_report_path
from .errors import InvalidPathError, ListReadError, ValidationError
from .models import MoveEntry, MoveResult, MoveStatus
from .mover import ListMover, make_result
from .reader import ListReader, read_exclusions
from .report import ResultRecorder
from .reroot import compute_destination
from .sink import LogSink, ResultSink
from .transfer import Transfer, make_transfer
from .utils import validate_run_paths

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_VALIDATION = 1
EXIT_LIST_READ = 2
EXIT_TRANSFER = 3
EXIT_REPORT = 4


class Runner:
    """
    Drives one run: validate -> read list -> process entries -> write report.
    The exit code reflects orchestration health only; per-entry failures
    live in the report.
    """

    def __init__(self, config: RunConfiguration, transfer: Optional[Transfer] = None,
                 sink: Optional[ResultSink] = None, recorder: Optional[ResultRecorder] = None):
        self.config = config
        self.sink = sink or LogSink()
        self.recorder = recorder or ResultRecorder(append=config.append_report)
        self.mover = ListMover(
            transfer or make_transfer(config.backend),
            allow_dirs=config.allow_dirs,
            verify_source_removed=config.verify_source_removed,
            dry_run=config.dry_run,
            retries=config.retries,
            wait_seconds=config.wait_seconds,
            threads=config.threads,
        )
        self.report_written = False

    def run(self) -> int:
        try:
            self.validate()
        except ValidationError as e:
            log.error("Validation failed: %s", e)
            return EXIT_VALIDATION

        try:
            entries, exclusions = self.read_list()
        except ListReadError as e:
            log.error("Could not read list: %s", e)
            return EXIT_LIST_READ

        log.info("Processing %d entries from %s", len(entries), self.config.list_path)
        transfer_failed = self.process(entries, exclusions)
        self.write_report()

        if transfer_failed:
            return EXIT_TRANSFER
        if not self.report_written:
            return EXIT_REPORT
        return EXIT_OK

    def validate(self) -> None:
        self.config.validate()
        validate_run_paths(self.config.target_root, self.config.list_path,
                           self.config.exclude_list_path)

    def read_list(self) -> Tuple[List[MoveEntry], Tuple[str, ...]]:
        reader = ListReader(
            self.config.list_path,
            start_offset=self.config.start_offset,
            list_format=self.config.list_format,
            column=self.config.column,
            encoding=self.config.encoding,
        )
        # materialized up front so a broken list aborts before anything moves
        entries = list(reader.read_entries())
        exclusions: Tuple[str, ...] = ()
        if self.config.tree_mode:
            exclusions = read_exclusions(self.config.exclude_list_path, self.config.encoding)
            log.info("Loaded %d exclusions", len(exclusions))
        return entries, exclusions

    def process(self, entries: List[MoveEntry], exclusions: Tuple[str, ...] = ()) -> bool:
        """Returns True if a whole-tree transfer failed hard."""
        transfer_failed = False
        for entry in entries:
            result = self.process_entry(entry, exclusions)
            if self.config.tree_mode and result.status is MoveStatus.ERROR:
                transfer_failed = True
            self.recorder.record(result)
            self.sink.write(result)
        return transfer_failed

    def process_entry(self, entry: MoveEntry, exclusions: Tuple[str, ...] = ()) -> MoveResult:
        try:
            destination = compute_destination(entry.source_path, self.config.target_root)
        except InvalidPathError as e:
            return make_result(entry, MoveStatus.ERROR, None, str(e))

        if self.config.tree_mode:
            return self.mover.move_tree(entry, destination, exclusions)
        return self.mover.move_one(entry, destination)

    def write_report(self) -> None:
        path = self.config.report_path or default_report_path()
        try:
            self.recorder.flush(path)
        except OSError as e:
            log.error("Could not write report %s: %s", path, e)
            return
        self.report_written = True
        log.info("Report written to %s", path)
