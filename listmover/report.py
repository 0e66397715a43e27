import csv
from collections import Counter
from pathlib import Path
from typing import Dict, List

from .models import MoveResult, MoveStatus

REPORT_COLUMNS = ["Timestamp", "Status", "Line", "Source", "Destination", "Message"]


class ResultRecorder:
    """Collects one MoveResult per entry and writes them out once, at the end of a run."""

    def __init__(self, append: bool = False):
        self.append = append
        self._results: List[MoveResult] = []

    def record(self, result: MoveResult) -> None:
        self._results.append(result)

    def summary(self) -> Dict[MoveStatus, int]:
        counts = Counter(r.status for r in self._results)
        return {status: counts.get(status, 0) for status in MoveStatus}

    def flush(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        needs_header = not self.append or not path.exists() or path.stat().st_size == 0
        mode = "a" if self.append else "w"

        with path.open(mode, newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            if needs_header:
                writer.writerow(REPORT_COLUMNS)
            for r in self._results:
                writer.writerow(self._row(r))
        return path

    @staticmethod
    def _row(r: MoveResult) -> list:
        return [
            r.timestamp.isoformat(timespec="seconds"),
            r.status.value,
            r.line_number,
            r.source,
            r.destination,
            r.message,
        ]


def load_report(path: Path) -> List[Dict[str, str]]:
    """Read a report back as dict rows (used for inspection and tests)."""
    with path.open("r", newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))
