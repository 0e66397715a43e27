import csv
import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .errors import ListReadError
from .models import MoveEntry

log = logging.getLogger(__name__)

HEADER_NAMES = {"path", "file", "source"}
LIST_FORMATS = ("text", "csv")


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1].strip()
    return value


class ListReader:
    """
    Reads MoveEntry items from a plain text list (one path per line) or a CSV
    file with a path column. Line numbers always point at the physical line
    of the untrimmed file, so they can be matched against the list by hand.
    """

    def __init__(self, list_path: Path, start_offset: int = 1, list_format: str = "text",
                 column: str = "Path", encoding: str = "utf-8-sig"):
        if list_format not in LIST_FORMATS:
            raise ValueError(f"Unknown list format: {list_format}")
        self.list_path = list_path
        self.start_offset = max(start_offset, 1)
        self.list_format = list_format
        self.column = column
        self.encoding = encoding

    def read_entries(self) -> Iterator[MoveEntry]:
        rows = self._csv_rows() if self.list_format == "csv" else self._text_rows()
        to_skip = self.start_offset - 1
        try:
            for line_number, value in rows:
                if to_skip > 0:
                    to_skip -= 1
                    continue
                yield MoveEntry(line_number, value)
        except (OSError, UnicodeDecodeError) as e:
            raise ListReadError(f"Cannot read list file {self.list_path}: {e}") from e
        except csv.Error as e:
            raise ListReadError(f"Malformed CSV in {self.list_path}: {e}") from e

    def _text_rows(self) -> Iterator[Tuple[int, str]]:
        header_checked = False
        with self.list_path.open("r", encoding=self.encoding, newline="") as f:
            for line_number, line in enumerate(f, 1):
                if not line.strip():
                    continue
                if not header_checked:
                    header_checked = True
                    first_token = _unquote(line.split(",", 1)[0])
                    if first_token.lower() in HEADER_NAMES:
                        log.debug("Skipping header on line %d: %s", line_number, line.strip())
                        continue
                yield line_number, _unquote(line)

    def _csv_rows(self) -> Iterator[Tuple[int, str]]:
        index: Optional[int] = None
        with self.list_path.open("r", encoding=self.encoding, newline="") as f:
            reader = csv.reader(f)
            for row in reader:
                if not any(cell.strip() for cell in row):
                    continue
                if index is None:
                    index = self._bind_column(row)
                    if index >= 0:
                        log.debug("Bound to column %r at index %d", self.column, index)
                        continue
                    index = 0  # no header; first column holds the path
                value = row[index].strip() if index < len(row) else ""
                if not value:
                    log.debug("Row on line %d has no value in the path column", reader.line_num)
                    continue
                yield reader.line_num, value

    def _bind_column(self, header: List[str]) -> int:
        wanted = self.column.strip().lower()
        names = [cell.strip().lower() for cell in header]
        if wanted in names:
            return names.index(wanted)
        if any(name in HEADER_NAMES for name in names):
            raise ListReadError(
                f"Column {self.column!r} not found in header of {self.list_path}: {header}"
            )
        return -1


def read_exclusions(path: Path, encoding: str = "utf-8-sig") -> Tuple[str, ...]:
    """One absolute path per line; blank lines and '#' comments are ignored."""
    try:
        with path.open("r", encoding=encoding) as f:
            lines = [_unquote(line) for line in f]
    except (OSError, UnicodeDecodeError) as e:
        raise ListReadError(f"Cannot read exclusion list {path}: {e}") from e
    return tuple(line for line in lines if line and not line.startswith("#"))
