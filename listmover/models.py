from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Tuple


class MoveStatus(Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    SKIPPED = "SKIPPED"
    WARNING = "WARNING"
    NOT_FOUND = "NOT_FOUND"


@dataclass(frozen=True)
class MoveEntry:
    line_number: int  # 1-based, counted in the untrimmed list file
    source_path: str


@dataclass(frozen=True)
class MoveResult:
    timestamp: datetime
    line_number: int
    status: MoveStatus
    source: str
    destination: str = ""  # empty if never computed
    message: str = ""


@dataclass(frozen=True)
class TransferSpec:
    """One invocation of a transfer backend."""
    source_dir: str
    dest_dir: str
    file_filter: str = "*"
    move: bool = True
    retries: int = 1
    wait_seconds: int = 1
    threads: int = 8
    recursive: bool = False
    exclude_files: Tuple[str, ...] = ()
    exclude_dirs: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ExitStatus:
    code: int
    message: str = ""

    @property
    def failed(self) -> bool:
        # robocopy convention: 8 and above means at least one hard failure
        return self.code >= 8

    @property
    def has_warnings(self) -> bool:
        return not self.failed and bool(self.code & 0b0110)
