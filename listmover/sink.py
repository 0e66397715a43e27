import logging
from typing import List, Optional, Protocol

from .models import MoveResult, MoveStatus

_LEVELS = {
    MoveStatus.SUCCESS: logging.INFO,
    MoveStatus.SKIPPED: logging.WARNING,
    MoveStatus.WARNING: logging.WARNING,
    MoveStatus.NOT_FOUND: logging.WARNING,
    MoveStatus.ERROR: logging.ERROR,
}


class ResultSink(Protocol):
    def write(self, result: MoveResult) -> None:
        ...


class LogSink:
    """Reports every outcome through logging as soon as it happens."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("listmover.results")

    def write(self, result: MoveResult) -> None:
        level = _LEVELS.get(result.status, logging.INFO)
        if result.destination:
            self.logger.log(level, "[%s] line %d: %s -> %s (%s)", result.status.value,
                            result.line_number, result.source, result.destination, result.message)
        else:
            self.logger.log(level, "[%s] line %d: %s (%s)", result.status.value,
                            result.line_number, result.source, result.message)


class ListSink:
    def __init__(self):
        self.results: List[MoveResult] = []

    def write(self, result: MoveResult) -> None:
        self.results.append(result)
