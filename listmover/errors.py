from .models import MoveStatus


class MoverError(Exception):
    """Base error for the project."""


class ValidationError(MoverError):
    """Pre-flight check failed; nothing has been touched yet."""


class ConfigError(ValidationError):
    pass


class ListReadError(MoverError):
    pass


class InvalidPathError(MoverError):
    pass


class EntryError(MoverError):
    """Outcome of a single entry that is recorded instead of aborting the run."""
    status = MoveStatus.ERROR


class EntryNotFoundError(EntryError):
    status = MoveStatus.NOT_FOUND


class UnsupportedEntryTypeError(EntryError):
    status = MoveStatus.SKIPPED


class TransferIncompleteError(EntryError):
    pass


class SourceLockedError(EntryError):
    pass


class UnexpectedTransferError(EntryError):
    pass
