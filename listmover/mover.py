import logging
import shutil
from datetime import datetime
from pathlib import Path, PurePath
from typing import Optional, Sequence, Tuple

from .errors import (
    EntryError,
    EntryNotFoundError,
    SourceLockedError,
    TransferIncompleteError,
    UnexpectedTransferError,
    UnsupportedEntryTypeError,
)
from .models import ExitStatus, MoveEntry, MoveResult, MoveStatus, TransferSpec
from .transfer import NativeTransfer, Transfer
from .utils import is_within

log = logging.getLogger(__name__)


def make_result(entry: MoveEntry, status: MoveStatus, destination, message: str) -> MoveResult:
    return MoveResult(
        timestamp=datetime.now(),
        line_number=entry.line_number,
        status=status,
        source=entry.source_path,
        destination=str(destination) if destination is not None else "",
        message=message,
    )


class ListMover:
    """
    Moves one entry at a time and classifies the outcome. Nothing raised
    while handling an entry escapes move_one/move_tree; it becomes a
    MoveResult instead.
    """

    def __init__(self, transfer: Optional[Transfer] = None, allow_dirs: bool = False,
                 verify_source_removed: bool = True, dry_run: bool = False,
                 retries: int = 1, wait_seconds: int = 1, threads: int = 8):
        self.transfer = transfer or NativeTransfer()
        self.allow_dirs = allow_dirs
        self.verify_source_removed = verify_source_removed
        self.dry_run = dry_run
        self.retries = retries
        self.wait_seconds = wait_seconds
        self.threads = threads

    def move_one(self, entry: MoveEntry, destination: PurePath) -> MoveResult:
        src = Path(entry.source_path)
        dst = Path(destination)
        started = False
        try:
            if not src.exists():
                raise EntryNotFoundError("source not found")
            if src.is_dir() and not self.allow_dirs:
                raise UnsupportedEntryTypeError("directories are not supported by this operation")
            conflict = self._location_conflict(src, dst)
            if conflict:
                return make_result(entry, MoveStatus.SKIPPED, dst, conflict)
            if self.dry_run:
                return make_result(entry, MoveStatus.SKIPPED, dst, "dry run: would move")

            dst.parent.mkdir(parents=True, exist_ok=True)
            if src.is_dir():
                spec = self._spec(src, dst, "*", recursive=True)
            else:
                spec = self._spec(src.parent, dst.parent, src.name)
            started = True
            self._verify(src, dst, self.transfer.execute(spec))
        except EntryError as e:
            if isinstance(e, EntryNotFoundError):
                dst = None
            return make_result(entry, e.status, dst, str(e))
        except Exception as e:  # noqa: BLE001
            if started and src.exists():
                self._cleanup(src, dst)
            error = UnexpectedTransferError(str(e) or e.__class__.__name__)
            return make_result(entry, error.status, dst, str(error))

        return make_result(entry, MoveStatus.SUCCESS, dst, "moved")

    def move_tree(self, entry: MoveEntry, destination: PurePath,
                  exclusions: Sequence[str] = ()) -> MoveResult:
        """
        Migrate a whole directory tree with a single transfer call.
        Excluded items stay behind, so the source tree may survive a
        successful migration; partial results are never rolled back.
        """
        src = Path(entry.source_path)
        dst = Path(destination)
        try:
            if not src.exists():
                raise EntryNotFoundError("source not found")
            if not src.is_dir():
                raise UnsupportedEntryTypeError("tree migration needs a directory")
            conflict = self._location_conflict(src, dst)
            if conflict:
                return make_result(entry, MoveStatus.SKIPPED, dst, conflict)
            exclude_files, exclude_dirs = self._split_exclusions(src, exclusions)
            if self.dry_run:
                return make_result(entry, MoveStatus.SKIPPED, dst, "dry run: would migrate tree")

            dst.parent.mkdir(parents=True, exist_ok=True)
            spec = self._spec(src, dst, "*", recursive=True,
                              exclude_files=exclude_files, exclude_dirs=exclude_dirs)
            status = self.transfer.execute(spec)
            if status.failed:
                raise UnexpectedTransferError(status.message)
            if not dst.exists():
                raise TransferIncompleteError("transfer did not complete")
        except EntryError as e:
            if isinstance(e, EntryNotFoundError):
                dst = None
            return make_result(entry, e.status, dst, str(e))
        except Exception as e:  # noqa: BLE001
            error = UnexpectedTransferError(str(e) or e.__class__.__name__)
            return make_result(entry, error.status, dst, str(error))

        if status.has_warnings:
            return make_result(entry, MoveStatus.WARNING, dst, status.message)
        excluded = len(exclude_files) + len(exclude_dirs)
        message = f"migrated, {excluded} excluded" if excluded else "migrated"
        return make_result(entry, MoveStatus.SUCCESS, dst, message)

    def _verify(self, src: Path, dst: Path, status: ExitStatus) -> None:
        if status.failed:
            if src.exists():
                self._cleanup(src, dst)
            raise UnexpectedTransferError(status.message)
        if not dst.exists():
            raise TransferIncompleteError("transfer did not complete")
        if self.verify_source_removed and src.exists():
            self._cleanup(src, dst)
            raise SourceLockedError("source appears locked or in use")

    def _location_conflict(self, src: Path, dst: Path) -> Optional[str]:
        src_real, dst_real = src.resolve(), dst.resolve()
        if src_real == dst_real:
            return "same location"
        if src.is_dir() and is_within(str(dst_real), str(src_real)):
            return "destination is inside the source"
        return None

    def _cleanup(self, src: Path, dst: Path) -> None:
        """
        Remove what was duplicated by a failed move. For a directory only
        files whose source counterpart still exists are removed; anything
        that already left the source is the surviving copy and stays.
        """
        try:
            if src.is_dir() and dst.is_dir():
                self._remove_duplicates(src, dst)
            elif dst.is_file() and src.is_file():
                dst.unlink()
                log.debug("Removed partial copy %s", dst)
        except OSError as e:
            log.warning("Could not remove partial copy %s: %s", dst, e)

    def _remove_duplicates(self, src: Path, dst: Path) -> None:
        for copy in sorted(dst.rglob("*"), reverse=True):
            original = src / copy.relative_to(dst)
            if copy.is_file() and original.is_file():
                copy.unlink()
                log.debug("Removed partial copy %s", copy)
            elif copy.is_dir() and original.is_dir() and not any(copy.iterdir()):
                copy.rmdir()
        if not any(dst.iterdir()):
            dst.rmdir()

    def _spec(self, src_dir: Path, dst_dir: Path, file_filter: str, recursive: bool = False,
              exclude_files: Tuple[str, ...] = (), exclude_dirs: Tuple[str, ...] = ()) -> TransferSpec:
        return TransferSpec(
            source_dir=str(src_dir),
            dest_dir=str(dst_dir),
            file_filter=file_filter,
            move=True,
            retries=self.retries,
            wait_seconds=self.wait_seconds,
            threads=self.threads,
            recursive=recursive,
            exclude_files=exclude_files,
            exclude_dirs=exclude_dirs,
        )

    def _split_exclusions(self, root: Path, exclusions: Sequence[str]):
        files, dirs = [], []
        for item in exclusions:
            path = Path(item)
            if path == root or not is_within(str(path), str(root)):
                continue
            if path.is_dir():
                dirs.append(str(path))
            else:
                files.append(str(path))
        return tuple(files), tuple(dirs)
