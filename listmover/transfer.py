"""
Transfer backends.

Both backends satisfy the same contract, ``execute(spec) -> ExitStatus``,
and report robocopy-style exit codes so the mover can classify outcomes
without caring which one did the work:

    0   nothing to transfer
    1   files transferred
    2   extra files/dirs present in the destination
    4   mismatched files/dirs detected
    8   some files could not be transferred
    16  fatal error, nothing transferred
"""
import fnmatch
import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import List, Protocol

from .models import ExitStatus, TransferSpec
from .utils import is_within

log = logging.getLogger(__name__)

_EXIT_BITS = (
    (16, "fatal error"),
    (8, "some files could not be transferred"),
    (4, "mismatched files or directories detected"),
    (2, "extra files or directories in destination"),
    (1, "files transferred"),
)


def describe_exit_code(code: int) -> str:
    if code == 0:
        return "nothing to transfer"
    parts = [text for bit, text in _EXIT_BITS if code & bit]
    return "; ".join(parts) if parts else f"exit code {code}"


class Transfer(Protocol):
    def execute(self, spec: TransferSpec) -> ExitStatus:
        ...


class NativeTransfer:
    """Moves data in-process with shutil (rename, or copy+delete across volumes)."""

    def execute(self, spec: TransferSpec) -> ExitStatus:
        src_dir = Path(spec.source_dir)
        dst_dir = Path(spec.dest_dir)

        if not spec.recursive:
            src = src_dir / spec.file_filter
            self._transfer(src, dst_dir / spec.file_filter, spec.move)
            return ExitStatus(1, describe_exit_code(1))

        if not spec.exclude_files and not spec.exclude_dirs and spec.file_filter == "*" \
                and not dst_dir.exists():
            # whole directory, nothing filtered out
            self._transfer(src_dir, dst_dir, spec.move)
            return ExitStatus(1, describe_exit_code(1))

        return self._walk_tree(src_dir, dst_dir, spec)

    def _transfer(self, src: Path, dst: Path, move: bool) -> None:
        if move:
            shutil.move(str(src), str(dst))
        elif src.is_dir():
            shutil.copytree(str(src), str(dst), dirs_exist_ok=True)
        else:
            shutil.copy2(str(src), str(dst))

    def _walk_tree(self, src_dir: Path, dst_dir: Path, spec: TransferSpec) -> ExitStatus:
        moved = 0
        failures: List[str] = []
        dst_dir.mkdir(parents=True, exist_ok=True)
        for current, dirs, files in os.walk(src_dir):
            here = Path(current)
            dirs[:] = [d for d in dirs
                       if not any(is_within(str(here / d), x) for x in spec.exclude_dirs)]
            target = dst_dir / here.relative_to(src_dir)
            for name in files:
                src = here / name
                if not fnmatch.fnmatch(name, spec.file_filter):
                    continue
                if str(src) in spec.exclude_files:
                    log.debug("Excluded: %s", src)
                    continue
                try:
                    target.mkdir(parents=True, exist_ok=True)
                    self._transfer(src, target / name, spec.move)
                    moved += 1
                except OSError as e:
                    log.debug("Failed to transfer %s: %s", src, e)
                    failures.append(f"{src}: {e}")
            if not dirs and not files:
                target.mkdir(parents=True, exist_ok=True)

        if spec.move:
            self._prune_empty_dirs(src_dir)

        code = (8 if failures else 0) | (1 if moved else 0)
        message = describe_exit_code(code)
        if failures:
            message = f"{message}: {failures[0]}"
        return ExitStatus(code, message)

    def _prune_empty_dirs(self, root: Path) -> None:
        for current, dirs, files in os.walk(root, topdown=False):
            if not os.listdir(current):
                try:
                    os.rmdir(current)
                except OSError as e:
                    log.debug("Could not remove %s: %s", current, e)


class RobocopyTransfer:
    """Delegates to robocopy. Its exit code is the whole contract."""

    def __init__(self, executable: str = "robocopy"):
        self.executable = executable

    def build_command(self, spec: TransferSpec) -> List[str]:
        command = [self.executable, spec.source_dir, spec.dest_dir, spec.file_filter]
        if spec.recursive:
            command.append("/E")
        if spec.move:
            # /MOVE also removes the emptied source directories, /MOV only files
            command.append("/MOVE" if spec.recursive else "/MOV")
        command += [
            f"/R:{spec.retries}",
            f"/W:{spec.wait_seconds}",
            f"/MT:{spec.threads}",
        ]
        if spec.exclude_files:
            command += ["/XF", *spec.exclude_files]
        if spec.exclude_dirs:
            command += ["/XD", *spec.exclude_dirs]
        command += ["/NP", "/NJH", "/NJS"]
        return command

    def execute(self, spec: TransferSpec) -> ExitStatus:
        command = self.build_command(spec)
        log.debug("Running: %s", subprocess.list2cmdline(command))
        result = subprocess.run(command, capture_output=True, text=True)
        message = describe_exit_code(result.returncode)
        if result.returncode >= 8:
            detail = (result.stderr or result.stdout or "").strip().splitlines()
            if detail:
                message = f"{message}: {detail[-1].strip()}"
        return ExitStatus(result.returncode, message)


BACKENDS = {
    "native": NativeTransfer,
    "robocopy": RobocopyTransfer,
}


def make_transfer(name: str) -> Transfer:
    try:
        return BACKENDS[name]()
    except KeyError:
        raise ValueError(f"Unknown transfer backend: {name}") from None
