import re
from pathlib import Path, PurePath, PurePosixPath, PureWindowsPath
from typing import Union

from .errors import InvalidPathError

# "C:\..." / "C:/..." or "\\server\share\..."
_WINDOWS_PATH = re.compile(r"^(?:[A-Za-z]:|\\\\|//)")


def split_root(source_path: str) -> PurePath:
    """Parse a source path in the flavour it was written in."""
    if _WINDOWS_PATH.match(source_path):
        return PureWindowsPath(source_path)
    return PurePosixPath(source_path)


def relative_remainder(source_path: str) -> tuple:
    """
    Return the path components below the root/volume designator.
    Raises InvalidPathError when there is no separable root.
    """
    if not source_path or not source_path.strip():
        raise InvalidPathError("Empty source path")

    pure = split_root(source_path.strip())
    if not pure.is_absolute():
        raise InvalidPathError(f"Source path is not absolute: {source_path}")

    remainder = pure.parts[1:]  # parts[0] is the anchor
    if not remainder:
        raise InvalidPathError(f"Source path has nothing below its root: {source_path}")
    return remainder


def compute_destination(source_path: str, target_root: Union[str, PurePath]) -> PurePath:
    """
    Re-root source_path under target_root, keeping the whole structure below
    the drive/root, e.g. D:\\A\\x.txt + D:\\Out -> D:\\Out\\A\\x.txt.
    Pure: no directories are created here.
    """
    root = target_root if isinstance(target_root, PurePath) else Path(target_root)
    return root.joinpath(*relative_remainder(source_path))
