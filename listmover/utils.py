from pathlib import Path
from typing import Optional

from .errors import ValidationError


def validate_run_paths(target_root: Path, list_path: Path,
                       exclude_list_path: Optional[Path] = None) -> None:
    if not target_root.exists() or not target_root.is_dir():
        raise ValidationError(f"Target root invalid: {target_root}")
    if not list_path.exists() or not list_path.is_file():
        raise ValidationError(f"List file not found: {list_path}")
    if list_path.stat().st_size == 0:
        raise ValidationError(f"List file is empty: {list_path}")
    if exclude_list_path is not None and not exclude_list_path.is_file():
        raise ValidationError(f"Exclusion list not found: {exclude_list_path}")


def is_within(path: str, parent: str) -> bool:
    """True if path equals parent or sits somewhere below it."""
    try:
        Path(path).relative_to(parent)
    except ValueError:
        return False
    return True
