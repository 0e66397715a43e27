import json
from dataclasses import dataclass, fields, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError, ValidationError
from .reader import LIST_FORMATS
from .transfer import BACKENDS

REPORT_NAME_FORMAT = "move_report_%Y%m%d-%H%M%S.csv"


def default_report_path(now: Optional[datetime] = None) -> Path:
    return Path.cwd() / (now or datetime.now()).strftime(REPORT_NAME_FORMAT)


@dataclass(frozen=True)
class RunConfiguration:
    target_root: Path
    list_path: Path
    start_offset: int = 1
    report_path: Optional[Path] = None
    exclude_list_path: Optional[Path] = None
    list_format: str = "text"
    column: str = "Path"
    encoding: str = "utf-8-sig"
    allow_dirs: bool = False
    backend: str = "native"
    verify_source_removed: bool = True
    dry_run: bool = False
    append_report: bool = False
    retries: int = 1
    wait_seconds: int = 1
    threads: int = 8

    @property
    def tree_mode(self) -> bool:
        return self.exclude_list_path is not None

    def validate(self) -> None:
        if self.start_offset < 1:
            raise ValidationError(f"Start offset must be 1 or greater, got {self.start_offset}")
        if self.list_format not in LIST_FORMATS:
            raise ValidationError(f"Unknown list format: {self.list_format}")
        if self.backend not in BACKENDS:
            raise ValidationError(f"Unknown backend: {self.backend}")
        if self.retries < 0 or self.wait_seconds < 0 or self.threads < 1:
            raise ValidationError("retries/wait must be >= 0 and threads >= 1")


_PATH_FIELDS = {"target_root", "list_path", "report_path", "exclude_list_path"}
_FIELD_NAMES = {f.name for f in fields(RunConfiguration)}


def load_settings(path: Path) -> Dict[str, Any]:
    """Load a JSON settings file whose keys are RunConfiguration field names."""
    if not path.exists():
        raise ConfigError(f"Settings file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Cannot read settings file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file must hold a JSON object: {path}")

    unknown = set(data) - _FIELD_NAMES
    if unknown:
        raise ConfigError(f"Unknown settings in {path}: {', '.join(sorted(unknown))}")
    return data


def build_configuration(overrides: Dict[str, Any], settings_path: Optional[Path] = None,
                        now: Optional[datetime] = None) -> RunConfiguration:
    """
    Merge the settings file (if any) with explicit overrides. Overrides whose
    value is None are treated as "not given" so file values survive.
    """
    values: Dict[str, Any] = load_settings(settings_path) if settings_path else {}
    values.update({k: v for k, v in overrides.items() if v is not None})

    for key in ("target_root", "list_path"):
        if not values.get(key):
            raise ValidationError(f"Missing required setting: {key}")

    for key in _PATH_FIELDS:
        if values.get(key):
            values[key] = Path(values[key]).expanduser()

    try:
        config = RunConfiguration(**values)
    except TypeError as e:
        raise ConfigError(str(e)) from e
    if config.report_path is None:
        config = replace(config, report_path=default_report_path(now))
    config.validate()
    return config
