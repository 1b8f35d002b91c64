"""User settings loaded from a YAML file in the data directory."""

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

import yaml

# Default data directory
DATA_DIR = Path.home() / ".momentum-log"

SETTINGS_FILENAME = "settings.yaml"


@dataclass
class Settings:
    """Runtime settings.

    Every key is optional in ``settings.yaml``; unknown keys are ignored.
    """

    data_dir: Path = field(default_factory=lambda: DATA_DIR)
    backup_dir: Path | None = None  # defaults to the current directory
    max_import_size_mb: int = 20
    autosave_debounce_ms: int = 400
    log_level: str = "WARNING"

    @property
    def max_import_bytes(self) -> int:
        return self.max_import_size_mb * 1024 * 1024

    @property
    def autosave_delay(self) -> float:
        """Debounce delay for AutosaveCoalescer, in seconds."""
        return self.autosave_debounce_ms / 1000

    @classmethod
    def load(cls, data_dir: Path | None = None) -> "Settings":
        """Load settings from ``<data_dir>/settings.yaml`` if it exists."""
        data_dir = Path(data_dir) if data_dir else DATA_DIR
        path = data_dir / SETTINGS_FILENAME
        raw: dict = {}
        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}

        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in raw.items() if key in known}
        values["data_dir"] = Path(values.get("data_dir", data_dir)).expanduser()
        if values.get("backup_dir"):
            values["backup_dir"] = Path(values["backup_dir"]).expanduser()
        return cls(**values)

    def save(self) -> Path:
        """Write settings to ``<data_dir>/settings.yaml``."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        out = asdict(self)
        out["data_dir"] = str(self.data_dir)
        out["backup_dir"] = str(self.backup_dir) if self.backup_dir else None
        path = self.data_dir / SETTINGS_FILENAME
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(out, f)
        return path
