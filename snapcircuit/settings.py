"""
settings.py - User configuration for snapcircuit.

Stores defaults in a dataclass and user overrides in a JSON config file.
Only values that differ from the defaults are written back.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path

logger = logging.getLogger(__name__)

_CONFIG_DIR = Path.home() / ".snapcircuit"
_CONFIG_FILE = _CONFIG_DIR / "settings.json"

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@dataclass
class CircuitSettings:
    log_level: str = "WARNING"
    # Dump the connection list at DEBUG level on every recompute
    log_graph: bool = False
    check_invariants: bool = True

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict) -> "CircuitSettings":
        """Build settings from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        settings = cls(**{k: v for k, v in payload.items() if k in known})
        settings.log_level = str(settings.log_level).upper()
        if settings.log_level not in LOG_LEVELS:
            logger.warning("Unknown log level '%s', using WARNING", settings.log_level)
            settings.log_level = "WARNING"
        return settings


class SettingsStore:
    """Loads and saves CircuitSettings overrides."""

    def __init__(self, config_path=None):
        self._config_path = Path(config_path) if config_path else _CONFIG_FILE
        self.settings = CircuitSettings()
        self.load()

    @property
    def config_path(self) -> Path:
        return self._config_path

    def get(self, key):
        return getattr(self.settings, key)

    def set(self, key, value):
        """Set a single value. Unknown keys raise KeyError."""
        if key not in self.settings.to_dict():
            raise KeyError(f"Unknown setting '{key}'")
        setattr(self.settings, key, value)

    def reset_defaults(self):
        self.settings = CircuitSettings()

    def save(self):
        """Save user overrides to JSON config file."""
        defaults = CircuitSettings().to_dict()
        overrides = {k: v for k, v in self.settings.to_dict().items() if v != defaults[k]}
        try:
            self._config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._config_path, "w") as f:
                json.dump(overrides, f, indent=2)
        except OSError as e:
            logger.error("Failed to save settings: %s", e)

    def load(self):
        """Load user overrides from JSON config file."""
        if not self._config_path.exists():
            return
        try:
            with open(self._config_path) as f:
                overrides = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load settings from %s: %s", self._config_path, e)
            return
        if not isinstance(overrides, dict):
            logger.warning("Ignoring settings file %s: expected a JSON object", self._config_path)
            return
        merged = self.settings.to_dict()
        merged.update(overrides)
        self.settings = CircuitSettings.from_dict(merged)


def configure_logging(level: str = "WARNING") -> None:
    """Configure root logging for command-line use. Library code never calls this."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
