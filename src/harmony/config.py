"""Configuration management for Harmony."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .core.occurrences import DEFAULT_HORIZON_DAYS

logger = logging.getLogger(__name__)

HARMONY_HOME = Path(os.environ.get("HARMONY_HOME", Path.home() / "harmony"))
CONFIG_FILE = HARMONY_HOME / "config" / "harmony.conf"
DATA_DIR = HARMONY_HOME / "data"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Config:
    """Harmony configuration."""

    horizon_days: int = DEFAULT_HORIZON_DAYS
    current_user: str = "user_1"
    # Whether a pending occurrence may be completed without being assigned first
    allow_direct_complete: bool = True
    data_dir: str = ""


def resolve_data_dir(config: Config) -> Path:
    """Resolve storage directory from config."""
    if config.data_dir:
        return Path(config.data_dir).expanduser()
    return DATA_DIR


def _parse_value(value: str) -> str:
    """Strip quotes, or inline comments from unquoted values."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from harmony.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _parse_value(value.strip())

        match key:
            case "horizon_days":
                try:
                    horizon = int(value)
                except ValueError:
                    logger.warning(f"Ignoring non-integer HORIZON_DAYS: {value!r}")
                    continue
                if horizon < 1:
                    logger.warning(f"Ignoring HORIZON_DAYS below 1: {horizon}")
                    continue
                config.horizon_days = horizon
            case "current_user":
                config.current_user = value
            case "allow_direct_complete":
                lowered = value.lower()
                if lowered in _TRUE:
                    config.allow_direct_complete = True
                elif lowered in _FALSE:
                    config.allow_direct_complete = False
                else:
                    logger.warning(f"Ignoring invalid ALLOW_DIRECT_COMPLETE: {value!r}")
            case "data_dir":
                config.data_dir = value

    return config
