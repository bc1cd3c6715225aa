"""Configuration management for taskcal."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

TASKCAL_HOME = Path(os.environ.get("TASKCAL_HOME", Path.home() / "taskcal"))
CONFIG_FILE = TASKCAL_HOME / "config" / "taskcal.conf"
DATA_DIR = TASKCAL_HOME / "data"

# Value shipped in example configs; treated as "not configured"
PLACEHOLDER_API_KEY = "your-gemini-api-key"


@dataclass
class Config:
    """taskcal configuration."""

    data_file: str = ""
    user_id: str = ""
    due_soon_days: int = 3
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    breakdown_timeout: float = 20.0
    timezone: str = "UTC"
    # Telegram bot settings
    telegram_bot_token: str = ""
    telegram_allowed_users: list[int] = field(default_factory=list)
    telegram_summary_time: str = ""

    @property
    def has_gemini(self) -> bool:
        key = self.gemini_api_key.strip()
        return bool(key) and key != PLACEHOLDER_API_KEY

    @property
    def tasks_path(self) -> Path:
        if self.data_file:
            return Path(self.data_file).expanduser()
        return DATA_DIR / "tasks.json"


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _to_int(key: str, value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}")
        return default


def _to_float(key: str, value: str, default: float) -> float:
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Invalid number for {key.upper()}: {value!r}")
        return default


def parse_config(text: str) -> Config:
    """Parse KEY=value lines into a Config. Unknown keys are ignored."""
    config = Config()

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "data_file":
                config.data_file = value
            case "user_id":
                config.user_id = value
            case "due_soon_days":
                config.due_soon_days = _to_int(key, value, config.due_soon_days)
            case "gemini_api_key":
                config.gemini_api_key = value
            case "gemini_model":
                config.gemini_model = value
            case "gemini_base_url":
                config.gemini_base_url = value
            case "breakdown_timeout":
                config.breakdown_timeout = _to_float(key, value, config.breakdown_timeout)
            case "timezone":
                config.timezone = value
            case "telegram_bot_token":
                config.telegram_bot_token = value
            case "telegram_allowed_users":
                users = []
                for u in value.split(","):
                    u = u.strip()
                    if not u:
                        continue
                    try:
                        users.append(int(u))
                    except ValueError:
                        logger.warning(f"Ignoring invalid Telegram user id: {u!r}")
                config.telegram_allowed_users = users
            case "telegram_summary_time":
                config.telegram_summary_time = value

    return config


def load_config(path: Path | None = None) -> Config:
    """Load configuration from taskcal.conf file."""
    path = path or CONFIG_FILE
    if not path.exists():
        return Config()
    return parse_config(path.read_text())
