import logging
from dataclasses import asdict, dataclass, fields
from typing import Any

from cliptag.config import DEFAULT_MAX_HISTORY_ITEMS

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"
SETUP_COMPLETE_KEY = "setup_complete"
AUTO_START_KEY = "auto_start"


@dataclass
class Settings:
    enabled: bool = True
    save_text: bool = True
    save_code: bool = True
    save_links: bool = True
    save_emails: bool = True
    save_images: bool = True
    save_passwords: bool = False
    encrypt_passwords: bool = True
    max_history_items: int = DEFAULT_MAX_HISTORY_ITEMS

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Settings":
        data = data or {}
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        settings = cls(**values)
        settings.max_history_items = _parse_max_items(settings.max_history_items)
        return settings


def _parse_max_items(value: Any) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return DEFAULT_MAX_HISTORY_ITEMS
    return parsed if parsed > 0 else DEFAULT_MAX_HISTORY_ITEMS


class SettingsManager:
    """Loads and saves user settings and app flags through the key-value store."""

    def __init__(self, kv):
        self._kv = kv
        self._current = Settings.from_dict(kv.get(SETTINGS_KEY))

    @property
    def current(self) -> Settings:
        return self._current

    def save(self, settings: Settings) -> None:
        self._current = Settings.from_dict(settings.to_dict())
        self._kv.set(SETTINGS_KEY, self._current.to_dict())
        logger.info("Settings saved")

    def is_setup_complete(self) -> bool:
        return bool(self._kv.get(SETUP_COMPLETE_KEY, False))

    def complete_setup(self, settings: Settings) -> None:
        self.save(settings)
        self._kv.set(SETUP_COMPLETE_KEY, True)

    @property
    def auto_start(self) -> bool:
        return bool(self._kv.get(AUTO_START_KEY, False))

    @auto_start.setter
    def auto_start(self, enabled: bool) -> None:
        self._kv.set(AUTO_START_KEY, bool(enabled))

    def reset(self) -> None:
        """Wipe every stored key, history included, and fall back to defaults."""
        self._kv.clear()
        self._current = Settings()
        logger.info("All stored data reset")
