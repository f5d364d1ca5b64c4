import os
from pathlib import Path

DATA_DIR = Path(os.environ.get("CLIPTAG_DATA_DIR", Path.home() / ".local" / "share" / "cliptag"))
DB_PATH = DATA_DIR / "cliptag.db"
EXPORT_DIR = DATA_DIR / "exports"
LOG_PATH = DATA_DIR / "cliptag.log"

POLL_INTERVAL = 0.5  # seconds between clipboard checks
DEFAULT_MAX_HISTORY_ITEMS = 500
MAX_TEXT_SIZE = 1_000_000  # 1MB text limit
MAX_IMAGE_SIZE = 10_000_000  # 10MB image limit
PREVIEW_LENGTH = 100  # characters kept in an entry preview
MENU_TITLE_LENGTH = 50  # characters shown in a menu item


def _parse_menu_display_count() -> int:
    raw = os.environ.get("CLIPTAG_MENU_DISPLAY_COUNT")
    if raw is None:
        return 15
    try:
        value = int(raw)
    except ValueError:
        return 15
    return max(5, min(50, value))


MENU_DISPLAY_COUNT = _parse_menu_display_count()
