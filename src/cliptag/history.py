import json
import logging
import uuid
from collections.abc import Callable
from datetime import datetime

from cliptag.factory import IMAGE_PREVIEW
from cliptag.models import Category, Entry, EntryDraft, HistoryStats
from cliptag.privacy import DecryptionError, decrypt
from cliptag.settings import SettingsManager
from cliptag.storage import PersistenceError

logger = logging.getLogger(__name__)

HISTORY_KEY = "clipboard_history"
FILTER_ALL = "all"
FILTER_FAVORITES = "favorites"


class HistoryStore:
    """Capacity-bounded clipboard history, newest entry first.

    The in-memory list is authoritative; every mutation is written through to
    the key-value store, and a failed write is logged rather than raised.
    """

    def __init__(
        self,
        kv,
        settings: SettingsManager,
        on_insert: Callable[[Entry], None] | None = None,
        on_clear: Callable[[], None] | None = None,
    ):
        self._kv = kv
        self._settings = settings
        self._on_insert = on_insert
        self._on_clear = on_clear
        self._entries: list[Entry] = []
        self.reload()

    def reload(self) -> None:
        raw = self._kv.get(HISTORY_KEY, [])
        entries = []
        for item in raw:
            try:
                entries.append(Entry.from_dict(item))
            except (KeyError, ValueError, TypeError):
                logger.warning("Skipping unreadable history item")
        self._entries = entries

    def _persist(self) -> None:
        try:
            self._kv.set(HISTORY_KEY, [e.to_dict() for e in self._entries])
        except PersistenceError:
            logger.exception("Failed to persist clipboard history")

    def insert(self, draft: EntryDraft) -> Entry:
        entry = Entry(
            id=uuid.uuid4().hex,
            category=draft.category,
            content=draft.content,
            preview=draft.preview,
            tags=list(draft.tags),
            metadata=dict(draft.metadata),
            is_encrypted=draft.is_encrypted,
            created_at=datetime.now(),
        )
        max_items = self._settings.current.max_history_items
        self._entries = [entry, *self._entries][:max_items]
        self._persist()

        if self._on_insert:
            self._on_insert(entry)
        return entry

    def get(self, entry_id: str) -> Entry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def list_all(self) -> list[Entry]:
        return list(self._entries)

    def list_by_category(self, category: Category | str) -> list[Entry]:
        if category == FILTER_ALL:
            return self.list_all()
        if category == FILTER_FAVORITES:
            return [e for e in self._entries if e.favorite]
        try:
            wanted = Category(category)
        except ValueError:
            return []
        return [e for e in self._entries if e.category == wanted]

    def search(self, query: str) -> list[Entry]:
        """Case-insensitive substring search over content and tags.

        Encrypted passwords are never matched, since their stored content is
        not plaintext.
        """
        needle = query.lower()
        results = []
        for entry in self._entries:
            if entry.category == Category.PASSWORD and entry.is_encrypted:
                continue
            if needle in entry.content.lower() or any(needle in tag.lower() for tag in entry.tags):
                results.append(entry)
        return results

    def _plaintext(self, entry: Entry) -> str:
        if not entry.is_encrypted:
            return entry.content
        try:
            return decrypt(entry.content)
        except DecryptionError:
            logger.warning("Could not decrypt entry %s", entry.id)
            return ""

    def copy_back(self, entry_id: str) -> str | None:
        """Content ready to put back on the clipboard; None if the entry is gone."""
        entry = self.get(entry_id)
        if entry is None:
            return None
        content = self._plaintext(entry)
        entry.last_used_at = datetime.now()
        self._persist()
        return content

    def reveal(self, entry_id: str) -> str:
        entry = self.get(entry_id)
        if entry is None:
            return ""
        return self._plaintext(entry)

    def delete(self, entry_id: str) -> None:
        remaining = [e for e in self._entries if e.id != entry_id]
        if len(remaining) == len(self._entries):
            return
        self._entries = remaining
        self._persist()

    def toggle_favorite(self, entry_id: str) -> bool:
        entry = self.get(entry_id)
        if entry is None:
            return False
        entry.favorite = not entry.favorite
        self._persist()
        return entry.favorite

    def clear(self) -> None:
        self._entries = []
        self._persist()
        logger.info("Clipboard history cleared")
        if self._on_clear:
            self._on_clear()

    def count(self) -> int:
        return len(self._entries)

    def stats(self) -> HistoryStats:
        per_category = {category: 0 for category in Category}
        for entry in self._entries:
            per_category[entry.category] += 1
        return HistoryStats(
            total=len(self._entries),
            per_category=per_category,
            favorites=sum(1 for e in self._entries if e.favorite),
        )

    def export(self) -> str:
        """Sanitized JSON dump: passwords dropped, image data replaced by a marker."""
        safe = [
            {
                "category": e.category.value,
                "content": IMAGE_PREVIEW if e.category == Category.IMAGE else e.content,
                "tags": list(e.tags),
                "created_at": e.created_at.isoformat(),
            }
            for e in self._entries
            if e.category != Category.PASSWORD
        ]
        return json.dumps(safe, indent=2, ensure_ascii=False)
