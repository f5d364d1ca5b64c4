import pytest

from cliptag.history import HistoryStore
from cliptag.models import Category, EntryDraft
from cliptag.privacy import REDACTED_PREVIEW, encrypt
from cliptag.settings import Settings, SettingsManager
from cliptag.storage import KeyValueStore


@pytest.fixture
def kv():
    store = KeyValueStore(db_path=":memory:")
    yield store
    store.close()


@pytest.fixture
def settings_manager(kv):
    manager = SettingsManager(kv)
    manager.save(Settings(save_passwords=True))
    return manager


@pytest.fixture
def store(kv, settings_manager):
    return HistoryStore(kv, settings_manager)


@pytest.fixture
def make_draft():
    """Factory fixture to create EntryDraft instances for testing."""

    def _make_draft(
        text: str = "hello world",
        category: Category = Category.TEXT,
        tags: list[str] | None = None,
        encrypted: bool = False,
    ) -> EntryDraft:
        if category == Category.PASSWORD:
            return EntryDraft(
                category=category,
                content=encrypt(text) if encrypted else text,
                preview=REDACTED_PREVIEW,
                tags=tags if tags is not None else ["password", "sensitive"],
                metadata={"strength": "strong"},
                is_encrypted=encrypted,
            )
        return EntryDraft(
            category=category,
            content=text,
            preview=text[:100],
            tags=tags if tags is not None else [category.value],
        )

    return _make_draft
