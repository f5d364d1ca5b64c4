import json
from unittest.mock import MagicMock

from cliptag.history import HISTORY_KEY, HistoryStore
from cliptag.models import Category
from cliptag.privacy import encrypt
from cliptag.settings import Settings
from cliptag.storage import PersistenceError


class TestInsertAndList:
    def test_insert_assigns_identity(self, store, make_draft):
        entry = store.insert(make_draft("first"))
        assert entry.id
        assert entry.created_at is not None
        assert entry.favorite is False
        assert entry.last_used_at is None

    def test_ids_are_unique(self, store, make_draft):
        ids = {store.insert(make_draft(f"item {i}")).id for i in range(20)}
        assert len(ids) == 20

    def test_newest_first(self, store, make_draft):
        store.insert(make_draft("first"))
        store.insert(make_draft("second"))
        store.insert(make_draft("third"))
        assert [e.content for e in store.list_all()] == ["third", "second", "first"]

    def test_list_all_returns_copy(self, store, make_draft):
        store.insert(make_draft("first"))
        store.list_all().clear()
        assert store.count() == 1

    def test_on_insert_notified(self, kv, settings_manager, make_draft):
        callback = MagicMock()
        store = HistoryStore(kv, settings_manager, on_insert=callback)
        entry = store.insert(make_draft("notify"))
        callback.assert_called_once_with(entry)

    def test_persisted_across_instances(self, kv, settings_manager, store, make_draft):
        entry = store.insert(make_draft("persist me"))
        reopened = HistoryStore(kv, settings_manager)
        assert [e.id for e in reopened.list_all()] == [entry.id]
        assert reopened.get(entry.id).content == "persist me"


class TestCapacity:
    def test_oldest_evicted(self, kv, settings_manager, make_draft):
        settings_manager.save(Settings(max_history_items=5))
        store = HistoryStore(kv, settings_manager)
        for i in range(8):
            store.insert(make_draft(f"item {i}"))
        assert store.count() == 5
        assert [e.content for e in store.list_all()] == [f"item {i}" for i in range(7, 2, -1)]

    def test_favorites_evicted_too(self, kv, settings_manager, make_draft):
        settings_manager.save(Settings(max_history_items=2))
        store = HistoryStore(kv, settings_manager)
        first = store.insert(make_draft("fav"))
        store.toggle_favorite(first.id)
        store.insert(make_draft("b"))
        store.insert(make_draft("c"))
        assert store.get(first.id) is None

    def test_capacity_change_applies_on_next_insert(self, store, settings_manager, make_draft):
        for i in range(6):
            store.insert(make_draft(f"item {i}"))
        settings_manager.save(Settings(max_history_items=3))
        store.insert(make_draft("new"))
        assert [e.content for e in store.list_all()] == ["new", "item 5", "item 4"]


class TestFilter:
    def test_by_category(self, store, make_draft):
        store.insert(make_draft("hello"))
        store.insert(make_draft("x = 1", category=Category.CODE))
        assert [e.content for e in store.list_by_category(Category.CODE)] == ["x = 1"]
        assert [e.content for e in store.list_by_category("text")] == ["hello"]

    def test_all(self, store, make_draft):
        store.insert(make_draft("a"))
        store.insert(make_draft("b", category=Category.LINK))
        assert len(store.list_by_category("all")) == 2

    def test_favorites(self, store, make_draft):
        entry = store.insert(make_draft("a"))
        store.insert(make_draft("b"))
        store.toggle_favorite(entry.id)
        assert [e.id for e in store.list_by_category("favorites")] == [entry.id]

    def test_unknown_filter(self, store, make_draft):
        store.insert(make_draft("a"))
        assert store.list_by_category("bogus") == []


class TestSearch:
    def test_content_match_case_insensitive(self, store, make_draft):
        store.insert(make_draft("Python Programming"))
        store.insert(make_draft("javascript coding"))
        results = store.search("python")
        assert [e.content for e in results] == ["Python Programming"]

    def test_tag_match(self, store, make_draft):
        store.insert(make_draft("x = 1", category=Category.CODE, tags=["code", "python"]))
        assert len(store.search("PYTHON")) == 1

    def test_no_results(self, store, make_draft):
        store.insert(make_draft("hello world"))
        assert store.search("nonexistent") == []

    def test_encrypted_password_never_matches(self, store, make_draft):
        store.insert(make_draft("P@ssw0rd123!", category=Category.PASSWORD, encrypted=True))
        assert store.search("password") == []
        assert store.search("P@ss") == []
        assert store.search(encrypt("P@ssw0rd123!")) == []

    def test_unencrypted_password_searchable(self, store, make_draft):
        store.insert(make_draft("P@ssw0rd123!", category=Category.PASSWORD, encrypted=False))
        assert len(store.search("p@ss")) == 1


class TestCopyBackAndReveal:
    def test_copy_back_plain(self, store, make_draft):
        entry = store.insert(make_draft("copy me"))
        assert store.copy_back(entry.id) == "copy me"
        assert store.get(entry.id).last_used_at is not None

    def test_copy_back_decrypts(self, store, make_draft):
        entry = store.insert(make_draft("P@ssw0rd123!", category=Category.PASSWORD, encrypted=True))
        assert store.copy_back(entry.id) == "P@ssw0rd123!"

    def test_copy_back_missing(self, store):
        assert store.copy_back("missing") is None

    def test_copy_back_image_returns_data_url(self, store, make_draft):
        entry = store.insert(make_draft("data:image/png;base64,AAAA", category=Category.IMAGE))
        assert store.copy_back(entry.id) == "data:image/png;base64,AAAA"

    def test_reveal_returns_plaintext(self, store, make_draft):
        entry = store.insert(make_draft("P@ssw0rd123!", category=Category.PASSWORD, encrypted=True))
        assert store.reveal(entry.id) == "P@ssw0rd123!"
        # reveal does not change what is stored
        assert store.get(entry.id).content == encrypt("P@ssw0rd123!")

    def test_reveal_missing(self, store):
        assert store.reveal("missing") == ""

    def test_corrupt_ciphertext_yields_empty(self, store, make_draft):
        draft = make_draft("x", category=Category.PASSWORD, encrypted=True)
        draft.content = "%%% not encoded %%%"
        entry = store.insert(draft)
        assert store.reveal(entry.id) == ""
        assert store.copy_back(entry.id) == ""


class TestMutations:
    def test_toggle_favorite_twice(self, store, make_draft):
        entry = store.insert(make_draft("fav"))
        assert store.toggle_favorite(entry.id) is True
        assert store.get(entry.id).favorite is True
        assert store.toggle_favorite(entry.id) is False
        assert store.get(entry.id).favorite is False

    def test_toggle_favorite_missing(self, store):
        assert store.toggle_favorite("missing") is False

    def test_delete(self, store, make_draft):
        entry = store.insert(make_draft("to delete"))
        store.delete(entry.id)
        assert store.get(entry.id) is None
        assert store.count() == 0

    def test_delete_missing_is_noop(self, store, make_draft):
        store.insert(make_draft("keep"))
        store.delete("missing")
        assert store.count() == 1

    def test_clear(self, kv, settings_manager, make_draft):
        on_clear = MagicMock()
        store = HistoryStore(kv, settings_manager, on_clear=on_clear)
        for i in range(5):
            store.insert(make_draft(f"item {i}"))
        store.clear()
        assert store.count() == 0
        assert kv.get(HISTORY_KEY) == []
        on_clear.assert_called_once_with()


class TestStats:
    def test_counts(self, store, make_draft):
        store.insert(make_draft("a"))
        store.insert(make_draft("b"))
        code = store.insert(make_draft("x = 1", category=Category.CODE))
        store.toggle_favorite(code.id)
        stats = store.stats()
        assert stats.total == 3
        assert stats.per_category[Category.TEXT] == 2
        assert stats.per_category[Category.CODE] == 1
        assert stats.per_category[Category.IMAGE] == 0
        assert set(stats.per_category) == set(Category)
        assert stats.favorites == 1


class TestExport:
    def test_passwords_omitted(self, store, make_draft):
        store.insert(make_draft("P@ssw0rd123!", category=Category.PASSWORD, encrypted=True))
        store.insert(make_draft("plain text"))
        exported = json.loads(store.export())
        assert len(exported) == 1
        assert exported[0]["content"] == "plain text"
        assert exported[0]["category"] == "text"
        assert exported[0]["tags"] == ["text"]
        assert "created_at" in exported[0]

    def test_image_content_replaced(self, store, make_draft):
        store.insert(make_draft("data:image/png;base64,AAAA", category=Category.IMAGE))
        exported = json.loads(store.export())
        assert exported[0]["content"] == "[Image]"

    def test_empty(self, store):
        assert json.loads(store.export()) == []


class TestPersistenceFailure:
    def test_write_failure_keeps_memory_state(self, settings_manager, make_draft):
        kv = MagicMock()
        kv.get.return_value = []
        kv.set.side_effect = PersistenceError("disk full")
        store = HistoryStore(kv, settings_manager)
        entry = store.insert(make_draft("still here"))
        assert store.get(entry.id) is not None
        assert store.toggle_favorite(entry.id) is True

    def test_unreadable_items_skipped(self, kv, settings_manager):
        kv.set(HISTORY_KEY, [{"id": "x"}, {"nonsense": True}])
        store = HistoryStore(kv, settings_manager)
        assert store.count() == 0
