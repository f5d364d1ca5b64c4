import logging
from datetime import datetime

import rumps

from cliptag import __version__
from cliptag.config import DB_PATH, EXPORT_DIR, MENU_DISPLAY_COUNT, POLL_INTERVAL
from cliptag.history import FILTER_ALL, HistoryStore
from cliptag.menu import (
    MenuItemSpec,
    compute_entry_specs,
    compute_filter_submenu,
    compute_search_specs,
    stats_summary,
)
from cliptag.models import Category, Entry
from cliptag.monitor import ClipboardMonitor
from cliptag.pipeline import ClipboardPipeline
from cliptag.settings import SettingsManager
from cliptag.storage import KeyValueStore
from cliptag.utils import ensure_dirs

logger = logging.getLogger(__name__)


class CliptagApp(rumps.App):
    def __init__(self):
        super().__init__("Cliptag", title="📋", quit_button=None)
        self._init_app()

    def _init_app(self) -> None:
        """Initialize app components. Separated for testability."""
        ensure_dirs()
        self._kv = KeyValueStore(DB_PATH)
        self._settings = SettingsManager(self._kv)
        if not self._settings.is_setup_complete():
            self._settings.complete_setup(self._settings.current)
        self._store = HistoryStore(
            self._kv,
            self._settings,
            on_insert=self._on_history_insert,
            on_clear=self._refresh_menu,
        )
        self._pipeline = ClipboardPipeline(self._store, self._settings)
        self._monitor = ClipboardMonitor(self._pipeline)
        self._filter = FILTER_ALL
        self._entry_ids: dict[str, str] = {}
        self._timer: rumps.Timer | None = None
        self._build_menu()
        self._restart_watcher()

    def _restart_watcher(self) -> None:
        """Stop the poll timer and start a fresh one if watching is enabled."""
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        if self._settings.current.enabled:
            self._monitor.sync_change_count()
            self._timer = rumps.Timer(self._poll_clipboard, POLL_INTERVAL)
            self._timer.start()

    def _poll_clipboard(self, _sender) -> None:
        self._monitor.check_clipboard()

    def _on_history_insert(self, _entry: Entry) -> None:
        self._refresh_menu()

    def _refresh_menu(self) -> None:
        self._build_menu()

    def _build_menu(self) -> None:
        self.menu.clear()
        self._entry_ids.clear()
        self._render_menu_specs(self._compute_menu_specs())

    def _compute_menu_specs(self) -> list[MenuItemSpec | None]:
        watching = self._settings.current.enabled
        specs: list[MenuItemSpec | None] = [
            MenuItemSpec(f"Cliptag v{__version__} - Clipboard History"),
            None,
            MenuItemSpec("Search...", callback=self._on_search),
            compute_filter_submenu(self._filter, self._on_filter),
            None,
        ]

        entries = self._store.list_by_category(self._filter)[:MENU_DISPLAY_COUNT]
        if entries:
            specs.extend(compute_entry_specs(entries, self._on_entry_click))
        else:
            specs.append(MenuItemSpec("(No clipboard history)"))

        specs.extend([
            None,
            MenuItemSpec("Pause Watching" if watching else "Resume Watching", callback=self._on_toggle_watching),
            MenuItemSpec("Statistics", callback=self._on_stats),
            MenuItemSpec("Export History", callback=self._on_export),
            MenuItemSpec("Clear History", callback=self._on_clear),
            None,
            MenuItemSpec("Quit Cliptag", callback=self._on_quit),
        ])
        return specs

    def _render_menu_specs(self, specs: list[MenuItemSpec | None]) -> None:
        self.menu = [self._render_single_spec(spec) for spec in specs]

    def _render_single_spec(self, spec: MenuItemSpec | None) -> rumps.MenuItem | None:
        if spec is None:
            return None

        if spec.is_submenu and spec.children:
            submenu = rumps.MenuItem(spec.title)
            for child in spec.children:
                submenu.add(self._render_single_spec(child))
            return submenu

        item = rumps.MenuItem(spec.title, callback=spec.callback)
        if spec.state is not None:
            item.state = int(spec.state)
        if spec.key is not None:
            item._id = spec.key
            if spec.entry_id is not None:
                self._entry_ids[spec.key] = spec.entry_id
        return item

    def _on_filter(self, sender) -> None:
        self._filter = getattr(sender, "_id", FILTER_ALL)
        self._refresh_menu()

    def _on_entry_click(self, sender) -> None:
        entry_id = self._entry_ids.get(getattr(sender, "_id", ""))
        if entry_id is None:
            return

        entry = self._store.get(entry_id)
        if entry is None:
            return

        # Option toggles favorite, Command reveals a password
        try:
            from AppKit import NSAlternateKeyMask, NSCommandKeyMask, NSEvent

            modifier_flags = NSEvent.modifierFlags()
            if modifier_flags & NSAlternateKeyMask:
                self._on_favorite_toggle(entry)
                return
            if modifier_flags & NSCommandKeyMask and entry.category == Category.PASSWORD:
                self._on_reveal(entry)
                return
        except Exception:
            pass  # If we can't check modifiers, proceed with normal copy

        try:
            content = self._store.copy_back(entry_id)
            if content and self._monitor.write_back(entry, content):
                rumps.notification("Cliptag", "", "Copied to clipboard", sound=False)
            else:
                rumps.notification("Cliptag", "", "Could not copy this item", sound=False)
        except Exception:
            logger.exception("Error copying entry to clipboard")

    def _on_favorite_toggle(self, entry: Entry) -> None:
        favorite = self._store.toggle_favorite(entry.id)
        rumps.notification("Cliptag", "", "Added to favorites" if favorite else "Removed from favorites", sound=False)
        self._refresh_menu()

    def _on_reveal(self, entry: Entry) -> None:
        plaintext = self._store.reveal(entry.id)
        if not plaintext:
            rumps.alert("Cliptag", "Could not reveal this password.")
            return
        rumps.alert("Cliptag - Password", plaintext)

    def _on_search(self, _sender) -> None:
        response = rumps.Window(
            message="Search clipboard history:",
            title="Cliptag Search",
            default_text="",
            ok="Search",
            cancel="Cancel",
            dimensions=(300, 24),
        ).run()

        if response.clicked and response.text.strip():
            query = response.text.strip()
            results = self._store.search(query)

            if not results:
                rumps.alert("Cliptag Search", f'No results for "{query}"')
                return

            self.menu.clear()
            self._entry_ids.clear()
            specs = compute_search_specs(
                query, results, self._on_entry_click, lambda _: self._refresh_menu(), MENU_DISPLAY_COUNT
            )
            specs.extend([None, MenuItemSpec("Quit Cliptag", callback=self._on_quit)])
            self._render_menu_specs(specs)

    def _on_toggle_watching(self, _sender) -> None:
        settings = self._settings.current
        settings.enabled = not settings.enabled
        self._settings.save(settings)
        self._restart_watcher()
        self._refresh_menu()

    def _on_stats(self, _sender) -> None:
        rumps.alert("Cliptag Statistics", stats_summary(self._store.stats()))

    def _on_export(self, _sender) -> None:
        path = EXPORT_DIR / f"cliptag-export-{datetime.now():%Y%m%d-%H%M%S}.json"
        try:
            path.write_text(self._store.export(), encoding="utf-8")
        except OSError:
            logger.exception("Failed to export history")
            rumps.alert("Cliptag", "Export failed.")
            return
        rumps.notification("Cliptag", "", f"Exported to {path.name}", sound=False)

    def _on_clear(self, _sender) -> None:
        if rumps.alert("Cliptag", "Clear all clipboard history?", ok="Clear", cancel="Cancel"):
            self._store.clear()

    def _on_quit(self, _sender) -> None:
        if self._timer is not None:
            self._timer.stop()
        self._kv.close()
        rumps.quit_application()
