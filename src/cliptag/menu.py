"""Menu layout for the menu-bar app, kept free of rumps so it can be tested anywhere."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from cliptag.config import MENU_TITLE_LENGTH
from cliptag.history import FILTER_ALL, FILTER_FAVORITES
from cliptag.models import Category, Entry, HistoryStats
from cliptag.utils import relative_time, truncate_text

ENTRY_KEY_PREFIX = "cliptag_entry_"

CATEGORY_BADGES = {
    Category.TEXT: "📝",
    Category.CODE: "💻",
    Category.LINK: "🔗",
    Category.EMAIL: "✉️",
    Category.PASSWORD: "🔒",
    Category.PHONE: "📞",
    Category.COLOR: "🎨",
    Category.IMAGE: "🖼",
}

FILTER_LABELS = {
    FILTER_ALL: "All",
    FILTER_FAVORITES: "Favorites",
    Category.TEXT.value: "Text",
    Category.CODE.value: "Code",
    Category.LINK.value: "Links",
    Category.EMAIL.value: "Emails",
    Category.PASSWORD.value: "Passwords",
    Category.PHONE.value: "Phone Numbers",
    Category.COLOR.value: "Colors",
    Category.IMAGE.value: "Images",
}


@dataclass
class MenuItemSpec:
    """Specification for a menu item, separating logic from rumps rendering."""

    title: str
    callback: Callable | None = None
    entry_id: str | None = None
    key: str | None = None
    state: bool | None = None
    is_submenu: bool = False
    children: list["MenuItemSpec | None"] | None = None


def entry_key(entry_id: str) -> str:
    return f"{ENTRY_KEY_PREFIX}{entry_id}"


def entry_title(entry: Entry, now: datetime | None = None) -> str:
    star = "★ " if entry.favorite else ""
    badge = CATEGORY_BADGES.get(entry.category, "")
    preview = truncate_text(entry.preview, MENU_TITLE_LENGTH)
    return f"{star}{badge} {preview}  · {relative_time(entry.created_at, now)}"


def compute_entry_specs(entries: list[Entry], on_click: Callable, now: datetime | None = None) -> list[MenuItemSpec]:
    return [
        MenuItemSpec(title=entry_title(e, now), callback=on_click, entry_id=e.id, key=entry_key(e.id))
        for e in entries
    ]


def compute_filter_submenu(active: str, on_select: Callable) -> MenuItemSpec:
    children: list[MenuItemSpec | None] = []
    for value, label in FILTER_LABELS.items():
        children.append(MenuItemSpec(label, callback=on_select, key=value, state=value == active))
        if value == FILTER_FAVORITES:
            children.append(None)  # separator
    return MenuItemSpec(f"Show: {FILTER_LABELS.get(active, active)}", is_submenu=True, children=children)


def stats_summary(stats: HistoryStats) -> str:
    lines = [f"Total: {stats.total}", f"Favorites: {stats.favorites}"]
    for category, count in stats.per_category.items():
        if count:
            lines.append(f"{FILTER_LABELS[category.value]}: {count}")
    return "\n".join(lines)


def compute_search_specs(
    query: str, results: list[Entry], on_click: Callable, on_show_all: Callable, limit: int
) -> list[MenuItemSpec | None]:
    specs: list[MenuItemSpec | None] = [
        MenuItemSpec(f'Search: "{query}" ({len(results)} results)'),
        None,
        MenuItemSpec("Show All", callback=on_show_all),
        None,
    ]
    specs.extend(compute_entry_specs(results[:limit], on_click))
    return specs
