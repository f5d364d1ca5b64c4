from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Category(str, Enum):
    TEXT = "text"
    CODE = "code"
    LINK = "link"
    EMAIL = "email"
    PASSWORD = "password"
    PHONE = "phone"
    COLOR = "color"
    IMAGE = "image"


class SnapshotKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"


@dataclass(frozen=True)
class Snapshot:
    """One observed clipboard payload. Image payloads are data URLs."""

    kind: SnapshotKind
    payload: str
    preview: str | None = None


@dataclass
class Classification:
    category: Category
    tags: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def add_tags(self, *tags: str) -> None:
        for tag in tags:
            if tag not in self.tags:
                self.tags.append(tag)


@dataclass(frozen=True)
class PolicyResult:
    persist: bool
    content: str
    is_encrypted: bool = False


@dataclass
class EntryDraft:
    category: Category
    content: str
    preview: str
    tags: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    is_encrypted: bool = False


@dataclass
class Entry:
    id: str
    category: Category
    content: str
    preview: str
    tags: list[str]
    metadata: dict[str, Any]
    is_encrypted: bool
    created_at: datetime
    last_used_at: datetime | None = None
    favorite: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category.value,
            "content": self.content,
            "preview": self.preview,
            "tags": list(self.tags),
            "metadata": dict(self.metadata),
            "is_encrypted": self.is_encrypted,
            "created_at": self.created_at.isoformat(),
            "last_used_at": self.last_used_at.isoformat() if self.last_used_at else None,
            "favorite": self.favorite,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Entry":
        last_used = data.get("last_used_at")
        return cls(
            id=data["id"],
            category=Category(data["category"]),
            content=data.get("content", ""),
            preview=data.get("preview", ""),
            tags=list(data.get("tags") or []),
            metadata=dict(data.get("metadata") or {}),
            is_encrypted=bool(data.get("is_encrypted", False)),
            created_at=datetime.fromisoformat(data["created_at"]),
            last_used_at=datetime.fromisoformat(last_used) if last_used else None,
            favorite=bool(data.get("favorite", False)),
        )


@dataclass
class HistoryStats:
    total: int
    per_category: dict[Category, int]
    favorites: int
