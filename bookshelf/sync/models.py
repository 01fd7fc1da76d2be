"""
Data models for the sync layer.

Stored documents use the camelCase field names of the user data store
layout; the dataclasses below translate to and from that shape.
"""

import math
from dataclasses import dataclass, replace, asdict
from datetime import date
from enum import Enum
from typing import Optional, Dict, Any

UNKNOWN_AUTHOR = "Unknown author"
UNTITLED = "Untitled"
NO_DESCRIPTION = "No description available"


def epoch_ms(value: Any) -> int:
    """Stored epoch-millisecond timestamp, or 0 when the value is not a finite number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return int(value)


class ReadingState(str, Enum):
    """Reading progress of one book for one user."""
    NOT_STARTED = "NotStarted"
    READING = "Reading"
    FINISHED = "Finished"

    @classmethod
    def parse(cls, value: Any) -> "ReadingState":
        """Decode a stored enum name; anything unknown is NOT_STARTED."""
        try:
            return cls(value)
        except ValueError:
            return cls.NOT_STARTED


@dataclass(frozen=True)
class Book:
    """A catalog book, optionally flagged as one of the user's favorites."""
    key: str
    title: str
    author: str = UNKNOWN_AUTHOR
    cover_url: str = ""
    description: str = ""
    id: str = ""
    is_favorite: bool = False

    def with_favorite(self, is_favorite: bool) -> "Book":
        return replace(self, is_favorite=is_favorite)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "key": self.key,
            "title": self.title,
            "author": self.author,
            "coverUrl": self.cover_url,
            "description": self.description,
            "isFavorite": self.is_favorite,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Book":
        return cls(
            id=data.get("id") or "",
            key=data.get("key") or "",
            title=data.get("title") or UNTITLED,
            author=data.get("author") or UNKNOWN_AUTHOR,
            cover_url=data.get("coverUrl") or "",
            description=data.get("description") or "",
            is_favorite=bool(data.get("isFavorite", False)),
        )


@dataclass(frozen=True)
class FavoriteEntry:
    """A favorites-set record: a full book snapshot plus when it was added."""
    book: Book
    added_at: int

    def to_dict(self) -> Dict[str, Any]:
        data = self.book.with_favorite(True).to_dict()
        data["addedAt"] = self.added_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FavoriteEntry":
        return cls(
            book=Book.from_dict(data).with_favorite(True),
            added_at=epoch_ms(data.get("addedAt")),
        )


@dataclass(frozen=True)
class SearchHistoryEntry:
    """One saved search query. ``timestamp`` is epoch milliseconds."""
    query: str
    timestamp: int
    id: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class UserProfile:
    """Profile document of one user."""
    uid: str
    first_name: str = ""
    last_name: str = ""
    second_last_name: str = ""
    birth_date: Optional[date] = None
    profile_picture_url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "secondLastName": self.second_last_name,
            "birthDate": self.birth_date.isoformat() if self.birth_date else None,
            "profilePictureUrl": self.profile_picture_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        birth_date = data.get("birthDate")
        if isinstance(birth_date, str) and birth_date:
            try:
                birth_date = date.fromisoformat(birth_date[:10])
            except ValueError:
                birth_date = None
        else:
            birth_date = None

        return cls(
            uid=data.get("uid") or "",
            first_name=data.get("firstName") or "",
            last_name=data.get("lastName") or "",
            second_last_name=data.get("secondLastName") or "",
            birth_date=birth_date,
            profile_picture_url=data.get("profilePictureUrl") or "",
        )
