"""
Service registry and JSON encoding shared by the route modules.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from flask import current_app

from bookshelf.auth.service import AccountAuthService
from bookshelf.sync.books import BooksSyncService
from bookshelf.sync.models import Book, SearchHistoryEntry, UserProfile
from bookshelf.sync.profile import ProfileSyncService
from bookshelf.sync.states import State

EXTENSION_KEY = "bookshelf"


@dataclass
class Services:
    auth: AccountAuthService
    books: BooksSyncService
    profile: ProfileSyncService


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]


def to_json(value: Any) -> Any:
    """Encode states, models and enums into JSON-ready values."""
    if isinstance(value, State):
        return {
            "status": value.status.value,
            "data": to_json(value.data),
            "message": value.message,
        }
    if isinstance(value, (Book, SearchHistoryEntry, UserProfile)):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    return value
