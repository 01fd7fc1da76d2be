"""
Repositories combining the catalog, the user data store and the identity.

Store layout under ``users/{uid}``:

    favorites/{sanitizedKey}       favorite book document
    book_notes/{key}               notes text
    search_history/{generatedId}   {query, timestamp, id}
    reading_states/{sanitizedKey}  ReadingState name
    profile                        profile document
"""

import time
from dataclasses import replace
from datetime import date
from typing import Callable, List, Optional

from bookshelf.api.openlibrary import OpenLibraryClient
from bookshelf.auth.context import AuthContext
from bookshelf.store.base import UserStore, BlobStorage, sanitize_key, user_path, join_path
from bookshelf.sync.guard import fallback
from bookshelf.sync.models import (
    Book,
    epoch_ms,
    FavoriteEntry,
    ReadingState,
    SearchHistoryEntry,
    UserProfile,
)
from bookshelf.utils.logging import get_logger

logger = get_logger(__name__)


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def _require_key(key: str) -> str:
    # A blank key would address the parent collection itself
    if not key or not key.strip("/ "):
        raise ValueError("Book key must not be blank")
    return key


class BooksRepository:
    """
    Book search plus the signed-in user's favorites, notes, search history
    and reading states.

    Methods returning bool or a plain value are fail-soft: with no identity
    or on any store error they return False, "" or NOT_STARTED. List reads
    return [] with no identity and raise on store errors.
    """

    def __init__(
        self,
        catalog: OpenLibraryClient,
        store: UserStore,
        auth: AuthContext,
        clock: Callable[[], int] = now_ms,
    ):
        self.catalog = catalog
        self.store = store
        self.auth = auth
        self.clock = clock

    def search_books(self, query: str) -> List[Book]:
        """Catalog results with favorite flags taken from the favorites set."""
        books = self.catalog.search(query)
        if not books:
            return []

        favorite_keys = {book.key for book in self.get_favorite_books()}
        return [book.with_favorite(book.key in favorite_keys) for book in books]

    def get_favorite_books(self) -> List[Book]:
        """Favorite books, most recently added first."""
        uid = self.auth.current_uid()
        if uid is None:
            return []

        raw = self.store.get(user_path(uid, "favorites"))
        if not isinstance(raw, dict):
            return []

        entries = [
            FavoriteEntry.from_dict(value)
            for value in raw.values()
            if isinstance(value, dict)
        ]
        entries.sort(key=lambda entry: entry.added_at, reverse=True)
        return [entry.book for entry in entries]

    @fallback(False, "Failed to toggle favorite")
    def toggle_favorite(self, book: Book) -> bool:
        """
        Remove ``book`` from favorites when it is flagged as favorite,
        otherwise add a snapshot of it.
        """
        uid = self.auth.current_uid()
        if uid is None:
            return False

        path = user_path(uid, "favorites", sanitize_key(_require_key(book.key)))
        if book.is_favorite:
            self.store.delete(path)
            logger.info("Favorite removed", key=book.key)
        else:
            self.store.set(path, FavoriteEntry(book, self.clock()).to_dict())
            logger.info("Favorite added", key=book.key)
        return True

    @fallback(False, "Failed to save book notes")
    def save_book_notes(self, book_key: str, notes: str) -> bool:
        uid = self.auth.current_uid()
        if uid is None:
            return False

        self.store.set(user_path(uid, "book_notes", _require_key(book_key)), notes)
        return True

    @fallback("", "Failed to load book notes")
    def get_book_notes(self, book_key: str) -> str:
        uid = self.auth.current_uid()
        if uid is None:
            return ""

        notes = self.store.get(user_path(uid, "book_notes", _require_key(book_key)))
        return notes if isinstance(notes, str) else ""

    @fallback(False, "Failed to save search query")
    def save_search_query(self, query: str) -> bool:
        """Append ``query`` to the search history. Blank queries are rejected."""
        if not query or not query.strip():
            return False
        uid = self.auth.current_uid()
        if uid is None:
            return False

        history_path = user_path(uid, "search_history")
        search_id = self.store.push_key(history_path)
        entry = SearchHistoryEntry(query=query, timestamp=self.clock(), id=search_id)
        self.store.set(join_path(history_path, search_id), entry.to_dict())
        return True

    def get_search_history(self) -> List[SearchHistoryEntry]:
        """Saved searches, newest first."""
        uid = self.auth.current_uid()
        if uid is None:
            return []

        raw = self.store.get(user_path(uid, "search_history"))
        if not isinstance(raw, dict):
            return []

        history = []
        for child_key, value in raw.items():
            if not isinstance(value, dict):
                continue
            query = value.get("query") or ""
            if not query:
                continue
            history.append(SearchHistoryEntry(
                query=query,
                timestamp=epoch_ms(value.get("timestamp")),
                id=value.get("id") or child_key,
            ))

        history.sort(key=lambda entry: entry.timestamp, reverse=True)
        return history

    @fallback(False, "Failed to delete search history entry")
    def delete_search_history(self, search_id: str) -> bool:
        uid = self.auth.current_uid()
        if uid is None or not search_id:
            return False

        self.store.delete(user_path(uid, "search_history", sanitize_key(search_id)))
        return True

    @fallback(False, "Failed to clear search history")
    def clear_search_history(self) -> bool:
        uid = self.auth.current_uid()
        if uid is None:
            return False

        self.store.delete(user_path(uid, "search_history"))
        return True

    @fallback(False, "Failed to save reading state")
    def save_reading_state(self, book_key: str, state: ReadingState) -> bool:
        uid = self.auth.current_uid()
        if uid is None:
            return False

        path = user_path(uid, "reading_states", sanitize_key(_require_key(book_key)))
        self.store.set(path, ReadingState(state).value)
        return True

    @fallback(ReadingState.NOT_STARTED, "Failed to load reading state")
    def get_reading_state(self, book_key: str) -> ReadingState:
        uid = self.auth.current_uid()
        if uid is None:
            return ReadingState.NOT_STARTED

        path = user_path(uid, "reading_states", sanitize_key(_require_key(book_key)))
        return ReadingState.parse(self.store.get(path))


class UserRepository:
    """Profile document and profile picture of the signed-in user."""

    def __init__(self, store: UserStore, blobs: BlobStorage, auth: AuthContext):
        self.store = store
        self.blobs = blobs
        self.auth = auth

    def get_user_profile(self) -> Optional[UserProfile]:
        """
        Read the stored profile.

        The stored ``uid`` is never trusted; it is replaced by the
        authenticated id. Store errors propagate.
        """
        uid = self.auth.current_uid()
        if uid is None:
            return None

        data = self.store.get(user_path(uid, "profile"))
        if not isinstance(data, dict):
            return None
        return replace(UserProfile.from_dict(data), uid=uid)

    def update_user_profile(
        self,
        first_name: str,
        last_name: str,
        second_last_name: str,
        birth_date: Optional[date],
        profile_image: Optional[bytes] = None,
    ) -> bool:
        """
        Write the profile document in a single call.

        A supplied image is uploaded first and its URL stored; otherwise
        the currently stored picture URL is kept.

        Returns:
            False when nobody is signed in, True once written

        Raises:
            StoreError: If the upload or the write fails
        """
        uid = self.auth.current_uid()
        if uid is None:
            return False

        picture_url = ""
        if profile_image:
            picture_url = self.blobs.upload(f"profile_pictures/{uid}.jpg", profile_image)

        if not picture_url:
            existing = self.get_user_profile()
            picture_url = existing.profile_picture_url if existing else ""

        profile = UserProfile(
            uid=uid,
            first_name=first_name,
            last_name=last_name,
            second_last_name=second_last_name,
            birth_date=birth_date,
            profile_picture_url=picture_url,
        )
        self.store.set(user_path(uid, "profile"), profile.to_dict())
        logger.info("Profile updated", uid=uid, new_picture=bool(profile_image))
        return True
