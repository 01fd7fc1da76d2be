"""
Shared fixtures for the Bookshelf Sync test suite.
"""

from unittest.mock import MagicMock

import pytest

from bookshelf.api.openlibrary import OpenLibraryClient
from bookshelf.auth.context import StaticAuthContext
from bookshelf.db.database import init_db, close_db
from bookshelf.store.base import StoreError, UserStore
from bookshelf.store.blobs import LocalBlobStorage
from bookshelf.store.documents import SqlDocumentStore
from bookshelf.sync.books import BooksSyncService
from bookshelf.sync.models import Book
from bookshelf.sync.profile import ProfileSyncService
from bookshelf.sync.repository import BooksRepository, UserRepository

UID = "user-1"

DUNE = Book(
    key="/works/OL893415W",
    title="Dune",
    author="Frank Herbert",
    cover_url="https://covers.openlibrary.org/b/id/11481354-L.jpg",
    description="In the week before their departure to Arrakis...",
)
DUNE_MESSIAH = Book(
    key="/works/OL893502W",
    title="Dune Messiah",
    author="Frank Herbert",
)
CHILDREN_OF_DUNE = Book(
    key="/works/OL893527W",
    title="Children of Dune",
    author="Frank Herbert",
)


class TickingClock:
    """Epoch-millisecond clock that advances by one second per call."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        self.now += 1000
        return self.now


@pytest.fixture
def db(tmp_path):
    """Initialize a fresh SQLite database for one test"""
    init_db(f"sqlite:///{tmp_path / 'bookshelf.db'}")
    yield
    close_db()


@pytest.fixture
def store(db):
    return SqlDocumentStore()


@pytest.fixture
def failing_store():
    """A store whose every call raises StoreError"""
    store = MagicMock(spec=UserStore)
    for name in ("get", "set", "delete", "push_key"):
        getattr(store, name).side_effect = StoreError("backend unavailable")
    return store


@pytest.fixture
def catalog():
    client = MagicMock(spec=OpenLibraryClient)
    client.search.return_value = [DUNE, DUNE_MESSIAH, CHILDREN_OF_DUNE]
    return client


@pytest.fixture
def auth():
    return StaticAuthContext(UID)


@pytest.fixture
def signed_out():
    return StaticAuthContext(None)


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def books_repository(catalog, store, auth, clock):
    return BooksRepository(catalog, store, auth, clock=clock)


@pytest.fixture
def books_service(books_repository):
    return BooksSyncService(books_repository)


@pytest.fixture
def blobs(tmp_path):
    return LocalBlobStorage(str(tmp_path / "blobs"), "http://media.test/media")


@pytest.fixture
def user_repository(store, blobs, auth):
    return UserRepository(store, blobs, auth)


@pytest.fixture
def profile_service(user_repository):
    return ProfileSyncService(user_repository)
