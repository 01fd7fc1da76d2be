"""
Book sync service.

Turns search, favorites, notes, history and reading-state intents into
state slot updates. No exception escapes a public method.
"""

from typing import List, Optional

from bookshelf.sync.models import Book, ReadingState, SearchHistoryEntry
from bookshelf.sync.repository import BooksRepository
from bookshelf.sync.states import State, StateSlot, Status
from bookshelf.utils.logging import get_logger

logger = get_logger(__name__)


class BooksSyncService:
    """
    Exposes the book-related state of the signed-in user.

    Slots:
        search_state: Initial | Loading | Empty | Success(books) | Error
        favorites_state: Loading | Empty | Success(books) | Error
        book_notes: notes text of the last loaded or saved book
        save_notes_state: Initial | Loading | Success | Error
        search_history_state: Initial | Loading | Empty | Success(entries) | Error
        reading_state: ReadingState of the last loaded or updated book
        selected_book: the book a detail view is showing, if any
    """

    def __init__(self, repository: BooksRepository):
        self.repository = repository

        self.search_state: StateSlot[State[List[Book]]] = StateSlot("search", State.initial())
        self.favorites_state: StateSlot[State[List[Book]]] = StateSlot("favorites", State.loading())
        self.book_notes: StateSlot[str] = StateSlot("book_notes", "")
        self.save_notes_state: StateSlot[State[None]] = StateSlot("save_notes", State.initial())
        self.search_history_state: StateSlot[State[List[SearchHistoryEntry]]] = StateSlot(
            "search_history", State.initial()
        )
        self.reading_state: StateSlot[ReadingState] = StateSlot(
            "reading_state", ReadingState.NOT_STARTED
        )
        self.selected_book: StateSlot[Optional[Book]] = StateSlot("selected_book", None)

    # Search

    def search(self, query: str) -> State[List[Book]]:
        """
        Search the catalog and flag results that are favorites.

        A blank query resets the slot to Initial without searching.
        """
        if not query or not query.strip():
            self.search_state.set(State.initial())
            return self.search_state.value

        self.search_state.set(State.loading())
        try:
            books = self.repository.search_books(query)
            state = State.from_items(books)
        except Exception as e:
            logger.error("Book search failed", query=query, error=str(e))
            state = State.error(f"Could not search books: {e}")

        self.search_state.set(state)
        return state

    # Favorites

    def load_favorites(self) -> State[List[Book]]:
        self.favorites_state.set(State.loading())
        try:
            books = [book.with_favorite(True) for book in self.repository.get_favorite_books()]
            state = State.from_items(books)
        except Exception as e:
            logger.error("Loading favorites failed", error=str(e))
            state = State.error(f"Could not load favorites: {e}")

        self.favorites_state.set(state)
        return state

    def toggle_favorite(self, book: Book) -> bool:
        """
        Add or remove ``book`` from favorites depending on its current flag.

        On success the matching entries of a loaded search result are
        flipped in place and the favorites list is reloaded.

        Returns:
            True if the store confirmed the change
        """
        try:
            if not self.repository.toggle_favorite(book):
                return False
        except Exception as e:
            logger.error("Toggling favorite failed", key=book.key, error=str(e))
            return False

        self.search_state.update(lambda state: _flip_favorite(state, book.key))

        selected = self.selected_book.value
        if selected is not None and selected.key == book.key:
            self.selected_book.set(selected.with_favorite(not book.is_favorite))

        self.load_favorites()
        return True

    def select_book(self, book: Optional[Book]) -> None:
        self.selected_book.set(book)

    # Notes

    def load_book_notes(self, book_key: str) -> str:
        try:
            notes = self.repository.get_book_notes(book_key)
        except Exception as e:
            logger.error("Loading notes failed", key=book_key, error=str(e))
            notes = ""

        self.book_notes.set(notes)
        return notes

    def save_book_notes(self, book_key: str, notes: str) -> bool:
        self.save_notes_state.set(State.loading())
        try:
            saved = self.repository.save_book_notes(book_key, notes)
        except Exception as e:
            logger.error("Saving notes failed", key=book_key, error=str(e))
            self.save_notes_state.set(State.error(f"Could not save notes: {e}"))
            return False

        if not saved:
            self.save_notes_state.set(State.error("Could not save notes"))
            return False

        self.book_notes.set(notes)
        self.save_notes_state.set(State.success())
        return True

    # Search history

    def load_search_history(self) -> State[List[SearchHistoryEntry]]:
        self.search_history_state.set(State.loading())
        try:
            state = State.from_items(self.repository.get_search_history())
        except Exception as e:
            logger.error("Loading search history failed", error=str(e))
            state = State.error(f"Could not load search history: {e}")

        self.search_history_state.set(state)
        return state

    def save_search_query(self, query: str) -> bool:
        """Record ``query`` and reload the history. Blank queries are ignored."""
        if not query or not query.strip():
            return False
        return self._mutate_history(lambda: self.repository.save_search_query(query))

    def delete_search_history_item(self, search_id: str) -> bool:
        return self._mutate_history(lambda: self.repository.delete_search_history(search_id))

    def clear_search_history(self) -> bool:
        try:
            cleared = self.repository.clear_search_history()
        except Exception as e:
            logger.error("Clearing search history failed", error=str(e))
            return False

        if cleared:
            self.search_history_state.set(State.empty())
        return cleared

    def _mutate_history(self, mutation) -> bool:
        try:
            done = mutation()
        except Exception as e:
            logger.error("Search history update failed", error=str(e))
            return False

        if done:
            self.load_search_history()
        return done

    # Reading state

    def load_reading_state(self, book_key: str) -> ReadingState:
        try:
            state = self.repository.get_reading_state(book_key)
        except Exception as e:
            logger.error("Loading reading state failed", key=book_key, error=str(e))
            state = ReadingState.NOT_STARTED

        self.reading_state.set(state)
        return state

    def update_reading_state(self, book_key: str, state: ReadingState) -> bool:
        try:
            saved = self.repository.save_reading_state(book_key, state)
        except Exception as e:
            logger.error("Saving reading state failed", key=book_key, error=str(e))
            return False

        if saved:
            self.reading_state.set(ReadingState(state))
        return saved


def _flip_favorite(state: State[List[Book]], key: str) -> State[List[Book]]:
    if state.status is not Status.SUCCESS or not state.data:
        return state
    return State.success([
        book.with_favorite(not book.is_favorite) if book.key == key else book
        for book in state.data
    ])
