"""
Open Library search client for Bookshelf Sync.

Documentation: https://openlibrary.org/dev/docs/api/search
"""

from typing import List, Dict, Any

from bookshelf.api.base import BaseClient, APIError
from bookshelf.sync.models import Book, UNKNOWN_AUTHOR, UNTITLED, NO_DESCRIPTION
from bookshelf.utils.logging import get_logger

logger = get_logger(__name__)

OPEN_LIBRARY_URL = "https://openlibrary.org"
COVER_URL_TEMPLATE = "https://covers.openlibrary.org/b/id/{cover_id}-L.jpg"
DEFAULT_LIMIT = 20


def cover_url(cover_id: Any) -> str:
    """Large cover image URL for a numeric cover id, or "" when there is none."""
    if isinstance(cover_id, bool) or not isinstance(cover_id, int):
        return ""
    return COVER_URL_TEMPLATE.format(cover_id=cover_id)


def doc_to_book(doc: Dict[str, Any]) -> Book:
    """
    Translate one ``docs`` entry of a search response into a Book.

    Favorite status is left unset; it is resolved against the user's
    favorites set by the caller.
    """
    authors = doc.get("author_name")
    if not isinstance(authors, list):
        authors = []
    authors = [str(name) for name in authors if name]

    sentences = doc.get("first_sentence")
    if isinstance(sentences, str):
        sentences = [sentences]
    elif not isinstance(sentences, list):
        sentences = []
    sentences = [s for s in sentences if isinstance(s, str) and s]

    return Book(
        key=doc.get("key") or "",
        title=doc.get("title") or UNTITLED,
        author=", ".join(authors) if authors else UNKNOWN_AUTHOR,
        cover_url=cover_url(doc.get("cover_i")),
        description=sentences[0] if sentences else NO_DESCRIPTION,
    )


class OpenLibraryClient(BaseClient):
    """
    Client for the Open Library search endpoint.

    Searching is fail-soft: any transport error, non-success response or
    malformed body yields an empty result list.
    """

    def __init__(
        self,
        base_url: str = OPEN_LIBRARY_URL,
        timeout: int = 30,
        max_retries: int = 0,
        limit: int = DEFAULT_LIMIT,
    ):
        super().__init__(base_url, timeout=timeout, max_retries=max_retries)
        self.limit = limit

    def search(self, query: str) -> List[Book]:
        """
        Search the catalog by free text.

        Args:
            query: Non-blank search text

        Returns:
            Books in catalog rank order, all with ``is_favorite`` False
        """
        try:
            data = self.get("/search.json", params={"q": query, "limit": self.limit})
        except APIError as e:
            logger.warning("Catalog search failed", query=query, error=str(e))
            return []

        docs = data.get("docs") if isinstance(data, dict) else None
        if not isinstance(docs, list):
            logger.warning("Catalog response has no docs", query=query)
            return []

        try:
            books = [doc_to_book(doc) for doc in docs if isinstance(doc, dict)]
        except Exception as e:
            logger.warning("Catalog response could not be parsed", query=query, error=str(e))
            return []

        logger.debug(
            "Catalog search completed",
            query=query,
            found=data.get("numFound"),
            returned=len(books),
        )
        return books
