"""
Storage interfaces for per-user data.

The user data store is a tree of JSON values addressed by slash-delimited
paths. Every per-user path lives under ``users/{uid}``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class StoreError(Exception):
    """Raised when a store or blob backend fails."""
    message: str

    def __str__(self) -> str:
        return f"Store Error: {self.message}"


def sanitize_key(key: str) -> str:
    """Make a catalog key usable as a single path segment."""
    return key.replace("/", "_")


def join_path(*parts: Any) -> str:
    """Join path parts with "/", collapsing empty segments."""
    segments = []
    for part in parts:
        segments.extend(s for s in str(part).split("/") if s)
    return "/".join(segments)


def user_path(uid: str, *parts: Any) -> str:
    """Path of a node owned by ``uid``."""
    return join_path("users", uid, *parts)


class UserStore(ABC):
    """Document/tree store holding all durable per-user state."""

    @abstractmethod
    def get(self, path: str) -> Optional[Any]:
        """
        Read the value at ``path``.

        A parent path yields a mapping of its children. Returns None when
        nothing is stored at or below the path.
        """

    @abstractmethod
    def set(self, path: str, value: Any) -> None:
        """Replace whatever is stored at or below ``path`` with ``value``."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove ``path`` and everything below it. Missing paths are fine."""

    @abstractmethod
    def push_key(self, path: str) -> str:
        """Generate a new unique child key under ``path``."""


class BlobStorage(ABC):
    """Binary object storage with public download URLs."""

    @abstractmethod
    def upload(self, path: str, data: bytes) -> str:
        """Store ``data`` at ``path`` and return its public URL."""
