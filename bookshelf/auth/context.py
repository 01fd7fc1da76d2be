"""
Identity resolution for per-user operations.
"""

from abc import ABC, abstractmethod
from typing import Optional


class AuthContext(ABC):
    """Answers "who is signed in right now"."""

    @abstractmethod
    def current_uid(self) -> Optional[str]:
        """The authenticated user id, or None when nobody is signed in."""


class StaticAuthContext(AuthContext):
    """An identity fixed at construction; ``uid=None`` means signed out."""

    def __init__(self, uid: Optional[str] = None):
        self.uid = uid

    def current_uid(self) -> Optional[str]:
        return self.uid
