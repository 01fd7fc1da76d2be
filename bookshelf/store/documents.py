"""
SQL-backed user data store.
"""

import uuid
from typing import Any, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from bookshelf.db.database import get_db_session
from bookshelf.db.models import Document
from bookshelf.store.base import UserStore, StoreError, join_path
from bookshelf.utils.logging import get_logger

logger = get_logger(__name__)


def _subtree(path: str):
    """Filter matching ``path`` and every path below it."""
    return or_(
        Document.path == path,
        Document.path.startswith(path + "/", autoescape=True),
    )


def _ancestors(path: str):
    """Every proper ancestor of ``path``, nearest last."""
    parts = path.split("/")
    return ["/".join(parts[:i]) for i in range(1, len(parts))]


def _assemble(path: str, rows) -> dict:
    """
    Nest the rows below ``path`` into dicts.

    A child path wins over a leaf value stored under the same name.
    """
    tree: dict = {}
    for row in rows:
        parts = row.path[len(path) + 1:].split("/")
        node = tree
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        if not isinstance(node.get(parts[-1]), dict):
            node[parts[-1]] = row.value
    return tree


class SqlDocumentStore(UserStore):
    """
    Tree store kept in the ``documents`` table.

    Each value lives at a leaf path. Reading a parent path assembles the
    rows below it into nested dicts, so ``users/u1/favorites`` returns a
    mapping of favorite key to favorite document.
    """

    def get(self, path: str) -> Optional[Any]:
        path = join_path(path)
        try:
            with get_db_session() as session:
                row = session.get(Document, path)
                if row is not None:
                    return row.value

                rows = (
                    session.query(Document)
                    .filter(Document.path.startswith(path + "/", autoescape=True))
                    .order_by(Document.path)
                    .all()
                )
                if not rows:
                    return None

                return _assemble(path, rows)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read {path}: {e}") from e

    def set(self, path: str, value: Any) -> None:
        path = join_path(path)
        if not path:
            raise StoreError("Refusing to write the store root")
        try:
            with get_db_session() as session:
                session.query(Document).filter(_subtree(path)).delete(
                    synchronize_session=False
                )
                # A value at an ancestor would shadow the new node
                session.query(Document).filter(Document.path.in_(_ancestors(path))).delete(
                    synchronize_session=False
                )
                session.add(Document(path=path, value=value))
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to write {path}: {e}") from e
        logger.debug("Document written", path=path)

    def delete(self, path: str) -> None:
        path = join_path(path)
        if not path:
            raise StoreError("Refusing to delete the store root")
        try:
            with get_db_session() as session:
                removed = session.query(Document).filter(_subtree(path)).delete(
                    synchronize_session=False
                )
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to delete {path}: {e}") from e
        logger.debug("Documents deleted", path=path, count=removed)

    def push_key(self, path: str) -> str:
        return uuid.uuid4().hex
