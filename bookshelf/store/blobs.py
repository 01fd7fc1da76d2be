"""
Filesystem blob storage.
"""

from pathlib import Path

from bookshelf.store.base import BlobStorage, StoreError, join_path
from bookshelf.utils.logging import get_logger

logger = get_logger(__name__)


class LocalBlobStorage(BlobStorage):
    """
    Writes blobs under a root directory.

    Args:
        root: Directory the blobs are written to
        base_url: Public URL prefix the root directory is served under
    """

    def __init__(self, root: str, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def resolve(self, path: str) -> Path:
        """Filesystem location of a blob path, confined to the root."""
        relative = join_path(path)
        if not relative or ".." in relative.split("/"):
            raise StoreError(f"Invalid blob path: {path!r}")
        return self.root / relative

    def upload(self, path: str, data: bytes) -> str:
        target = self.resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise StoreError(f"Failed to upload {path}: {e}") from e

        logger.info("Blob uploaded", path=join_path(path), size=len(data))
        return f"{self.base_url}/{join_path(path)}"
