"""Filesystem storage for uploaded menu item images."""

import logging
import time
from pathlib import Path

from restaurant_ordering_service.errors import StorageError

logger = logging.getLogger(__name__)


class ImageStorage:
    """Stores uploaded files under generated names in a single directory.

    Stored files are named ``<epoch milliseconds><original extension>`` and
    are served back by the HTTP layer under the ``/uploads`` prefix. No type
    or size checks are applied.
    """

    def __init__(self, upload_dir: str | Path) -> None:
        """Initialize storage.

        Args:
            upload_dir: Directory uploaded files are written to
        """
        self.upload_dir = Path(upload_dir)

    def ensure_directory(self) -> None:
        """Create the upload directory if it does not exist."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def save(self, original_filename: str | None, content: bytes) -> str:
        """Write an uploaded file and return where it was stored.

        Args:
            original_filename: Client-supplied file name, used for its extension
            content: Raw file bytes

        Returns:
            str: Storage path of the written file, e.g. ``uploads/1718000000000.png``

        Raises:
            StorageError: If the file cannot be written
        """
        extension = Path(original_filename or "").suffix
        stored_name = f"{int(time.time() * 1000)}{extension}"
        path = self.upload_dir / stored_name

        try:
            self.ensure_directory()
            path.write_bytes(content)
        except OSError as e:
            logger.error(f"Failed to store uploaded image: {e}")
            raise StorageError(f"Failed to store uploaded image: {e}") from e

        logger.info(f"Stored uploaded image {original_filename!r} as {path}")
        return path.as_posix()
