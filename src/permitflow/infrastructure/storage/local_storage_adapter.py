"""Local Storage Adapter - filesystem implementation of ObjectStoragePort.

Objects are written under {root}/permits/{permit_id}/ with a timestamp and
random suffix appended to the base name so repeated uploads of the same file
never overwrite each other.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import logging
import os
import secrets
import time
from pathlib import Path

from ...domain.documents.ports.object_storage_port import ObjectStoragePort
from ...domain.documents.validation import sanitize_filename
from ...errors import PayloadTooLargeError, StorageError
from ...observability.metrics import storage_errors_total

logger = logging.getLogger(__name__)


class LocalStorageAdapter(ObjectStoragePort):
    """Filesystem-backed document storage.

    Storage paths are relative to root_path, e.g.
    'permits/3f2a.../plans_1718000000000_9c1d2e3f.pdf'.

    Example:
        storage = LocalStorageAdapter(root_path="/var/lib/permitflow")
        path = storage.save(b"...", "plans.pdf", permit_id)
    """

    def __init__(self, root_path: str, max_size_bytes: int = 50 * 1024 * 1024):
        self.root_path = Path(root_path).resolve()
        self.max_size_bytes = max_size_bytes
        self.root_path.mkdir(parents=True, exist_ok=True)

        logger.info(f"Initialized local storage adapter: root={self.root_path}")

    def save(self, content: bytes, file_name: str, permit_id: str) -> str:
        if len(content) > self.max_size_bytes:
            storage_errors_total.labels(operation="save").inc()
            raise PayloadTooLargeError(len(content), self.max_size_bytes)

        relative_path = Path("permits") / str(permit_id) / self._generate_unique_name(file_name)
        full_path = self._resolve(str(relative_path))

        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_bytes(content)
        except OSError as e:
            storage_errors_total.labels(operation="save").inc()
            logger.error(f"Local write failed: path={relative_path}, error={e}")
            raise StorageError(f"Failed to store file: {e}")

        logger.info(f"Stored file: path={relative_path}, size={len(content)}")
        return relative_path.as_posix()

    def get(self, storage_path: str) -> bytes:
        full_path = self._resolve(storage_path)
        try:
            return full_path.read_bytes()
        except FileNotFoundError:
            storage_errors_total.labels(operation="get").inc()
            raise StorageError(f"File not found: {storage_path}")
        except OSError as e:
            storage_errors_total.labels(operation="get").inc()
            logger.error(f"Local read failed: path={storage_path}, error={e}")
            raise StorageError(f"Failed to read file: {e}")

    def delete(self, storage_path: str) -> None:
        full_path = self._resolve(storage_path)
        try:
            full_path.unlink()
            logger.info(f"Deleted file: path={storage_path}")
        except FileNotFoundError:
            logger.info(f"File not found for deletion: path={storage_path}")
        except OSError as e:
            storage_errors_total.labels(operation="delete").inc()
            logger.error(f"Local delete failed: path={storage_path}, error={e}")
            raise StorageError(f"Failed to delete file: {e}")

    def exists(self, storage_path: str) -> bool:
        try:
            return self._resolve(storage_path).is_file()
        except StorageError:
            return False

    def health_check(self) -> bool:
        return self.root_path.is_dir() and os.access(self.root_path, os.W_OK)

    def _resolve(self, storage_path: str) -> Path:
        """Map a storage path to an absolute path inside root_path.

        Raises:
            StorageError: If the path escapes the storage root
        """
        full_path = (self.root_path / storage_path).resolve()
        if full_path != self.root_path and self.root_path not in full_path.parents:
            raise StorageError("Invalid file path: outside storage root")
        return full_path

    @staticmethod
    def _generate_unique_name(file_name: str) -> str:
        """Build '{base}_{millis}_{8 hex chars}{ext}' from the original name.

        Example:
            >>> LocalStorageAdapter._generate_unique_name('plans.pdf')  # doctest: +SKIP
            'plans_1718000000000_9c1d2e3f.pdf'
        """
        base, ext = os.path.splitext(sanitize_filename(file_name))
        timestamp = int(time.time() * 1000)
        random = secrets.token_hex(4)
        return f"{base}_{timestamp}_{random}{ext}"
