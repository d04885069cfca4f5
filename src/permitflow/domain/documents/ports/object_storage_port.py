"""Object Storage Port - Domain interface for document byte storage.

This port defines the contract the document ledger requires from a storage
backend. Adapters implement it for the local filesystem and for S3/MinIO.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod


class ObjectStoragePort(ABC):
    """Port interface for storing permit document bytes.

    Storage paths returned by save() are opaque to callers; they are
    persisted on the document record and handed back unchanged to
    get/delete/exists.

    Every adapter enforces its configured maximum payload size and reports
    all failures as StorageError (PayloadTooLargeError for oversize input).

    Example Usage:
        storage = LocalStorageAdapter(root_path="storage", max_size_bytes=50 * 1024 * 1024)

        path = storage.save(b"%PDF-1.4...", "plans.pdf", permit_id)
        content = storage.get(path)
    """

    @abstractmethod
    def save(self, content: bytes, file_name: str, permit_id: str) -> str:
        """Persist bytes for a permit document.

        Args:
            content: File bytes
            file_name: Original file name (used for the stored object's name)
            permit_id: Owning permit package id (used to group objects)

        Returns:
            str: Opaque storage path

        Raises:
            PayloadTooLargeError: If content exceeds the configured maximum
            StorageError: If the write fails
        """

    @abstractmethod
    def get(self, storage_path: str) -> bytes:
        """Read the bytes stored at storage_path.

        Raises:
            StorageError: If the object is missing or the read fails
        """

    @abstractmethod
    def delete(self, storage_path: str) -> None:
        """Delete the object at storage_path.

        Deleting a missing object is not an error.

        Raises:
            StorageError: If deletion fails
        """

    @abstractmethod
    def exists(self, storage_path: str) -> bool:
        """Check if an object exists at storage_path."""

    def health_check(self) -> bool:
        """Return True if the backend is reachable."""
        return True
