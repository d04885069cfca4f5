"""Storage configuration for permit document storage.

Supports a local filesystem backend (default) and S3-compatible object
storage (MinIO in development, AWS S3 in production) behind the same port.
"""

from dataclasses import dataclass
from typing import Optional

from ...config import Settings

BACKEND_LOCAL = "local"
BACKEND_S3 = "s3"


@dataclass
class StorageConfig:
    """Configuration for the document storage backend.

    Attributes:
        backend: "local" or "s3"
        root_path: Root directory for the local backend
        max_size_bytes: Largest payload either backend accepts
        endpoint_url: S3 endpoint URL (e.g. 'http://localhost:9000' for MinIO,
                      None for AWS S3 which uses default regional endpoints)
        access_key: S3 access key ID
        secret_key: S3 secret access key
        bucket_name: S3 bucket name for storing documents
        region: AWS region (default: 'us-east-1')
    """
    backend: str = BACKEND_LOCAL
    root_path: str = "storage"
    max_size_bytes: int = 50 * 1024 * 1024
    endpoint_url: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    bucket_name: str = "permitflow-documents"
    region: str = "us-east-1"


def storage_config_from_settings(settings: Settings) -> StorageConfig:
    """Build a StorageConfig from application settings."""
    return StorageConfig(
        backend=settings.STORAGE_BACKEND.lower(),
        root_path=settings.STORAGE_ROOT,
        max_size_bytes=settings.MAX_UPLOAD_SIZE_BYTES,
        endpoint_url=settings.S3_ENDPOINT_URL,
        access_key=settings.S3_ACCESS_KEY_ID,
        secret_key=settings.S3_SECRET_ACCESS_KEY,
        bucket_name=settings.S3_BUCKET_NAME,
        region=settings.S3_REGION,
    )


def validate_storage_config(config: StorageConfig) -> None:
    """Validate storage configuration.

    Args:
        config: Storage configuration to validate

    Raises:
        ValueError: If configuration is invalid
    """
    if config.backend not in (BACKEND_LOCAL, BACKEND_S3):
        raise ValueError(
            f"Unknown STORAGE_BACKEND '{config.backend}'. "
            f"Must be '{BACKEND_LOCAL}' or '{BACKEND_S3}'"
        )

    if config.max_size_bytes <= 0:
        raise ValueError("MAX_UPLOAD_SIZE_BYTES must be positive")

    if config.backend == BACKEND_LOCAL:
        if not config.root_path:
            raise ValueError("STORAGE_ROOT is required for the local backend")
        return

    if not config.bucket_name:
        raise ValueError("Storage bucket_name is required")

    if config.endpoint_url:
        # MinIO configuration
        if not config.endpoint_url.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid endpoint_url: {config.endpoint_url}. "
                "Must start with http:// or https://"
            )
    elif not config.region:
        raise ValueError("AWS region is required when using S3 (S3_ENDPOINT_URL not set)")
