"""Document storage adapters."""

from ...config import Settings
from ...domain.documents.ports.object_storage_port import ObjectStoragePort
from .local_storage_adapter import LocalStorageAdapter
from .s3_storage_adapter import S3StorageAdapter
from .storage_config import (
    BACKEND_S3,
    StorageConfig,
    storage_config_from_settings,
    validate_storage_config,
)


def build_storage(settings: Settings) -> ObjectStoragePort:
    """Create the storage adapter selected by STORAGE_BACKEND.

    Raises:
        ValueError: If the storage configuration is invalid
    """
    config = storage_config_from_settings(settings)
    validate_storage_config(config)

    if config.backend == BACKEND_S3:
        return S3StorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
            max_size_bytes=config.max_size_bytes,
        )
    return LocalStorageAdapter(
        root_path=config.root_path,
        max_size_bytes=config.max_size_bytes,
    )


__all__ = [
    "LocalStorageAdapter",
    "S3StorageAdapter",
    "StorageConfig",
    "build_storage",
    "storage_config_from_settings",
    "validate_storage_config",
]
