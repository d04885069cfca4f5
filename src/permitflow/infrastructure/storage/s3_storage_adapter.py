"""S3 Storage Adapter - Implementation of ObjectStoragePort using boto3.

Provides storage operations for AWS S3, MinIO, and other S3-compatible services.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import hashlib
import logging
import secrets
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from ...domain.documents.ports.object_storage_port import ObjectStoragePort
from ...domain.documents.validation import get_mime_type, sanitize_filename
from ...errors import PayloadTooLargeError, StorageError
from ...observability.metrics import storage_errors_total

logger = logging.getLogger(__name__)


class S3StorageAdapter(ObjectStoragePort):
    """S3-compatible storage adapter using boto3.

    Storage key format: permits/{permit_id}/{year}/{month}/{sha256[:16]}_{hex}_{name}

    Example:
        config = storage_config_from_settings(get_settings())
        storage = S3StorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
        )

        path = storage.save(b"%PDF-1.4...", "plans.pdf", permit_id)
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: Optional[str],
        secret_key: Optional[str],
        bucket_name: str,
        region: str = "us-east-1",
        max_size_bytes: int = 50 * 1024 * 1024,
    ):
        """Initialize S3 storage adapter.

        Args:
            endpoint_url: S3 endpoint URL (None for AWS S3, URL for MinIO)
            access_key: S3 access key ID (None to use the default credential chain)
            secret_key: S3 secret access key
            bucket_name: S3 bucket name
            region: AWS region (default: 'us-east-1')
            max_size_bytes: Largest accepted payload

        Raises:
            StorageError: If S3 client initialization fails
        """
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
            self.bucket_name = bucket_name
            self.region = region
            self.max_size_bytes = max_size_bytes

            logger.info(
                f"Initialized S3 storage adapter: bucket={bucket_name}, "
                f"endpoint={endpoint_url or 'AWS S3'}, region={region}"
            )
        except NoCredentialsError as e:
            raise StorageError(f"Invalid S3 credentials: {e}")
        except (BotoCoreError, ValueError) as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

    def save(self, content: bytes, file_name: str, permit_id: str) -> str:
        if len(content) > self.max_size_bytes:
            storage_errors_total.labels(operation="save").inc()
            raise PayloadTooLargeError(len(content), self.max_size_bytes)

        sha256_hex = hashlib.sha256(content).hexdigest()
        storage_key = self._generate_storage_key(permit_id, sha256_hex, file_name)

        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=storage_key,
                Body=BytesIO(content),
                ContentType=get_mime_type(file_name),
                Metadata={
                    "sha256": sha256_hex,
                    "permit_id": str(permit_id),
                },
            )
        except (ClientError, BotoCoreError) as e:
            storage_errors_total.labels(operation="save").inc()
            logger.error(f"S3 upload failed: storage_key={storage_key}, error={e}")
            raise StorageError(f"Failed to upload file: {self._error_code(e)}")

        logger.info(
            f"Uploaded file: storage_key={storage_key}, "
            f"sha256={sha256_hex}, size={len(content)}"
        )
        return storage_key

    def get(self, storage_path: str) -> bytes:
        try:
            response = self.s3_client.get_object(
                Bucket=self.bucket_name,
                Key=storage_path,
            )
            return response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            storage_errors_total.labels(operation="get").inc()
            error_code = self._error_code(e)
            if error_code == "NoSuchKey":
                logger.warning(f"File not found: storage_key={storage_path}")
                raise StorageError(f"File not found: {storage_path}")
            logger.error(
                f"S3 retrieval failed: storage_key={storage_path}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to retrieve file: {error_code}")

    def delete(self, storage_path: str) -> None:
        # S3 DeleteObject succeeds for missing keys
        try:
            self.s3_client.delete_object(
                Bucket=self.bucket_name,
                Key=storage_path,
            )
            logger.info(f"Deleted file: storage_key={storage_path}")
        except (ClientError, BotoCoreError) as e:
            storage_errors_total.labels(operation="delete").inc()
            error_code = self._error_code(e)
            logger.error(
                f"S3 deletion failed: storage_key={storage_path}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to delete file: {error_code}")

    def exists(self, storage_path: str) -> bool:
        """Check if an object exists (HEAD request)."""
        try:
            self.s3_client.head_object(
                Bucket=self.bucket_name,
                Key=storage_path,
            )
            return True
        except ClientError as e:
            error_code = self._error_code(e)
            if error_code not in ("404", "NoSuchKey", "NotFound"):
                logger.warning(
                    f"Error checking file existence: storage_key={storage_path}, "
                    f"error={error_code}"
                )
            return False
        except BotoCoreError:
            return False

    def health_check(self) -> bool:
        """Verify that the configured bucket is reachable."""
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"S3 bucket check failed: bucket={self.bucket_name}, error={e}")
            return False

    @staticmethod
    def _generate_storage_key(permit_id: str, sha256: str, file_name: str) -> str:
        """Build the object key for a new upload.

        Example:
            >>> S3StorageAdapter._generate_storage_key(
            ...     'a1b2...', 'abc123...', 'site plan.pdf'
            ... )  # doctest: +SKIP
            'permits/a1b2.../2026/10/abc123..._9c1d2e3f_site_plan.pdf'
        """
        now = datetime.now(timezone.utc)
        name = sanitize_filename(file_name) or f"file{Path(file_name).suffix}"
        return (
            f"permits/{permit_id}/{now.year}/{now.month:02d}/"
            f"{sha256[:16]}_{secrets.token_hex(4)}_{name}"
        )

    @staticmethod
    def _error_code(error: Exception) -> str:
        if isinstance(error, ClientError):
            return error.response.get("Error", {}).get("Code", "Unknown")
        return type(error).__name__
