"""
Google Cloud Storage implementation.

The client and bucket handle are built by ``create_gcs_handle`` on first use,
so missing credentials fail individual calls instead of startup. The
google-cloud-storage SDK is synchronous, so every call runs in a worker
thread.
"""
import asyncio
import json
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import requests
from google.api_core.exceptions import GoogleAPIError, NotFound
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage
from google.oauth2 import service_account

from app.config import BackendKind, GCSConfig
from app.logging_config import setup_logging
from app.storage.base import StorageBackend
from app.storage.exceptions import FileNotFoundError, StorageError

logger = setup_logging()

# Names are never reused for different content, so objects are immutable
CACHE_CONTROL = "public, max-age=31536000"

# Errors any SDK call can raise
CALL_ERRORS = (GoogleAPIError, GoogleAuthError, requests.exceptions.RequestException)


@dataclass
class GCSHandle:
    """Client and bucket shared by every request, plus the signing state."""

    client: Any
    bucket: Any
    signing_unavailable: bool = False

    def disable_signing(self, reason: str) -> None:
        # Write-once flag; a concurrent duplicate warning is harmless
        if self.signing_unavailable:
            return
        self.signing_unavailable = True
        logger.warning(
            "Signed URLs not available (missing service account key): "
            f"{reason}. Media will be served through the proxy endpoint. "
            "Set GCS_KEY_FILE or GCS_KEY_JSON to a service account key to enable signed URLs."
        )


def create_gcs_handle(config: GCSConfig) -> GCSHandle:
    """
    Build the storage client for the configured bucket.

    Credential resolution order:
    1. Key file path (``GCS_KEY_FILE`` / ``GOOGLE_APPLICATION_CREDENTIALS``)
    2. JSON key blob (``GCS_KEY_JSON``)
    3. Application Default Credentials

    Args:
        config: GCS configuration

    Returns:
        GCSHandle wrapping the client and bucket
    """
    client = None

    if config.key_file:
        key_file = os.path.expanduser(config.key_file)
        client = storage.Client.from_service_account_json(key_file, project=config.project_id)
        logger.info(f"GCS client initialized from key file for project {config.project_id}")
    elif config.key_json:
        try:
            key_data = json.loads(config.key_json)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse GCS_KEY_JSON, falling back to default credentials: {str(e)}")
        else:
            credentials = service_account.Credentials.from_service_account_info(key_data)
            client = storage.Client(project=config.project_id, credentials=credentials)
            logger.info(f"GCS client initialized from JSON key for project {config.project_id}")

    if client is None:
        client = storage.Client(project=config.project_id)
        logger.info(f"GCS client initialized with default credentials for project {config.project_id}")

    return GCSHandle(client=client, bucket=client.bucket(config.bucket_name))


class GCSStorageBackend(StorageBackend):
    """
    Google Cloud Storage backend.

    Object names are canonical filenames at the bucket root.
    """

    kind = BackendKind.GCS

    def __init__(self, config: GCSConfig, handle: GCSHandle | None = None):
        """
        Initialize GCS storage backend.

        Args:
            config: GCS configuration
            handle: Prebuilt client/bucket handle (default: built by
                ``create_gcs_handle(config)`` on first use)
        """
        self.config = config
        self.handle = handle

    async def _get_handle(self) -> GCSHandle:
        """
        Return the client handle, building it on first use.

        Raises:
            StorageError: If no usable credentials are available
        """
        if self.handle is None:
            try:
                self.handle = await asyncio.to_thread(create_gcs_handle, self.config)
            except (GoogleAuthError, OSError, ValueError) as e:
                logger.error(f"GCS client unavailable for bucket {self.config.bucket_name}: {str(e)}")
                raise StorageError(f"GCS client unavailable: {str(e)}") from e
        return self.handle

    async def _blob(self, file_name: str):
        handle = await self._get_handle()
        return handle.bucket.blob(file_name)

    async def upload(
        self,
        data: bytes,
        file_name: str,
        content_type: str | None = None,
    ) -> str:
        blob = await self._blob(file_name)
        blob.cache_control = CACHE_CONTROL

        try:
            await asyncio.to_thread(blob.upload_from_string, data, content_type=content_type)
        except CALL_ERRORS as e:
            raise StorageError(f"GCS upload failed: {str(e)}") from e

        try:
            await asyncio.to_thread(blob.make_public)
        except CALL_ERRORS as e:
            # Uniform bucket-level access forbids per-object ACLs; reads fall
            # back to signed or proxy URLs
            logger.info(f"Could not make gs://{self.config.bucket_name}/{file_name} public: {str(e)}")

        logger.info(f"Uploaded gs://{self.config.bucket_name}/{file_name} ({len(data)} bytes)")
        return file_name

    async def download(self, file_name: str) -> bytes:
        blob = await self._blob(file_name)

        try:
            return await asyncio.to_thread(blob.download_as_bytes)
        except NotFound as e:
            raise FileNotFoundError(file_name) from e
        except CALL_ERRORS as e:
            raise StorageError(f"GCS download failed: {str(e)}") from e

    async def delete(self, file_name: str) -> None:
        blob = await self._blob(file_name)

        try:
            await asyncio.to_thread(blob.delete)
        except NotFound:
            # Already deleted
            return
        except CALL_ERRORS as e:
            raise StorageError(f"GCS delete failed: {str(e)}") from e

    async def exists(self, file_name: str) -> bool:
        blob = await self._blob(file_name)

        try:
            return await asyncio.to_thread(blob.exists)
        except CALL_ERRORS as e:
            raise StorageError(f"GCS existence check failed: {str(e)}") from e

    def public_url(self, file_name: str) -> str:
        return f"{self.config.public_base_url}/{file_name}"

    async def signed_url(self, file_name: str, expiry_minutes: int | None = None) -> str | None:
        """
        Generate a time-limited v4 GET URL for an object.

        Args:
            file_name: Canonical filename
            expiry_minutes: URL lifetime (default from config)

        Returns:
            Signed URL, or None when the credentials cannot sign. Once signing
            has failed this way, None is returned without any network call.

        Raises:
            FileNotFoundError: If the object doesn't exist
            StorageError: If signing fails for another reason
        """
        handle = await self._get_handle()
        if handle.signing_unavailable:
            return None

        if not await self.exists(file_name):
            raise FileNotFoundError(file_name)

        minutes = expiry_minutes or self.config.signed_url_expiry_minutes
        blob = handle.bucket.blob(file_name)

        try:
            return await asyncio.to_thread(
                blob.generate_signed_url,
                version="v4",
                expiration=timedelta(minutes=minutes),
                method="GET",
            )
        except (AttributeError, GoogleAuthError) as e:
            # Token-only credentials (e.g. Cloud Run metadata server) carry no private key
            handle.disable_signing(str(e))
            return None
        except CALL_ERRORS as e:
            raise StorageError(f"GCS signed URL generation failed: {str(e)}") from e
