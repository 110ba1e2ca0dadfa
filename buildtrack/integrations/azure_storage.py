"""
Azure Blob Storage backend for project documents and cover photos.
"""

import asyncio
import os
import uuid
from typing import Optional

import structlog
from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient, ContentSettings

from ..config.settings import Settings
from ..core.exceptions import StorageError

logger = structlog.get_logger(__name__)


def build_blob_name(folder: str, project_id: str, filename: str) -> str:
    """Unique blob name that keeps the original file stem readable."""
    stem, extension = os.path.splitext(os.path.basename(filename or "file"))
    stem = stem.replace(" ", "_") or "file"
    return f"{folder}/{project_id}/{stem}-{uuid.uuid4().hex[:12]}{extension.lower()}"


class BlobDocumentStorage:
    """Uploads and deletes project files in a single blob container."""

    def __init__(self, service_client: BlobServiceClient, container_name: str):
        self.service_client = service_client
        self.container_name = container_name
        self.container_client = service_client.get_container_client(container_name)

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["BlobDocumentStorage"]:
        """Build a storage backend, or ``None`` when no connection string is configured."""
        if not settings.azure_storage_connection_string:
            logger.warning("Azure Storage connection string not set; document uploads disabled")
            return None
        service_client = BlobServiceClient.from_connection_string(settings.azure_storage_connection_string)
        return cls(service_client, settings.azure_storage_container_name)

    async def ensure_container_exists(self) -> bool:
        """Ensure the blob container exists, create if not."""
        try:
            await asyncio.to_thread(self.container_client.create_container)
            logger.info("Created blob container", container=self.container_name)
        except ResourceExistsError:
            logger.info("Blob container exists", container=self.container_name)
        except AzureError as e:
            logger.error("Failed to ensure container exists", container=self.container_name, error=str(e))
            return False
        return True

    async def upload(self, blob_name: str, content: bytes, content_type: Optional[str] = None) -> str:
        """Upload ``content`` and return the blob URL."""
        blob_client = self.service_client.get_blob_client(container=self.container_name, blob=blob_name)
        try:
            await asyncio.to_thread(
                blob_client.upload_blob,
                content,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type or "application/octet-stream"),
            )
        except AzureError as e:
            logger.error("Failed to upload blob", blob_name=blob_name, error=str(e))
            raise StorageError(f"Upload failed: {e}") from e

        logger.info("Uploaded blob", blob_name=blob_name, size=len(content))
        return blob_client.url

    async def delete(self, blob_name: str) -> bool:
        """Delete a blob. Returns False when it did not exist."""
        blob_client = self.service_client.get_blob_client(container=self.container_name, blob=blob_name)
        try:
            await asyncio.to_thread(blob_client.delete_blob)
        except ResourceNotFoundError:
            logger.warning("Blob already gone", blob_name=blob_name)
            return False
        except AzureError as e:
            logger.error("Failed to delete blob", blob_name=blob_name, error=str(e))
            raise StorageError(f"Delete failed: {e}") from e

        logger.info("Deleted blob", blob_name=blob_name)
        return True
