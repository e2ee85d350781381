"""Azure Blob Storage provider."""

from blob_files.azure.backend import AzureContainerBackend
from blob_files.azure.storage import AzureStorage

__all__ = ["AzureContainerBackend", "AzureStorage"]
