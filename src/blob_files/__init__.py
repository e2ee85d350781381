"""Uniform file listing over private/public blob containers."""

from blob_files.azure.storage import AzureStorage
from blob_files.config import FilesOptions, FilesSettings
from blob_files.core.storage import Storage
from blob_files.errors import StorageError, StorageErrorCode
from blob_files.sdk import init, setup_logging

__all__ = [
    "AzureStorage",
    "FilesOptions",
    "FilesSettings",
    "Storage",
    "StorageError",
    "StorageErrorCode",
    "init",
    "setup_logging",
]
