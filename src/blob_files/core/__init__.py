"""Storage core: path routing, listing and the backend interface."""

from blob_files.core.backend import (
    Aborter,
    BackendHandle,
    BlobProperties,
    ContainerBackend,
    ListingPage,
)
from blob_files.core.paths import Container, PathRoute, classify
from blob_files.core.storage import Storage

__all__ = [
    "Aborter",
    "BackendHandle",
    "BlobProperties",
    "Container",
    "ContainerBackend",
    "ListingPage",
    "PathRoute",
    "Storage",
    "classify",
]
