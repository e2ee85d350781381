"""Shared fixtures for blob_files tests."""

from unittest.mock import AsyncMock

import pytest

from blob_files.core.backend import (
    Aborter,
    BackendHandle,
    BlobProperties,
    ContainerBackend,
    ListingPage,
)
from blob_files.core.storage import Storage
from blob_files.errors import BackendError

OW_ENV_VARS = ("__OW_NAMESPACE", "OW_NAMESPACE", "__OW_AUTH", "OW_AUTH")


def make_container_backend() -> AsyncMock:
    """Create a mock container backend."""
    backend = AsyncMock(spec=ContainerBackend)
    backend.get_properties.return_value = BlobProperties(name="blob")
    backend.list_page.return_value = ListingPage()
    return backend


def not_found() -> BackendError:
    return BackendError("BlobNotFound", status_code=404, error_code="BlobNotFound")


@pytest.fixture(autouse=True)
def clean_ow_env(monkeypatch):
    """Keep OpenWhisk runtime variables out of every test."""
    for name in OW_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def private_backend():
    return make_container_backend()


@pytest.fixture
def public_backend():
    return make_container_backend()


@pytest.fixture
def aborter():
    return Aborter(timeout=5)


@pytest.fixture
def storage(private_backend, public_backend, aborter):
    """Storage over two mock containers."""
    handle = BackendHandle(private=private_backend, public=public_backend, aborter=aborter)
    return Storage(handle)
