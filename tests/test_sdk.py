"""Tests for the top-level init entry point."""

from unittest.mock import AsyncMock

import pytest

import blob_files
from blob_files import sdk
from blob_files.config import DEFAULT_TVM_API_URL, FilesSettings
from blob_files.credentials import SasCredentials
from blob_files.errors import StorageError, StorageErrorCode

SAS_CREDENTIALS = {
    "sas_url_private": "https://fake.com/private",
    "sas_url_public": "https://fake.com/public",
}
TVM_CREDENTIALS = {
    "sasURLPrivate": "https://tvm.com/private",
    "sasURLPublic": "https://tvm.com/public",
    "expiration": "2999-01-01T00:00:00Z",
}


@pytest.fixture
def settings():
    return FilesSettings(_env_file=None)


@pytest.fixture
def azure_init(monkeypatch):
    """Replace AzureStorage.init with a mock."""
    mock = AsyncMock(return_value="storage")
    monkeypatch.setattr(sdk.AzureStorage, "init", mock)
    return mock


@pytest.fixture
def tvm(monkeypatch):
    """Replace the TVM client with a recording fake."""
    created = []

    class FakeTvmClient:
        def __init__(self, ow, api_url, cache_file=None):
            self.ow = ow
            self.api_url = api_url
            self.cache_file = cache_file
            created.append(self)

        async def get_azure_blob_credentials(self):
            return TVM_CREDENTIALS

    monkeypatch.setattr(sdk, "TvmClient", FakeTvmClient)
    return created


@pytest.mark.asyncio
async def test_init_with_azure_credentials(azure_init, tvm, settings):
    result = await blob_files.init({"azure": SAS_CREDENTIALS}, settings=settings)

    assert result == "storage"
    assert tvm == []
    args, kwargs = azure_init.await_args
    assert isinstance(args[0], SasCredentials)
    assert kwargs["public_prefix"] == "public/"
    assert kwargs["aborter"].timeout is None


@pytest.mark.asyncio
async def test_init_with_ow_credentials_uses_tvm(azure_init, tvm, settings):
    await blob_files.init({"ow": {"namespace": "ns", "auth": "key"}}, settings=settings)

    assert len(tvm) == 1
    assert tvm[0].ow.namespace == "ns"
    assert tvm[0].api_url == DEFAULT_TVM_API_URL
    assert azure_init.await_args.args[0] == TVM_CREDENTIALS


@pytest.mark.asyncio
async def test_options_override_tvm_settings(azure_init, tvm, settings, tmp_path):
    await blob_files.init(
        {"ow": {"namespace": "ns", "auth": "key"}},
        {"tvm_api_url": "https://my.tvm", "tvm_cache_file": tmp_path / "c.json", "timeout": 3},
        settings=settings,
    )

    assert tvm[0].api_url == "https://my.tvm"
    assert tvm[0].cache_file == tmp_path / "c.json"
    assert azure_init.await_args.kwargs["aborter"].timeout == 3


@pytest.mark.asyncio
async def test_ow_credentials_from_environment(azure_init, tvm, monkeypatch):
    monkeypatch.setenv("__OW_NAMESPACE", "env-ns")
    monkeypatch.setenv("__OW_AUTH", "env-auth")

    await blob_files.init(settings=FilesSettings(_env_file=None))

    assert tvm[0].ow.namespace == "env-ns"
    assert tvm[0].ow.auth == "env-auth"


@pytest.mark.asyncio
async def test_environment_ow_conflicts_with_azure(azure_init, tvm, monkeypatch):
    monkeypatch.setenv("OW_NAMESPACE", "env-ns")

    with pytest.raises(StorageError) as exc_info:
        await blob_files.init(
            {"azure": SAS_CREDENTIALS}, settings=FilesSettings(_env_file=None)
        )

    assert exc_info.value.code is StorageErrorCode.BAD_ARGUMENT
    assert "conflict" in exc_info.value.message
    azure_init.assert_not_called()


@pytest.mark.asyncio
async def test_missing_credentials(azure_init, settings):
    with pytest.raises(StorageError) as exc_info:
        await blob_files.init(settings=settings)

    assert exc_info.value.code is StorageErrorCode.BAD_ARGUMENT
    assert "required" in exc_info.value.message


@pytest.mark.asyncio
async def test_invalid_options(azure_init, settings):
    with pytest.raises(StorageError) as exc_info:
        await blob_files.init({"azure": SAS_CREDENTIALS}, {"timeout": -1}, settings=settings)

    assert exc_info.value.code is StorageErrorCode.BAD_ARGUMENT
    assert "options" in exc_info.value.message


@pytest.mark.asyncio
async def test_custom_public_prefix_from_settings(azure_init):
    settings = FilesSettings(_env_file=None, public_prefix="/www")

    await blob_files.init({"azure": SAS_CREDENTIALS}, settings=settings)

    assert azure_init.await_args.kwargs["public_prefix"] == "www/"


def test_empty_public_prefix_is_rejected():
    with pytest.raises(ValueError):
        FilesSettings(_env_file=None, public_prefix="/")
