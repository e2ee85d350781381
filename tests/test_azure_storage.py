"""Tests for AzureStorage initialization."""

from unittest.mock import MagicMock

import pytest

from blob_files.azure import storage as azure_storage
from blob_files.azure.storage import AzureStorage
from blob_files.core.backend import Aborter
from blob_files.errors import BackendError, StorageError, StorageErrorCode

from conftest import make_container_backend

FAKE_SAS_CREDENTIALS = {
    "sas_url_private": "https://fake.com/private",
    "sas_url_public": "https://fake.com/public",
}
FAKE_USER_CREDENTIALS = {
    "container_name": "fake",
    "storage_access_key": "fakeKey",
    "storage_account": "fakeAccount",
}


@pytest.fixture
def containers(monkeypatch):
    """Replace Azure container construction with mock backends."""
    private = make_container_backend()
    public = make_container_backend()
    by_name = {"fake": private, "fake-public": public}

    from_account = MagicMock(side_effect=lambda account, key, name: by_name[name])
    from_url = MagicMock(side_effect=[private, public])
    monkeypatch.setattr(
        azure_storage.AzureContainerBackend, "from_account", from_account
    )
    monkeypatch.setattr(
        azure_storage.AzureContainerBackend, "from_container_url", from_url
    )
    return {
        "private": private,
        "public": public,
        "from_account": from_account,
        "from_url": from_url,
    }


class TestBadArguments:
    @pytest.mark.asyncio
    async def test_no_arguments(self, containers):
        with pytest.raises(StorageError) as exc_info:
            await AzureStorage.init(None)

        assert exc_info.value.code is StorageErrorCode.BAD_ARGUMENT
        assert "credentials" in exc_info.value.message
        assert "required" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_incomplete_sas_credentials(self, containers):
        bad_input = dict(FAKE_SAS_CREDENTIALS)
        del bad_input["sas_url_private"]

        with pytest.raises(StorageError) as exc_info:
            await AzureStorage.init(bad_input)

        assert exc_info.value.code is StorageErrorCode.BAD_ARGUMENT
        assert "sas_url_private" in exc_info.value.message
        # Fails before any backend is built
        containers["from_url"].assert_not_called()

    @pytest.mark.asyncio
    async def test_both_sas_and_user_credentials(self, containers):
        with pytest.raises(StorageError) as exc_info:
            await AzureStorage.init({**FAKE_USER_CREDENTIALS, **FAKE_SAS_CREDENTIALS})

        assert exc_info.value.code is StorageErrorCode.BAD_ARGUMENT
        assert "conflict" in exc_info.value.message
        containers["from_account"].assert_not_called()


class TestAccountCredentials:
    @pytest.mark.asyncio
    async def test_containers_are_created(self, containers):
        aborter = Aborter(timeout=10)

        storage = await AzureStorage.init(FAKE_USER_CREDENTIALS, aborter=aborter)

        assert isinstance(storage, AzureStorage)
        containers["private"].create.assert_awaited_once_with(
            public_access=None, aborter=aborter
        )
        containers["public"].create.assert_awaited_once_with(
            public_access="blob", aborter=aborter
        )
        containers["from_account"].assert_any_call("fakeAccount", "fakeKey", "fake")
        containers["from_account"].assert_any_call("fakeAccount", "fakeKey", "fake-public")

    @pytest.mark.asyncio
    async def test_existing_containers_are_ignored(self, containers):
        """Test that init is idempotent when both containers exist."""
        for name in ("private", "public"):
            containers[name].create.side_effect = BackendError(
                "exists", status_code=409, error_code="ContainerAlreadyExists"
            )

        first = await AzureStorage.init(FAKE_USER_CREDENTIALS)
        second = await AzureStorage.init(FAKE_USER_CREDENTIALS)

        assert isinstance(first, AzureStorage)
        assert isinstance(second, AzureStorage)
        assert containers["private"].create.await_count == 2
        assert containers["public"].create.await_count == 2

    @pytest.mark.asyncio
    async def test_error_without_status(self, containers):
        containers["private"].create.side_effect = RuntimeError("error")

        with pytest.raises(StorageError) as exc_info:
            await AzureStorage.init(FAKE_USER_CREDENTIALS)

        assert exc_info.value.code is StorageErrorCode.INTERNAL

    @pytest.mark.asyncio
    async def test_error_with_status(self, containers):
        containers["private"].create.side_effect = BackendError(status_code=500)

        with pytest.raises(StorageError) as exc_info:
            await AzureStorage.init(FAKE_USER_CREDENTIALS)

        assert exc_info.value.code is StorageErrorCode.INTERNAL
        assert "500" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_forbidden_error(self, containers):
        containers["public"].create.side_effect = BackendError(status_code=403)

        with pytest.raises(StorageError) as exc_info:
            await AzureStorage.init(FAKE_USER_CREDENTIALS)

        assert exc_info.value.code is StorageErrorCode.FORBIDDEN
        # The private container was created before the failure, no rollback
        containers["private"].create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connections_are_closed_on_failure(self, containers):
        containers["public"].create.side_effect = BackendError(status_code=500)

        with pytest.raises(StorageError):
            await AzureStorage.init(FAKE_USER_CREDENTIALS)

        containers["private"].close.assert_awaited_once()
        containers["public"].close.assert_awaited_once()


@pytest.mark.asyncio
async def test_sas_credentials(containers):
    storage = await AzureStorage.init(FAKE_SAS_CREDENTIALS, public_prefix="www/")

    assert isinstance(storage, AzureStorage)
    assert storage.public_prefix == "www/"
    assert containers["from_url"].call_args_list[0].args == ("https://fake.com/private",)
    assert containers["from_url"].call_args_list[1].args == ("https://fake.com/public",)
    # Containers are pre-provisioned by the credential issuer
    containers["private"].create.assert_not_called()
    containers["public"].create.assert_not_called()
