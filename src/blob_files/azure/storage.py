"""Azure-backed storage initialization."""

from collections.abc import Mapping
from typing import Any

from blob_files.config import DEFAULT_PUBLIC_PREFIX
from blob_files.core.backend import Aborter, BackendHandle, ensure_container
from blob_files.core.storage import Storage
from blob_files.credentials import (
    AccountCredentials,
    AzureCredentials,
    SasCredentials,
    parse_azure_credentials,
)
from blob_files.errors import wrap_provider_errors
from blob_files.azure.backend import AzureContainerBackend
from blob_files.observability.logging import get_logger

logger = get_logger(__name__)

PUBLIC_CONTAINER_SUFFIX = "-public"


class AzureStorage(Storage):
    """Storage on a pair of Azure Blob containers."""

    @classmethod
    async def init(
        cls,
        credentials: Mapping[str, Any] | AzureCredentials | None,
        *,
        public_prefix: str = DEFAULT_PUBLIC_PREFIX,
        aborter: Aborter | None = None,
    ) -> "AzureStorage":
        """Validate credentials and open both containers.

        With SAS credentials the containers are expected to exist already.
        With account credentials both are created if missing: the private
        one without public access, the public one with public read access
        on blobs.

        Args:
            credentials: Account or SAS credentials
            public_prefix: Leading path segment routed to the public container
            aborter: Shared cancellation settings for every backend call

        Returns:
            Ready-to-use AzureStorage

        Raises:
            StorageError: BadArgument for invalid credentials, Forbidden or
                Internal if container creation fails
        """
        creds = parse_azure_credentials(credentials)
        aborter = aborter or Aborter.none()

        match creds:
            case SasCredentials():
                handle = BackendHandle(
                    private=AzureContainerBackend.from_container_url(creds.sas_url_private),
                    public=AzureContainerBackend.from_container_url(creds.sas_url_public),
                    aborter=aborter,
                )
                logger.info("Azure storage initialized", credentials="sas")
            case AccountCredentials():
                handle = BackendHandle(
                    private=AzureContainerBackend.from_account(
                        creds.storage_account,
                        creds.storage_access_key,
                        creds.container_name,
                    ),
                    public=AzureContainerBackend.from_account(
                        creds.storage_account,
                        creds.storage_access_key,
                        creds.container_name + PUBLIC_CONTAINER_SUFFIX,
                    ),
                    aborter=aborter,
                )
                try:
                    with wrap_provider_errors():
                        await ensure_container(
                            handle.private, public_access=None, aborter=aborter
                        )
                        await ensure_container(
                            handle.public, public_access="blob", aborter=aborter
                        )
                except Exception:
                    await handle.close()
                    raise
                logger.info(
                    "Azure storage initialized",
                    credentials="account",
                    account=creds.storage_account,
                    container=creds.container_name,
                )

        return cls(handle, public_prefix=public_prefix)
