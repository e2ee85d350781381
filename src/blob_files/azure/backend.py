"""Azure Blob Storage implementation of :class:`ContainerBackend`."""

from typing import Any

from azure.core.credentials import AzureNamedKeyCredential
from azure.storage.blob.aio import ContainerClient

from blob_files.core.backend import (
    Aborter,
    BlobProperties,
    ContainerBackend,
    ListingPage,
    PublicAccess,
)

ACCOUNT_URL_TEMPLATE = "https://{account}.blob.core.windows.net"


class AzureContainerBackend(ContainerBackend):
    """One Azure container, accessed with the async SDK client.

    Azure SDK exceptions are raised untouched; they carry ``status_code``
    and ``error_code`` which the error translator understands.
    """

    def __init__(self, client: ContainerClient):
        self._client = client

    @classmethod
    def from_container_url(cls, container_url: str) -> "AzureContainerBackend":
        """Build from a container URL carrying a SAS token."""
        return cls(ContainerClient.from_container_url(container_url))

    @classmethod
    def from_account(
        cls, account: str, access_key: str, container_name: str
    ) -> "AzureContainerBackend":
        """Build from storage account name and shared key."""
        return cls(
            ContainerClient(
                account_url=ACCOUNT_URL_TEMPLATE.format(account=account),
                container_name=container_name,
                credential=AzureNamedKeyCredential(account, access_key),
            )
        )

    @property
    def client(self) -> ContainerClient:
        return self._client

    @staticmethod
    def _call_kwargs(aborter: Aborter) -> dict[str, Any]:
        if aborter.timeout is not None:
            return {"timeout": aborter.timeout}
        return {}

    async def get_properties(self, name: str, *, aborter: Aborter) -> BlobProperties:
        blob = self._client.get_blob_client(name)
        props = await blob.get_blob_properties(**self._call_kwargs(aborter))
        content_settings = getattr(props, "content_settings", None)
        return BlobProperties(
            name=name,
            size=props.size,
            content_type=getattr(content_settings, "content_type", None),
            etag=(props.etag or "").strip('"') or None,
            metadata=dict(props.metadata or {}),
        )

    async def list_page(
        self,
        marker: str | None,
        *,
        prefix: str,
        delimiter: str,
        aborter: Aborter,
    ) -> ListingPage:
        # Flat listing: the delimiter is accepted for interface parity but
        # full blob names are always returned.
        pages = self._client.list_blobs(
            name_starts_with=prefix or None, **self._call_kwargs(aborter)
        ).by_page(continuation_token=marker)
        try:
            page = await anext(pages)
        except StopAsyncIteration:
            return ListingPage()
        names = [blob.name async for blob in page]
        return ListingPage(names=names, next_marker=pages.continuation_token)

    async def create(
        self, *, public_access: PublicAccess | None, aborter: Aborter
    ) -> None:
        await self._client.create_container(
            public_access=public_access, **self._call_kwargs(aborter)
        )

    async def download(self, name: str, *, aborter: Aborter) -> bytes:
        downloader = await self._client.download_blob(
            name, **self._call_kwargs(aborter)
        )
        return await downloader.readall()

    async def upload(self, name: str, content: bytes, *, aborter: Aborter) -> int:
        await self._client.upload_blob(
            name, content, overwrite=True, **self._call_kwargs(aborter)
        )
        return len(content)

    async def delete(self, name: str, *, aborter: Aborter) -> None:
        await self._client.delete_blob(name, **self._call_kwargs(aborter))

    async def close(self) -> None:
        await self._client.close()
