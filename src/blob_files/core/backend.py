"""Backend interface consumed by the storage core.

The core never touches a provider SDK directly. It talks to two
:class:`ContainerBackend` objects, one per container, bundled with a shared
:class:`Aborter` in a :class:`BackendHandle`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from blob_files.errors import is_already_exists
from blob_files.observability.logging import get_logger

logger = get_logger(__name__)

PublicAccess = Literal["blob", "container"]


class Aborter(BaseModel):
    """Cancellation settings shared by every call made through one handle.

    Read-only once built. ``timeout`` is the server-side timeout in seconds
    forwarded to the provider; ``None`` leaves the transport defaults alone.
    """

    model_config = ConfigDict(frozen=True)

    timeout: float | None = Field(default=None, gt=0)

    @classmethod
    def none(cls) -> "Aborter":
        return cls()


class ListingPage(BaseModel):
    """One page of a prefix listing.

    ``next_marker`` is ``None`` on the last page. Empty-string markers are
    normalized to ``None`` so provider conventions don't leak.
    """

    names: list[str] = Field(default_factory=list)
    next_marker: str | None = None

    @field_validator("next_marker", mode="before")
    @classmethod
    def _empty_marker_is_last_page(cls, value: str | None) -> str | None:
        return value or None


class BlobProperties(BaseModel):
    """Metadata returned by a blob probe."""

    name: str
    size: int | None = None
    content_type: str | None = None
    etag: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)


class ContainerBackend(ABC):
    """Operations on a single flat container of blobs."""

    @abstractmethod
    async def get_properties(self, name: str, *, aborter: Aborter) -> BlobProperties:
        """Fetch metadata for the blob at ``name``.

        Raises:
            Exception: provider error; status 404 when the blob is missing
        """
        ...

    @abstractmethod
    async def list_page(
        self,
        marker: str | None,
        *,
        prefix: str,
        delimiter: str,
        aborter: Aborter,
    ) -> ListingPage:
        """Fetch one page of blob names starting with ``prefix``.

        Args:
            marker: Continuation marker from the previous page, or None
            prefix: Blob name prefix
            delimiter: Hierarchy delimiter; listings stay flat
            aborter: Shared cancellation settings

        Returns:
            ListingPage with full blob names, in provider order
        """
        ...

    @abstractmethod
    async def create(
        self, *, public_access: PublicAccess | None, aborter: Aborter
    ) -> None:
        """Create the container. Raises if it already exists."""
        ...

    @abstractmethod
    async def download(self, name: str, *, aborter: Aborter) -> bytes:
        ...

    @abstractmethod
    async def upload(self, name: str, content: bytes, *, aborter: Aborter) -> int:
        ...

    @abstractmethod
    async def delete(self, name: str, *, aborter: Aborter) -> None:
        ...

    async def close(self) -> None:
        """Close any open connections."""
        pass


@dataclass
class BackendHandle:
    """The private and public containers plus their shared aborter."""

    private: ContainerBackend
    public: ContainerBackend
    aborter: Aborter = field(default_factory=Aborter.none)

    async def close(self) -> None:
        await self.private.close()
        await self.public.close()


async def ensure_container(
    backend: ContainerBackend,
    *,
    public_access: PublicAccess | None,
    aborter: Aborter,
) -> bool:
    """Create a container unless it already exists.

    Returns:
        True if created, False if it was already there

    Raises:
        Exception: any provider failure other than "already exists",
            untranslated
    """
    try:
        await backend.create(public_access=public_access, aborter=aborter)
    except Exception as error:
        if is_already_exists(error):
            logger.debug("Container already exists", public_access=public_access)
            return False
        raise
    logger.info("Container created", public_access=public_access)
    return True
