"""Virtual filesystem over a private and a public blob container.

A single logical path space is split by its first segment: paths under
the public prefix live in the public container (with the prefix stripped
from blob names), everything else lives in the private container.
"""

from __future__ import annotations

from blob_files.config import DEFAULT_PUBLIC_PREFIX
from blob_files.core.backend import BackendHandle, ContainerBackend
from blob_files.core.paths import (
    Container,
    PathRoute,
    classify,
    is_directory_like,
    to_public_path,
)
from blob_files.errors import StorageError, is_not_found, wrap_provider_errors
from blob_files.observability.logging import get_logger

logger = get_logger(__name__)

LIST_DELIMITER = "/"


class Storage:
    """Uniform file operations over a :class:`BackendHandle`.

    Every failure surfaces as a :class:`StorageError`; provider exceptions
    never escape.
    """

    def __init__(
        self,
        handle: BackendHandle,
        *,
        public_prefix: str = DEFAULT_PUBLIC_PREFIX,
    ):
        self._handle = handle
        self._public_prefix = public_prefix

    @property
    def public_prefix(self) -> str:
        return self._public_prefix

    def _container(self, container: Container) -> ContainerBackend:
        if container is Container.PUBLIC:
            return self._handle.public
        return self._handle.private

    async def list(self, path: str | None = None) -> list[str]:
        """List files under a path.

        A path whose last segment has an extension is probed as a single
        file and yields ``[path]`` or ``[]``. Anything else is listed as a
        prefix. The root lists the private container, then the public one.

        Args:
            path: Logical path, ``None``/``""``/``"/"`` for the root

        Returns:
            Logical paths, private before public, in provider order

        Raises:
            StorageError: Forbidden or Internal on provider failures
        """
        route = classify(path, self._public_prefix)
        logger.debug(
            "Listing path",
            path=path,
            container=route.container.value,
            looks_like_file=route.looks_like_file,
        )

        with wrap_provider_errors():
            if route.looks_like_file:
                return await self._probe_file(path, route)

            match route.container:
                case Container.BOTH:
                    private = await self._list_prefix(self._handle.private, "")
                    public = await self._list_prefix(self._handle.public, "")
                    return private + [
                        to_public_path(name, self._public_prefix) for name in public
                    ]
                case Container.PUBLIC:
                    names = await self._list_prefix(self._handle.public, route.prefix)
                    return [to_public_path(name, self._public_prefix) for name in names]
                case _:
                    return await self._list_prefix(self._handle.private, route.prefix)

    async def _probe_file(self, path: str | None, route: PathRoute) -> list[str]:
        backend = self._container(route.container)
        try:
            await backend.get_properties(route.prefix, aborter=self._handle.aborter)
        except Exception as error:
            if is_not_found(error):
                logger.debug("File not found", path=path)
                return []
            raise
        return [path]

    async def _list_prefix(self, backend: ContainerBackend, prefix: str) -> list[str]:
        """Follow continuation markers until the last page, one page at a time."""
        names: list[str] = []
        marker: str | None = None
        pages = 0
        while True:
            page = await backend.list_page(
                marker,
                prefix=prefix,
                delimiter=LIST_DELIMITER,
                aborter=self._handle.aborter,
            )
            pages += 1
            names.extend(page.names)
            marker = page.next_marker
            if marker is None:
                break
        logger.debug("Listed prefix", prefix=prefix, pages=pages, count=len(names))
        return names

    def _file_route(self, path: str) -> PathRoute:
        route = None
        if isinstance(path, str) and not is_directory_like(path):
            route = classify(path, self._public_prefix)
        # The bare public segment names a container, not a blob
        if route is None or not route.prefix:
            raise StorageError.bad_argument(
                f'"path" must point to a file, got {path!r}'
            )
        return route

    async def read(self, path: str) -> bytes:
        """Download the content of a file."""
        route = self._file_route(path)
        with wrap_provider_errors():
            return await self._container(route.container).download(
                route.prefix, aborter=self._handle.aborter
            )

    async def write(self, path: str, content: bytes) -> int:
        """Upload ``content`` to a file, replacing it if present.

        Returns:
            Number of bytes written
        """
        route = self._file_route(path)
        if not isinstance(content, (bytes, bytearray)):
            raise StorageError.bad_argument('"content" must be bytes')
        with wrap_provider_errors():
            written = await self._container(route.container).upload(
                route.prefix, bytes(content), aborter=self._handle.aborter
            )
        logger.debug("File written", path=path, size=written)
        return written

    async def delete(self, path: str) -> None:
        """Delete a single file."""
        route = self._file_route(path)
        with wrap_provider_errors():
            await self._container(route.container).delete(
                route.prefix, aborter=self._handle.aborter
            )

    async def close(self) -> None:
        """Close both container connections."""
        await self._handle.close()

    async def __aenter__(self) -> "Storage":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
