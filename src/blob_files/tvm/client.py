"""Client for the token vending machine (TVM).

The TVM exchanges an OpenWhisk namespace and auth key for short-lived
SAS URLs on the namespace's private and public containers.
"""

import base64
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os
import httpx

from blob_files.credentials import OpenWhiskCredentials
from blob_files.errors import StorageError, StorageErrorCode, wrap_provider_errors
from blob_files.observability.logging import get_logger

logger = get_logger(__name__)

AZURE_BLOB_ENDPOINT = "azure/blob"
REQUIRED_AZURE_KEYS = ("sasURLPrivate", "sasURLPublic")
# Cached credentials closer than this to expiry are refreshed
EXPIRATION_MARGIN = timedelta(seconds=60)


def _parse_expiration(value: Any) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class TvmClient:
    """Fetches and optionally caches storage credentials from the TVM."""

    def __init__(
        self,
        ow: OpenWhiskCredentials,
        api_url: str,
        *,
        cache_file: Path | str | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self._ow = ow
        self._api_url = api_url.rstrip("/")
        self._cache_file = Path(cache_file) if cache_file else None
        self._http_client = http_client
        self._timeout = timeout

    @property
    def api_url(self) -> str:
        return self._api_url

    @property
    def _cache_key(self) -> str:
        return f"{self._ow.namespace}-{self._api_url}"

    def _auth_header(self) -> str:
        token = base64.b64encode(self._ow.auth.encode()).decode()
        return f"Basic {token}"

    async def get_azure_blob_credentials(self) -> dict[str, Any]:
        """Return SAS credentials, from the cache when still valid.

        Raises:
            StorageError: Forbidden if the TVM rejects the auth key, Internal
                on any other failure
        """
        cached = await self._read_cache()
        if cached is not None:
            logger.debug("Using cached TVM credentials", namespace=self._ow.namespace)
            return cached

        credentials = await self._fetch(AZURE_BLOB_ENDPOINT)
        missing = [key for key in REQUIRED_AZURE_KEYS if not credentials.get(key)]
        if missing:
            raise StorageError(
                f"TVM response is missing {', '.join(missing)}",
                StorageErrorCode.INTERNAL,
            )
        await self._write_cache(credentials)
        return credentials

    async def _fetch(self, endpoint: str) -> dict[str, Any]:
        url = f"{self._api_url}/{self._ow.namespace}/{endpoint}"
        headers = {"Authorization": self._auth_header()}
        logger.info("Requesting credentials from TVM", namespace=self._ow.namespace)

        with wrap_provider_errors():
            if self._http_client is not None:
                response = await self._http_client.get(url, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, headers=headers)
            response.raise_for_status()
            body = response.json()

        if not isinstance(body, dict):
            raise StorageError(
                "TVM returned an unexpected response body", StorageErrorCode.INTERNAL
            )
        return body

    async def _read_cache(self) -> dict[str, Any] | None:
        if self._cache_file is None or not self._cache_file.exists():
            return None
        try:
            async with aiofiles.open(self._cache_file) as f:
                content = json.loads(await f.read())
        except (OSError, ValueError) as error:
            logger.warning("Ignoring unreadable TVM cache", error=str(error))
            return None

        entry = content.get(self._cache_key) if isinstance(content, dict) else None
        if not isinstance(entry, dict):
            return None
        expiration = _parse_expiration(entry.get("expiration"))
        if expiration is None:
            return None
        if expiration - EXPIRATION_MARGIN <= datetime.now(timezone.utc):
            return None
        return entry

    async def _write_cache(self, credentials: dict[str, Any]) -> None:
        if self._cache_file is None:
            return
        content: dict[str, Any] = {}
        if self._cache_file.exists():
            try:
                async with aiofiles.open(self._cache_file) as f:
                    loaded = json.loads(await f.read())
                if isinstance(loaded, dict):
                    content = loaded
            except (OSError, ValueError):
                content = {}
        content[self._cache_key] = credentials

        try:
            await aiofiles.os.makedirs(self._cache_file.parent, exist_ok=True)
            async with aiofiles.open(self._cache_file, "w") as f:
                await f.write(json.dumps(content))
        except OSError as error:
            logger.warning("Could not write TVM cache", error=str(error))
