"""Entry point: build a storage instance from caller credentials."""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from blob_files.azure.storage import AzureStorage
from blob_files.config import FilesOptions, FilesSettings
from blob_files.core.backend import Aborter
from blob_files.core.storage import Storage
from blob_files.credentials import merge_openwhisk_env, parse_init_credentials
from blob_files.errors import StorageError
from blob_files.observability.logging import configure_logging
from blob_files.tvm.client import TvmClient

# Only one provider for now
PROVIDER = "azure"


async def init(
    credentials: Mapping[str, Any] | None = None,
    options: FilesOptions | Mapping[str, Any] | None = None,
    *,
    settings: FilesSettings | None = None,
) -> Storage:
    """Initialize and return a storage instance.

    Either ``credentials["ow"]`` (OpenWhisk ``namespace`` and ``auth``,
    exchanged for temporary credentials at the token vending machine) or
    ``credentials["azure"]`` (your own account or SAS credentials) must be
    given. OpenWhisk credentials may also come from the ``__OW_NAMESPACE``
    / ``OW_NAMESPACE`` and ``__OW_AUTH`` / ``OW_AUTH`` environment variables.

    Args:
        credentials: Mapping with exactly one of ``ow`` or ``azure``
        options: :class:`FilesOptions` or a mapping of its fields
        settings: Environment settings; read from the environment if omitted

    Returns:
        Storage instance

    Raises:
        StorageError: BadArgument for invalid input, Forbidden or Internal
            for provider failures
    """
    settings = settings or FilesSettings()
    if isinstance(options, FilesOptions):
        files_options = options
    else:
        try:
            files_options = FilesOptions.model_validate(dict(options or {}))
        except ValidationError as error:
            raise StorageError.bad_argument(f'"options" are invalid: {error}') from error

    request = parse_init_credentials(merge_openwhisk_env(credentials, settings))
    aborter = Aborter(timeout=files_options.timeout)

    match PROVIDER:
        case "azure":
            if request.ow is not None:
                tvm = TvmClient(
                    request.ow,
                    api_url=files_options.tvm_api_url or settings.tvm_api_url,
                    cache_file=files_options.tvm_cache_file or settings.tvm_cache_file,
                )
                azure_credentials = await tvm.get_azure_blob_credentials()
            else:
                azure_credentials = request.azure
            return await AzureStorage.init(
                azure_credentials,
                public_prefix=settings.public_prefix,
                aborter=aborter,
            )
        case _:
            raise StorageError.bad_argument(f"provider '{PROVIDER}' is not supported.")


def setup_logging(settings: FilesSettings | None = None) -> None:
    """Configure structured logging from settings."""
    settings = settings or FilesSettings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)
