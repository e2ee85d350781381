"""Credential models and boundary validation.

Callers hand over loosely shaped mappings. They are checked here, once,
and turned into typed models; nothing past this module looks at raw keys.
"""

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from blob_files.config import FilesSettings
from blob_files.errors import StorageError


class OpenWhiskCredentials(BaseModel):
    """OpenWhisk identity exchanged for storage credentials at the TVM."""

    model_config = ConfigDict(frozen=True)

    namespace: str = Field(min_length=1)
    auth: str = Field(min_length=1, repr=False)


class AccountCredentials(BaseModel):
    """Long-lived storage account credentials."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    storage_account: str = Field(alias="storageAccount", min_length=1)
    storage_access_key: str = Field(alias="storageAccessKey", min_length=1, repr=False)
    container_name: str = Field(alias="containerName", min_length=1)


class SasCredentials(BaseModel):
    """Pre-signed container URLs, as issued by the TVM."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    sas_url_private: str = Field(alias="sasURLPrivate", repr=False)
    sas_url_public: str = Field(alias="sasURLPublic", repr=False)

    @field_validator("sas_url_private", "sas_url_public")
    @classmethod
    def _must_be_uri(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("must be a valid uri")
        return value


AzureCredentials = AccountCredentials | SasCredentials

ACCOUNT_FIELDS = ("storage_account", "storage_access_key", "container_name")
SAS_FIELDS = ("sas_url_private", "sas_url_public")


class InitCredentials(BaseModel):
    """Validated top-level credentials: exactly one of ``ow`` or ``azure``."""

    model_config = ConfigDict(frozen=True)

    ow: OpenWhiskCredentials | None = None
    azure: AzureCredentials | None = None


def _given_key(model: type[BaseModel], raw: Mapping[str, Any], name: str) -> str | None:
    """Return the key the caller used for a field, by name or alias."""
    alias = model.model_fields[name].alias
    for key in (name, alias):
        if key and raw.get(key) is not None:
            return key
    return None


def _spelling(model: type[BaseModel], name: str, camel_case: bool) -> str:
    return (model.model_fields[name].alias or name) if camel_case else name


def _bad_argument_from_validation(label: str, error: ValidationError) -> StorageError:
    details = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        problem = "is required" if item["type"] == "missing" else item["msg"]
        details.append(f'"{label}.{location}" {problem}' if location else problem)
    return StorageError.bad_argument("; ".join(details))


def parse_azure_credentials(
    raw: Mapping[str, Any] | AzureCredentials | None,
    label: str = "credentials",
) -> AzureCredentials:
    """Validate Azure credentials and return the matching model.

    Either all of ``storage_account``, ``storage_access_key`` and
    ``container_name`` or both ``sas_url_private`` and ``sas_url_public``
    must be given, never fields from both groups.

    Raises:
        StorageError: BadArgument naming the offending fields
    """
    if isinstance(raw, (AccountCredentials, SasCredentials)):
        return raw
    if not isinstance(raw, Mapping):
        raise StorageError.bad_argument(f'"{label}" is required')

    account_keys = {
        name: _given_key(AccountCredentials, raw, name) for name in ACCOUNT_FIELDS
    }
    sas_keys = {name: _given_key(SasCredentials, raw, name) for name in SAS_FIELDS}
    account_given = [key for key in account_keys.values() if key is not None]
    sas_given = [key for key in sas_keys.values() if key is not None]

    if account_given and sas_given:
        raise StorageError.bad_argument(
            f'"{label}" contains a conflict between exclusive peers '
            f"[{', '.join(sas_given)}] and [{', '.join(account_given)}]"
        )
    if not account_given and not sas_given:
        raise StorageError.bad_argument(
            f'"{label}" must contain either [{", ".join(SAS_FIELDS)}] or '
            f'[{", ".join(ACCOUNT_FIELDS)}], all fields of one group are required'
        )

    model: type[BaseModel]
    if account_given:
        model, keys, given = AccountCredentials, account_keys, account_given
    else:
        model, keys, given = SasCredentials, sas_keys, sas_given

    # Report missing fields in the same spelling the caller used
    camel_case = any(key != name for name, key in keys.items() if key is not None)
    missing = [
        _spelling(model, name, camel_case) for name, key in keys.items() if key is None
    ]
    if missing:
        raise StorageError.bad_argument(
            f'"{label}" is missing required peers [{", ".join(missing)}] '
            f"of [{', '.join(given)}]"
        )

    try:
        return model.model_validate(dict(raw))
    except ValidationError as error:
        raise _bad_argument_from_validation(label, error) from error


def merge_openwhisk_env(
    credentials: Mapping[str, Any] | None, settings: FilesSettings
) -> Mapping[str, Any] | None:
    """Fill missing ``ow`` fields from the OpenWhisk runtime settings.

    Explicit values win over the environment. The input mapping is not
    modified.
    """
    if not (settings.ow_namespace or settings.ow_auth):
        return credentials

    merged: dict[str, Any] = dict(credentials) if isinstance(credentials, Mapping) else {}
    ow = merged.get("ow")
    ow = dict(ow) if isinstance(ow, Mapping) else {}
    ow["namespace"] = ow.get("namespace") or settings.ow_namespace
    ow["auth"] = ow.get("auth") or settings.ow_auth
    merged["ow"] = ow
    return merged


def parse_init_credentials(credentials: Mapping[str, Any] | None) -> InitCredentials:
    """Validate the credentials passed to :func:`blob_files.init`.

    Raises:
        StorageError: BadArgument if ``ow`` and ``azure`` are both or neither
            given, or if either of them is malformed
    """
    if not isinstance(credentials, Mapping):
        raise StorageError.bad_argument('"credentials" is required')

    has_ow = credentials.get("ow") is not None
    has_azure = credentials.get("azure") is not None
    if has_ow and has_azure:
        raise StorageError.bad_argument(
            '"credentials" contains a conflict between exclusive peers [ow, azure]'
        )
    if not has_ow and not has_azure:
        raise StorageError.bad_argument(
            '"credentials" must contain at least one of [ow, azure], one is required'
        )

    if has_azure:
        azure = parse_azure_credentials(credentials["azure"], label="credentials.azure")
        return InitCredentials(azure=azure)

    raw_ow = credentials["ow"]
    if isinstance(raw_ow, OpenWhiskCredentials):
        return InitCredentials(ow=raw_ow)
    if not isinstance(raw_ow, Mapping):
        raise StorageError.bad_argument('"credentials.ow" must be an object')
    try:
        ow = OpenWhiskCredentials.model_validate(dict(raw_ow))
    except ValidationError as error:
        raise _bad_argument_from_validation("credentials.ow", error) from error
    return InitCredentials(ow=ow)
