"""Configuration settings for blob_files.

Settings are read from the environment once, when :func:`blob_files.init`
builds a storage instance, and passed down as plain values.
"""

from pathlib import Path

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TVM_API_URL = (
    "https://adobeioruntime.net/api/v1/web/mraho/"
    "adobeio-cna-token-vending-machine-0.1.0"
)

DEFAULT_PUBLIC_PREFIX = "public/"


def normalize_public_prefix(value: str) -> str:
    """Strip slashes around the prefix and append exactly one trailing slash."""
    stripped = value.strip().strip("/")
    if not stripped:
        raise ValueError("public prefix must not be empty")
    return stripped + "/"


class FilesSettings(BaseSettings):
    """Environment-based settings."""

    model_config = SettingsConfigDict(
        env_prefix="BLOB_FILES_",
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # OpenWhisk identity, set by the runtime inside actions
    ow_namespace: str | None = Field(
        default=None,
        validation_alias=AliasChoices("__OW_NAMESPACE", "OW_NAMESPACE"),
    )
    ow_auth: str | None = Field(
        default=None,
        validation_alias=AliasChoices("__OW_AUTH", "OW_AUTH"),
    )

    tvm_api_url: str = Field(
        default=DEFAULT_TVM_API_URL,
        description="Token vending machine endpoint",
    )
    tvm_cache_file: Path | None = Field(
        default=None,
        description="File used to cache credentials returned by the TVM",
    )
    public_prefix: str = Field(
        default=DEFAULT_PUBLIC_PREFIX,
        description="Leading path segment routed to the public container",
    )

    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)

    @field_validator("public_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        return normalize_public_prefix(value)


class FilesOptions(BaseModel):
    """Options accepted by :func:`blob_files.init`."""

    tvm_api_url: str | None = Field(
        default=None,
        description="Alternative TVM endpoint, only used with ow credentials",
    )
    tvm_cache_file: Path | None = Field(
        default=None,
        description="Alternative TVM cache file, only used with ow credentials",
    )
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Server-side timeout in seconds applied to every backend call",
    )
