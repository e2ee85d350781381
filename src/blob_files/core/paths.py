"""Routing of logical paths onto the private and public containers."""

from dataclasses import dataclass
from enum import Enum

from blob_files.config import DEFAULT_PUBLIC_PREFIX


class Container(str, Enum):
    """Which container(s) a logical path lives in."""

    PRIVATE = "private"
    PUBLIC = "public"
    BOTH = "both"


@dataclass(frozen=True)
class PathRoute:
    """Result of classifying a logical path.

    ``prefix`` is the blob name (or name prefix) to query in the target
    container, with the public prefix already stripped for public paths.
    """

    container: Container
    prefix: str
    looks_like_file: bool


def normalize_path(path: str | None) -> str:
    """Drop leading slashes; ``None`` becomes the empty (root) path."""
    if path is None:
        return ""
    return path.lstrip("/")


def is_root(path: str | None) -> bool:
    return normalize_path(path) == ""


def is_directory_like(path: str | None) -> bool:
    normalized = normalize_path(path)
    return normalized == "" or normalized.endswith("/")


def classify(path: str | None, public_prefix: str = DEFAULT_PUBLIC_PREFIX) -> PathRoute:
    """Decide which container a path targets and how it should be listed.

    Args:
        path: Logical path; ``None``, ``""`` and ``"/"`` all mean the root
        public_prefix: Leading segment reserved for the public container,
            with a trailing slash

    Returns:
        PathRoute for the path
    """
    normalized = normalize_path(path)
    if not normalized:
        return PathRoute(container=Container.BOTH, prefix="", looks_like_file=False)

    # Extension heuristic, only used to pick probe vs. listing
    basename = normalized.rsplit("/", 1)[-1]
    looks_like_file = "." in basename

    if normalized == public_prefix.rstrip("/"):
        return PathRoute(container=Container.PUBLIC, prefix="", looks_like_file=False)
    if normalized.startswith(public_prefix):
        return PathRoute(
            container=Container.PUBLIC,
            prefix=normalized[len(public_prefix) :],
            looks_like_file=looks_like_file,
        )
    return PathRoute(
        container=Container.PRIVATE,
        prefix=normalized,
        looks_like_file=looks_like_file,
    )


def to_public_path(blob_name: str, public_prefix: str = DEFAULT_PUBLIC_PREFIX) -> str:
    """Turn a blob name from the public container into a logical path."""
    return public_prefix + blob_name
