"""Observability infrastructure for blob_files."""

from blob_files.observability.logging import configure_logging, get_logger, reset_logging

__all__ = ["configure_logging", "get_logger", "reset_logging"]
