"""Token vending machine client."""

from blob_files.tvm.client import TvmClient

__all__ = ["TvmClient"]
