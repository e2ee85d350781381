#!/usr/bin/env python3
"""Basic usage example for blob_files.

Lists, writes and reads files with your own Azure account credentials:

    AZURE_STORAGE_ACCOUNT=... AZURE_STORAGE_KEY=... python examples/basic_usage.py
"""

import asyncio
import os

import blob_files
from blob_files import StorageError


async def main() -> None:
    blob_files.setup_logging()

    storage = await blob_files.init(
        {
            "azure": {
                "storage_account": os.environ["AZURE_STORAGE_ACCOUNT"],
                "storage_access_key": os.environ["AZURE_STORAGE_KEY"],
                "container_name": os.environ.get("AZURE_CONTAINER", "blob-files-demo"),
            }
        }
    )

    async with storage:
        await storage.write("notes/hello.txt", b"private hello")
        await storage.write("public/index.html", b"<h1>public hello</h1>")

        print("Everything:", await storage.list("/"))
        print("Private dir:", await storage.list("notes/"))
        print("Single file:", await storage.list("public/index.html"))
        print("Missing file:", await storage.list("notes/missing.txt"))
        print("Content:", await storage.read("notes/hello.txt"))

        try:
            await storage.read("notes/")
        except StorageError as e:
            print(f"Expected error: {e}")


if __name__ == "__main__":
    asyncio.run(main())
