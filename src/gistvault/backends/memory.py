# Backends - In-Memory Backend
#
# Dict-backed RemoteBackend for tests and local experiments.
# Collections are listed in creation order, mirroring a backend that
# returns a stable listing.

import itertools
from typing import Dict, List

from .base import BackendError, RemoteBackend, RemoteCollection, RemoteFile


class InMemoryBackend(RemoteBackend):
    """Stores collections in a dict: id -> {filename: content}."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, str]] = {}
        self._ids = itertools.count(1)
        self.calls: Dict[str, int] = {}

    def _count(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1

    def _snapshot(self, collection_id: str) -> RemoteCollection:
        files = {
            name: RemoteFile(filename=name, raw_url=f"memory://{collection_id}/{name}")
            for name in self._collections[collection_id]
        }
        return RemoteCollection(id=collection_id, files=files)

    def _require(self, collection_id: str) -> Dict[str, str]:
        try:
            return self._collections[collection_id]
        except KeyError:
            raise BackendError(f"Collection {collection_id} not found", status_code=404) from None

    def add_collection(self, files: Dict[str, str]) -> str:
        """Seed a collection synchronously (test setup helper)."""
        collection_id = f"mem{next(self._ids)}"
        self._collections[collection_id] = dict(files)
        return collection_id

    def files(self, collection_id: str) -> Dict[str, str]:
        """Current contents of a collection (copy)."""
        return dict(self._require(collection_id))

    @property
    def collection_ids(self) -> List[str]:
        return list(self._collections)

    # ------------------------------------------------------------------
    # RemoteBackend interface
    # ------------------------------------------------------------------

    async def list_collections(self) -> List[RemoteCollection]:
        self._count("list_collections")
        return [self._snapshot(cid) for cid in self._collections]

    async def get_collection(self, collection_id: str) -> RemoteCollection:
        self._count("get_collection")
        self._require(collection_id)
        return self._snapshot(collection_id)

    async def fetch_file_content(self, file: RemoteFile) -> str:
        self._count("fetch_file_content")
        prefix = "memory://"
        if not file.raw_url.startswith(prefix):
            raise BackendError(f"Unknown file reference {file.raw_url!r}")
        collection_id, _, filename = file.raw_url[len(prefix):].partition("/")
        files = self._require(collection_id)
        try:
            return files[filename]
        except KeyError:
            raise BackendError(f"File {filename} not found", status_code=404) from None

    async def create_collection(self, files: Dict[str, str]) -> RemoteCollection:
        self._count("create_collection")
        collection_id = self.add_collection(files)
        return self._snapshot(collection_id)

    async def update_collection(
        self, collection_id: str, files: Dict[str, str]
    ) -> RemoteCollection:
        self._count("update_collection")
        self._require(collection_id).update(files)
        return self._snapshot(collection_id)

    async def delete_collection(self, collection_id: str) -> bool:
        self._count("delete_collection")
        return self._collections.pop(collection_id, None) is not None
