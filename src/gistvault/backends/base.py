# Backends - Abstract Remote Collection Store
#
# Defines the RemoteBackend abstract base class that every storage
# service the vault can live on must implement. A backend stores
# "collections": groups of named UTF-8 text files addressable by an
# opaque id (a GitHub gist is one collection). No fetching is performed
# here; this is the contract only.

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..exceptions import BackendAuthError, BackendError

__all__ = [
    "BackendAuthError",
    "BackendError",
    "RemoteBackend",
    "RemoteCollection",
    "RemoteFile",
]


@dataclass
class RemoteFile:
    """A file inside a remote collection.

    ``raw_url`` is the backend's reference for fetching the content.
    Some backends inline small files; ``content`` is set in that case.
    """
    filename: str
    raw_url: str = ""
    content: Optional[str] = None


@dataclass
class RemoteCollection:
    """A remote collection and the files it currently holds."""
    id: str
    files: Dict[str, RemoteFile] = field(default_factory=dict)
    description: str = ""

    def has_file(self, filename: str) -> bool:
        return filename in self.files


class RemoteBackend(ABC):
    """Abstract base class for remote collection backends.

    All methods are coroutines; every implementation raises
    ``BackendError`` (or ``BackendAuthError``) on failure and never
    retries on its own.

    Lifecycle:
        1. ``list_collections()`` / ``get_collection()`` -- discover files
        2. ``fetch_file_content()`` -- read one file
        3. ``create_collection()`` / ``update_collection()`` -- write files
        4. ``aclose()`` -- release connections
    """

    # ------------------------------------------------------------------
    # Abstract interface
    # ------------------------------------------------------------------

    @abstractmethod
    async def list_collections(self) -> List[RemoteCollection]:
        """Return every collection visible to the account, in backend order."""

    @abstractmethod
    async def get_collection(self, collection_id: str) -> RemoteCollection:
        """Return one collection with its current file listing."""

    @abstractmethod
    async def fetch_file_content(self, file: RemoteFile) -> str:
        """Return the text content of a file listed in a collection."""

    @abstractmethod
    async def create_collection(self, files: Dict[str, str]) -> RemoteCollection:
        """Create a collection holding ``files`` (filename -> content)."""

    @abstractmethod
    async def update_collection(
        self, collection_id: str, files: Dict[str, str]
    ) -> RemoteCollection:
        """Create or replace ``files`` in an existing collection."""

    @abstractmethod
    async def delete_collection(self, collection_id: str) -> bool:
        """Delete a collection. Returns True if it was removed."""

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    async def read_file(self, collection: RemoteCollection, filename: str) -> Optional[str]:
        """Content of ``filename`` in ``collection``, or None if absent."""
        remote_file = collection.files.get(filename)
        if remote_file is None:
            return None
        if remote_file.content is not None:
            return remote_file.content
        return await self.fetch_file_content(remote_file)

    async def aclose(self) -> None:
        """Release any held connections. No-op by default."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
