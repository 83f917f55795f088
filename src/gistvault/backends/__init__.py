# Backends - Remote Collection Storage
#
# The vault only talks to storage through RemoteBackend. GistBackend is
# the production implementation; InMemoryBackend backs tests and dry runs.

from .base import (
    BackendAuthError,
    BackendError,
    RemoteBackend,
    RemoteCollection,
    RemoteFile,
)
from .gist import GistBackend
from .hooks import LoggingHooks, ProgressTracker, TransportHooks
from .memory import InMemoryBackend

__all__ = [
    "BackendAuthError",
    "BackendError",
    "RemoteBackend",
    "RemoteCollection",
    "RemoteFile",
    "GistBackend",
    "InMemoryBackend",
    "LoggingHooks",
    "ProgressTracker",
    "TransportHooks",
]
