# Backends - Transport Hooks
#
# Hooks wrap every HTTP request a backend makes, so callers can observe
# traffic (progress bars, request logging) without patching the HTTP
# client. GistBackend awaits on_request() before sending and
# on_response() after the exchange finishes, even when it fails.

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TransportHooks:
    """No-op base class. Override either coroutine."""

    async def on_request(self, method: str, url: str) -> None:
        pass

    async def on_response(self, method: str, url: str, status_code: Optional[int]) -> None:
        """``status_code`` is None when the request never got a response."""
        pass


class LoggingHooks(TransportHooks):
    """Logs every request at DEBUG level."""

    async def on_request(self, method: str, url: str) -> None:
        logger.debug("-> %s %s", method, url)

    async def on_response(self, method: str, url: str, status_code: Optional[int]) -> None:
        logger.debug("<- %s %s (%s)", method, url, status_code if status_code is not None else "no response")


class ProgressTracker(TransportHooks):
    """Tracks the fraction of in-flight requests that have finished.

    ``value`` is 1.0 when nothing is pending. Once every started request
    has finished the counters reset, so the next batch starts from 0.

    Args:
        callback: Called with the new value after every change.
    """

    def __init__(self, callback: Optional[Callable[[float], None]] = None):
        self.callback = callback
        self.started = 0
        self.finished = 0

    @property
    def value(self) -> float:
        return self.finished / self.started if self.started > 0 else 1.0

    @property
    def complete(self) -> bool:
        return self.value >= 1.0

    def _notify(self) -> None:
        if self.callback is not None:
            self.callback(self.value)

    async def on_request(self, method: str, url: str) -> None:
        self.started += 1
        self._notify()

    async def on_response(self, method: str, url: str, status_code: Optional[int]) -> None:
        self.finished += 1
        self._notify()
        if self.finished >= self.started:
            self.started = 0
            self.finished = 0
