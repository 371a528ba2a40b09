"""Write-behind persistence - ordered background writes of whole snapshots."""

import logging
from concurrent.futures import Future, ThreadPoolExecutor

from .ports.key_value_store import KeyValueStore, PersistenceError

logger = logging.getLogger(__name__)


class SnapshotWriter:
    """
    Writes serialized snapshots to a KeyValueStore off the caller's path.

    A single worker thread preserves submission order, so the last snapshot
    submitted for a key is the one left in storage. Failures are logged and
    kept in ``last_error``; they never reach the code that submitted the write.
    """

    def __init__(self, kv: KeyValueStore, background: bool = True):
        self.kv = kv
        self.last_error: PersistenceError | None = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="gamepad-writer") if background else None
        self._pending: list[Future] = []

    def submit(self, key: str, value: str) -> Future:
        """Queue a write. The returned future resolves once it is durable (or failed)."""
        if self._executor is None:
            future: Future = Future()
            self._write(key, value)
            future.set_result(None)
            return future

        self._pending = [f for f in self._pending if not f.done()]
        future = self._executor.submit(self._write, key, value)
        self._pending.append(future)
        return future

    def flush(self) -> None:
        """Block until every queued write has finished."""
        pending, self._pending = self._pending, []
        for future in pending:
            future.result()

    def close(self) -> None:
        self.flush()
        if self._executor is not None:
            self._executor.shutdown(wait=True)

    @property
    def degraded(self) -> bool:
        """True when the most recent write failed."""
        return self.last_error is not None

    def _write(self, key: str, value: str) -> None:
        try:
            self.kv.set(key, value)
        except PersistenceError as e:
            logger.error(f"Failed to save {key}: {e}")
            self.last_error = e
        else:
            self.last_error = None
