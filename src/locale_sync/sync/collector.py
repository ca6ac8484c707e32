"""
Collection and persistence of missing translation keys.

The host engine reports every key it could not resolve. The collector buffers
those keys per namespace and, once no new key has arrived for a quiet period,
merges them into the namespace files of the active language.
"""

import asyncio
import logging
from pathlib import Path

from ..resources.buffer import PendingKeyBuffer
from ..resources.store import ResourceFileStore
from ..resources.types import FlushReport, FlushStatus, NamespaceFlushOutcome
from ..utils.core.exceptions import (
    InvalidNamespaceError,
    ResourceBusyError,
    ResourceStoreError,
)
from .debounce import DebouncedTask

logger = logging.getLogger(__name__)

DEFAULT_FLUSH_QUIET_PERIOD = 1.0
DEFAULT_MAX_BUSY_RETRIES = 5


class MissingKeyCollector:
    """
    Batch missing keys and merge them into per-namespace resource files.

    Keys are cleared from the buffer once they are persisted. Keys whose write
    failed stay buffered and are retried by a later flush; a busy file
    schedules that flush automatically when `retry_busy_writes` is set, up to
    `max_busy_retries` times in a row.
    """

    def __init__(
        self,
        locales_root: Path,
        language: str,
        *,
        store: ResourceFileStore | None = None,
        quiet_period: float = DEFAULT_FLUSH_QUIET_PERIOD,
        retry_busy_writes: bool = True,
        max_busy_retries: int = DEFAULT_MAX_BUSY_RETRIES,
    ) -> None:
        self._locales_root: Path = locales_root
        self._language: str = language
        self._store: ResourceFileStore = store or ResourceFileStore()
        self._retry_busy_writes: bool = retry_busy_writes
        self._max_busy_retries: int = max_busy_retries
        self._busy_retries: int = 0
        self._buffer: PendingKeyBuffer = PendingKeyBuffer()
        self._flush_task: DebouncedTask = DebouncedTask(
            self._flush, quiet_period, name="missing-key-flush"
        )
        self._last_report: FlushReport | None = None

    @property
    def language(self) -> str:
        return self._language

    @property
    def language_dir(self) -> Path:
        """Directory that the next flush writes into."""
        return self._locales_root / self._language

    @property
    def pending(self) -> PendingKeyBuffer:
        return self._buffer

    @property
    def flush_task(self) -> DebouncedTask:
        return self._flush_task

    @property
    def last_report(self) -> FlushReport | None:
        return self._last_report

    def set_language(self, code: str) -> None:
        """Change the language that subsequent flushes write into."""
        if code != self._language:
            logger.debug(f"Missing keys will now be written for language {code}")
        self._language = code

    def on_missing_key(self, namespace: str, key: str, fallback: str) -> None:
        """Record a missing key and schedule a flush."""
        self._buffer.record(namespace, key, fallback)
        self._busy_retries = 0
        try:
            self._flush_task.schedule()
        except RuntimeError as e:
            # No running event loop; the key stays buffered for the next flush
            logger.warning(f"Could not schedule missing-key flush: {e}")

    def handle_missing_key(
        self, languages: list[str], namespace: str, key: str, fallback: str
    ) -> None:
        """Adapter for the host's missing-key event."""
        logger.debug(f"Missing key {namespace}:{key} for languages {languages}")
        self.on_missing_key(namespace, key, fallback)

    async def flush(self) -> FlushReport:
        """Flush buffered keys now, bypassing the quiet period."""
        self._flush_task.schedule()
        await self._flush_task.flush()
        return self._last_report or FlushReport(language=self._language)

    async def wait_idle(self) -> None:
        """
        Wait until no flush is pending or running.

        While a busy file is being retried this waits for every retry, up to
        `max_busy_retries` quiet periods after the last missing key.
        """
        await self._flush_task.join()

    async def close(self, flush: bool = True) -> None:
        """
        Stop collecting.

        Args:
            flush: Persist outstanding keys before closing
        """
        if flush and len(self._buffer):
            _ = await self.flush()
        self._flush_task.close()
        await self._flush_task.wait_running()

    async def _flush(self) -> FlushReport:
        language = self._language
        language_dir = self.language_dir
        snapshot = self._buffer.snapshot_all()
        report = FlushReport(language=language)

        if not snapshot:
            self._last_report = report
            return report

        logger.debug(
            f"Flushing {sum(len(keys) for keys in snapshot.values())} missing key(s) "
            + f"in {len(snapshot)} namespace(s) for {language}"
        )

        outcomes = await asyncio.gather(
            *(
                self._flush_namespace(language_dir, namespace, keys)
                for namespace, keys in snapshot.items()
            )
        )
        for outcome in outcomes:
            report.outcomes[outcome.namespace] = outcome

        if not report.busy:
            self._busy_retries = 0
        elif self._retry_busy_writes and self._busy_retries < self._max_busy_retries:
            self._busy_retries += 1
            logger.info(
                f"Retrying busy namespaces later ({self._busy_retries}/{self._max_busy_retries}): "
                + ", ".join(report.busy)
            )
            self._flush_task.schedule()
        elif self._retry_busy_writes:
            logger.warning(
                f"Giving up automatic retries for busy namespaces: {', '.join(report.busy)}; "
                + "keys stay buffered until the next flush"
            )

        self._last_report = report
        return report

    async def _flush_namespace(
        self, language_dir: Path, namespace: str, keys: dict[str, str]
    ) -> NamespaceFlushOutcome:
        try:
            result = await asyncio.to_thread(
                self._store.merge, language_dir, namespace, keys
            )
        except ResourceBusyError as e:
            logger.warning(f"Resource busy, keeping missing keys for {namespace}: {e}")
            return NamespaceFlushOutcome(namespace, FlushStatus.BUSY, error=str(e))
        except InvalidNamespaceError as e:
            logger.error(f"Dropping missing keys for invalid namespace: {e}")
            self._buffer.discard(namespace)
            return NamespaceFlushOutcome(namespace, FlushStatus.DROPPED, error=str(e))
        except ResourceStoreError as e:
            logger.warning(f"Failed to insert missing translations: {e}")
            return NamespaceFlushOutcome(namespace, FlushStatus.FAILED, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error flushing namespace {namespace}: {e}")
            return NamespaceFlushOutcome(namespace, FlushStatus.FAILED, error=str(e))

        self._buffer.acknowledge(namespace, keys)
        status = FlushStatus.WRITTEN if result.written else FlushStatus.UNCHANGED
        return NamespaceFlushOutcome(namespace, status, result=result)
