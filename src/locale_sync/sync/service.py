"""
Wiring of missing-key collection and watch-and-reload onto a host engine.

`LocaleSync` is the explicit context constructed at startup. It subscribes to
the host's events, keeps the collector and the coordinator in agreement on the
active language, and tears both down on `close()`.
"""

import logging
from pathlib import Path
from types import TracebackType

from ..config.schema import LocaleSyncConfig
from ..resources.store import ResourceFileStore
from .collector import MissingKeyCollector
from .coordinator import LanguageWatchCoordinator, SessionFactory
from .host import Subscription, TranslationHost
from .watcher import WatchSession

logger = logging.getLogger(__name__)


class LocaleSync:
    """
    Keep the locale directory and the host's in-memory resources in sync.

    Example:
        >>> async with LocaleSync(catalog, config) as sync:
        ...     catalog.translate("greeting", default="Hello")
    """

    def __init__(
        self,
        host: TranslationHost,
        config: LocaleSyncConfig,
        *,
        store: ResourceFileStore | None = None,
        session_factory: SessionFactory = WatchSession,
    ) -> None:
        self.host: TranslationHost = host
        self.config: LocaleSyncConfig = config
        locales_root: Path = config.storage.locales_root

        self.collector: MissingKeyCollector = MissingKeyCollector(
            locales_root,
            host.language,
            store=store or ResourceFileStore(indent=config.storage.indent),
            quiet_period=config.sync.flush_quiet_period,
            retry_busy_writes=config.sync.retry_busy_writes,
            max_busy_retries=config.sync.max_busy_retries,
        )
        self.coordinator: LanguageWatchCoordinator = LanguageWatchCoordinator(
            locales_root,
            host,
            quiet_period=config.sync.reload_quiet_period,
            session_factory=session_factory,
        )
        self._subscriptions: list[Subscription] = []
        self._started: bool = False
        self._initial_save_missing: bool = host.save_missing

    @property
    def started(self) -> bool:
        return self._started

    @property
    def language(self) -> str:
        return self.collector.language

    async def start(self) -> None:
        """Subscribe to host events and arm the watch for the host's language."""
        if self._started:
            return
        self._started = True
        self._initial_save_missing = self.host.save_missing

        self._subscriptions.append(
            self.host.subscribe_missing_key(self._on_missing_key)
        )
        self._subscriptions.append(
            self.host.subscribe_language_changed(self.on_language_changed)
        )
        self.on_language_changed(self.host.language)
        logger.info(f"Locale sync started for {self.config.storage.locales_root}")

    def on_language_changed(self, code: str) -> None:
        """Update both components to a new active language."""
        try:
            self.collector.set_language(code)
            self.coordinator.language_changed(code)
        except Exception as e:
            logger.exception(f"Failed to switch locale sync to {code}: {e}")

    async def close(self, flush: bool = True) -> None:
        """
        Revoke subscriptions, close the watch session and stop pending tasks.

        Args:
            flush: Persist buffered missing keys before stopping
        """
        if not self._started:
            return
        self._started = False

        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()

        await self.coordinator.aclose()
        self.host.save_missing = self._initial_save_missing
        await self.collector.close(flush=flush)
        logger.info("Locale sync stopped")

    async def __aenter__(self) -> "LocaleSync":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _on_missing_key(
        self, languages: list[str], namespace: str, key: str, fallback: str
    ) -> None:
        try:
            self.collector.handle_missing_key(languages, namespace, key, fallback)
        except Exception as e:
            logger.exception(f"Failed to record missing key {namespace}:{key}: {e}")
