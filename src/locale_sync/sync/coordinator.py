"""
Watch-and-reload coordination for the active language.

The coordinator keeps one watch session open on the directory of the active
language. Edits to that directory trigger a debounced reload of the host's
in-memory resources. When the active language changes, the old session is
closed before anything else happens, so its events can no longer cause a
reload.
"""

import asyncio
import inspect
import logging
from enum import Enum
from pathlib import Path
from typing import Protocol

from ..utils.core.exceptions import WatchUnavailableError
from .debounce import DebouncedTask
from .host import TranslationHost
from .watcher import ChangeCallback, WatchSession

logger = logging.getLogger(__name__)

DEFAULT_RELOAD_QUIET_PERIOD = 1.0


class WatchState(Enum):
    """Coordinator states."""

    INACTIVE = "inactive"
    WATCHING = "watching"


class SessionFactory(Protocol):
    def __call__(
        self,
        language: str,
        directory: Path,
        on_change: ChangeCallback,
        loop: asyncio.AbstractEventLoop,
    ) -> WatchSession: ...


class LanguageWatchCoordinator:
    """Owns at most one watch session and reloads the host on changes."""

    def __init__(
        self,
        locales_root: Path,
        host: TranslationHost,
        *,
        quiet_period: float = DEFAULT_RELOAD_QUIET_PERIOD,
        session_factory: SessionFactory = WatchSession,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._locales_root: Path = locales_root
        self._host: TranslationHost = host
        self._session_factory: SessionFactory = session_factory
        self._loop: asyncio.AbstractEventLoop | None = loop
        self._session: WatchSession | None = None
        self._language: str | None = None
        self._reload_task: DebouncedTask = DebouncedTask(
            self._reload, quiet_period, name="resource-reload", loop=loop
        )
        self._reload_count: int = 0
        self._join_tasks: set[asyncio.Task[None]] = set()

    @property
    def state(self) -> WatchState:
        if self._session is not None and self._session.is_open:
            return WatchState.WATCHING
        return WatchState.INACTIVE

    @property
    def language(self) -> str | None:
        return self._language

    @property
    def session(self) -> WatchSession | None:
        return self._session

    @property
    def reload_task(self) -> DebouncedTask:
        return self._reload_task

    @property
    def reload_count(self) -> int:
        """Number of reloads requested from the host."""
        return self._reload_count

    def language_changed(self, code: str) -> None:
        """
        Re-arm the watch for a new active language.

        Closes the current session, then opens a new one if the language has
        a directory. Missing-key capture is enabled only in that case.
        """
        self._close_session()
        self._language = code
        directory = self._locales_root / code

        if not directory.is_dir():
            logger.info(
                f"No locale directory for {code}, missing-key capture and reload disabled"
            )
            self._host.save_missing = False
            return

        self._host.save_missing = True
        session = self._session_factory(
            code, directory, self._on_directory_event, self._get_loop()
        )
        try:
            session.open()
        except WatchUnavailableError as e:
            # Directory vanished between the check and the subscription
            logger.info(f"Watch unavailable for {code}: {e}")
            self._host.save_missing = False
            return
        except OSError as e:
            logger.warning(f"Failed to watch {directory}: {e}")
            return

        self._session = session
        logger.info(f"Watching locale directory {directory}")

    def close(self) -> None:
        """Close the watch session and stop scheduling reloads."""
        self._close_session()
        self._reload_task.close()

    async def aclose(self) -> None:
        """Close and wait for a reload and observer threads still finishing."""
        self.close()
        await self._reload_task.wait_running()
        if self._join_tasks:
            _ = await asyncio.wait(set(self._join_tasks))

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _close_session(self) -> None:
        session, self._session = self._session, None
        if session is not None:
            session.close(wait=False)
            self._join_in_background(session)
        self._reload_task.cancel()

    def _join_in_background(self, session: WatchSession) -> None:
        """Join the stopped observer thread without blocking the event loop."""
        try:
            loop = self._get_loop()
        except RuntimeError:
            session.join()
            return

        task = loop.create_task(
            asyncio.to_thread(session.join), name=f"watch-join-{session.language}"
        )
        self._join_tasks.add(task)
        task.add_done_callback(self._join_tasks.discard)

    def _on_directory_event(self, language: str, path: Path) -> None:
        session = self._session
        if session is None or session.closed or session.language != language:
            logger.debug(f"Ignoring event from stale watch session: {path}")
            return
        logger.debug(f"Locale file changed: {path}")
        self._reload_task.schedule(language)

    async def _reload(self, language: str) -> None:
        if language != self._language:
            logger.debug(f"Skipping reload for inactive language {language}")
            return

        self._reload_count += 1
        try:
            result = self._host.reload_resources([language])
            if inspect.isawaitable(result):
                await result
            logger.info(f"Reloaded translations for {language}")
        except Exception as e:
            logger.warning(f"Failed to reload translations for {language}: {e}")
