"""
Filesystem watch sessions on a language directory.

A session wraps a watchdog observer scheduled on exactly one directory.
Events are delivered on the observer thread and marshalled onto the asyncio
event loop before reaching the callback. Once a session is closed, no
further events reach the callback, including events already in flight.
"""

import asyncio
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any, override

from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from ..resources.store import RESOURCE_SUFFIX, TEMP_SUFFIX
from ..utils.core.exceptions import WatchUnavailableError

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str, Path], None]
ObserverFactory = Callable[[], Any]

OBSERVER_JOIN_TIMEOUT = 5.0

RELEVANT_EVENT_TYPES = frozenset(
    {
        EVENT_TYPE_CREATED,
        EVENT_TYPE_MODIFIED,
        EVENT_TYPE_DELETED,
        EVENT_TYPE_MOVED,
        EVENT_TYPE_CLOSED,
    }
)


def is_resource_file(path: str | bytes) -> bool:
    """Check whether a path names a namespace resource file."""
    if not path:
        return False
    name = Path(os.fsdecode(path)).name
    return (
        name.endswith(RESOURCE_SUFFIX)
        and not name.startswith(".")
        and not name.endswith(TEMP_SUFFIX)
    )


class LanguageDirectoryHandler(FileSystemEventHandler):
    """File system event handler for a watched language directory."""

    def __init__(self, session: "WatchSession") -> None:
        super().__init__()
        self.session: "WatchSession" = session

    @override
    def on_any_event(self, event: FileSystemEvent) -> None:
        """Forward resource file changes to the session."""
        if event.is_directory or event.event_type not in RELEVANT_EVENT_TYPES:
            return

        dest_path = getattr(event, "dest_path", "")
        for path in (event.src_path, dest_path):
            if is_resource_file(path):
                self.session.notify(Path(os.fsdecode(path)))
                return


class WatchSession:
    """Live subscription to change events of one language directory."""

    def __init__(
        self,
        language: str,
        directory: Path,
        on_change: ChangeCallback,
        loop: asyncio.AbstractEventLoop,
        *,
        observer_factory: ObserverFactory = Observer,
    ) -> None:
        """
        Initialize the watch session.

        Args:
            language: Language code the directory belongs to
            directory: Directory to watch (non-recursive)
            on_change: Called on the event loop with (language, path)
            loop: Event loop that receives the events
            observer_factory: Factory creating the watchdog observer
        """
        self.language: str = language
        self.directory: Path = directory
        self._on_change: ChangeCallback = on_change
        self._loop: asyncio.AbstractEventLoop = loop
        self._observer_factory: ObserverFactory = observer_factory
        self._observer: Any = None
        self._stopped_observer: Any = None
        self.handler: LanguageDirectoryHandler = LanguageDirectoryHandler(self)
        self._closed: bool = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_open(self) -> bool:
        return self._observer is not None and not self._closed

    def open(self) -> None:
        """
        Start watching the directory.

        Raises:
            WatchUnavailableError: If the directory does not exist
            OSError: If the observer cannot be started
        """
        if self._closed:
            raise RuntimeError(f"Watch session for {self.language} is closed")
        if not self.directory.is_dir():
            raise WatchUnavailableError(
                f"No directory for language {self.language}: {self.directory}",
                context=self.directory,
            )

        observer = self._observer_factory()
        _ = observer.schedule(self.handler, str(self.directory), recursive=False)
        observer.start()
        self._observer = observer
        logger.debug(f"Watching {self.directory} for language {self.language}")

    def close(self, wait: bool = True) -> None:
        """
        Stop watching. Events that arrive afterwards are dropped.

        Args:
            wait: Join the observer thread before returning. Without it the
                caller should call `join()` later, off the event loop.
        """
        if self._closed:
            return
        self._closed = True

        observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            self._stopped_observer = observer
        logger.debug(f"Stopped watching {self.directory}")
        if wait:
            self.join()

    def join(self, timeout: float = OBSERVER_JOIN_TIMEOUT) -> None:
        """Wait for the stopped observer thread to exit."""
        observer, self._stopped_observer = self._stopped_observer, None
        if observer is not None:
            observer.join(timeout=timeout)

    def notify(self, path: Path) -> None:
        """Deliver a change event from the observer thread to the event loop."""
        if self._closed:
            return
        try:
            _ = self._loop.call_soon_threadsafe(self._deliver, path)
        except RuntimeError:
            # Event loop already closed
            logger.debug(f"Dropping change event for {path}, event loop closed")

    def _deliver(self, path: Path) -> None:
        if self._closed:
            return
        self._on_change(self.language, path)
