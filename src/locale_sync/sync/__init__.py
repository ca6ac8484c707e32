"""
Sync package for locale-sync.

This package contains the debounced missing-key collector, the watch-and-reload
coordinator and the service wiring both onto a host translation engine.
"""

from .collector import MissingKeyCollector
from .coordinator import LanguageWatchCoordinator, WatchState
from .debounce import DebouncedTask
from .host import Subscription, TranslationHost
from .service import LocaleSync
from .watcher import LanguageDirectoryHandler, WatchSession

__all__ = [
    "DebouncedTask",
    "LanguageDirectoryHandler",
    "LanguageWatchCoordinator",
    "LocaleSync",
    "MissingKeyCollector",
    "Subscription",
    "TranslationHost",
    "WatchSession",
    "WatchState",
]
