"""
locale-sync - keep on-disk translation resources in sync with a running application.

Missing translation keys reported by the host engine are merged into
per-namespace JSON files without overwriting existing translations, and
edits to the active language's files trigger a reload of the host's
in-memory resources.
"""

from .config.schema import LocaleSyncConfig
from .main import main
from .resources.catalog import JsonResourceCatalog
from .resources.languages import create_language, get_known_languages
from .resources.store import ResourceFileStore
from .sync.collector import MissingKeyCollector
from .sync.coordinator import LanguageWatchCoordinator, WatchState
from .sync.service import LocaleSync

__all__ = [
    "JsonResourceCatalog",
    "LanguageWatchCoordinator",
    "LocaleSync",
    "LocaleSyncConfig",
    "MissingKeyCollector",
    "ResourceFileStore",
    "WatchState",
    "create_language",
    "get_known_languages",
    "main",
]
