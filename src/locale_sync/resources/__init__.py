"""
On-disk resource files and the pending-key buffer.

Resource files live at `<locales_root>/<language>/<namespace>.json`.
"""

from .buffer import PendingKeyBuffer
from .languages import create_language, get_known_languages
from .store import ResourceFileStore
from .types import FlushReport, FlushStatus, MergeResult, NamespaceFlushOutcome

__all__ = [
    "FlushReport",
    "FlushStatus",
    "MergeResult",
    "NamespaceFlushOutcome",
    "PendingKeyBuffer",
    "ResourceFileStore",
    "create_language",
    "get_known_languages",
]
