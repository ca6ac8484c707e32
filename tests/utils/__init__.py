"""
Test utilities package for locale-sync tests.

## Available Modules

### test_helpers.py
Filesystem and host doubles:
- `write_resource()` / `read_resource()`: Namespace JSON files in a locales tree
- `FakeHost`: In-memory `TranslationHost` recording reload requests
- `FakeObserver`: Stand-in for a watchdog observer that never starts a thread
- `RecordingStore`: `ResourceFileStore` that records merges and can inject errors
- `fake_session_factory()`: `WatchSession` factory wired to `FakeObserver`

### async_helpers.py
Async testing utilities:
- `wait_for_condition()`: Wait for conditions to become true with timeout
"""

from .async_helpers import wait_for_condition
from .test_helpers import (
    FakeHost,
    FailingObserver,
    FakeObserver,
    RecordingStore,
    fake_session_factory,
    read_resource,
    write_resource,
)

__all__ = [
    "FakeHost",
    "FailingObserver",
    "FakeObserver",
    "RecordingStore",
    "fake_session_factory",
    "read_resource",
    "wait_for_condition",
    "write_resource",
]
