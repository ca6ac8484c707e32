"""
Global test configuration fixtures for locale-sync tests.

Provides a temporary locales tree, configurations with short quiet periods
and host doubles shared across the unit and integration tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from locale_sync.config.schema import (
    LocaleSyncConfig,
    StorageConfig,
    SyncConfig,
)
from tests.utils.test_helpers import FakeHost, FakeObserver, write_resource

# Short quiet period keeping timing-based tests fast
QUIET_PERIOD = 0.05


@pytest.fixture
def locales_root(tmp_path: Path) -> Path:
    """
    Create a locales root with an English language directory.

    Returns:
        Path: Root directory containing `en/common.json`
    """
    root = tmp_path / "locales"
    _ = write_resource(root, "en", "common", {})
    return root


@pytest.fixture
def fast_config(locales_root: Path) -> LocaleSyncConfig:
    """
    Create a configuration with short quiet periods for timing tests.

    Returns:
        LocaleSyncConfig: Configuration pointing at the temporary locales root
    """
    return LocaleSyncConfig(
        storage=StorageConfig(locales_root=locales_root),
        sync=SyncConfig(
            flush_quiet_period=QUIET_PERIOD,
            reload_quiet_period=QUIET_PERIOD,
        ),
    )


@pytest.fixture
def host() -> FakeHost:
    """Create an in-memory host with English as the active language."""
    return FakeHost("en")


@pytest.fixture(autouse=True)
def reset_fake_observers() -> None:
    """Forget observers created by previous tests."""
    FakeObserver.instances.clear()
