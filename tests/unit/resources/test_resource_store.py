"""
Tests for the namespace resource file store.

This module tests additive merging, idempotence, atomic writes and the
failure taxonomy (busy, malformed, I/O, invalid namespace).
"""

from __future__ import annotations

import errno
import os
import stat
import sys
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from locale_sync.resources.store import (
    NEW_FILE_MODE,
    ResourceFileStore,
    is_busy_error,
    validate_namespace,
)
from locale_sync.utils.core.exceptions import (
    InvalidNamespaceError,
    MalformedResourceError,
    ResourceBusyError,
    ResourceIOError,
)
from tests.utils.test_helpers import read_resource, write_resource


class TestMerge:
    """Test additive merging into namespace files."""

    def test_merge_into_empty_object(self, locales_root: Path) -> None:
        """Test that pending keys are added to an empty file."""
        _ = write_resource(locales_root, "en", "ns1", {})
        store = ResourceFileStore()

        result = store.merge(locales_root / "en", "ns1", {"k1": "v1", "k2": "v2"})

        assert result.written
        assert result.added == ("k1", "k2")
        assert not result.created
        assert read_resource(locales_root, "en", "ns1") == {"k1": "v1", "k2": "v2"}

    def test_merge_never_overwrites_existing_key(self, locales_root: Path) -> None:
        """Test that human-authored values win over pending fallbacks."""
        _ = write_resource(locales_root, "en", "ns1", {"k1": "existing"})
        store = ResourceFileStore()

        result = store.merge(locales_root / "en", "ns1", {"k1": "v1", "k2": "v2"})

        assert result.added == ("k2",)
        assert read_resource(locales_root, "en", "ns1") == {"k1": "existing", "k2": "v2"}

    def test_merge_preserves_non_string_values(self, locales_root: Path) -> None:
        """Test that nested or non-string values already in the file survive."""
        original = {"plural": {"one": "item", "other": "items"}, "count": 3}
        _ = write_resource(locales_root, "en", "ns1", original)
        store = ResourceFileStore()

        _ = store.merge(locales_root / "en", "ns1", {"plural": "x", "new": "n"})

        assert read_resource(locales_root, "en", "ns1") == {**original, "new": "n"}

    def test_merge_creates_missing_file(self, locales_root: Path) -> None:
        """Test that an absent file is treated as empty and created."""
        store = ResourceFileStore()

        result = store.merge(locales_root / "en", "fresh", {"hello": "Hello"})

        assert result.created
        assert result.changed
        assert read_resource(locales_root, "en", "fresh") == {"hello": "Hello"}

    def test_merge_with_no_keys_does_not_create_file(self, locales_root: Path) -> None:
        """Test that an empty pending set leaves the directory untouched."""
        store = ResourceFileStore()

        result = store.merge(locales_root / "en", "fresh", {})

        assert not result.written
        assert not (locales_root / "en" / "fresh.json").exists()

    def test_second_merge_is_noop(self, locales_root: Path) -> None:
        """Test that merging the same keys twice leaves the file unchanged."""
        _ = write_resource(locales_root, "en", "ns1", {"a": "1"})
        store = ResourceFileStore()
        pending = {"b": "2", "c": "3"}

        first = store.merge(locales_root / "en", "ns1", pending)
        content_after_first = (locales_root / "en" / "ns1.json").read_bytes()
        second = store.merge(locales_root / "en", "ns1", pending)

        assert first.written
        assert not second.written
        assert second.added == ()
        assert (locales_root / "en" / "ns1.json").read_bytes() == content_after_first

    def test_written_file_is_indented_utf8(self, locales_root: Path) -> None:
        """Test human-readable formatting with non-ASCII characters kept."""
        store = ResourceFileStore(indent=4)

        _ = store.merge(locales_root / "en", "ns1", {"greeting": "Grüß dich"})

        text = (locales_root / "en" / "ns1.json").read_text(encoding="utf-8")
        assert text == json.dumps({"greeting": "Grüß dich"}, indent=4, ensure_ascii=False)

    def test_no_temporary_files_left_behind(self, locales_root: Path) -> None:
        """Test that the atomic write cleans up its temporary file."""
        store = ResourceFileStore()

        _ = store.merge(locales_root / "en", "ns1", {"k": "v"})

        leftovers = [p.name for p in (locales_root / "en").iterdir() if p.name.startswith(".")]
        assert leftovers == []

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
    @pytest.mark.parametrize("mode", [0o644, 0o664, 0o600])
    def test_merge_keeps_file_mode(self, locales_root: Path, mode: int) -> None:
        """Test that replacing the file keeps the permissions translators set."""
        path = write_resource(locales_root, "en", "ns1", {})
        os.chmod(path, mode)
        store = ResourceFileStore()

        _ = store.merge(locales_root / "en", "ns1", {"k": "v"})

        assert stat.S_IMODE(path.stat().st_mode) == mode
        assert read_resource(locales_root, "en", "ns1") == {"k": "v"}

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
    def test_new_file_follows_umask(self, locales_root: Path) -> None:
        """Test that a created file gets the same mode as an ordinary open()."""
        store = ResourceFileStore()

        _ = store.merge(locales_root / "en", "fresh", {"k": "v"})

        path = locales_root / "en" / "fresh.json"
        assert stat.S_IMODE(path.stat().st_mode) == NEW_FILE_MODE


class TestFailures:
    """Test the error taxonomy of the store."""

    def test_malformed_json_raises(self, locales_root: Path) -> None:
        """Test that invalid JSON is reported and the file is left alone."""
        path = write_resource(locales_root, "en", "ns1", "{not json")
        store = ResourceFileStore()

        with pytest.raises(MalformedResourceError):
            _ = store.merge(locales_root / "en", "ns1", {"k": "v"})

        assert path.read_text(encoding="utf-8") == "{not json"

    def test_non_object_json_raises(self, locales_root: Path) -> None:
        """Test that a JSON array is not accepted as a resource file."""
        _ = write_resource(locales_root, "en", "ns1", "[1, 2]")
        store = ResourceFileStore()

        with pytest.raises(MalformedResourceError, match="JSON object"):
            _ = store.read(locales_root / "en", "ns1")

    def test_invalid_utf8_raises_malformed(self, locales_root: Path) -> None:
        """Test that undecodable bytes are treated as malformed content."""
        (locales_root / "en" / "ns1.json").write_bytes(b'{"k": "\xff"}')
        store = ResourceFileStore()

        with pytest.raises(MalformedResourceError):
            _ = store.read(locales_root / "en", "ns1")

    def test_busy_write_raises_retryable(self, locales_root: Path) -> None:
        """Test that a locked file is reported as retryable."""
        store = ResourceFileStore()
        busy = OSError(errno.EBUSY, "Device or resource busy")

        with patch.object(Path, "replace", side_effect=busy):
            with pytest.raises(ResourceBusyError) as exc_info:
                _ = store.merge(locales_root / "en", "ns1", {"k": "v"})

        assert exc_info.value.recoverable
        assert not (locales_root / "en" / "ns1.json").exists()
        leftovers = [p for p in (locales_root / "en").iterdir() if p.name.startswith(".")]
        assert leftovers == []

    def test_other_write_error_is_not_retryable(self, tmp_path: Path) -> None:
        """Test that writing into a missing directory fails permanently."""
        store = ResourceFileStore()

        with pytest.raises(ResourceIOError) as exc_info:
            _ = store.merge(tmp_path / "missing", "ns1", {"k": "v"})

        assert not exc_info.value.recoverable

    @pytest.mark.parametrize("namespace", ["", ".", "..", "../escape", "a/b", "a\\b"])
    def test_invalid_namespace_rejected(self, locales_root: Path, namespace: str) -> None:
        """Test that namespaces cannot address files outside the language directory."""
        store = ResourceFileStore()

        with pytest.raises(InvalidNamespaceError):
            _ = store.merge(locales_root / "en", namespace, {"k": "v"})


class TestHelpers:
    """Test module-level helpers."""

    def test_is_busy_error(self) -> None:
        """Test classification of lock-related OS errors."""
        assert is_busy_error(OSError(errno.EBUSY, "busy"))
        assert is_busy_error(OSError(errno.EAGAIN, "again"))
        assert not is_busy_error(OSError(errno.EACCES, "denied"))
        assert not is_busy_error(FileNotFoundError(errno.ENOENT, "missing"))

    def test_validate_namespace_returns_name(self) -> None:
        """Test that valid namespaces pass through unchanged."""
        assert validate_namespace("common") == "common"
        assert validate_namespace("ui.buttons") == "ui.buttons"
