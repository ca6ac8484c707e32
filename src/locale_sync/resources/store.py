"""
Namespace resource file persistence.

This module reads, merges and writes the JSON resource file of a single
(language, namespace) pair. Merging is additive: keys that already exist in
the file are never changed, so values written by translators always win.
"""

import errno
import json
import logging
import os
import shutil
import tempfile
from collections.abc import Mapping
from pathlib import Path

from ..utils.core.exceptions import (
    InvalidNamespaceError,
    MalformedResourceError,
    ResourceBusyError,
    ResourceIOError,
)
from .types import MergeResult

logger = logging.getLogger(__name__)

RESOURCE_SUFFIX = ".json"
TEMP_SUFFIX = ".tmp"

BUSY_ERRNOS = frozenset({errno.EBUSY, errno.EAGAIN, errno.ETXTBSY})
# ERROR_SHARING_VIOLATION, ERROR_LOCK_VIOLATION
BUSY_WINERRORS = frozenset({32, 33})


def _read_umask() -> int:
    umask = os.umask(0)
    _ = os.umask(umask)
    return umask


# Read once at import; os.umask cannot be queried without setting it
NEW_FILE_MODE = 0o666 & ~_read_umask()


def is_busy_error(error: OSError) -> bool:
    """Check whether an OSError signals a transient lock on the file."""
    if error.errno in BUSY_ERRNOS:
        return True
    return getattr(error, "winerror", None) in BUSY_WINERRORS


def validate_namespace(namespace: str) -> str:
    """
    Ensure a namespace maps to a single file inside the language directory.

    Raises:
        InvalidNamespaceError: If the namespace is empty or contains path parts
    """
    if (
        not namespace
        or namespace in (".", "..")
        or "/" in namespace
        or "\\" in namespace
        or Path(namespace).name != namespace
    ):
        raise InvalidNamespaceError(
            f"Invalid namespace name: {namespace!r}", context=namespace
        )
    return namespace


class ResourceFileStore:
    """Reads and additively merges `<language_dir>/<namespace>.json` files."""

    def __init__(self, indent: int = 2) -> None:
        self.indent: int = indent

    def resource_path(self, language_dir: Path, namespace: str) -> Path:
        """Get the resource file path for a namespace."""
        return language_dir / f"{validate_namespace(namespace)}{RESOURCE_SUFFIX}"

    def read(self, language_dir: Path, namespace: str) -> dict[str, object]:
        """
        Read and parse a namespace resource file.

        A file that does not exist is treated as an empty object.

        Raises:
            InvalidNamespaceError: If the namespace is not a plain name
            MalformedResourceError: If the file is not a UTF-8 JSON object
            ResourceBusyError: If the file is temporarily locked
            ResourceIOError: For any other I/O failure
        """
        path = self.resource_path(language_dir, namespace)
        data = self._read_text(path)
        if data is None:
            return {}
        return self._parse(path, data)

    def merge(
        self, language_dir: Path, namespace: str, pending_keys: Mapping[str, str]
    ) -> MergeResult:
        """
        Merge pending keys into a namespace resource file.

        Only keys absent from the file are inserted. If nothing is added to an
        existing file, the file is left untouched.

        Args:
            language_dir: Directory of the target language
            namespace: Namespace name (file stem)
            pending_keys: Mapping of key to fallback value

        Returns:
            MergeResult describing what was added and written

        Raises:
            InvalidNamespaceError: If the namespace is not a plain name
            MalformedResourceError: If the existing file is not a JSON object
            ResourceBusyError: If the file is temporarily locked
            ResourceIOError: For any other I/O failure
        """
        path = self.resource_path(language_dir, namespace)
        data = self._read_text(path)
        created = data is None
        existing = {} if data is None else self._parse(path, data)

        added: list[str] = []
        for key, fallback in pending_keys.items():
            if key not in existing:
                existing[key] = fallback
                added.append(key)

        if not added:
            logger.debug(f"No new keys for {path}, skipping write")
            return MergeResult(namespace=namespace, path=path)

        self._write(path, existing)
        logger.info(f"Added {len(added)} missing key(s) to {path}")
        return MergeResult(
            namespace=namespace,
            path=path,
            added=tuple(added),
            created=created,
            written=True,
        )

    @staticmethod
    def _read_text(path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise MalformedResourceError(
                f"Resource file {path} is not valid UTF-8: {e}", context=path
            ) from e
        except OSError as e:
            if is_busy_error(e):
                raise ResourceBusyError(
                    f"Resource file {path} is busy: {e}", context=path
                ) from e
            raise ResourceIOError(
                f"Failed to read resource file {path}: {e}", context=path
            ) from e

    @staticmethod
    def _parse(path: Path, data: str) -> dict[str, object]:
        try:
            parsed: object = json.loads(data)
        except json.JSONDecodeError as e:
            raise MalformedResourceError(
                f"Resource file {path} is not valid JSON: {e}", context=path
            ) from e

        if not isinstance(parsed, dict):
            raise MalformedResourceError(
                f"Resource file {path} must contain a JSON object, got {type(parsed).__name__}",
                context=path,
            )
        return parsed  # pyright: ignore[reportUnknownVariableType]

    def _write(self, path: Path, content: Mapping[str, object]) -> None:
        """Atomically replace the file content using a temporary file."""
        temp_file = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=TEMP_SUFFIX,
                delete=False,
            ) as temp_file:
                json.dump(content, temp_file, indent=self.indent, ensure_ascii=False)
                temp_file.flush()
                os.fsync(temp_file.fileno())
                temp_path = Path(temp_file.name)

            # NamedTemporaryFile creates 0600 files; keep the resource's mode
            if path.exists():
                shutil.copymode(path, temp_path)
            else:
                temp_path.chmod(NEW_FILE_MODE)

            # Atomic move
            _ = temp_path.replace(path)

        except OSError as e:
            if temp_file is not None:
                Path(temp_file.name).unlink(missing_ok=True)
            if is_busy_error(e):
                raise ResourceBusyError(
                    f"Resource file {path} is busy: {e}", context=path
                ) from e
            raise ResourceIOError(
                f"Failed to write resource file {path}: {e}", context=path
            ) from e
