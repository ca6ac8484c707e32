"""
Language directory helpers.

Each language is a directory below the locales root holding one JSON file per
namespace. These helpers back the language listing and creation commands.
"""

import logging
from pathlib import Path

from ..utils.core.exceptions import LanguageError
from .store import RESOURCE_SUFFIX, validate_namespace

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "common"


def validate_language_code(code: str) -> str:
    """
    Ensure a language code maps to a single directory below the locales root.

    Raises:
        LanguageError: If the code is empty, hidden or contains path parts
    """
    stripped = code.strip()
    if (
        not stripped
        or stripped != code
        or stripped.startswith(".")
        or "/" in stripped
        or "\\" in stripped
        or Path(stripped).name != stripped
    ):
        raise LanguageError(f"Invalid language code: {code!r}", context=code)
    return code


def language_directory(locales_root: Path, code: str) -> Path:
    """Get the directory of a language."""
    return locales_root / validate_language_code(code)


def get_known_languages(locales_root: Path) -> list[str]:
    """
    List the languages that have a directory below the locales root.

    A missing root or an I/O failure yields an empty list.

    Args:
        locales_root: Root directory holding one directory per language

    Returns:
        Sorted list of language codes
    """
    try:
        return sorted(
            entry.name
            for entry in locales_root.iterdir()
            if entry.is_dir() and not entry.name.startswith(".")
        )
    except OSError as e:
        logger.debug(f"Could not list languages in {locales_root}: {e}")
        return []


def create_language(
    locales_root: Path, code: str, namespace: str = DEFAULT_NAMESPACE
) -> Path:
    """
    Create a language directory with an empty default namespace file.

    An existing namespace file is left untouched.

    Args:
        locales_root: Root directory holding one directory per language
        code: Language code to create
        namespace: Name of the default namespace file

    Returns:
        Path of the language directory

    Raises:
        LanguageError: If the language code is invalid
        OSError: If the directory or file cannot be created
    """
    directory = language_directory(locales_root, code)
    _ = directory.mkdir(parents=True, exist_ok=True)

    namespace_file = directory / f"{validate_namespace(namespace)}{RESOURCE_SUFFIX}"
    if not namespace_file.exists():
        _ = namespace_file.write_text("{}", encoding="utf-8")
        logger.info(f"Created language {code} at {directory}")
    else:
        logger.debug(f"Language {code} already exists at {directory}")

    return directory
