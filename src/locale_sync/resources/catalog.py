"""
In-memory translation catalog backed by the on-disk resource layout.

`JsonResourceCatalog` is a small translation engine implementing the
`TranslationHost` interface. It is used by the `watch` command and as a
realistic host in tests; applications with their own engine only need to
provide the same interface.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from ..sync.host import LanguageChangedHandler, MissingKeyHandler, Subscription
from ..utils.core.exceptions import ResourceStoreError
from .languages import DEFAULT_NAMESPACE
from .store import RESOURCE_SUFFIX, ResourceFileStore

logger = logging.getLogger(__name__)


class JsonResourceCatalog:
    """Translation lookups over `<locales_root>/<language>/<namespace>.json`."""

    def __init__(
        self,
        locales_root: Path,
        language: str = "en",
        *,
        fallback_language: str | None = None,
        default_namespace: str = DEFAULT_NAMESPACE,
        store: ResourceFileStore | None = None,
    ) -> None:
        self.locales_root: Path = locales_root
        self.fallback_language: str | None = fallback_language
        self.default_namespace: str = default_namespace
        self.save_missing: bool = False
        self._language: str = language
        self._store: ResourceFileStore = store or ResourceFileStore()
        self._resources: dict[str, dict[str, dict[str, str]]] = {}
        self._missing_key_handlers: list[MissingKeyHandler] = []
        self._language_handlers: list[LanguageChangedHandler] = []

        self.load_language(language)
        if fallback_language and fallback_language != language:
            self.load_language(fallback_language)

    @property
    def language(self) -> str:
        return self._language

    def namespaces(self, language: str | None = None) -> list[str]:
        """Namespaces loaded for a language."""
        return sorted(self._resources.get(language or self._language, {}))

    def resources(self, language: str | None = None) -> dict[str, dict[str, str]]:
        """Copy of the loaded resources of a language."""
        loaded = self._resources.get(language or self._language, {})
        return {ns: dict(entries) for ns, entries in loaded.items()}

    def load_language(self, language: str) -> None:
        """
        Load every namespace file of a language from disk.

        Malformed or unreadable files are logged and skipped.
        """
        directory = self.locales_root / language
        loaded: dict[str, dict[str, str]] = {}

        try:
            paths = sorted(directory.glob(f"*{RESOURCE_SUFFIX}"))
        except OSError as e:
            logger.debug(f"Cannot list resources in {directory}: {e}")
            paths = []

        for path in paths:
            if path.name.startswith("."):
                continue
            namespace = path.stem
            try:
                data = self._store.read(directory, namespace)
            except ResourceStoreError as e:
                logger.warning(f"Skipping resource file {path}: {e}")
                continue
            loaded[namespace] = {
                str(key): value for key, value in data.items() if isinstance(value, str)
            }

        self._resources[language] = loaded
        logger.debug(
            f"Loaded {sum(len(v) for v in loaded.values())} translation(s) "
            + f"in {len(loaded)} namespace(s) for {language}"
        )

    def reload_resources(self, languages: list[str]) -> None:
        """Reload the given languages from disk."""
        for language in languages:
            self.load_language(language)

    def change_language(self, code: str) -> None:
        """Switch the active language and notify subscribers."""
        if code not in self._resources:
            self.load_language(code)
        self._language = code
        self._emit(self._language_handlers, code)

    def translate(
        self, key: str, *, namespace: str | None = None, default: str | None = None
    ) -> str:
        """
        Look up a translation.

        The active language is searched first, then the fallback language.
        An unresolved key returns the default (or the fallback translation, or
        the key itself) and is reported to missing-key subscribers when
        `save_missing` is enabled.
        """
        namespace = namespace or self.default_namespace
        value = self._lookup(self._language, namespace, key)
        if value is not None:
            return value

        fallback: str | None = None
        if self.fallback_language and self.fallback_language != self._language:
            fallback = self._lookup(self.fallback_language, namespace, key)

        resolved = default if default is not None else (fallback or key)
        if self.save_missing:
            self._emit(
                self._missing_key_handlers, [self._language], namespace, key, resolved
            )
        return resolved

    def subscribe_missing_key(self, handler: MissingKeyHandler) -> Subscription:
        return self._subscribe(self._missing_key_handlers, handler)

    def subscribe_language_changed(
        self, handler: LanguageChangedHandler
    ) -> Subscription:
        return self._subscribe(self._language_handlers, handler)

    def _lookup(self, language: str, namespace: str, key: str) -> str | None:
        return self._resources.get(language, {}).get(namespace, {}).get(key)

    @staticmethod
    def _subscribe(
        handlers: list[Callable[..., None]], handler: Callable[..., None]
    ) -> Subscription:
        handlers.append(handler)

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return Subscription(unsubscribe)

    @staticmethod
    def _emit(handlers: list[Callable[..., None]], *args: object) -> None:
        for handler in list(handlers):
            try:
                handler(*args)
            except Exception as e:
                logger.exception(f"Event handler {handler!r} failed: {e}")
