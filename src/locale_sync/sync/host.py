"""
Interface of the host translation engine.

The sync components never register global listeners on the host. They
subscribe through these methods and keep the returned `Subscription` handle,
which they revoke on teardown.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

MissingKeyHandler = Callable[[list[str], str, str, str], None]
LanguageChangedHandler = Callable[[str], None]


class Subscription:
    """Revocable handle for an event subscription."""

    def __init__(self, unsubscribe: Callable[[], None]) -> None:
        self._unsubscribe: Callable[[], None] | None = unsubscribe

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def unsubscribe(self) -> None:
        """Revoke the subscription. Calling it again does nothing."""
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()


class TranslationHost(Protocol):
    """Translation engine that emits missing-key and language-change events."""

    # Switch controlling whether missing-key events are emitted at all
    save_missing: bool

    @property
    def language(self) -> str: ...

    def reload_resources(self, languages: list[str]) -> Awaitable[None] | None:
        """Reload in-memory resources of the given languages from disk."""
        ...

    def subscribe_missing_key(self, handler: MissingKeyHandler) -> Subscription:
        """Call `handler(languages, namespace, key, fallback)` for unresolved keys."""
        ...

    def subscribe_language_changed(
        self, handler: LanguageChangedHandler
    ) -> Subscription:
        """Call `handler(code)` whenever the active language changes."""
        ...
