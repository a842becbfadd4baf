"""Handler entries and the unregister token handed back on registration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from .core import Dispatcher

Handler = Callable[..., Any]


class HandlerEntry:
    """One slot in a handler sequence.

    Registering the same callable twice yields two entries, so each
    registration can be removed on its own. `original` is the callable the
    caller handed in; `handler` is what actually gets invoked (they differ
    for once-handlers).
    """

    __slots__ = ("handler", "original")

    def __init__(self, handler: Handler, original: Handler | None = None) -> None:
        self.handler = handler
        self.original = handler if original is None else original

    def __repr__(self) -> str:
        return f"HandlerEntry({describe(self.original)})"


class Registration:
    """Token returned by `Dispatcher.register` and `register_once`.

    Calling it (or `cancel()`) removes exactly the entry it was created for.
    Cancelling twice, or after the entry is already gone, does nothing.
    """

    __slots__ = ("_dispatcher", "_name", "_entry")

    def __init__(self, dispatcher: Dispatcher, name: str, entry: HandlerEntry) -> None:
        self._dispatcher = dispatcher
        self._name = name
        self._entry = entry

    @property
    def name(self) -> str:
        """The resolved name the handler is stored under."""
        return self._name

    @property
    def handler(self) -> Handler:
        return self._entry.handler

    @property
    def active(self) -> bool:
        return self._dispatcher._holds(self._name, self._entry)

    def cancel(self) -> None:
        self._dispatcher._discard(self._name, self._entry)

    def __call__(self) -> None:
        self.cancel()

    def __repr__(self) -> str:
        state = "active" if self.active else "cancelled"
        return f"<Registration {self._name!r} {describe(self._entry.original)} ({state})>"


def describe(fn: Handler) -> str:
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)
