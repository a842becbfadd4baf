"""Core hook dispatcher — the main entry point."""

from __future__ import annotations

import logging
import threading
from contextlib import AbstractContextManager, nullcontext
from typing import Any, Callable, Sequence

from .exceptions import InvalidNameError, RedirectCycleError
from .models import DispatcherSettings
from .registration import Handler, HandlerEntry, Registration, describe

logger = logging.getLogger(__name__)


def _check_name(name: object) -> None:
    if not isinstance(name, str):
        raise InvalidNameError(name)


class Dispatcher:
    """Synchronous named-hook dispatcher.

    Handlers are registered against string names and invoked in
    registration order by `call`. Each `call` runs five stages, each one to
    completion before the next starts:

        before_each -> before(name) -> handlers -> after(name) -> after_each

    `redirect` aliases one name to another. Registration resolves the name
    through the redirection chain before storing anything, so handlers
    registered on an alias end up under the final target. A cyclic chain
    never resolves unless the settings enable cycle detection.

    Exceptions raised by handlers propagate out of `call` untouched and
    stop the remainder of that pass.
    """

    def __init__(self, settings: DispatcherSettings | None = None) -> None:
        self.settings = settings or DispatcherSettings()
        self._hooks: dict[str, list[HandlerEntry]] = {}
        self._redirections: dict[str, str] = {}
        self._before_each: list[HandlerEntry] = []
        self._after_each: list[HandlerEntry] = []
        self._before: dict[str, list[HandlerEntry]] = {}
        self._after: dict[str, list[HandlerEntry]] = {}
        self._lock: AbstractContextManager[Any] = (
            threading.RLock() if self.settings.thread_safe else nullcontext()
        )

    @classmethod
    def create(cls, settings: DispatcherSettings | None = None) -> Dispatcher:
        """Return a new dispatcher with empty tables."""
        return cls(settings)

    # ── Handler Registration ──

    def register(self, name: str, handler: Handler) -> Registration:
        """Append `handler` to the handlers of `name` (after redirection)."""
        return self._add(name, HandlerEntry(handler))

    def register_once(self, name: str, handler: Handler) -> Registration:
        """Register a handler that removes itself the first time it runs.

        The wrapper unregisters before delegating, so a handler that calls
        the same hook again does not fire twice. The returned token removes
        the wrapper, and is still safe to call after it has fired.
        """
        registration: Registration | None = None

        def once(*arguments: Any) -> None:
            if registration is not None:
                registration.cancel()
            handler(*arguments)

        once.__qualname__ = f"once({describe(handler)})"
        registration = self._add(name, HandlerEntry(once, original=handler))
        return registration

    def unregister(self, name: str, handler: Handler) -> None:
        """Remove every entry of `handler` under `name` (after redirection).

        Matching is by identity. Unknown names and handlers are ignored.
        """
        with self._lock:
            name = self.resolve(name)
            entries = self._hooks.get(name)
            if not entries:
                return
            before = len(entries)
            # in place, so a pass already iterating this list sees the removal
            entries[:] = [entry for entry in entries if entry.handler is not handler]
            if len(entries) < before:
                logger.debug("unregistered hook=%s handler=%s", name, describe(handler))

    def handlers(self, name: str) -> list[Handler]:
        """Return the handlers `call(name)` would run, in order.

        Uses the same lookup as `call`: the literal name unless
        `resolve_on_call` is set.
        """
        with self._lock:
            return [entry.original for entry in self._hooks.get(self._target(name), ())]

    def has_handlers(self, name: str) -> bool:
        with self._lock:
            return bool(self._hooks.get(self._target(name)))

    # ── Redirection ──

    def redirect(self, from_: str, to: str) -> None:
        """Make `from_` an alias of `to`, replacing any earlier mapping."""
        _check_name(from_)
        _check_name(to)
        with self._lock:
            if self.settings.detect_cycles:
                chain = [from_, to]
                current = to
                while current != from_ and current in self._redirections:
                    current = self._redirections[current]
                    chain.append(current)
                if current == from_:
                    raise RedirectCycleError(from_, chain)
            self._redirections[from_] = to
            logger.debug("redirect %s -> %s", from_, to)

    def resolve(self, name: str) -> str:
        """Follow the redirection chain from `name` to its end."""
        _check_name(name)
        with self._lock:
            if not self.settings.detect_cycles:
                while name in self._redirections:
                    name = self._redirections[name]
                return name

            chain = [name]
            while name in self._redirections:
                name = self._redirections[name]
                if name in chain:
                    chain.append(name)
                    raise RedirectCycleError(chain[0], chain)
                chain.append(name)
            return name

    # ── Before / After Callbacks ──

    def before_each(self, callback: Handler) -> None:
        """Run `callback(name, *arguments)` before every call."""
        with self._lock:
            self._before_each.append(HandlerEntry(callback))

    def after_each(self, callback: Handler) -> None:
        """Run `callback(name, *arguments)` after every call."""
        with self._lock:
            self._after_each.append(HandlerEntry(callback))

    def before(self, name: str, callback: Handler) -> None:
        """Run `callback(*arguments)` before the handlers of `name`."""
        with self._lock:
            self._before.setdefault(self.resolve(name), []).append(HandlerEntry(callback))

    def after(self, name: str, callback: Handler) -> None:
        """Run `callback(*arguments)` after the handlers of `name`."""
        with self._lock:
            self._after.setdefault(self.resolve(name), []).append(HandlerEntry(callback))

    # ── Dispatch ──

    def call(self, name: str, *arguments: Any) -> None:
        """Invoke every stage for `name`, forwarding `arguments` verbatim.

        By default the literal `name` is looked up, so a name that has been
        redirected away no longer reaches the handlers registered through
        it. With `resolve_on_call` the name is resolved first.
        """
        with self._lock:
            name = self._target(name)
            logger.debug("call hook=%s args=%d", name, len(arguments))

            self._run(lambda: self._before_each, (name, *arguments))
            self._run(lambda: self._before.get(name, ()), arguments)
            self._run(lambda: self._hooks.get(name, ()), arguments)
            self._run(lambda: self._after.get(name, ()), arguments)
            self._run(lambda: self._after_each, (name, *arguments))

    def _run(
        self,
        entries: Callable[[], Sequence[HandlerEntry]],
        arguments: tuple[Any, ...],
    ) -> None:
        # Walk the live sequence: removals made by a handler are honoured
        # later in the same pass, entries appended during the pass still
        # run, and no entry runs twice.
        #
        # Entries only ever get appended or removed, so the live list is
        # always the entries already run followed by those still pending.
        # `position` tracks that boundary; removals before it pull it back.
        done: set[HandlerEntry] = set()
        position = 0
        while True:
            current = entries()
            position = min(position, len(current))
            while position > 0 and current[position - 1] not in done:
                position -= 1
            while position < len(current) and current[position] in done:
                position += 1
            if position == len(current):
                return
            entry = current[position]
            done.add(entry)
            entry.handler(*arguments)

    # ── Internals ──

    def _target(self, name: str) -> str:
        _check_name(name)
        return self.resolve(name) if self.settings.resolve_on_call else name

    def _add(self, name: str, entry: HandlerEntry) -> Registration:
        with self._lock:
            name = self.resolve(name)
            self._hooks.setdefault(name, []).append(entry)
            logger.debug("registered hook=%s handler=%s", name, describe(entry.original))
            return Registration(self, name, entry)

    def _holds(self, name: str, entry: HandlerEntry) -> bool:
        with self._lock:
            return any(other is entry for other in self._hooks.get(name, ()))

    def _discard(self, name: str, entry: HandlerEntry) -> None:
        with self._lock:
            entries = self._hooks.get(name)
            if not entries:
                return
            for index, other in enumerate(entries):
                if other is entry:
                    del entries[index]
                    logger.debug("unregistered hook=%s handler=%s", name, describe(entry.original))
                    return
