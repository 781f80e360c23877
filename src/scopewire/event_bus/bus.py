"""Event Bus Implementation.

This module provides the EventBus class owned by every Registry node. Dispatch
is synchronous: ``emit`` runs every matching handler in registration order
before it returns.

## Key Features

- **Exact and universal handlers**: ``on(name, handler)`` and ``on(handler)``
- **Bounded subscriptions**: ``once`` and ``many`` remove themselves
- **Wildcards**: optional ``*`` / ``**`` matching on namespaced names
- **Listener threshold**: a warning (never an error) above ``max_listeners``
- **Stable dispatch**: handlers added or removed while an event is being
  emitted do not change that emit pass

## Usage

```python
bus = EventBus(wildcard=True)
bus.on("user.*", lambda user_id: print(f"user event for {user_id}"))
bus.many("user.created", 2, audit)
bus.emit("user.created", 42)
```

"""

import threading
from collections.abc import Callable
from typing import Any

from loguru import logger

from scopewire.exceptions import InvalidArgumentsError, TypeArgumentError

from .core import EventBusConfig, Handler, Listener, ListenerGroup, match_event

Invoker = Callable[..., Any]


def _invoke_directly(handler: Handler, *args: Any) -> Any:
    return handler(*args)


class EventBus:
    """Per-node publish/subscribe table.

    Example:
        ```python
        bus = EventBus()
        bus.once("ready", on_ready)
        bus.emit("ready")  # True, on_ready ran and was removed
        bus.emit("ready")  # False
        ```
    """

    def __init__(
        self,
        config: EventBusConfig | None = None,
        invoker: Invoker | None = None,
        **overrides: Any,
    ) -> None:
        """Initialize a new EventBus instance.

        Args:
            config: Bus configuration. Defaults to ``EventBusConfig()``.
            invoker: Called as ``invoker(handler, *args)`` for every dispatch.
                     The Registry uses this to inject dependencies into handlers.
            **overrides: Individual config fields (delimiter, wildcard,
                         max_listeners) applied on top of ``config``.
        """
        base = config.model_dump() if config is not None else {}
        self._config = EventBusConfig(**(base | overrides))
        self._invoke = invoker or _invoke_directly
        self._groups: dict[str, ListenerGroup] = {}
        self._any: list[Handler] = []
        self._lock = threading.RLock()
        logger.trace(f"EventBus initialized ({self._config})")

    @property
    def config(self) -> EventBusConfig:
        return self._config

    @property
    def delimiter(self) -> str:
        return self._config.delimiter

    @property
    def wildcard(self) -> bool:
        return self._config.wildcard

    @property
    def max_listeners(self) -> int:
        return self._config.max_listeners

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def on(self, event_name: str | Handler, handler: Handler | None = None) -> "EventBus":
        """Register a handler for an event.

        With a single callable argument the handler becomes universal, the
        same as ``on_any``.

        Raises:
            InvalidArgumentsError: If the event name is not a string
            TypeArgumentError: If the handler is not callable
        """
        if handler is None and callable(event_name):
            return self.on_any(event_name)
        return self._add(event_name, handler, None)

    def once(self, event_name: str, handler: Handler) -> "EventBus":
        """Register a handler that is removed after its first invocation."""
        return self._add(event_name, handler, 1)

    def many(self, event_name: str, times: int, handler: Handler) -> "EventBus":
        """Register a handler that is removed after ``times`` invocations.

        Raises:
            InvalidArgumentsError: If ``times`` is not a positive integer
        """
        if isinstance(times, bool) or not isinstance(times, int) or times < 1:
            raise InvalidArgumentsError(f"times must be a positive integer, got: {times!r}")
        return self._add(event_name, handler, times)

    def on_any(self, handler: Handler) -> "EventBus":
        """Register a universal handler, invoked for every emitted event.

        Universal handlers receive the event name followed by the emitted
        arguments.
        """
        self._check_handler(handler)
        with self._lock:
            self._any.append(handler)
        logger.debug(f"Registered universal handler: {handler}")
        return self

    def _add(self, event_name: Any, handler: Any, times: int | None) -> "EventBus":
        self._check_event_name(event_name)
        self._check_handler(handler)

        listener = Listener(handler) if times is None else Listener(handler, remaining=times)
        with self._lock:
            group = self._groups.setdefault(event_name, ListenerGroup())
            group.add(listener)
            limit = self._config.max_listeners
            if limit > 0 and len(group) > limit and not group.warned:
                group.warned = True
                logger.warning(
                    f"Possible event handler leak detected: {len(group)} listeners added for "
                    f"'{event_name}' (max_listeners={limit}). Use set_max_listeners() to increase the limit."
                )

        logger.debug(f"Registered handler for '{event_name}' (times={times or 'inf'}): {handler}")
        return self

    @staticmethod
    def _check_event_name(event_name: Any) -> None:
        if not isinstance(event_name, str):
            raise InvalidArgumentsError(f"Event name must be a string, got: {event_name!r}")

    @staticmethod
    def _check_handler(handler: Any) -> None:
        if not callable(handler):
            raise TypeArgumentError(f"Handler must be callable: {handler!r}")

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def off(self, event_name: str, handler: Handler) -> "EventBus":
        """Remove one registration of ``handler`` for ``event_name``.

        Nothing happens when the handler is not registered.

        Raises:
            InvalidArgumentsError: If the event name is not a string
            TypeArgumentError: If the handler is not callable
        """
        self._check_event_name(event_name)
        self._check_handler(handler)
        with self._lock:
            candidates = [
                (name, listener)
                for name, group in self._matching_groups(event_name)
                for listener in group.listeners
                if listener.matches(handler)
            ]
            if not candidates:
                return self
            name, listener = min(candidates, key=lambda item: item[1].seq)
            self._detach(name, listener)

        logger.debug(f"Removed handler for '{name}': {handler}")
        return self

    def off_any(self, handler: Handler | None = None) -> "EventBus":
        """Remove a universal handler, or all of them when called without one."""
        with self._lock:
            if handler is None:
                self._any.clear()
            else:
                self._check_handler(handler)
                try:
                    self._any.remove(handler)
                except ValueError:
                    return self
        logger.debug(f"Removed universal handler: {handler or 'all'}")
        return self

    def remove_all_listeners(self, event_name: str | None = None) -> "EventBus":
        """Clear handlers for one event, or every handler when called without one.

        Universal handlers are only cleared by the no-argument form.
        """
        if event_name is not None:
            self._check_event_name(event_name)
        with self._lock:
            if event_name is None:
                self._groups.clear()
                self._any.clear()
                logger.debug("Cleared all handlers")
                return self

            for name, _group in list(self._matching_groups(event_name)):
                del self._groups[name]
        logger.debug(f"Cleared handlers for '{event_name}'")
        return self

    def _detach(self, event_name: str, listener: Listener) -> None:
        group = self._groups.get(event_name)
        if group is None:
            return
        group.discard(listener)
        if not group.listeners:
            del self._groups[event_name]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def emit(self, event_name: str, *args: Any) -> bool:
        """Invoke every handler registered for ``event_name``, then every universal handler.

        The handler list is captured before the first handler runs. Handlers
        registered during dispatch wait for the next emit; bounded handlers
        are counted down and removed before they are invoked, so re-entrant
        emits never run them past their limit.

        Returns:
            True if at least one handler ran
        """
        self._check_event_name(event_name)

        with self._lock:
            snapshot = sorted(
                ((name, listener) for name, group in self._matching_groups(event_name) for listener in group.listeners),
                key=lambda item: item[1].seq,
            )
            universal = list(self._any)

        if not snapshot and not universal:
            logger.trace(f"No handlers registered for '{event_name}'")
            return False

        logger.trace(f"Emitting '{event_name}' to {len(snapshot)} handlers and {len(universal)} universal handlers")

        fired = False
        for name, listener in snapshot:
            with self._lock:
                if listener.exhausted:
                    continue
                if listener.consume():
                    self._detach(name, listener)
            self._invoke(listener.handler, *args)
            fired = True

        for handler in universal:
            self._invoke(handler, event_name, *args)
            fired = True

        return fired

    def _matching_groups(self, event_name: str):
        if not self._config.wildcard:
            group = self._groups.get(event_name)
            return [(event_name, group)] if group is not None else []
        delimiter = self._config.delimiter
        return [(name, group) for name, group in self._groups.items() if match_event(name, event_name, delimiter)]

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def set_max_listeners(self, n: int) -> "EventBus":
        """Update the warn threshold for future registrations (0 disables it)."""
        if isinstance(n, bool) or not isinstance(n, int) or n < 0:
            raise InvalidArgumentsError(f"max_listeners must be a non-negative integer, got: {n!r}")
        with self._lock:
            self._config = self._config.model_copy(update={"max_listeners": n})
        logger.debug(f"max_listeners set to {n}")
        return self

    def listeners(self, event_name: str) -> list[Handler]:
        """Return the handlers for ``event_name`` in registration order.

        Universal handlers are not included. Returns an empty list when
        nothing is registered.
        """
        self._check_event_name(event_name)
        with self._lock:
            listeners = [listener for _name, group in self._matching_groups(event_name) for listener in group.listeners]
        return [listener.handler for listener in sorted(listeners, key=lambda listener: listener.seq)]

    def listeners_any(self) -> list[Handler]:
        """Return the universal handlers in registration order."""
        with self._lock:
            return list(self._any)

    def has_warned(self, event_name: str) -> bool:
        """Return True if ``event_name`` went over ``max_listeners``."""
        with self._lock:
            group = self._groups.get(event_name)
            return group is not None and group.warned

    def event_names(self) -> list[str]:
        """Return the event names that currently have handlers."""
        with self._lock:
            return list(self._groups)
