"""Hierarchical registry for values, factories and options.

A Registry node stores values and factories under names and forwards lookups
it cannot answer to its parent. Nodes form a tree: ``forge`` creates a root,
``child`` creates a scope below an existing node.

```python
root = forge()
config = root.child("config").value({"host": "127.0.0.1", "port": 3000})
service = root.child("service")

service.config.port        # 3000, found through the root
service.value("missing")   # ABSENT
```

Every node also owns an EventBus. Handlers registered through a node receive
injected values for their named parameters:

```python
root.value("users", user_repository)
root.on("user.find", lambda users, user_id: users.find(user_id))
root.emit("user.find", 1)
```
"""

import os
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, ClassVar

from loguru import logger

from scopewire.constants import ABSENT, EXTRA_RESERVED_NAMES, OPTION_USE_GETTER, OPTION_USE_SETTER
from scopewire.context import bind_registry
from scopewire.event_bus import EventBus, EventBusConfig
from scopewire.exceptions import InvalidArgumentsError, NameConflictError, ReservedNameError
from scopewire.settings import get_settings

from .accessors import AccessorMixin
from .injection import InjectionResolver

Factory = Callable[[], Any]
Handler = Callable[..., Any]


def _public_names(cls: type) -> frozenset[str]:
    return frozenset(name for name in dir(cls) if not name.startswith("_")) | EXTRA_RESERVED_NAMES


class Registry(AccessorMixin):
    """A scope of named values and factories with delegated lookup.

    Lookups (``value``, ``factory``, ``get_option``) check the node itself
    first and then walk up the parent chain. A name counts as present when it
    was stored, whatever its value: a stored ``0`` or ``None`` is returned and
    shadows the parent. Only a missing name yields ``ABSENT``.

    Public attribute names of the class are reserved and cannot be used as
    registration names. The reserved set is computed once per class.
    """

    RESERVED_NAMES: ClassVar[frozenset[str]] = frozenset()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.RESERVED_NAMES = _public_names(cls)

    def __init__(
        self,
        parent: "Registry | None" = None,
        *,
        delimiter: str | None = None,
        wildcard: bool | None = None,
        max_listeners: int | None = None,
    ):
        """Initialize an empty node.

        Args:
            parent: Node that unresolved lookups are delegated to. None makes a root.
            delimiter: Event name separator, defaults to ``Settings.delimiter``
            wildcard: Enable wildcard event names, defaults to ``Settings.wildcard``
            max_listeners: Listener warn threshold, defaults to ``Settings.max_listeners``
        """
        settings = get_settings()
        self._parent = parent
        self._values: dict[str, Any] = {}
        self._factories: dict[str, Factory] = {}
        self._options: dict[str, Any] = {}
        if parent is None:
            self._options = {
                OPTION_USE_GETTER: settings.use_getter,
                OPTION_USE_SETTER: settings.use_setter,
            }
        self._lock = threading.RLock()
        self._resolver = InjectionResolver(self)

        overrides = {
            key: value
            for key, value in (("delimiter", delimiter), ("wildcard", wildcard), ("max_listeners", max_listeners))
            if value is not None
        }
        config = EventBusConfig(delimiter=settings.delimiter, wildcard=settings.wildcard, max_listeners=settings.max_listeners)
        self._events = EventBus(config, invoker=self._dispatch, **overrides)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} depth={self._depth()} values={sorted(self._values)} factories={sorted(self._factories)}>"

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def _depth(self) -> int:
        depth, node = 0, self._parent
        while node is not None:
            depth, node = depth + 1, node._parent
        return depth

    def _check_name(self, name: Any) -> None:
        if not isinstance(name, str):
            raise InvalidArgumentsError(f"Name must be a string, got: {name!r}")
        if name in type(self).RESERVED_NAMES:
            raise ReservedNameError(name)

    # ------------------------------------------------------------------
    # Values and factories
    # ------------------------------------------------------------------

    def value(self, name: str | Mapping[str, Any], *args: Any) -> Any:
        """Get or set a value.

        ``value(name)`` returns the nearest stored value or ``ABSENT``.
        ``value(name, v)`` stores ``v`` on this node and returns the node.
        ``value({name: v, ...})`` stores every entry; entries are applied in
        order and earlier ones stay stored if a later one is rejected.

        Raises:
            ReservedNameError: If a name to store is reserved
            InvalidArgumentsError: If the name is not a string or the arity is wrong
        """
        if isinstance(name, Mapping):
            if args:
                raise InvalidArgumentsError("Bulk value() takes a single mapping argument")
            for key, item in name.items():
                self.value(key, item)
            return self

        if len(args) > 1:
            raise InvalidArgumentsError(f"value() takes a name and at most one value, got {len(args)} values")

        if not args:
            if not isinstance(name, str):
                raise InvalidArgumentsError(f"Name must be a string, got: {name!r}")
            return self._lookup_value(name)

        self._check_name(name)
        with self._lock:
            self._values[name] = args[0]
            self._factories.pop(name, None)
        logger.debug(f"Registered value '{name}' on {self!r}")
        return self

    def get(self, name: str) -> Any:
        """Alias of ``value(name)``."""
        return self.value(name)

    def set(self, name: str | Mapping[str, Any], *args: Any) -> "Registry":
        """Alias of ``value(name, v)`` and ``value(mapping)``."""
        if not args and not isinstance(name, Mapping):
            raise InvalidArgumentsError("set() requires a value or a mapping")
        return self.value(name, *args)

    def factory(self, name: str | Mapping[str, Factory], *args: Any) -> Any:
        """Get a freshly produced object or register a factory.

        ``factory(name)`` calls the nearest registered factory every time and
        returns its result, or ``ABSENT``. ``factory(name, f)`` and
        ``factory({name: f, ...})`` register zero-argument callables.

        Raises:
            ReservedNameError: If a name to store is reserved
            InvalidArgumentsError: If the name is not a string, the factory is
                not callable or the arity is wrong
        """
        if isinstance(name, Mapping):
            if args:
                raise InvalidArgumentsError("Bulk factory() takes a single mapping argument")
            for key, item in name.items():
                self.factory(key, item)
            return self

        if len(args) > 1:
            raise InvalidArgumentsError(f"factory() takes a name and at most one factory, got {len(args)} values")

        if not args:
            if not isinstance(name, str):
                raise InvalidArgumentsError(f"Name must be a string, got: {name!r}")
            producer = self._lookup_factory(name)
            if producer is ABSENT:
                return ABSENT
            with bind_registry(self):
                return producer()

        self._check_name(name)
        producer = args[0]
        if not callable(producer):
            raise InvalidArgumentsError(f"Factory for '{name}' must be callable, got: {producer!r}")
        with self._lock:
            self._factories[name] = producer
            self._values.pop(name, None)
        logger.debug(f"Registered factory '{name}' on {self!r}")
        return self

    def has(self, name: str) -> bool:
        """Return True if ``name`` is stored as a value or factory on this node or an ancestor."""
        return self._registered_kind(name) is not None

    def _lookup_value(self, name: str) -> Any:
        node = self
        while node is not None:
            if name in node._values:
                return node._values[name]
            node = node._parent
        return ABSENT

    def _lookup_factory(self, name: str) -> Any:
        node = self
        while node is not None:
            if name in node._factories:
                return node._factories[name]
            node = node._parent
        return ABSENT

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    def get_option(self, name: str) -> Any:
        """Return the nearest option value, or ``ABSENT``."""
        node = self
        while node is not None:
            if name in node._options:
                return node._options[name]
            node = node._parent
        return ABSENT

    def set_option(self, name: str, value: Any) -> "Registry":
        """Set an option on this node. Children without their own setting see it too.

        Raises:
            ReservedNameError: If the name is reserved
            InvalidArgumentsError: If the name is not a string
        """
        self._check_name(name)
        with self._lock:
            self._options[name] = value
        logger.debug(f"Option '{name}' set to {value!r} on {self!r}")
        return self

    # ------------------------------------------------------------------
    # Hierarchy
    # ------------------------------------------------------------------

    def parent(self) -> "Registry | None":
        """Return the parent node, or None for a root."""
        return self._parent

    def root(self) -> "Registry":
        """Return the root of this node's tree."""
        node = self
        while node._parent is not None:
            node = node._parent
        return node

    def child(self, name: str | None = None) -> "Registry":
        """Create a child node, optionally registered under ``name``.

        With a name, the call is idempotent: if ``value(name)`` already is a
        Registry that node is returned unchanged.

        Raises:
            ReservedNameError: If the name is reserved
            InvalidArgumentsError: If the name is not a string
            NameConflictError: If the name already holds a non-Registry value
        """
        if name is None:
            logger.debug(f"Created anonymous child of {self!r}")
            return type(self)(self)

        self._check_name(name)
        with self._lock:
            existing = self.value(name)
            if isinstance(existing, Registry):
                return existing
            if existing is not ABSENT:
                raise NameConflictError(name, existing)

            child = type(self)(self)
            self.value(name, child)
        logger.debug(f"Created child '{name}' of {self!r}")
        return child

    def forge(self) -> "Registry":
        """Return a new root, unrelated to this node's tree."""
        return type(self)()

    # ------------------------------------------------------------------
    # Injection
    # ------------------------------------------------------------------

    def apply(self, fn: Callable[..., Any], args: Sequence[Any], *, names: Iterable[str] | None = None) -> Any:
        """Call ``fn``, resolving each parameter as value, factory, then next element of ``args``."""
        return self._resolver.apply(fn, args, names)

    def call(self, fn: Callable[..., Any], *params: Any, names: Iterable[str] | None = None) -> Any:
        """Call ``fn``, resolving each parameter as value, factory, then next of ``params``."""
        return self._resolver.call(fn, params, names)

    exec = call

    def callp(self, fn: Callable[..., Any], props: Mapping[str, Any], *, names: Iterable[str] | None = None) -> Any:
        """Call ``fn``, resolving each parameter from ``props`` first, then value, then factory."""
        return self._resolver.callp(fn, props, names)

    execp = callp

    def install(self, module: Any, *params: Any) -> "Registry":
        """Install a module into this node.

        ``module`` may be:
        - a callable, called as ``module(registry, *params)``
        - an object (e.g. a Python module) with a callable ``install`` attribute
        - a file path, directory path or dotted module name, see ``scopewire.loader``

        Raises:
            InvalidArgumentsError: If ``module`` is none of the above
            ModuleLoadError: If a locator cannot be loaded
        """
        if isinstance(module, (str, os.PathLike)):
            from scopewire.loader import load_modules

            for loaded in load_modules(module):
                self.install(loaded, *params)
            return self

        installer = module if callable(module) else getattr(module, "install", None)
        if not callable(installer):
            raise InvalidArgumentsError(f"Cannot install {module!r}: not callable and has no install()")

        logger.debug(f"Installing {getattr(module, '__name__', module)!r} into {self!r}")
        with bind_registry(self):
            installer(self, *params)
        return self

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _dispatch(self, handler: Handler, *args: Any) -> Any:
        return self._resolver.call(handler, args)

    @property
    def events(self) -> EventBus:
        """The EventBus owned by this node."""
        return self._events

    def on(self, event_name: str | Handler, handler: Handler | None = None) -> "Registry":
        """Register an injected handler for an event, or a universal handler when given only a callable."""
        self._events.on(event_name, handler)
        return self

    def on_any(self, handler: Handler) -> "Registry":
        """Register a universal handler that receives the event name first."""
        self._events.on_any(handler)
        return self

    def once(self, event_name: str, handler: Handler) -> "Registry":
        """Register a handler that runs for the next emit only."""
        self._events.once(event_name, handler)
        return self

    def many(self, event_name: str, times: int, handler: Handler) -> "Registry":
        """Register a handler that runs for the next ``times`` emits."""
        self._events.many(event_name, times, handler)
        return self

    def off(self, event_name: str, handler: Handler) -> "Registry":
        """Remove the earliest registration of ``handler`` for ``event_name``."""
        self._events.off(event_name, handler)
        return self

    def off_any(self, handler: Handler | None = None) -> "Registry":
        """Remove a universal handler, or all of them."""
        self._events.off_any(handler)
        return self

    def remove_all_listeners(self, event_name: str | None = None) -> "Registry":
        """Clear the handlers of one event, or every handler on this node."""
        self._events.remove_all_listeners(event_name)
        return self

    def emit(self, event_name: str, *args: Any) -> bool:
        """Emit an event on this node only. Parents and children do not see it."""
        return self._events.emit(event_name, *args)

    def set_max_listeners(self, n: int) -> "Registry":
        """Set the per-event handler count above which a warning is logged."""
        self._events.set_max_listeners(n)
        return self

    def listeners(self, event_name: str) -> list[Handler]:
        """Handlers registered for ``event_name``, in registration order."""
        return self._events.listeners(event_name)

    def listeners_any(self) -> list[Handler]:
        """Universal handlers, in registration order."""
        return self._events.listeners_any()

    def has_warned(self, event_name: str) -> bool:
        """Whether ``event_name`` has gone over the listener threshold."""
        return self._events.has_warned(event_name)

    def event_names(self) -> list[str]:
        """Event names that currently have handlers on this node."""
        return self._events.event_names()


Registry.RESERVED_NAMES = _public_names(Registry)


def forge(**kwargs: Any) -> Registry:
    """Create a new root Registry.

    Args:
        **kwargs: Event bus overrides (delimiter, wildcard, max_listeners)
    """
    return Registry(**kwargs)
