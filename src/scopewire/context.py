"""Execution context binding.

Callables invoked through a Registry (injection entry points, installers and
event handlers) can reach the node that invoked them through
``current_registry`` instead of receiving it as an argument.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .registry.registry import Registry

_current_registry: ContextVar["Registry | None"] = ContextVar("scopewire_current_registry", default=None)


def current_registry() -> "Registry | None":
    """Return the Registry bound to the running call, or None outside of one."""
    return _current_registry.get()


@contextmanager
def bind_registry(registry: "Registry") -> Iterator["Registry"]:
    """Bind ``registry`` as execution context for the enclosed block.

    Bindings nest: the previous registry is restored on exit, also when the
    block raises.
    """
    token = _current_registry.set(registry)
    try:
        yield registry
    finally:
        _current_registry.reset(token)
