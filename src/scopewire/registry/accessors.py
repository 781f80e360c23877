"""Attribute access to registered names.

``registry.name`` reads ``registry.value("name")`` (or the factory of that
name) while the ``use_getter`` option is on. Assigning ``registry.name = v``
registers ``v`` while ``use_setter`` is on. Nothing is stored here: every
access goes through the Registry's own lookup.
"""

from typing import Any

from scopewire.constants import OPTION_USE_GETTER, OPTION_USE_SETTER

VALUE = "value"
FACTORY = "factory"


class AccessorMixin:
    """Expose registered names as attributes of a Registry."""

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal attribute lookup failed
        if name.startswith("_"):
            raise AttributeError(name)

        if not self.get_option(OPTION_USE_GETTER):
            raise AttributeError(f"'{type(self).__name__}' attribute access is disabled (use_getter=False): '{name}'")

        kind = self._registered_kind(name)
        if kind == VALUE:
            return self.value(name)
        if kind == FACTORY:
            return self.factory(name)
        raise AttributeError(f"'{type(self).__name__}' has no registered name '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return

        if not self.get_option(OPTION_USE_SETTER):
            raise AttributeError(f"cannot assign '{name}': attribute assignment is disabled (use_setter=False)")

        if self._registered_kind(name) == FACTORY and callable(value):
            self.factory(name, value)
        else:
            self.value(name, value)

    def __dir__(self) -> list[str]:
        names = set(super().__dir__())
        if self.get_option(OPTION_USE_GETTER):
            names.update(self._registered_names())
        return sorted(names)

    def _registered_kind(self, name: str) -> str | None:
        """Return whether the nearest binding of ``name`` is a value or a factory."""
        node = self
        while node is not None:
            if name in node._values:
                return VALUE
            if name in node._factories:
                return FACTORY
            node = node._parent
        return None

    def _registered_names(self) -> set[str]:
        names: set[str] = set()
        node = self
        while node is not None:
            names.update(node._values)
            names.update(node._factories)
            node = node._parent
        return names
