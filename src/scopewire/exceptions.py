"""Common exceptions for scopewire.

Every failure is raised synchronously to the caller. Each concrete error also
derives from the closest builtin exception so callers that only know about
``ValueError``/``TypeError``/``ImportError`` keep working.
"""

from typing import Any


class ScopewireError(Exception):
    """Base exception for all scopewire errors.

    Use this for catching any registry or event bus error:
        ```python
        try:
            registry.value("value", 1)
        except ScopewireError as e:
            logger.error(f"Registry error: {e}")
        ```
    """


class ReservedNameError(ScopewireError, ValueError):
    """Raised when a registration uses a name reserved by the Registry API.

    Reserved names are the public operation names of ``Registry`` plus
    ``length``. Registering one of them would shadow the operation when it is
    read back through attribute access.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name} is a reserved word")


class InvalidArgumentsError(ScopewireError, ValueError):
    """Raised when an operation receives the wrong arity or argument type."""


class TypeArgumentError(ScopewireError, TypeError):
    """Raised when an argument list or handler has the wrong type.

    This occurs when:
    - ``apply`` is given something other than an ordered sequence
    - ``off`` is given a handler that is not callable
    """


class NameConflictError(ScopewireError, ValueError):
    """Raised when ``child(name)`` collides with a non-Registry value."""

    def __init__(self, name: str, existing: Any):
        self.name = name
        self.existing = existing
        super().__init__(f"value for name {name} is already defined: {existing!r}")


class ModuleLoadError(ScopewireError, ImportError):
    """Raised when an installable module cannot be resolved from a locator."""

    def __init__(self, locator: str, reason: str):
        self.locator = locator
        self.reason = reason
        super().__init__(f"Cannot load module from {locator}: {reason}")
