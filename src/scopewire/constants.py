"""Global constants for scopewire.

This module defines option names, defaults and the ``ABSENT`` sentinel used
throughout the package to avoid hardcoded strings.
"""

from typing import Final

# Option names understood by every Registry node
OPTION_USE_GETTER: Final = "use_getter"
OPTION_USE_SETTER: Final = "use_setter"

# Event bus defaults
DEFAULT_DELIMITER: Final = "."
DEFAULT_MAX_LISTENERS: Final = 10

# Wildcard tokens for namespaced event names
WILDCARD_SEGMENT: Final = "*"
WILDCARD_MULTI_SEGMENT: Final = "**"

# Names reserved in addition to the Registry's public operations
EXTRA_RESERVED_NAMES: Final = frozenset({"length"})

# Module skipped when installing every module of a directory
INDEX_MODULE: Final = "__init__.py"


class _Absent:
    """Type of the ``ABSENT`` sentinel."""

    _instance: "_Absent | None" = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT: Final = _Absent()
"""Result of a lookup that found nothing, distinct from a stored falsy value."""
