"""Core Event Bus Components.

This module contains the building blocks of the per-node event bus. They hold
no references to a Registry and can be used on their own.

## Key Components

- **EventBusConfig**: Validated delimiter / wildcard / max_listeners settings
- **Listener**: One handler registration with its remaining invocation count
- **ListenerGroup**: Ordered registrations for one event name plus the
  ``warned`` flag of the listener threshold
- **match_event**: Namespace matching for wildcard-enabled buses

## Wildcards

With ``wildcard=True`` event names are split on the delimiter:

```python
match_event("user.*", "user.created", ".")       # True
match_event("user.**", "user.profile.saved", ".") # True
match_event("user.created", "user.*", ".")       # True, matching is symmetric
```
"""

import itertools
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field

from scopewire.constants import DEFAULT_DELIMITER, DEFAULT_MAX_LISTENERS, WILDCARD_MULTI_SEGMENT, WILDCARD_SEGMENT

Handler = Callable[..., Any]

# Shared across buses; only the relative order within one bus matters
_sequence = itertools.count()


class EventBusConfig(BaseModel):
    """Configuration of a single EventBus."""

    delimiter: str = Field(default=DEFAULT_DELIMITER, min_length=1, description="Namespace separator")
    wildcard: bool = Field(default=False, description="Enable '*' and '**' matching")
    max_listeners: int = Field(default=DEFAULT_MAX_LISTENERS, ge=0, description="Warn threshold per event (0 disables)")


@dataclass(eq=False)
class Listener:
    """A handler registration.

    ``remaining`` is ``math.inf`` for ordinary registrations, 1 for ``once``
    and n for ``many``.
    """

    handler: Handler
    remaining: float = math.inf
    seq: int = field(default_factory=lambda: next(_sequence))

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0

    def consume(self) -> bool:
        """Use up one invocation. Returns True when none are left afterwards."""
        self.remaining -= 1
        return self.remaining <= 0

    def matches(self, handler: Handler) -> bool:
        return self.handler == handler


@dataclass(eq=False)
class ListenerGroup:
    """Registrations for one event name."""

    listeners: list[Listener] = field(default_factory=list)
    warned: bool = False

    def __len__(self) -> int:
        return len(self.listeners)

    def add(self, listener: Listener) -> None:
        self.listeners.append(listener)

    def discard(self, listener: Listener) -> None:
        # Identity, not equality: the same handler may be registered twice
        for index, candidate in enumerate(self.listeners):
            if candidate is listener:
                del self.listeners[index]
                return


def _match_segments(pattern: list[str], name: list[str]) -> bool:
    if not pattern:
        return not name

    head, rest = pattern[0], pattern[1:]
    if head == WILDCARD_MULTI_SEGMENT:
        # '**' swallows zero or more segments
        return any(_match_segments(rest, name[i:]) for i in range(len(name) + 1))
    if not name:
        return False
    if head == WILDCARD_SEGMENT or head == name[0]:
        return _match_segments(rest, name[1:])
    return False


def match_event(registered: str, emitted: str, delimiter: str) -> bool:
    """Check whether a registered event name matches an emitted one.

    A wildcard on either side matches.
    """
    if registered == emitted:
        return True

    registered_parts = registered.split(delimiter)
    emitted_parts = emitted.split(delimiter)
    return _match_segments(registered_parts, emitted_parts) or _match_segments(emitted_parts, registered_parts)
