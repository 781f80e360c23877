"""Per-node Event Bus.

Every Registry node owns one EventBus; events never travel between nodes.
The bus can also be used on its own:

```python
from scopewire.event_bus import EventBus

bus = EventBus(wildcard=True, max_listeners=20)
bus.on("order.*", lambda order_id: print(f"order {order_id} changed"))
bus.emit("order.created", "A-1")
```

For the registration records and wildcard matching, see `core.py`.
For dispatch and the API reference, see `bus.py`.

"""

from .bus import EventBus
from .core import EventBusConfig, Listener, ListenerGroup, match_event

__all__ = [
    "EventBus",
    "EventBusConfig",
    "Listener",
    "ListenerGroup",
    "match_event",
]
