# custody_core/common/events.py
from collections import defaultdict
from typing import Any, Callable, Dict, List

Handler = Callable[[Dict[str, Any]], None]

_registry: Dict[str, List[Handler]] = defaultdict(list)


def subscribe(event_name: str):
    """
    Decorator registering `fn` for `event_name`. Registering the same handler
    twice is a no-op, so repeated AppConfig.ready() calls are harmless.

        @subscribe("inventory.low")
        def on_inventory_low(payload): ...
    """
    def _decorator(fn: Handler) -> Handler:
        if fn not in _registry[event_name]:
            _registry[event_name].append(fn)
        return fn
    return _decorator


def unsubscribe(event_name: str, fn: Handler) -> None:
    handlers = _registry.get(event_name)
    if handlers and fn in handlers:
        handlers.remove(fn)


def publish(event_name: str, payload: Dict[str, Any]) -> None:
    """
    Call every handler for `event_name`, in registration order.

    Handlers run synchronously inside the publisher's transaction: a rollback
    discards what they wrote, and an exception they raise aborts the publisher.
    """
    for handler in list(_registry.get(event_name, ())):
        handler(payload)
