"""
Fire-and-forget observers for slot state transitions.

Notification and audit dispatch subscribe here. Listeners run inline after
the transition is durable; a failing listener is logged and never affects
the request that emitted the event.
"""

import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

SLOT_CREATED = "slot.created"
SLOT_UPDATED = "slot.updated"
SLOT_CANCELLED = "slot.cancelled"
SLOT_CONFIRMED = "slot.confirmed"
REQUEST_DENIED = "request.denied"

Listener = Callable[[str, Dict[str, Any]], None]

_listeners: List[Listener] = []


def subscribe(listener: Listener) -> Listener:
    _listeners.append(listener)
    return listener


def unsubscribe(listener: Listener) -> None:
    if listener in _listeners:
        _listeners.remove(listener)


def emit(event: str, payload: Dict[str, Any]) -> None:
    for listener in list(_listeners):
        try:
            listener(event, payload)
        except Exception:
            logger.exception("Listener %r failed for %s", listener, event)


def _log_listener(event: str, payload: Dict[str, Any]) -> None:
    logger.info("%s %s", event, payload)


subscribe(_log_listener)
