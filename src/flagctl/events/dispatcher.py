from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol

from flagctl.events.observer import EventObserver
from flagctl.events.types import EVENT_TYPE_MAP

logger = logging.getLogger(__name__)


class EventEmitter(Protocol):
    """Anything with ``emit``; satisfied by EventDispatcher."""

    def emit(self, event_type: str, **data: Any) -> None: ...


class NullEmitter:
    def emit(self, event_type: str, **data: Any) -> None:
        pass


class EventDispatcher:
    """Turn ``emit`` calls into typed events and hand them to each observer.

    An observer that raises is logged and skipped; the remaining observers
    still receive the event.
    """

    def __init__(self, observers: Iterable[EventObserver] = ()) -> None:
        self._observers: list[EventObserver] = list(observers)

    def add_observer(self, observer: EventObserver) -> None:
        self._observers.append(observer)

    def emit(self, event_type: str, **data: Any) -> None:
        event_cls = EVENT_TYPE_MAP.get(event_type)
        if event_cls is None:
            logger.debug("Dropping unknown event type %s", event_type)
            return
        event = event_cls(**data)
        for observer in self._observers:
            try:
                observer.on_event(event)
            except Exception:
                logger.warning(
                    "Observer %s failed on %s", type(observer).__name__, event_type, exc_info=True
                )
