"""
Pointer event types and synchronous dispatch to registered consumers.
"""
from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List

from ResistiveTouch.calibration.models import Point2D

log = logging.getLogger(__name__)


class PointerPhase(enum.Enum):
    UP = "up"
    DOWN = "down"


class EventPhase(enum.Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"


@dataclass(frozen=True)
class PointerEvent:
    phase: EventPhase
    position: Point2D  # (nan, nan) when no calibrated position is available
    pressure: float    # normalized 0..1


PointerConsumer = Callable[[PointerEvent], None]


class EventDispatcher:
    """Deliver events in order on the caller's thread.

    Consumers must return quickly; a slow consumer stalls the sampling loop.
    A consumer that raises is logged and skipped so later consumers and later
    ticks still run.
    """

    def __init__(self) -> None:
        self._consumers: List[PointerConsumer] = []
        self._lock = threading.Lock()

    def subscribe(self, consumer: PointerConsumer) -> None:
        with self._lock:
            if consumer not in self._consumers:
                self._consumers = self._consumers + [consumer]

    def unsubscribe(self, consumer: PointerConsumer) -> None:
        with self._lock:
            self._consumers = [c for c in self._consumers if c != consumer]

    def __len__(self) -> int:
        return len(self._consumers)

    def dispatch(self, event: PointerEvent) -> None:
        for consumer in self._consumers:
            try:
                consumer(event)
            except Exception:
                log.exception("Pointer consumer %r failed on %s event", consumer, event.phase.value)
