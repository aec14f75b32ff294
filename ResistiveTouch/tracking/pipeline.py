from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from ResistiveTouch.control.events import EventDispatcher, PointerEvent
from ResistiveTouch.device.touch_device import TouchDevice
from .debounce import PointerDebouncer

log = logging.getLogger(__name__)

POLL_INTERVAL_S = 0.010


class PollingLoop:
    """Fixed-interval sampling driver.

    Each tick: read (two raw reads + denoise + map, inside the device), then
    debounce, then dispatch. A tick finishes completely before the next read
    is issued, and events go out only after the tick's computation is done.
    """

    def __init__(
        self,
        device: TouchDevice,
        debouncer: Optional[PointerDebouncer] = None,
        dispatcher: Optional[EventDispatcher] = None,
        interval_s: float = POLL_INTERVAL_S,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self.device = device
        self.debouncer = debouncer if debouncer is not None else PointerDebouncer()
        self.dispatcher = dispatcher if dispatcher is not None else EventDispatcher()
        self.interval_s = float(interval_s)
        self._cancel: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    def tick(self) -> Optional[PointerEvent]:
        self.device.read_touchpoints()
        event = self.debouncer.update(self.device.pressure, self.device.position)
        if event is not None:
            self.dispatcher.dispatch(event)
        return event

    def run(self, cancel: threading.Event) -> None:
        """Poll until ``cancel`` is set. Blocks the calling thread."""
        while not cancel.is_set():
            start_t = time.perf_counter()
            self.tick()
            # Pacing: sleep the rest of the interval; skip if the tick overran
            remaining = self.interval_s - (time.perf_counter() - start_t)
            if remaining > 0:
                cancel.wait(remaining)

    # Background thread ------------------------------------------------
    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            if self._thread.is_alive():
                if self._cancel is not None and self._cancel.is_set():
                    raise RuntimeError("previous touch polling thread has not exited yet")
                return
            self._finish_stop()
        self._cancel = threading.Event()
        self._thread = threading.Thread(target=self._run_logged, args=(self._cancel,), name="touch-polling", daemon=True)
        self._thread.start()
        log.info("Touch polling started (%.0f ms interval)", self.interval_s * 1000.0)

    def stop(self, timeout: Optional[float] = 1.0) -> bool:
        """Ask the polling thread to exit and wait up to ``timeout`` seconds.

        Returns False when the thread is still alive, e.g. blocked in a bus
        read. It then still owns the device: start() refuses to spawn another
        sampler while it is alive.
        """
        if self._thread is None:
            return True
        assert self._cancel is not None
        self._cancel.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout)
            if self._thread.is_alive():
                log.warning("Touch polling thread still busy after %s s; device not released", timeout)
                return False
        self._finish_stop()
        return True

    def _finish_stop(self) -> None:
        self._thread = None
        self._cancel = None
        self.debouncer.reset()
        log.info("Touch polling stopped")

    def _run_logged(self, cancel: threading.Event) -> None:
        try:
            self.run(cancel)
        except Exception:
            log.exception("Touch polling loop terminated by an error")
