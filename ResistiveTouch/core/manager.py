"""
TouchManager: wires the device, polling loop, dispatcher and calibration
store together for an application.

The application owns the manager instance and the raw read callable; nothing
here is global. Calibration runs stop normal polling first and restart it
afterwards so only one sampler touches the device at a time.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Tuple

from ResistiveTouch.calibration.capture import CalibrationPointCapture
from ResistiveTouch.calibration.matrix import CalibrationMatrix
from ResistiveTouch.calibration.models import AffineParameters, RawSample
from ResistiveTouch.calibration.session import CalibrationPattern, CalibrationSession, Prompt
from ResistiveTouch.calibration.store import CalibrationStore
from ResistiveTouch.control.events import EventDispatcher, PointerConsumer
from ResistiveTouch.core.settings import SettingsManager
from ResistiveTouch.device.touch_device import TouchDevice
from ResistiveTouch.tracking.debounce import PointerDebouncer
from ResistiveTouch.tracking.denoise import SampleDenoiser
from ResistiveTouch.tracking.pipeline import PollingLoop

log = logging.getLogger(__name__)


class TouchManager:
    def __init__(
        self,
        read_sample: Callable[[], RawSample],
        settings: Optional[SettingsManager] = None,
        *,
        store: Optional[CalibrationStore] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.settings = settings if settings is not None else SettingsManager()
        s = self.settings
        self.device = TouchDevice(
            read_sample,
            denoiser=SampleDenoiser(s.xy_tolerance(), s.pressure_tolerance()),
            max_pressure=s.max_pressure(),
        )
        self.dispatcher = EventDispatcher()
        self.loop = PollingLoop(
            self.device,
            debouncer=PointerDebouncer(s.press_threshold(), s.release_distance()),
            dispatcher=self.dispatcher,
            interval_s=s.poll_interval_s(),
        )
        self.store = store if store is not None else CalibrationStore(s.calibration_path())
        capture_kwargs = {"threshold": s.capture_threshold(), "poll_interval_s": s.capture_interval_s()}
        if sleep is not None:
            capture_kwargs["sleep"] = sleep
        self.capture = CalibrationPointCapture(**capture_kwargs)
        self._calibrating = threading.Lock()

    # Lifecycle ---------------------------------------------------------
    def start(self) -> None:
        self.loop.start()

    def stop(self) -> bool:
        return self.loop.stop()

    @property
    def running(self) -> bool:
        return self.loop.running

    def subscribe(self, consumer: PointerConsumer) -> None:
        self.dispatcher.subscribe(consumer)

    def unsubscribe(self, consumer: PointerConsumer) -> None:
        self.dispatcher.unsubscribe(consumer)

    # Calibration -------------------------------------------------------
    @property
    def is_calibrated(self) -> bool:
        return self.device.is_calibrated

    def load_calibration(self) -> bool:
        """Install the stored matrix if there is a valid one. Never raises for bad data."""
        matrix = self.store.load()
        if not matrix.valid:
            return False
        self.device.set_matrix(matrix)
        return True

    def save_calibration(self) -> None:
        self.store.save(self.device.calibration)

    def calibrate(
        self,
        prompt: Prompt,
        screen_bounds: Tuple[float, float],
        pattern: Optional[CalibrationPattern] = None,
        margin: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> AffineParameters:
        """Run a calibration, install and persist the result.

        Solver errors propagate and leave the current matrix untouched.
        """
        if pattern is None:
            pattern = self.settings.calibration_pattern()
        if margin is None:
            margin = self.settings.calibration_margin()
        if not self._calibrating.acquire(blocking=False):
            raise RuntimeError("a calibration run is already in progress")
        was_running = self.loop.running
        try:
            # Normal sampling would race the capture for the device
            if not self.loop.stop():
                was_running = False
                raise RuntimeError("touch polling did not stop; the device is still being sampled")
            session = CalibrationSession(self.device, prompt, self.capture)
            params = session.run(pattern, screen_bounds, margin, cancel)
            matrix: CalibrationMatrix = self.device.set_calibration(params)
            try:
                self.store.save(matrix)
            except OSError as e:
                log.warning("Calibration applied but could not be saved: %s", e)
            return params
        finally:
            self._calibrating.release()
            if was_running:
                self.loop.start()
