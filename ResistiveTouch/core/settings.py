"""
Settings manager for ResistiveTouch.

Loads/saves JSON settings (default ResistiveTouch/settings.json) and exposes
typed accessors for the sampling and calibration tunables.
"""
from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

from ResistiveTouch.calibration.session import CalibrationPattern


def default_settings() -> Dict[str, Any]:
    return {
        "sampling": {
            "poll_interval_ms": 10,
            "max_pressure": 255,
        },
        "noise": {
            "xy_tolerance": 40,
            "pressure_tolerance": 10,
        },
        "pointer": {
            "press_threshold": 5.0 / 255.0,
            "release_distance": 3.0 / 255.0,
        },
        "calibration": {
            "pattern": CalibrationPattern.CORNERS_AND_CENTER.name,
            "margin": 50,
            "capture_interval_ms": 5,
            "capture_threshold": 0.1,
            "path": "calibration.json",
        },
        "logging": {"level": "INFO", "file": None},
    }


class SettingsManager:
    def __init__(self, path: Optional[str] = None) -> None:
        if path is None:
            here = os.path.dirname(os.path.abspath(__file__))
            path = os.path.join(os.path.dirname(here), "settings.json")
        self.path = path
        self.data: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        if not os.path.exists(self.path):
            # provide minimal defaults
            self.data = default_settings()
            return
        with open(self.path, "r", encoding="utf-8") as f:
            self.data = json.load(f)

    def save(self) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self.data, f, indent=2)

    def _section(self, name: str) -> dict:
        sec = self.data.get(name)
        return sec if isinstance(sec, dict) else {}

    def _get(self, section: str, key: str) -> Any:
        v = self._section(section).get(key)
        if v is None:
            v = default_settings()[section][key]
        return v

    def _set(self, section: str, key: str, value: Any) -> None:
        sec = self.data.get(section)
        if not isinstance(sec, dict):
            sec = {}
            self.data[section] = sec
        sec[key] = value

    # Sampling ----------------------------------------------------------
    def poll_interval_s(self) -> float:
        return float(self._get("sampling", "poll_interval_ms")) / 1000.0

    def set_poll_interval_ms(self, ms: int) -> None:
        self._set("sampling", "poll_interval_ms", int(ms))

    def max_pressure(self) -> int:
        return int(self._get("sampling", "max_pressure"))

    def xy_tolerance(self) -> int:
        return int(self._get("noise", "xy_tolerance"))

    def pressure_tolerance(self) -> int:
        return int(self._get("noise", "pressure_tolerance"))

    def set_noise_tolerances(self, xy: int, pressure: int) -> None:
        self._set("noise", "xy_tolerance", int(xy))
        self._set("noise", "pressure_tolerance", int(pressure))

    # Pointer -----------------------------------------------------------
    def press_threshold(self) -> float:
        return float(self._get("pointer", "press_threshold"))

    def release_distance(self) -> float:
        return float(self._get("pointer", "release_distance"))

    def set_pointer_thresholds(self, press: float, release_distance: float) -> None:
        self._set("pointer", "press_threshold", float(press))
        self._set("pointer", "release_distance", float(release_distance))

    # Calibration -------------------------------------------------------
    def calibration_pattern(self) -> CalibrationPattern:
        try:
            return CalibrationPattern.parse(self._get("calibration", "pattern"))
        except ValueError:
            return CalibrationPattern.CORNERS_AND_CENTER

    def set_calibration_pattern(self, pattern: CalibrationPattern) -> None:
        self._set("calibration", "pattern", CalibrationPattern.parse(pattern).name)

    def calibration_margin(self) -> float:
        return float(self._get("calibration", "margin"))

    def capture_interval_s(self) -> float:
        return float(self._get("calibration", "capture_interval_ms")) / 1000.0

    def capture_threshold(self) -> float:
        return float(self._get("calibration", "capture_threshold"))

    def calibration_path(self) -> str:
        p = str(self._get("calibration", "path"))
        if os.path.isabs(p):
            return p
        # relative paths are resolved next to the settings file
        return os.path.join(os.path.dirname(os.path.abspath(self.path)), p)

    # Logging -----------------------------------------------------------
    def log_level(self) -> str:
        return str(self._get("logging", "level")).upper()

    def log_file(self) -> Optional[str]:
        v = self._section("logging").get("file")
        return str(v) if v else None
