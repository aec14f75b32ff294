import json
import logging
import os

import pytest

from ResistiveTouch.calibration.session import CalibrationPattern
from ResistiveTouch.core.log import setup_logger
from ResistiveTouch.core.settings import SettingsManager, default_settings


def test_defaults_when_file_missing(tmp_path):
    s = SettingsManager(str(tmp_path / "settings.json"))
    assert s.data == default_settings()
    assert s.poll_interval_s() == pytest.approx(0.010)
    assert s.max_pressure() == 255
    assert (s.xy_tolerance(), s.pressure_tolerance()) == (40, 10)
    assert s.press_threshold() == pytest.approx(5 / 255)
    assert s.release_distance() == pytest.approx(3 / 255)
    assert s.calibration_pattern() is CalibrationPattern.CORNERS_AND_CENTER
    assert s.calibration_margin() == 50.0
    assert s.capture_interval_s() == pytest.approx(0.005)
    assert s.capture_threshold() == pytest.approx(0.1)
    assert s.log_level() == "INFO"
    assert s.log_file() is None


def test_save_and_reload(tmp_path):
    path = str(tmp_path / "settings.json")
    s = SettingsManager(path)
    s.set_poll_interval_ms(20)
    s.set_noise_tolerances(30, 6)
    s.set_pointer_thresholds(0.05, 0.02)
    s.set_calibration_pattern("seven-point")
    s.save()

    again = SettingsManager(path)
    assert again.poll_interval_s() == pytest.approx(0.020)
    assert (again.xy_tolerance(), again.pressure_tolerance()) == (30, 6)
    assert again.press_threshold() == pytest.approx(0.05)
    assert again.release_distance() == pytest.approx(0.02)
    assert again.calibration_pattern() is CalibrationPattern.SEVEN_POINT


def test_partial_file_falls_back_per_key(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"sampling": {"poll_interval_ms": 4}, "noise": "bogus"}), encoding="utf-8")
    s = SettingsManager(str(path))
    assert s.poll_interval_s() == pytest.approx(0.004)
    assert s.max_pressure() == 255
    assert s.xy_tolerance() == 40
    s.set_noise_tolerances(12, 3)
    assert s.xy_tolerance() == 12


def test_unknown_pattern_falls_back(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"calibration": {"pattern": "TRIANGLE"}}), encoding="utf-8")
    assert SettingsManager(str(path)).calibration_pattern() is CalibrationPattern.CORNERS_AND_CENTER


def test_calibration_path_resolution(tmp_path):
    path = tmp_path / "settings.json"
    s = SettingsManager(str(path))
    assert s.calibration_path() == os.path.join(str(tmp_path), "calibration.json")
    absolute = str(tmp_path / "elsewhere" / "cal.json")
    path.write_text(json.dumps({"calibration": {"path": absolute}}), encoding="utf-8")
    s.load()
    assert s.calibration_path() == absolute


def test_setup_logger_is_idempotent(tmp_path):
    name = "ResistiveTouch.test-logger"
    log_file = str(tmp_path / "touch.log")
    logger = setup_logger(name, "debug", log_file)
    try:
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        assert setup_logger(name) is logger
        assert len(logger.handlers) == 2
        logger.info("hello")
        for h in logger.handlers:
            h.flush()
        assert "hello" in (tmp_path / "touch.log").read_text(encoding="utf-8")
    finally:
        for h in list(logger.handlers):
            h.close()
            logger.removeHandler(h)


def test_setup_from_settings(tmp_path):
    from ResistiveTouch.core.log import setup_from_settings

    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"logging": {"level": "warning"}}), encoding="utf-8")
    name = "ResistiveTouch.test-settings-logger"
    logger = setup_from_settings(SettingsManager(str(path)), name)
    try:
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
    finally:
        for h in list(logger.handlers):
            logger.removeHandler(h)
