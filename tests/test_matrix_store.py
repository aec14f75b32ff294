import json
import math
import threading
from datetime import datetime

import pytest

from ResistiveTouch.calibration.matrix import (
    CalibrationMatrix,
    CalibrationState,
    matrix_from_record,
    matrix_to_record,
)
from ResistiveTouch.calibration.store import CalibrationStore

WHEN = datetime(2024, 5, 17, 9, 30, 0)


def _matrix(offset=0.0):
    return CalibrationMatrix(0.2 + offset, 0.01, -40.0, -0.005, 0.13, -25.0, last_updated=WHEN)


def test_save_then_load(tmp_path):
    store = CalibrationStore(str(tmp_path / "calibration.json"))
    assert not store.exists()
    store.save(_matrix())
    assert store.exists()
    loaded = store.load()
    assert loaded.valid
    assert loaded.coefficients() == _matrix().coefficients()
    assert loaded.last_updated == WHEN


def test_save_leaves_no_temp_files(tmp_path):
    store = CalibrationStore(str(tmp_path / "calibration.json"))
    store.save(_matrix())
    store.save(_matrix(0.1))
    assert sorted(p.name for p in tmp_path.iterdir()) == ["calibration.json"]
    assert store.load().a == pytest.approx(0.3)


def test_save_creates_missing_folder(tmp_path):
    store = CalibrationStore(str(tmp_path / "nested" / "calibration.json"))
    store.save(_matrix())
    assert store.load().valid


def test_save_rejects_invalid_matrix(tmp_path):
    store = CalibrationStore(str(tmp_path / "calibration.json"))
    with pytest.raises(ValueError):
        store.save(CalibrationMatrix.invalid())
    assert not store.exists()


def test_missing_file_loads_invalid(tmp_path):
    assert not CalibrationStore(str(tmp_path / "nope.json")).load().valid


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[1, 2, 3]",
        json.dumps({"a": 1, "b": 0, "c": 0, "d": 0, "e": 1, "last_updated": WHEN.isoformat()}),
        json.dumps({"a": "1", "b": 0, "c": 0, "d": 0, "e": 1, "f": 0, "last_updated": WHEN.isoformat()}),
        json.dumps({"a": True, "b": 0, "c": 0, "d": 0, "e": 1, "f": 0, "last_updated": WHEN.isoformat()}),
        '{"a": NaN, "b": 0, "c": 0, "d": 0, "e": 1, "f": 0, "last_updated": "2024-05-17T09:30:00"}',
        json.dumps({"a": 1, "b": 0, "c": 0, "d": 0, "e": 1, "f": 0, "last_updated": "yesterday"}),
        json.dumps({"a": 1, "b": 0, "c": 0, "d": 0, "e": 1, "f": 0}),
    ],
    ids=["syntax", "list", "missing-f", "string", "bool", "nan", "bad-date", "no-date"],
)
def test_malformed_file_loads_invalid(tmp_path, content):
    path = tmp_path / "calibration.json"
    path.write_text(content, encoding="utf-8")
    assert not CalibrationStore(str(path)).load().valid


def test_record_shape():
    record = matrix_to_record(_matrix())
    assert set(record) == {"a", "b", "c", "d", "e", "f", "last_updated"}
    assert record["last_updated"] == "2024-05-17T09:30:00"
    assert matrix_from_record(record) == _matrix()


def test_integer_coefficients_are_accepted():
    record = {"a": 1, "b": 0, "c": 0, "d": 0, "e": 1, "f": 0, "last_updated": WHEN.isoformat()}
    m = matrix_from_record(record)
    assert m.valid
    assert m.transform((3.0, 4.0)) == (3.0, 4.0)


def test_state_generation_and_snapshot():
    state = CalibrationState()
    assert not state.current.valid
    assert state.generation == 0
    assert state.replace(_matrix()) == 1
    generation, matrix = state.snapshot()
    assert generation == 1
    assert matrix == _matrix()
    state.replace(CalibrationMatrix.invalid())
    assert state.generation == 2
    assert not state.current.valid


def test_readers_never_see_a_mixed_matrix():
    state = CalibrationState(_matrix())
    candidates = [_matrix(0.0), _matrix(1.0), CalibrationMatrix.invalid()]
    allowed = {m.coefficients() if m.valid else "invalid" for m in candidates}
    stop = threading.Event()
    seen = []

    def reader():
        while not stop.is_set():
            m = state.current
            seen.append(m.coefficients() if m.valid else "invalid")

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for i in range(2000):
        state.replace(candidates[i % len(candidates)])
    stop.set()
    for t in threads:
        t.join()
    assert seen
    assert set(seen) <= allowed


def test_invalid_matrix_coefficients_are_all_nan():
    m = CalibrationMatrix(1.0, 0.0, math.inf, 0.0, 1.0, 0.0)
    assert all(math.isnan(v) for v in m.coefficients())
