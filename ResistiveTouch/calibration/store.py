"""JSON persistence for the calibration matrix."""
from __future__ import annotations

import json
import logging
import os
import tempfile

from .matrix import CalibrationMatrix, matrix_from_record, matrix_to_record

log = logging.getLogger(__name__)


class CalibrationStore:
    def __init__(self, path: str) -> None:
        self.path = path

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> CalibrationMatrix:
        """Return the stored matrix, or an invalid one if nothing usable is stored."""
        if not os.path.exists(self.path):
            log.info("No calibration stored at %s", self.path)
            return CalibrationMatrix.invalid()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            matrix = matrix_from_record(data)
        except (OSError, ValueError, TypeError, KeyError) as e:
            log.warning("Ignoring malformed calibration file %s: %s", self.path, e)
            return CalibrationMatrix.invalid()
        log.info("Loaded calibration from %s (updated %s)", self.path, matrix.last_updated.isoformat())
        return matrix

    def save(self, matrix: CalibrationMatrix) -> None:
        record = matrix_to_record(matrix)
        folder = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(folder, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".calibration-", suffix=".json", dir=folder)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        log.info("Saved calibration to %s", self.path)
