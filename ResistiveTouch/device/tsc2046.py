"""
TSC2046 / XPT2046 command framing.

Each query is a three-byte full-duplex transfer: the command byte, then two
clock-out bytes carrying the conversion result. Opening the SPI bus and chip
select handling belong to the caller; this module only needs a
``transfer(frame) -> response`` callable such as ``spidev.SpiDev.xfer2``.
"""
from __future__ import annotations

from typing import Callable, List, Sequence

from ResistiveTouch.calibration.models import RawSample

CMD_START = 0x80
CMD_12BIT = 0x00
CMD_8BIT = 0x08
CMD_DIFF = 0x00
CMD_X_POS = 0x10
CMD_Z1_POS = 0x30
CMD_Z2_POS = 0x40
CMD_Y_POS = 0x50

CMD_READ_X = CMD_START | CMD_12BIT | CMD_DIFF | CMD_X_POS
CMD_READ_Y = CMD_START | CMD_12BIT | CMD_DIFF | CMD_Y_POS
CMD_READ_Z1 = CMD_START | CMD_8BIT | CMD_DIFF | CMD_Z1_POS
CMD_READ_Z2 = CMD_START | CMD_8BIT | CMD_DIFF | CMD_Z2_POS

# Largest value decode_pressure can return
MAX_RAW_PRESSURE = 0x7F + 0x7F

Transfer = Callable[[List[int]], Sequence[int]]


def frame(cmd: int) -> List[int]:
    return [cmd & 0xFF, 0x00, 0x00]


def decode_12bit(rx: Sequence[int]) -> int:
    """12-bit conversion result from a three-byte response."""
    if len(rx) < 3:
        raise ValueError("expected a 3-byte response")
    return ((rx[1] << 4) | (rx[2] >> 4)) & 0xFFF


def decode_pressure(z1_rx: Sequence[int], z2_rx: Sequence[int]) -> int:
    """Pressure proxy from the 8-bit Z1 and Z2 conversions.

    Z1 rises and Z2 falls as contact resistance drops, so both are folded
    into one increasing value.
    """
    if len(z1_rx) < 2 or len(z2_rx) < 2:
        raise ValueError("expected at least a 2-byte response")
    a = z1_rx[1] & 0x7F
    b = (255 - z2_rx[1]) & 0x7F
    return a + b


class Tsc2046Reader:
    def __init__(self, transfer: Transfer) -> None:
        self._transfer = transfer

    def _query(self, cmd: int) -> Sequence[int]:
        return self._transfer(frame(cmd))

    def read_x(self) -> int:
        return decode_12bit(self._query(CMD_READ_X))

    def read_y(self) -> int:
        return decode_12bit(self._query(CMD_READ_Y))

    def read_pressure(self) -> int:
        z1 = self._query(CMD_READ_Z1)
        z2 = self._query(CMD_READ_Z2)
        return decode_pressure(z1, z2)

    def read_sample(self) -> RawSample:
        x = self.read_x()
        y = self.read_y()
        return RawSample(x, y, self.read_pressure())

    __call__ = read_sample
