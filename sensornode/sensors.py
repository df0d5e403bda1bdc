"""IPSO temperature (3303) and humidity (3304) sensor objects."""

from __future__ import annotations

import logging
import math
import time
from typing import Callable

log = logging.getLogger(__name__)

Clock = Callable[[], int]
Reader = Callable[[], float]

MIN_UPDATE_INTERVAL_MS = 2000


def _millis() -> int:
    return int(time.monotonic() * 1000)


class MeasuredSensor:
    """A sensor value that tracks its minimum and maximum readings.

    ``reader`` returns a reading, or NaN when the sensor fails.
    ``clock`` returns the current time in milliseconds.
    Readings are taken at most once every two seconds.
    """

    units: str = ""
    initial_min: float = 0.0
    initial_max: float = 0.0

    def __init__(
        self,
        reader: Reader,
        instance: int,
        pin: int,
        clock: Clock | None = None,
    ) -> None:
        self.reader = reader
        self.instance = instance
        self.pin = pin
        self.clock = clock or _millis
        self.current_value = 0.0
        self.min_value = self.initial_min
        self.max_value = self.initial_max
        self.last_update = 0
        self.initialized = False

    def begin(self) -> None:
        """Mark the sensor ready and take a first reading."""
        self.initialized = True
        self.update()
        log.info(
            "%s %d initialised on pin %d",
            type(self).__name__,
            self.instance,
            self.pin,
        )

    def update(self) -> None:
        """Take a new reading unless the last one is under two seconds old."""
        if self.clock() - self.last_update < MIN_UPDATE_INTERVAL_MS:
            return
        value = self.reader()
        if math.isnan(value):
            return
        self.current_value = value
        self.min_value = min(self.min_value, value)
        self.max_value = max(self.max_value, value)
        self.last_update = self.clock()

    def read_value(self) -> float:
        """Refresh if due and return the current value."""
        self.update()
        return self.current_value

    def reset_min_max(self) -> None:
        self.min_value = self.current_value
        self.max_value = self.current_value
        log.info(
            "[%d] min/max reset to %.1f %s",
            self.instance,
            self.current_value,
            self.units,
        )

    def is_valid(self) -> bool:
        return self.initialized and not math.isnan(self.current_value)


class TemperatureSensor(MeasuredSensor):
    """Object 3303: temperature in degrees Celsius."""

    units = "Celsius"
    initial_min = 999.0
    initial_max = -999.0


class HumiditySensor(MeasuredSensor):
    """Object 3304: relative humidity in percent."""

    units = "%RH"
    initial_min = 100.0
    initial_max = 0.0