"""Ambient (DHT) sampling, ultrasonic distance and traffic-light state."""

from __future__ import annotations

import enum
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Protocol

log = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL_MS = 2000
DEFAULT_DISTANCE_THRESHOLD_CM = 100.0
SOUND_SPEED_CM_PER_US = 0.034


def _millis() -> int:
    return int(time.monotonic() * 1000)


class AmbientReader(Protocol):
    """A temperature/humidity sensor; failed readings come back as NaN."""

    def read_temperature(self) -> float: ...

    def read_humidity(self) -> float: ...

    def compute_heat_index(
        self, temperature: float, humidity: float, is_fahrenheit: bool
    ) -> float: ...


@dataclass(frozen=True)
class AmbientReading:
    temperature: float = math.nan
    humidity: float = math.nan
    heat_index: float = math.nan
    valid: bool = False


class AmbientSampler:
    """Samples an ambient sensor no more often than ``min_interval_ms``."""

    def __init__(
        self,
        reader: AmbientReader,
        clock: Callable[[], int] | None = None,
        min_interval_ms: int = DEFAULT_MIN_INTERVAL_MS,
    ) -> None:
        self.reader = reader
        self.clock = clock or _millis
        self.min_interval_ms = min_interval_ms
        self.last_collected = 0

    def can_collect(self) -> bool:
        """True, and restart the interval, if enough time has passed."""
        now = self.clock()
        if now - self.last_collected >= self.min_interval_ms:
            self.last_collected = now
            return True
        return False

    def measure(self) -> AmbientReading:
        """Return a reading; ``valid`` is False when too early or on failure."""
        if not self.can_collect():
            return AmbientReading()
        temperature = self.reader.read_temperature()
        humidity = self.reader.read_humidity()
        if math.isnan(temperature) or math.isnan(humidity):
            log.error("invalid readings from the DHT sensor")
            return AmbientReading()
        heat_index = self.reader.compute_heat_index(
            temperature, humidity, is_fahrenheit=False
        )
        return AmbientReading(temperature, humidity, heat_index, True)


def echo_to_cm(duration_us: float) -> float:
    """Convert an echo round-trip time in microseconds to centimetres."""
    return duration_us * SOUND_SPEED_CM_PER_US / 2


@dataclass(frozen=True)
class DistanceReading:
    cm: float
    threshold: float
    alarm: bool


class DistanceSensor:
    """Ultrasonic distance sensor.

    ``pulse_reader`` fires the trigger pulse and returns the echo
    duration in microseconds.
    """

    def __init__(
        self,
        pulse_reader: Callable[[], float],
        threshold: float = DEFAULT_DISTANCE_THRESHOLD_CM,
    ) -> None:
        self.pulse_reader = pulse_reader
        self.threshold = threshold

    def measure(self) -> DistanceReading:
        cm = echo_to_cm(self.pulse_reader())
        return DistanceReading(cm=cm, threshold=self.threshold, alarm=cm >= self.threshold)


class Phase(enum.Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


@dataclass
class TrafficLight:
    """Three-lamp traffic light; exactly one lamp is lit, starting at green."""

    phase: Phase = field(default=Phase.GREEN)

    def green(self) -> None:
        self.phase = Phase.GREEN

    def yellow(self) -> None:
        self.phase = Phase.YELLOW

    def red(self) -> None:
        self.phase = Phase.RED

    def lit(self) -> dict[Phase, bool]:
        """Which lamps are on."""
        return {phase: phase is self.phase for phase in Phase}