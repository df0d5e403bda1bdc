import math

import pytest

from sensornode.sensors import HumiditySensor, TemperatureSensor


class FakeClock:
    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now


class Readings:
    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.values.pop(0)


def test_initial_limits_and_units():
    clock = FakeClock()
    temp = TemperatureSensor(Readings(), 0, 19, clock)
    hum = HumiditySensor(Readings(), 1, 18, clock)
    assert (temp.min_value, temp.max_value, temp.units) == (999.0, -999.0, "Celsius")
    assert (hum.min_value, hum.max_value, hum.units) == (100.0, 0.0, "%RH")
    assert temp.is_valid() is False


def test_begin_takes_first_reading():
    clock = FakeClock(2000)
    sensor = TemperatureSensor(Readings(21.5), 0, 19, clock)
    sensor.begin()
    assert sensor.is_valid() is True
    assert sensor.current_value == 21.5
    assert sensor.min_value == sensor.max_value == 21.5


def test_begin_before_interval_keeps_default_value():
    reader = Readings(21.5)
    sensor = HumiditySensor(reader, 0, 19, FakeClock(0))
    sensor.begin()
    assert reader.calls == 0
    assert sensor.current_value == 0.0
    assert sensor.is_valid() is True


def test_update_is_throttled():
    clock = FakeClock(5000)
    reader = Readings(20.0, 30.0)
    sensor = TemperatureSensor(reader, 0, 19, clock)
    sensor.update()
    clock.now += 1999
    assert sensor.read_value() == 20.0
    assert reader.calls == 1
    clock.now += 1
    assert sensor.read_value() == 30.0


def test_min_max_track_readings():
    clock = FakeClock(2000)
    sensor = HumiditySensor(Readings(50.0, 40.0, 70.0, 55.0), 0, 19, clock)
    seen = []
    for _ in range(4):
        seen.append(sensor.read_value())
        clock.now += 2000
    assert sensor.min_value == min(seen)
    assert sensor.max_value == max(seen)
    assert sensor.current_value == seen[-1]


def test_nan_reading_ignored_and_retried():
    clock = FakeClock(4000)
    reader = Readings(float("nan"), 22.0)
    sensor = TemperatureSensor(reader, 0, 19, clock)
    sensor.update()
    assert sensor.current_value == 0.0
    assert sensor.last_update == 0
    sensor.update()
    assert sensor.current_value == 22.0
    assert sensor.last_update == 4000


def test_reset_min_max():
    clock = FakeClock(2000)
    sensor = TemperatureSensor(Readings(10.0, 30.0, 20.0), 0, 19, clock)
    for _ in range(3):
        sensor.update()
        clock.now += 2000
    sensor.reset_min_max()
    assert sensor.min_value == sensor.max_value == sensor.current_value == 20.0


def test_nan_current_is_invalid():
    sensor = HumiditySensor(Readings(), 0, 19, FakeClock())
    sensor.begin()
    sensor.current_value = math.nan
    assert sensor.is_valid() is False


@pytest.mark.parametrize("cls", [TemperatureSensor, HumiditySensor])
def test_instance_and_pin_kept(cls):
    sensor = cls(Readings(), 1, 18, FakeClock())
    assert (sensor.instance, sensor.pin) == (1, 18)