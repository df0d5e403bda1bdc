"""Buffered measurement storage: JSON lines on disk, batched out as CBOR."""

from __future__ import annotations

import json
import logging
import math
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import cbor2

log = logging.getLogger(__name__)

BUFFER_FILE = "buffer.jsonl"
CSV_FILE = "log.csv"
CSV_HEADER = "timestamp,device,temp,umid,ic,accel_x,accel_y,accel_z,motor"
DEFAULT_DEVICE = "ESP32_DEVICE_001"

NUMBER_FIELDS = ("temp", "umid", "ic", "accel_x", "accel_y", "accel_z")

_CBOR_ARRAY_START = b"\x9f"
_CBOR_MAP_START = b"\xbf"
_CBOR_BREAK = b"\xff"
_CBOR_FALSE = b"\xf4"
_CBOR_TRUE = b"\xf5"
_CBOR_FLOAT32 = 0xFA


@dataclass
class Measurement:
    """One set of readings from the node."""

    temperature: float
    humidity: float
    heat_index: float
    accel_x: float
    accel_y: float
    accel_z: float
    motor_status: bool = False
    timestamp: int = 0
    device: str = ""


def _json_number(value: float) -> float | None:
    """JSON has no NaN or infinity; such readings are stored as null."""
    value = float(value)
    return value if math.isfinite(value) else None


def _as_float(value: Any) -> float:
    if isinstance(value, (bool, int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def _as_uint32(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number = int(value)
        return number if 0 <= number <= 0xFFFFFFFF else 0
    if isinstance(value, str):
        try:
            return _as_uint32(int(value))
        except ValueError:
            return 0
    return 0


def _motor_status(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value in ("true", "1")
    return False


def _float32(value: float) -> bytes:
    return struct.pack(">Bf", _CBOR_FLOAT32, value)


def _encode_record(record: dict[str, Any]) -> bytes:
    """One measurement as an indefinite-length CBOR map."""
    device = record.get("device")
    out = bytearray(_CBOR_MAP_START)
    out += cbor2.dumps("device")
    out += cbor2.dumps(device if isinstance(device, str) else "")
    for key in NUMBER_FIELDS:
        if record.get(key) is not None:
            out += cbor2.dumps(key)
            out += _float32(_as_float(record[key]))
    out += cbor2.dumps("motor_status")
    out += _CBOR_TRUE if _motor_status(record.get("motor_status")) else _CBOR_FALSE
    if record.get("ts") is not None:
        out += cbor2.dumps("ts")
        out += cbor2.dumps(_as_uint32(record["ts"]))
    out += _CBOR_BREAK
    return bytes(out)


class MeasurementStore:
    """Appends measurements to a JSON-lines buffer and a CSV debug log.

    Files live under ``root``; the store initialises itself on first use.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.buffer_path = self.root / BUFFER_FILE
        self.csv_path = self.root / CSV_FILE
        self.ok = False

    def initialize(self) -> None:
        """Create the storage directory, the buffer and the CSV log."""
        if self.ok:
            return
        self.root.mkdir(parents=True, exist_ok=True)
        self.buffer_path.touch(exist_ok=True)
        if not self.csv_path.exists():
            self.csv_path.write_text(CSV_HEADER + "\n", encoding="utf-8")
        self.ok = True
        log.info("storage ready at %s", self.root)

    def _ensure(self) -> None:
        if not self.ok:
            self.initialize()

    def save(self, measurement: Measurement) -> None:
        """Append one measurement as a JSON line and a CSV row."""
        self._ensure()
        record = {
            "device": measurement.device or DEFAULT_DEVICE,
            "temp": _json_number(measurement.temperature),
            "umid": _json_number(measurement.humidity),
            "ic": _json_number(measurement.heat_index),
            "accel_x": _json_number(measurement.accel_x),
            "accel_y": _json_number(measurement.accel_y),
            "accel_z": _json_number(measurement.accel_z),
            "motor_status": "true" if measurement.motor_status else "false",
        }
        with self.buffer_path.open("a", encoding="utf-8") as buffer:
            buffer.write(json.dumps(record, separators=(",", ":")) + "\n")
        m = measurement
        motor = "true" if m.motor_status else "false"
        with self.csv_path.open("a", encoding="utf-8") as csv_file:
            csv_file.write(
                f"{m.timestamp},{m.device},{m.temperature:.2f},{m.humidity:.2f},"
                f"{m.heat_index:.5f},{m.accel_x:.5f},{m.accel_y:.5f},"
                f"{m.accel_z:.5f},{motor}\n"
            )

    def create_batch(self) -> bytes:
        """Encode every buffered measurement as one CBOR array of maps.

        Blank lines and lines that are not JSON objects are skipped.
        """
        self._ensure()
        out = bytearray(_CBOR_ARRAY_START)
        with self.buffer_path.open(encoding="utf-8") as buffer:
            for line in buffer:
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError:
                    log.warning("invalid JSON line in buffer, skipped")
                    continue
                if not isinstance(record, dict):
                    log.warning("invalid JSON line in buffer, skipped")
                    continue
                out += _encode_record(record)
        out += _CBOR_BREAK
        log.info("CBOR batch of %d bytes created", len(out))
        return bytes(out)

    def csv_text(self) -> str:
        """The contents of the CSV log."""
        self._ensure()
        if not self.csv_path.exists():
            raise FileNotFoundError(self.csv_path)
        return self.csv_path.read_text(encoding="utf-8")

    def clear(self) -> None:
        """Empty the measurement buffer."""
        self._ensure()
        self.buffer_path.unlink(missing_ok=True)
        self.buffer_path.touch()
        log.info("buffer cleared")

    def count(self) -> int:
        """Number of buffered lines."""
        self._ensure()
        if not self.buffer_path.exists():
            return 0
        return self.buffer_path.read_bytes().count(b"\n")

    def buffer_size(self) -> int:
        """Size of the buffer file in bytes."""
        self._ensure()
        if not self.buffer_path.exists():
            return 0
        return self.buffer_path.stat().st_size