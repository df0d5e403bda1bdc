# sensornode

Building blocks for a small sensor node that speaks LwM2M over CoAP:

- `sensornode.sensors`: IPSO temperature (3303) and humidity (3304)
  sensor objects that track their minimum and maximum readings;
- `sensornode.ambient`: a rate-limited ambient (temperature, humidity,
  heat index) sampler, an ultrasonic distance sensor and a traffic-light
  state;
- `sensornode.coap`: a CoAP message model, wire encoder and decoder, and
  builders for LwM2M registration, update and response messages;
- `sensornode.storage`: a measurement buffer kept as JSON lines with a CSV
  log alongside, packed into one CBOR batch on demand.

Hardware is abstracted behind plain callables, so every piece can be driven
by real drivers or by a test.

## Sensors

```python
from sensornode.sensors import TemperatureSensor, HumiditySensor

temperature = TemperatureSensor(reader=read_celsius, instance=0, pin=19, clock=millis)
temperature.begin()              # marks the sensor ready and takes a first reading
temperature.read_value()         # refreshes if due, returns current_value
temperature.min_value, temperature.max_value
temperature.reset_min_max()      # min and max become the current value
temperature.is_valid()
```

`reader` returns a reading, or NaN when the sensor fails; NaN readings are
ignored. `clock` returns milliseconds (a monotonic clock by default). A new
reading is taken at most once every two seconds. `TemperatureSensor` has
units `"Celsius"` and starts with min 999 and max -999; `HumiditySensor`
has units `"%RH"` and starts with min 100 and max 0.

## Ambient, distance and traffic light

`AmbientSampler(reader, clock, min_interval_ms=2000)` takes a reader with
`read_temperature()`, `read_humidity()` and
`compute_heat_index(temperature, humidity, is_fahrenheit)`. `measure()`
returns an `AmbientReading` with `temperature`, `humidity`, `heat_index`
and `valid`; when called before the interval has passed, or when either
reading is NaN, every value is NaN and `valid` is False.
`can_collect()` reports whether the interval has passed and, if so,
restarts it.

`echo_to_cm(duration_us)` converts an echo round trip to centimetres
(0.034 cm/µs, halved). `DistanceSensor(pulse_reader, threshold=100.0)`
returns a `DistanceReading` whose `alarm` is set when the distance is at or
above the threshold.

`TrafficLight` starts at `Phase.GREEN`; `green()`, `yellow()` and `red()`
switch phase, and `lit()` maps each `Phase` to whether its lamp is on.

## CoAP messages

```python
from sensornode import coap

message = coap.build_register(
    message_id=2,
    token=b"\x01\x02\x03\x04",
    endpoint="sensornode-demo-001",
    lifetime=300,
    objects=[(0, 0), (1, 0), (3, 0), (3311, 0)],
)
datagram = coap.encode(message)
decoded = coap.decode(datagram)
decoded.uri_path          # "rd"
coap.format_code(69)      # "2.05"
```

`build_register` makes a confirmable POST to `/rd` with the queries
`ep=`, `lt=`, `lwm2m=1.0` and `b=U` and a link-format payload.
`build_update(message_id, token, location)` makes a confirmable PUT to the
registration location and raises `ValueError` if the location is empty.
`build_response(message_type, code, message_id, token, payload)` adds a
text/plain Content-Format option when the payload is not empty.

`Message` carries `type` (`MessageType`), `code`, `message_id`, `token`,
`options` (a list of `Option`) and `payload`, with `uri_path`,
`location_path` and `is_request` helpers. `decode` raises `ValueError` on
short or truncated datagrams; `encode` raises it for tokens over 8 bytes.

## Measurement buffer

```python
from sensornode.storage import Measurement, MeasurementStore

store = MeasurementStore("data")
store.save(Measurement(22.5, 40.0, 22.1, 0.01, -0.02, 9.81, motor_status=True))
store.count()          # 1
batch = store.create_batch()
store.clear()
```

- `initialize()` creates the directory, an empty `buffer.jsonl` and a
  `log.csv` with its header; other methods call it on first use;
- `save(measurement)` appends one JSON line (non-finite numbers as null,
  device defaulting to `ESP32_DEVICE_001`) and one CSV row;
- `create_batch()` returns every buffered line as one indefinite-length
  CBOR array of maps, with numbers as 32-bit floats and `motor_status` as a
  boolean; blank and invalid lines are skipped;
- `count()` and `buffer_size()` report buffered lines and bytes;
- `clear()` empties the buffer; `csv_text()` returns the CSV log.

## What this package does not do

There is no command to run and no network loop: the package does not open
a UDP socket, register with an LwM2M server by itself, or keep a
registration alive. It has no light-control object (3311) and no component
that routes LwM2M read, write and execute requests to the sensors; the CoAP
codec and builders are there for an application to wire up.

## Tests

```
pip install -e .[test]
pytest
```