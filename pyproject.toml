[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sensornode"
version = "0.1.0"
description = "Building blocks for a small sensor node: IPSO temperature and humidity sensors, ambient and distance sampling, a CoAP codec with LwM2M message builders, and a CBOR measurement buffer."
requires-python = ">=3.10"
dependencies = [
    "cbor2",
]
keywords = ["lwm2m", "coap", "ipso", "iot", "sensors", "cbor", "jsonl"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Internet",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["sensornode"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
