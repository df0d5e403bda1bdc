"""Sensor node building blocks: IPSO sensors, ambient and distance sampling, CoAP codec and CBOR measurement buffer."""

__version__ = "0.1.0"