"""Ingestion layer.

Turns routed MQTT messages into decoded payloads and hands them to the
state store, coalescing lighting bursts on the way.
"""
