"""State/store layer.

This package is the single source of truth for the current lighting,
telemetry and selection of every known device. Inbound MQTT updates and
UI intents both land here.
"""
