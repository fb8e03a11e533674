"""Internal constants shared across the library."""

BROKER_HOST = "broker.hivemq.com"
BROKER_PORT = 8884
BROKER_WS_PATH = "/mqtt"
ROOT_TOPIC = "a7b3c45d-e1f2-4a5b-8c9d-e0f1a2b3c4d5"
KNOWN_DEVICES: tuple[str, ...] = ("Ben", "Roo")

MQTT_QOS = 1
MQTT_KEEPALIVE = 60
RECONNECT_DELAY_SECONDS = 5.0

DEBOUNCE_WINDOW_SECONDS = 0.5
THROTTLE_INTERVAL_SECONDS = 0.02
OFFLINE_THRESHOLD_SECONDS = 40.0

# ------------------------------------------------------------------
# Lighting speed ranges offered by the controls
# ------------------------------------------------------------------

RAINBOW_SPEED_MIN = 1
RAINBOW_SPEED_MAX = 10
STROBE_SPEED_MIN = 1
STROBE_SPEED_MAX = 20


def clamp_speed(speed: float, minimum: int, maximum: int) -> float:
    """Clamp a UI speed value into ``minimum..maximum``."""
    return max(float(minimum), min(float(maximum), float(speed)))
