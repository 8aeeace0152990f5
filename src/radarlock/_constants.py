"""Internal constants shared across the library."""

DEFAULT_RADAR_BASE_URL = "http://192.168.1.100:8080"
TRACKS_ENDPOINT = "/api/tracks.json"
USER_AGENT = "radarlock/1"

# ------------------------------------------------------------------
# Radar polling and staleness (seconds)
# ------------------------------------------------------------------

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_STALE_TIMEOUT = 5.0
DEFAULT_STALE_REMOVAL_TIMEOUT = 60.0
MIN_POLL_INTERVAL = 1.0
MIN_STALE_TIMEOUT = 1.0
DEFAULT_REQUEST_TIMEOUT = 5.0

# ------------------------------------------------------------------
# Lock safety interlocks
# ------------------------------------------------------------------

DEFAULT_STALE_GRACE_DURATION = 10.0
DEFAULT_LOW_BATTERY_THRESHOLD = 20
DEFAULT_CRITICAL_BATTERY_THRESHOLD = 10

# ------------------------------------------------------------------
# Actuator command throttling
# ------------------------------------------------------------------

DEFAULT_ACTUATOR_TIMEOUT = 5.0
DEFAULT_MISSION_UPDATE_INTERVAL = 3.0
DEFAULT_MINIMUM_DISTANCE_M = 5.0

# ------------------------------------------------------------------
# MQTT health telemetry
# ------------------------------------------------------------------

DEFAULT_MQTT_PORT = 1883
DEFAULT_MQTT_TOPIC = "radarlock/actuator/health"
DEFAULT_MQTT_KEEPALIVE = 60
DEFAULT_HEALTH_RETRY_DELAY = 5.0
EVENT_QUEUE_MAXSIZE = 256
