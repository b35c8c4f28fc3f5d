from shared.metrics import get_counter, get_gauge

SERVICE = "replica_dashboard"

# Stream consumption
STREAM_CONNECTS_TOTAL = get_counter(
    "stream_connects_total", "Websocket connections established.", SERVICE
)
STREAM_DISCONNECTS_TOTAL = get_counter(
    "stream_disconnects_total", "Websocket connections lost or closed.", SERVICE
)
STREAM_MESSAGES_TOTAL = get_counter(
    "stream_messages_total",
    "Stream messages applied to the registry, by kind.",
    SERVICE,
    labelnames=("kind",),
)
STREAM_DECODE_FAILURES_TOTAL = get_counter(
    "stream_decode_failures_total", "Stream payloads dropped as malformed.", SERVICE
)

# Session state
REGISTRY_SIZE = get_gauge(
    "registry_replicas", "Replicas currently tracked in the registry.", SERVICE
)
HISTORY_SAMPLES = get_gauge(
    "history_samples", "Samples currently retained across all replicas.", SERVICE
)

# Admin polling
POLL_SUCCESS_TOTAL = get_counter(
    "poll_success_total",
    "Successful admin resource fetches.",
    SERVICE,
    labelnames=("resource",),
)
POLL_FAILURES_TOTAL = get_counter(
    "poll_failures_total",
    "Failed admin resource fetches.",
    SERVICE,
    labelnames=("resource",),
)
POLL_DISCARDED_TOTAL = get_counter(
    "poll_discarded_total",
    "Admin results dropped because their polling generation had ended.",
    SERVICE,
    labelnames=("resource",),
)
