from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter("http_requests_total", "Total HTTP requests", ["method", "endpoint", "status"])
REQUEST_DURATION = Histogram("http_request_duration_seconds", "HTTP request duration")
ERROR_COUNT = Counter("http_errors_total", "Total HTTP errors", ["error_code", "status_code"])

WEBHOOK_EVENTS = Counter("webhook_events_total", "Verified webhook events by type", ["event_type"])
WEBHOOK_REJECTED = Counter("webhook_rejected_total", "Webhook deliveries failing signature verification")
SIDE_EFFECT_OUTCOMES = Counter(
    "webhook_side_effects_total", "Outcome of webhook-triggered side effects", ["effect", "outcome"]
)
SELF_PINGS = Counter("self_ping_total", "Keep-alive pings by outcome", ["outcome"])
