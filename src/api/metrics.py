from prometheus_client import Counter, Histogram, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        # Try to create it
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # If it already exists, retrieve it from the registry
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "taskorg_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "taskorg_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

NOTES_RECEIVED_TOTAL = get_or_create_metric(
    "taskorg_notes_received_total", "Total raw notes submitted for parsing", Counter
)

TASKS_PARSED_TOTAL = get_or_create_metric(
    "taskorg_tasks_parsed_total", "Total tasks created from notes", Counter
)

AI_FAILURES_TOTAL = get_or_create_metric(
    "taskorg_ai_failures_total", "AI gateway failures", Counter, labelnames=["reason"]
)
