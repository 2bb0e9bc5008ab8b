from prometheus_client import Counter, Histogram, Gauge, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        # Try to create it
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # If it already exists, retrieve it from the registry
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "taskboard_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "taskboard_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

TASKS_EXTRACTED_TOTAL = get_or_create_metric(
    "taskboard_tasks_extracted_total", "Total tasks extracted from free text", Counter
)

EXTRACTION_FAILURES_TOTAL = get_or_create_metric(
    "taskboard_extraction_failures_total",
    "Failed extraction calls by error kind",
    Counter,
    labelnames=["kind"],
)

OPEN_TASKS = get_or_create_metric(
    "taskboard_open_tasks", "Tasks not yet completed", Gauge
)
