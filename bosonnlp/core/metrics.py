# File: bosonnlp/core/metrics.py
from prometheus_client import Counter, Histogram

API_REQUESTS_TOTAL = Counter(
    "bosonnlp_api_requests_total",
    "Total number of requests sent to the BosonNLP HTTP API.",
    ["endpoint", "status"]
)

API_REQUEST_DURATION_SECONDS = Histogram(
    "bosonnlp_api_request_duration_seconds",
    "Duration of calls to the BosonNLP HTTP API.",
    ["endpoint"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30]
)

API_ERRORS_TOTAL = Counter(
    "bosonnlp_api_errors_total",
    "Total number of failed calls to the BosonNLP HTTP API.",
    ["endpoint", "error_type"]
)

TASK_DOCUMENTS_PUSHED_TOTAL = Counter(
    "bosonnlp_task_documents_pushed_total",
    "Total number of documents pushed to cluster/comments tasks.",
    ["task_kind"]
)
