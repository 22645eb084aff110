"""
Core metrics collection for NeuRazor using Prometheus
"""
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, Info, generate_latest

from core.config import settings

# Create a global registry for the application
REGISTRY = CollectorRegistry()

# Application info
app_info = Info("neurazor_app", "NeuRazor application information", registry=REGISTRY)

# Request metrics
request_count = Counter(
    "neurazor_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

request_duration = Histogram(
    "neurazor_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=REGISTRY,
)

# Formula metrics
formula_evaluations = Counter(
    "neurazor_formula_evaluations_total",
    "Total formula evaluations",
    ["outcome"],
    registry=REGISTRY,
)

formula_evaluation_duration = Histogram(
    "neurazor_formula_evaluation_duration_seconds",
    "Time spent validating and evaluating a single formula",
    buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1),
    registry=REGISTRY,
)

# Scoring metrics
scoring_runs = Counter(
    "neurazor_scoring_runs_total",
    "Total scoring passes",
    ["game_type", "status"],
    registry=REGISTRY,
)

# Error metrics
error_count = Counter(
    "neurazor_errors_total",
    "Total number of errors",
    ["error_type", "domain"],
    registry=REGISTRY,
)


class MetricsCollector:
    """Helper class for collecting metrics"""

    def __init__(self):
        app_info.info({"version": settings.app_version, "environment": settings.environment})

    def track_request(self, method: str, endpoint: str, status: int, duration: float):
        """Track HTTP request metrics"""
        request_count.labels(method=method, endpoint=endpoint, status=str(status)).inc()
        request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def track_formula_evaluation(self, outcome: str, duration: float):
        """Track one formula validate+evaluate pass"""
        formula_evaluations.labels(outcome=outcome).inc()
        formula_evaluation_duration.observe(duration)

    def track_scoring_run(self, game_type: str, status: str = "success"):
        """Track a full scoring pass over a configuration"""
        scoring_runs.labels(game_type=game_type, status=status).inc()

    def track_error(self, error_type: str, domain: str):
        """Track errors"""
        error_count.labels(error_type=error_type, domain=domain).inc()

    def get_metrics(self) -> bytes:
        """Get current metrics in Prometheus format"""
        return generate_latest(REGISTRY)


# Global metrics collector instance
metrics = MetricsCollector()


def get_metrics_response() -> tuple[bytes, str]:
    """Get metrics response for Prometheus endpoint"""
    return metrics.get_metrics(), CONTENT_TYPE_LATEST
