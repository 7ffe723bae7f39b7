from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from flask import Response, request
import time
from functools import wraps
import logging

logger = logging.getLogger("main")

# Database Metrics
db_query_duration_seconds = Histogram(
    "article_groups_db_query_duration_seconds", "Mirror store query duration", ["operation"]
)

db_query_total = Counter("article_groups_db_queries_total", "Total mirror store queries", ["operation", "status"])

mirror_records_total = Gauge("article_groups_mirror_records_total", "Rows in the articles_groups table")

# Classification Metrics
classifications_total = Counter(
    "article_groups_classifications_total", "Classification runs", ["operation", "outcome"]
)

capacity_denials_total = Counter(
    "article_groups_capacity_denials_total", "Candidate flags denied by a layout limit", ["flag"]
)

# Rendering Metrics
layouts_rendered_total = Counter("article_groups_layouts_rendered_total", "Layouts processed", ["status"])

render_duration_seconds = Histogram("article_groups_render_duration_seconds", "Time spent in render_all")

artifact_writes_total = Counter(
    "article_groups_artifact_writes_total", "Artifact writes to the object store", ["mode", "status"]
)

# Cache Metrics
cache_requests_total = Counter("article_groups_cache_requests_total", "Pipeline cache lookups", ["cache", "result"])

# API Metrics
api_request_duration_seconds = Histogram(
    "article_groups_api_request_duration_seconds", "API request duration", ["endpoint", "method"]
)

api_requests_total = Counter(
    "article_groups_api_requests_total", "Total API requests", ["endpoint", "method", "status_code"]
)


def init_metrics(app):
    @app.route("/metrics")
    def metrics():
        update_db_metrics()
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)

    @app.before_request
    def before_request():
        request.start_time = time.time()

    @app.after_request
    def after_request(response):
        duration = time.time() - getattr(request, "start_time", time.time())
        api_request_duration_seconds.labels(endpoint=request.endpoint or "unknown", method=request.method).observe(
            duration
        )
        api_requests_total.labels(
            endpoint=request.endpoint or "unknown", method=request.method, status_code=response.status_code
        ).inc()
        return response

    app.logger.info("Prometheus metrics initialized at /metrics")


def update_db_metrics():
    """Refresh the mirror table row count."""
    try:
        from repositories.articles_groups_repository import ArticlesGroupsRepository

        mirror_records_total.set(ArticlesGroupsRepository.count())
    except Exception as e:
        logger.debug(f"Could not refresh mirror metrics: {e}")


def track_db_query(operation):
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
                db_query_total.labels(operation=operation, status="success").inc()
                return result
            except Exception:
                db_query_total.labels(operation=operation, status="error").inc()
                raise
            finally:
                duration = time.time() - start_time
                db_query_duration_seconds.labels(operation=operation).observe(duration)

        return wrapper

    return decorator
