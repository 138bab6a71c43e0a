import time
from contextlib import contextmanager

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Метрики для HTTP запросов
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Метрики для хранилища студентов
store_operations_total = Counter(
    'store_operations_total',
    'Total student store operations',
    ['backend', 'operation', 'outcome']
)

store_operation_duration_seconds = Histogram(
    'store_operation_duration_seconds',
    'Student store operation duration in seconds',
    ['backend', 'operation']
)


@contextmanager
def track_store_operation(backend: str, operation: str):
    start = time.time()
    outcome = "error"
    try:
        yield
        outcome = "ok"
    finally:
        store_operations_total.labels(backend=backend, operation=operation, outcome=outcome).inc()
        store_operation_duration_seconds.labels(backend=backend, operation=operation).observe(time.time() - start)


def metrics_endpoint():
    """Endpoint для Prometheus метрик"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
