import time
import logging
import structlog
from fastapi import FastAPI, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .application.use_cases.manage_roster import RosterCoordinator
from .infrastructure import db
from .infrastructure.models import Base
from .infrastructure.repositories import build_store
from .infrastructure.metrics import (
    metrics_endpoint,
    http_requests_total,
    http_request_duration_seconds
)
from .interfaces.http.routers import roster as roster_router
from .interfaces.http.routers import students as students_router
from .config import settings

# Настройка структурированного логирования
log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(log_level),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

app = FastAPI(title="Roster Service", version="0.1.0")


@app.middleware("http")
async def observe_request(request: Request, call_next):
    start_time = time.time()
    method = request.method
    path = request.url.path

    response = await call_next(request)

    if response.headers.get("content-type", "").startswith("application/json"):
        response.headers["content-type"] = "application/json; charset=utf-8"

    # Метрики
    duration = time.time() - start_time
    status_code = response.status_code
    http_requests_total.labels(method=method, endpoint=path, status=status_code).inc()
    http_request_duration_seconds.labels(method=method, endpoint=path).observe(duration)

    logger.info(
        "http_request",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=round(duration * 1000, 2)
    )

    return response


@app.on_event("startup")
def on_startup():
    logger.info("Starting roster service", version="0.1.0", backend=settings.STORE_BACKEND)
    if settings.STORE_BACKEND == "remote":
        try:
            Base.metadata.create_all(bind=db.engine)
            with db.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Database connection established")
        except SQLAlchemyError as e:
            # сервис поднимается; mount() ниже покажет тост об ошибке загрузки
            logger.error("Database unavailable at startup", error=str(e))

    store = build_store(settings)
    coordinator = RosterCoordinator(store)
    app.state.store = store
    app.state.coordinator = coordinator
    # первичная загрузка списка; ошибка превращается в тост, а не в падение
    coordinator.mount()


@app.on_event("shutdown")
def on_shutdown():
    coordinator = getattr(app.state, "coordinator", None)
    if coordinator is not None:
        coordinator.unmount()


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    """Prometheus metrics endpoint"""
    return metrics_endpoint()


app.include_router(roster_router.router)
app.include_router(students_router.router)
