import time
import logging
from datetime import datetime, timezone

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from .config import settings
from .infrastructure.db import engine
from .infrastructure.models import Base
from .infrastructure.metrics import (
    metrics_endpoint,
    http_requests_total,
    http_request_duration_seconds
)
from .infrastructure.rate_limit import limiter
from .interfaces.http.errors import register_exception_handlers
from .interfaces.http.responses import ok
from .interfaces.http.routers import auth as auth_router
from .interfaces.http.routers import courses as courses_router
from .interfaces.http.routers import students as students_router
from .interfaces.http.routers import teachers as teachers_router
from .interfaces.http.routers import users as users_router

VERSION = "1.0.0"

# Настройка структурированного логирования
log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(ensure_ascii=False)
    ],
    wrapper_class=structlog.make_filtering_bound_logger(log_level),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

started_at = time.time()

app = FastAPI(title="Student Information API", version=VERSION)
app.state.limiter = limiter
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Кодировка ответа, метрики и лог каждого запроса
@app.middleware("http")
async def add_charset_header(request: Request, call_next):
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
    logger.info("Starting student information service", version=VERSION, environment=settings.ENVIRONMENT)
    Base.metadata.create_all(bind=engine)

    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database connection established")


@app.on_event("shutdown")
def on_shutdown():
    engine.dispose()
    logger.info("Database connection closed")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@app.get("/")
def root():
    return ok({
        "message": "Öğrenci Bilgi Sistemi API",
        "version": VERSION,
        "status": "running",
        "timestamp": _now(),
    }, "API çalışıyor").model_dump(exclude_none=True)


@app.get("/health")
def health():
    return ok({
        "status": "healthy",
        "timestamp": _now(),
        "uptime": round(time.time() - started_at, 2),
    }, "Sistem sağlıklı").model_dump(exclude_none=True)


@app.get("/metrics")
def metrics():
    """Prometheus metrics endpoint"""
    return metrics_endpoint()


app.include_router(auth_router.router)
app.include_router(users_router.router)
app.include_router(students_router.router)
app.include_router(teachers_router.router)
app.include_router(courses_router.router)


def run() -> None:
    uvicorn.run("student_info.main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
