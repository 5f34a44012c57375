"""
Celery application configuration for background pipeline steps.

Long-running retrying workflows (automerge waiting on external CI, install
verification waiting on the registry) run here instead of blocking the
caller. Tasks are defined in pipeline_tasks.py.
"""

import structlog
from celery import Celery
from celery.signals import setup_logging, worker_init
from prometheus_client import start_http_server

from pipeline_toolkit.config import settings
from pipeline_toolkit.logging_config import configure_logging

logger = structlog.get_logger(__name__)

celery_app = Celery(
    "pipeline_toolkit",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    # Task execution
    task_time_limit=settings.CELERY_TASK_TIME_LIMIT,  # Hard limit (kills task)
    task_soft_time_limit=settings.CELERY_TASK_TIME_LIMIT - 30,  # Soft limit (raises exception)

    # Worker settings
    worker_concurrency=settings.CELERY_WORKER_CONCURRENCY,
    worker_prefetch_multiplier=1,  # Tasks sleep for long stretches between attempts

    # Serialization
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],

    # Timezone
    timezone="UTC",
    enable_utc=True,

    # Result backend
    result_expires=3600,

    # Task tracking
    task_track_started=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
)


@setup_logging.connect
def _setup_logging(**kwargs) -> None:
    """Route worker logging through structlog instead of Celery's defaults."""
    configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)


@worker_init.connect
def _start_metrics_server(**kwargs) -> None:
    """Expose Prometheus metrics from the worker.

    Counters live in the process that runs the task, so a single scrape
    target needs the threads or solo pool.
    """
    if settings.PROMETHEUS_ENABLED:
        start_http_server(settings.METRICS_PORT)
        logger.info("Prometheus metrics server started", port=settings.METRICS_PORT)


celery_app.autodiscover_tasks(["pipeline_toolkit.tasks"])
