"""
Celery tasks for background pipeline steps.

- celery_app.py: Celery application configuration (broker, backend, etc.)
- pipeline_tasks.py: Task definitions (automerge, verify_npm)
"""

from pipeline_toolkit.tasks.celery_app import celery_app
from pipeline_toolkit.tasks.pipeline_tasks import automerge_task, verify_npm_task

__all__ = [
    "celery_app",
    "automerge_task",
    "verify_npm_task",
]
