"""
Celery tasks for retrying pipeline steps.

Tasks accept JSON-serializable arguments and return dicts for compatibility
with Celery's JSON serialization. Retrying is owned by the workflows, so
these tasks never use Celery-level autoretry.
"""

import asyncio
import time

import structlog
from celery import Task

from pipeline_toolkit.clients.github_client import GitHubReviewClient
from pipeline_toolkit.clients.subprocess_runner import SubprocessRunner
from pipeline_toolkit.config import settings
from pipeline_toolkit.models.package_models import PackageMetadata
from pipeline_toolkit.monitoring.reporting import StructlogReporter
from pipeline_toolkit.retry.engine import RetryEngine
from pipeline_toolkit.tasks.celery_app import celery_app
from pipeline_toolkit.workflows.automerge import AutomergeWorkflow, automerge_policy
from pipeline_toolkit.workflows.install_verification import verify_npm_package
from pipeline_toolkit.workflows.outcome import outcome_to_dict

logger = structlog.get_logger(__name__)


class PipelineTask(Task):
    """
    Base task class with resource initialization.

    The subprocess runner is shared per worker process. HTTP clients are
    created inside each task's event loop and closed before it ends.
    """

    _runner = None

    @property
    def runner(self) -> SubprocessRunner:
        """Get or initialize subprocess runner (singleton per worker)."""
        if self._runner is None:
            self._runner = SubprocessRunner()
        return self._runner


async def _automerge(change_id: int) -> dict:
    client = GitHubReviewClient.from_settings(settings)
    try:
        workflow = AutomergeWorkflow(
            client,
            reporter=StructlogReporter(workflow="automerge", change_id=change_id),
            policy=automerge_policy(settings),
            engine=RetryEngine(),
        )
        return outcome_to_dict(await workflow.execute(change_id))
    finally:
        await client.aclose()


@celery_app.task(bind=True, base=PipelineTask, name="automerge_pull_request")
def automerge_task(self: PipelineTask, change_id: int) -> dict:
    """
    Background automerge of one pull request.

    Args:
        change_id: Pull request number

    Returns:
        Outcome as dict ({"outcome": "success" | "aborted" | "fatal", ...})
    """
    start_time = time.time()
    logger.info("Automerge task started", task_id=self.request.id, change_id=change_id)

    result = asyncio.run(_automerge(change_id))

    logger.info(
        "Automerge task finished",
        task_id=self.request.id,
        change_id=change_id,
        outcome=result["outcome"],
        duration_ms=int((time.time() - start_time) * 1000),
    )
    return result


@celery_app.task(bind=True, base=PipelineTask, name="verify_npm_package")
def verify_npm_task(self: PipelineTask, metadata_dict: dict) -> dict:
    """
    Background install verification of a published package.

    Args:
        metadata_dict: PackageMetadata as dict (JSON-serializable)

    Returns:
        {"package": "<name>@<version>", "verified": bool}

    Raises:
        ComponentActionError: Install retries exhausted or a smoke test failed
    """
    metadata = PackageMetadata.model_validate(metadata_dict)
    logger.info("Install verification task started", task_id=self.request.id, package=metadata.spec)

    verified = asyncio.run(
        verify_npm_package(
            metadata,
            self.runner,
            settings,
            reporter=StructlogReporter(workflow="install_verification", package=metadata.spec),
        )
    )
    return {"package": metadata.spec, "verified": verified}
