"""
Install verification for freshly published npm packages.

Right after a release the registry may not serve the new version yet, so
the install is retried: every failure is transient until the elapsed-time
ceiling is reached, at which point the component action fails. There is no
stage machine here; the RetryEngine is used directly.
"""

import dataclasses
from typing import Optional
import structlog

from pipeline_toolkit.clients.exceptions import CommandError
from pipeline_toolkit.clients.subprocess_runner import SubprocessRunner
from pipeline_toolkit.config import Settings
from pipeline_toolkit.errors import ComponentActionError
from pipeline_toolkit.models.package_models import CommandResult, PackageMetadata
from pipeline_toolkit.monitoring.metrics import (
    retry_attempts_total,
    retry_delay_seconds,
    workflow_outcomes_total,
)
from pipeline_toolkit.monitoring.reporting import ReportingSink, StructlogReporter
from pipeline_toolkit.retry.engine import RetryEngine
from pipeline_toolkit.retry.policy import UNBOUNDED, LimitReason, RetryPolicy
from pipeline_toolkit.workflows.base import ms_to_seconds

logger = structlog.get_logger(__name__)

WORKFLOW_NAME = "install_verification"


def install_policy(settings: Settings, retry_ceiling_seconds: Optional[int] = None) -> RetryPolicy:
    """Unbounded attempts under the configured (or overridden) elapsed ceiling."""
    ceiling = settings.RETRY_CEILING_SECONDS if retry_ceiling_seconds is None else retry_ceiling_seconds
    return RetryPolicy(
        max_attempts=UNBOUNDED,
        max_total_elapsed_ms=ceiling * 1000,
        min_delay_ms=settings.RETRY_MIN_DELAY_MS,
        max_delay_ms=settings.RETRY_MAX_DELAY_MS,
        max_jitter_ms=settings.RETRY_MAX_JITTER_MS,
    )


class InstallVerification:
    """
    Retries `npm install <name>@<version>` until it succeeds.

    Attributes:
        runner: Subprocess runner used for npm
        reporter: Sink for progress notices
        policy: Retry limits and delays (hooks are supplied here)
        engine: RetryEngine driving the attempts
    """

    def __init__(
        self,
        runner: SubprocessRunner,
        reporter: Optional[ReportingSink] = None,
        policy: Optional[RetryPolicy] = None,
        engine: Optional[RetryEngine] = None,
    ):
        self.runner = runner
        self.reporter = reporter or StructlogReporter(workflow=WORKFLOW_NAME)
        self.policy = policy or RetryPolicy(max_attempts=UNBOUNDED)
        self.engine = engine or RetryEngine()

    async def run(self, package_name: str, package_version: str) -> CommandResult:
        """
        Install `package_name@package_version`, retrying transient failures.

        Raises:
            ComponentActionError: The elapsed ceiling (or attempt limit) ran out
        """
        spec = f"{package_name}@{package_version}"

        def on_failure(error: Exception, attempt_number: int, next_delay_ms: float, total_elapsed_ms: float) -> bool:
            retry_attempts_total.labels(workflow=WORKFLOW_NAME, classification="transient").inc()
            retry_delay_seconds.labels(workflow=WORKFLOW_NAME).observe(next_delay_ms / 1000)
            self.reporter.notice(
                f"transient failure at {ms_to_seconds(total_elapsed_ms)}s: attempt #{attempt_number} "
                f"installing {spec} did not succeed: {error}\n---\n"
                f"next attempt in {ms_to_seconds(next_delay_ms)} seconds..."
            )
            return True

        def on_limit_reached(error: Exception, attempt_number: int, reason: LimitReason, total_elapsed_ms: float) -> None:
            workflow_outcomes_total.labels(workflow=WORKFLOW_NAME, outcome="limit_exceeded").inc()
            message = (
                f"fatal error at {ms_to_seconds(total_elapsed_ms)}s: unable to install {spec} "
                f"after {attempt_number} tries: {error}"
            )
            self.reporter.notice(message)
            raise ComponentActionError(
                message,
                details={"attempt_number": attempt_number, "reason": reason.value, "total_elapsed_ms": total_elapsed_ms},
            ) from error

        policy = dataclasses.replace(self.policy, on_failure=on_failure, on_limit_reached=on_limit_reached)

        logger.info("Attempting package install", package=spec)
        result = await self.engine.attempt(
            lambda: self.runner.run("npm", ["install", spec], env={"NODE_ENV": "production"}),
            policy,
        )
        workflow_outcomes_total.labels(workflow=WORKFLOW_NAME, outcome="success").inc()
        logger.info("Package install succeeded", package=spec)
        return result


async def verify_npm_package(
    metadata: PackageMetadata,
    runner: SubprocessRunner,
    settings: Settings,
    reporter: Optional[ReportingSink] = None,
    engine: Optional[RetryEngine] = None,
) -> bool:
    """
    Verify a published package installs and loads.

    Skipped when CI/CD is skipped for the commit or the package is private.
    Otherwise retries the install, then runs a require() smoke test and, for
    packages shipping a CLI, `npx --no-install <name> --help`.

    Returns:
        True if verification ran, False if it was skipped

    Raises:
        ComponentActionError: Install retries exhausted or a smoke test failed
    """
    if metadata.should_skip_ci or metadata.should_skip_cd or metadata.has_private:
        logger.debug(
            "Skipped install verification",
            package=metadata.spec,
            should_skip_ci=metadata.should_skip_ci,
            should_skip_cd=metadata.should_skip_cd,
            has_private=metadata.has_private,
        )
        return False

    verification = InstallVerification(
        runner,
        reporter=reporter,
        policy=install_policy(settings, metadata.retry_ceiling_seconds),
        engine=engine,
    )
    await verification.run(metadata.package_name, metadata.package_version)

    try:
        await runner.run("node", ["-e", f"const test = require('{metadata.package_name}');"])
    except CommandError as e:
        raise ComponentActionError(f"generic execution test failed: {e}") from e

    if metadata.has_bin:
        try:
            await runner.run("npx", ["--no-install", metadata.package_name, "--help"])
        except CommandError as e:
            raise ComponentActionError(f"npx cli test failed: {e}") from e

    logger.info("Package verified", package=metadata.spec, has_bin=metadata.has_bin)
    return True
