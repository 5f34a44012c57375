"""
Unit tests for npm install verification.
"""

from unittest.mock import call

import pytest

from pipeline_toolkit.clients.exceptions import CommandError
from pipeline_toolkit.errors import ComponentActionError
from pipeline_toolkit.models.package_models import CommandResult, PackageMetadata
from pipeline_toolkit.retry.policy import UNBOUNDED, RetryPolicy
from pipeline_toolkit.workflows.install_verification import (
    InstallVerification,
    install_policy,
    verify_npm_package,
)

NPM_INSTALL = call("npm", ["install", "pkg@1.0.0"], env={"NODE_ENV": "production"})
NODE_REQUIRE = call("node", ["-e", "const test = require('pkg');"])
NPX_HELP = call("npx", ["--no-install", "pkg", "--help"])


def _failed(code: int = 1) -> CommandError:
    return CommandError(f"command exited with code {code}", result=CommandResult(exit_code=code, stderr="E404"))


@pytest.fixture
def metadata() -> PackageMetadata:
    return PackageMetadata(package_name="pkg", package_version="1.0.0")


@pytest.fixture
def short_ceiling_policy() -> RetryPolicy:
    """25s ceiling with 10s/30s delays: the third failure lands at 30s."""
    return RetryPolicy(
        max_attempts=UNBOUNDED,
        max_total_elapsed_ms=25_000,
        min_delay_ms=10_000,
        max_delay_ms=30_000,
    )


# ============================================================================
# InstallVerification
# ============================================================================


@pytest.mark.asyncio
async def test_install_succeeds_first_time(mock_runner, reporter, engine):
    verification = InstallVerification(mock_runner, reporter=reporter, engine=engine)

    result = await verification.run("pkg", "1.0.0")

    assert result.exit_code == 0
    assert mock_runner.run.call_args_list == [NPM_INSTALL]
    assert reporter.notices == []


@pytest.mark.asyncio
async def test_install_retries_until_registry_catches_up(mock_runner, reporter, engine, sleeper):
    """Test every install failure is transient and reported."""
    mock_runner.run.side_effect = [_failed(), _failed(), CommandResult(exit_code=0)]
    verification = InstallVerification(mock_runner, reporter=reporter, engine=engine)

    await verification.run("pkg", "1.0.0")

    assert mock_runner.run.call_count == 3
    assert sleeper.delays == [100, 200]
    assert len(reporter.transient_notices()) == 2
    assert reporter.notices[1].startswith("transient failure at 0s: attempt #2 installing pkg@1.0.0")


@pytest.mark.asyncio
async def test_install_transient_notice_format(mock_runner, reporter, engine, short_ceiling_policy):
    mock_runner.run.side_effect = [CommandError("registry returned 404"), CommandResult(exit_code=0)]
    verification = InstallVerification(mock_runner, reporter=reporter, policy=short_ceiling_policy, engine=engine)

    await verification.run("pkg", "1.0.0")

    assert reporter.notices == [
        "transient failure at 0s: attempt #1 installing pkg@1.0.0 did not succeed: registry returned 404\n"
        "---\nnext attempt in 10 seconds..."
    ]


@pytest.mark.asyncio
async def test_install_ceiling_exceeded(mock_runner, reporter, engine, short_ceiling_policy):
    """Test the ceiling produces a fatal component failure with diagnostics."""
    mock_runner.run.side_effect = CommandError("registry returned 404")
    verification = InstallVerification(mock_runner, reporter=reporter, policy=short_ceiling_policy, engine=engine)

    with pytest.raises(ComponentActionError) as exc_info:
        await verification.run("pkg", "1.0.0")

    message = str(exc_info.value)
    assert message == "fatal error at 30s: unable to install pkg@1.0.0 after 3 tries: registry returned 404"
    assert exc_info.value.details["reason"] == "elapsed"
    assert mock_runner.run.call_count == 3
    assert reporter.notices[-1] == message


def test_install_policy_uses_ceiling_override(test_settings):
    assert install_policy(test_settings).max_total_elapsed_ms == 180_000
    assert install_policy(test_settings, retry_ceiling_seconds=60).max_total_elapsed_ms == 60_000
    assert install_policy(test_settings).attempt_limit == UNBOUNDED


# ============================================================================
# verify_npm_package
# ============================================================================


@pytest.mark.asyncio
@pytest.mark.parametrize("flag", ["should_skip_ci", "should_skip_cd", "has_private"])
async def test_verification_skipped(mock_runner, test_settings, reporter, engine, flag):
    metadata = PackageMetadata(package_name="pkg", package_version="1.0.0", **{flag: True})

    verified = await verify_npm_package(metadata, mock_runner, test_settings, reporter=reporter, engine=engine)

    assert verified is False
    mock_runner.run.assert_not_called()
    assert reporter.notices == []


@pytest.mark.asyncio
async def test_verification_runs_require_smoke_test(mock_runner, test_settings, reporter, engine, metadata):
    verified = await verify_npm_package(metadata, mock_runner, test_settings, reporter=reporter, engine=engine)

    assert verified is True
    assert mock_runner.run.call_args_list == [NPM_INSTALL, NODE_REQUIRE]


@pytest.mark.asyncio
async def test_verification_runs_cli_check_when_package_has_bin(mock_runner, test_settings, reporter, engine):
    metadata = PackageMetadata(package_name="pkg", package_version="1.0.0", has_bin=True)

    await verify_npm_package(metadata, mock_runner, test_settings, reporter=reporter, engine=engine)

    assert mock_runner.run.call_args_list == [NPM_INSTALL, NODE_REQUIRE, NPX_HELP]


@pytest.mark.asyncio
async def test_require_failure_is_not_retried(mock_runner, test_settings, reporter, engine, metadata):
    mock_runner.run.side_effect = [CommandResult(exit_code=0), _failed()]

    with pytest.raises(ComponentActionError, match="^generic execution test failed: "):
        await verify_npm_package(metadata, mock_runner, test_settings, reporter=reporter, engine=engine)

    assert mock_runner.run.call_count == 2


@pytest.mark.asyncio
async def test_cli_check_failure(mock_runner, test_settings, reporter, engine):
    metadata = PackageMetadata(package_name="pkg", package_version="1.0.0", has_bin=True)
    mock_runner.run.side_effect = [CommandResult(exit_code=0), CommandResult(exit_code=0), _failed(2)]

    with pytest.raises(ComponentActionError, match="^npx cli test failed: "):
        await verify_npm_package(metadata, mock_runner, test_settings, reporter=reporter, engine=engine)


@pytest.mark.asyncio
async def test_metadata_ceiling_override_applies(mock_runner, test_settings, reporter, engine):
    """Test a zero ceiling gives up on the first failure after any delay."""
    metadata = PackageMetadata(package_name="pkg", package_version="1.0.0", retry_ceiling_seconds=0)
    mock_runner.run.side_effect = _failed()

    with pytest.raises(ComponentActionError, match="after 2 tries"):
        await verify_npm_package(metadata, mock_runner, test_settings, reporter=reporter, engine=engine)
