"""
Async subprocess runner for shell tooling (npm, node, npx).

Runs a command to completion with asyncio, captures its output and raises
CommandError when the command cannot be launched or exits non-zero.
"""

import asyncio
import os
from typing import Mapping, Optional, Sequence
import structlog

from pipeline_toolkit.clients.exceptions import CommandError
from pipeline_toolkit.models.package_models import CommandResult


logger = structlog.get_logger(__name__)


class SubprocessRunner:
    """
    Runs external commands without blocking the event loop.

    Extra environment variables are layered on top of the current process
    environment. A cancelled run kills and reaps its child process.
    """

    def __init__(self, cwd: Optional[str] = None):
        self.cwd = cwd

    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        """
        Run `command` with `args` and wait for it to finish.

        Returns:
            CommandResult for a zero exit code

        Raises:
            CommandError: Launch failure or non-zero exit code
        """
        full_env = {**os.environ, **env} if env else None
        argv = [command, *args]

        logger.debug("Running command", argv=argv, cwd=self.cwd)

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=full_env,
                cwd=self.cwd,
            )
        except OSError as e:
            raise CommandError(
                f"failed to launch {command}: {e}",
                details={"argv": argv, "error_type": type(e).__name__},
            ) from e

        try:
            stdout, stderr = await process.communicate()
        except BaseException:
            # Cancellation (task time limit, loop teardown) must not leave the child running
            if process.returncode is None:
                logger.warning("Killing command after interruption", argv=argv, pid=process.pid)
                process.kill()
                await process.wait()
            raise

        result = CommandResult(
            exit_code=process.returncode,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )

        if result.exit_code != 0:
            logger.debug("Command failed", argv=argv, exit_code=result.exit_code)
            raise CommandError(
                f"command `{' '.join(argv)}` exited with code {result.exit_code}",
                result=result,
                details={"argv": argv, "stderr": result.stderr[-2000:]},
            )

        return result
