import asyncio
import logging
import subprocess
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from ignite.errors import ProcessError
from ignite.models.config import Config
from ignite.models.execution_result import ExecutionResult

logger = logging.getLogger('ignite.process')


def _decode(output: Optional[bytes]) -> str:
    if not output:
        return ""
    return output.decode('utf-8', errors='replace')


def run_command(command_line: str, working_dir: str) -> ExecutionResult:
    """
    Run command_line through the system shell inside working_dir and wait for it.

    A nonzero exit is returned as ExecutionResult(success=False). Only a
    failure to spawn the shell raises ProcessError. No timeout is applied.
    """
    logger.info(f"Executing `{command_line}` in {working_dir}")
    try:
        completed = subprocess.run(
            command_line,
            shell=True,
            cwd=working_dir,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except (OSError, ValueError) as e:
        # ValueError: NUL byte in the command line or working directory
        logger.error(f"Failed to execute `{command_line}`: {e}")
        raise ProcessError(f"Failed to execute command: {e}") from e

    logger.info(f"`{command_line}` exited with status {completed.returncode}")
    return ExecutionResult(
        success=completed.returncode == 0,
        stdout=_decode(completed.stdout),
        stderr=_decode(completed.stderr),
        returncode=completed.returncode,
    )


class ProcessService:
    def __init__(self, max_workers: int = 8):
        # Separate from the query pool
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ignite-process")

    async def run(self, command_line: str, working_dir: str) -> ExecutionResult:
        """Run a command on the worker pool without blocking the event loop"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, run_command, command_line, working_dir)

    async def start(self, config: Config) -> ExecutionResult:
        """Run the configured start command"""
        return await self.run(config.start_command, config.working_dir)

    async def stop(self, config: Config) -> ExecutionResult:
        """Run the configured stop command"""
        return await self.run(config.stop_command, config.working_dir)

    def shutdown(self):
        self.executor.shutdown(wait=False)
