from dataclasses import dataclass


@dataclass(frozen=True)
class ExecutionResult:
    """
    Outcome of one start/stop command run.

    Attributes:
        success: True when the command exited with status zero
        stdout: Captured standard output
        stderr: Captured standard error
        returncode: Exit status of the shell
    """
    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0
