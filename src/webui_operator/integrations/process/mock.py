"""
webui_operator.integrations.process.mock - Recording Process Runner
====================================================================

A ProcessRunner that never touches a shell. It is the default runner for
tests and dry runs.

Why a Recording Runner?
    1. **No binaries required**: tests run without `oc` or `ansible-playbook`.
    2. **Call tracking**: every command is recorded for assertions, together
       with a snapshot of any file argument that existed at call time (the
       inventory is deleted before a test could read it afterwards).
    3. **Failure simulation**: exit codes and start failures can be scripted
       per program/subcommand.
    4. **Side effects**: an optional hook lets a test mimic what the real
       playbook does to the cluster (create/delete the Deployment).

Usage:
    >>> runner = RecordingProcessRunner()
    >>> runner.fail_when(lambda cmd: cmd.program == "ansible-playbook", exit_code=2)
    >>> await runner.run(ProcessCommand(program="oc", args=["project", "ns"]))
    >>> runner.call_count  # 1
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import BaseModel, Field

from webui_operator.core.exceptions import ProcessExitError, ProcessStartError
from webui_operator.core.logging_config import component_logger
from webui_operator.integrations.process.base import (
    ProcessCommand,
    ProcessResult,
    ProcessRunner,
)


CommandPredicate = Callable[[ProcessCommand], bool]
CommandHook = Callable[[ProcessCommand], Union[None, Awaitable[None]]]


class RecordedCall(BaseModel):
    """One invocation seen by the RecordingProcessRunner.

    Attributes:
        command: The command as passed to run().
        files: Contents of every argument that named an existing file when
            the command ran, keyed by path.
    """

    command: ProcessCommand
    files: dict[str, str] = Field(default_factory=dict)

    @property
    def program(self) -> str:
        return self.command.program

    @property
    def args(self) -> list[str]:
        return self.command.args


class _Failure(BaseModel):
    exit_code: int = 1
    start_error: bool = False


class RecordingProcessRunner(ProcessRunner):
    """ProcessRunner that records commands and simulates outcomes.

    Attributes:
        _calls: Every RecordedCall in invocation order.
        _failures: (predicate, failure) rules checked in registration order.
        _hook: Optional side-effect callback run for successful commands.
    """

    def __init__(
        self,
        *,
        hook: Optional[CommandHook] = None,
        logger: Optional[Any] = None,
    ) -> None:
        self._calls: list[RecordedCall] = []
        self._failures: list[tuple[CommandPredicate, _Failure]] = []
        self._hook = hook
        self._logger = component_logger("recording_process_runner", logger)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def calls(self) -> list[RecordedCall]:
        return self._calls

    @property
    def call_count(self) -> int:
        return len(self._calls)

    @property
    def programs(self) -> list[str]:
        """Program and first argument of each call, e.g. ``"oc login"``."""
        return [" ".join(call.command.argv[:2]) for call in self._calls]

    # =========================================================================
    # Scripting
    # =========================================================================

    def fail_when(
        self,
        predicate: CommandPredicate,
        *,
        exit_code: int = 1,
        start_error: bool = False,
    ) -> None:
        """Make matching commands fail.

        Args:
            predicate: Selects the commands that fail.
            exit_code: Simulated non-zero exit status.
            start_error: Simulate a process that cannot be started instead.
        """
        self._failures.append((predicate, _Failure(exit_code=exit_code, start_error=start_error)))

    def set_hook(self, hook: Optional[CommandHook]) -> None:
        self._hook = hook

    def clear(self) -> None:
        """Forget recorded calls and failure rules."""
        self._calls.clear()
        self._failures.clear()

    # =========================================================================
    # ProcessRunner Implementation
    # =========================================================================

    async def run(self, command: ProcessCommand) -> ProcessResult:
        display = command.display()
        self._calls.append(RecordedCall(command=command, files=self._snapshot(command)))
        self._logger.debug("recorded_process_call", command=display)

        for predicate, failure in self._failures:
            if not predicate(command):
                continue
            if failure.start_error:
                raise ProcessStartError(
                    message=f"Execution failed: {display}: simulated start failure",
                    command=display,
                )
            raise ProcessExitError(
                message=f"Execution failed (exit status {failure.exit_code}): {display}",
                command=display,
                returncode=failure.exit_code,
            )

        if self._hook is not None:
            outcome = self._hook(command)
            if outcome is not None:
                await outcome

        return ProcessResult(command=display, returncode=0)

    @staticmethod
    def _snapshot(command: ProcessCommand) -> dict[str, str]:
        files: dict[str, str] = {}
        for arg in command.args:
            path = Path(arg)
            if arg.startswith("/") and path.is_file():
                files[arg] = path.read_text()
        return files
