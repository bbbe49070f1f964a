"""
webui_operator.integrations.process.base - Process Execution Interface
=======================================================================

This module defines the contract for running external commands (`oc`,
`ansible-playbook`). The provisioning workflow never spawns processes
directly; it hands a ProcessCommand to a ProcessRunner.

Architecture Context:

    ┌──────────────────────┐     run()      ┌──────────────────┐
    │ ProvisioningWorkflow │ ─────────────→ │  ProcessRunner   │
    │                      │ ←─ Result ──── │  (abstract)      │
    └──────────────────────┘                └────────┬─────────┘
                                                     │
                                          ┌──────────┴──────────┐
                                     ┌────▼──────────┐  ┌───────▼────────┐
                                     │  Subprocess   │  │   Recording    │
                                     │  Runner       │  │   Runner       │
                                     └───────────────┘  └────────────────┘

Contract:
    - run() returns a ProcessResult only for a zero exit status.
    - A process that cannot be started raises ProcessStartError.
    - A non-zero exit raises ProcessExitError.
    - An exceeded deadline raises ProcessTimeoutError.
    - Secrets listed on the command never appear in logs or error messages.
"""

from __future__ import annotations

import shlex
from abc import ABC, abstractmethod

from pydantic import BaseModel, Field


MASK = "*****"


# =============================================================================
# Command Model
# =============================================================================
class ProcessCommand(BaseModel):
    """An external command invocation.

    Attributes:
        program: Executable name or path.
        args: Arguments, without the program itself.
        env: Variables added on top of the operator's own environment.
        secrets: Values that must be masked whenever the command is shown.

    Example:
        >>> cmd = ProcessCommand(
        ...     program="oc",
        ...     args=["login", "https://10.0.0.1:443", "--token=abc"],
        ...     env={"KUBECONFIG": "/tmp/config_0A1B2C3D4E"},
        ...     secrets=["abc"],
        ... )
        >>> cmd.display()
        'oc login https://10.0.0.1:443 --token=*****'
    """

    program: str
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)
    secrets: list[str] = Field(default_factory=list, repr=False)

    @property
    def argv(self) -> list[str]:
        """Program followed by its arguments."""
        return [self.program, *self.args]

    def display(self) -> str:
        """Shell-like command line with every secret replaced by a mask."""
        line = shlex.join(self.argv)
        for secret in self.secrets:
            if secret:
                line = line.replace(secret, MASK)
        return line


class ProcessResult(BaseModel):
    """Outcome of a successful command."""

    command: str = Field(description="Masked command line")
    returncode: int = 0


# =============================================================================
# Abstract Runner
# =============================================================================
class ProcessRunner(ABC):
    """Abstract base class for process execution capabilities.

    Implementations spawn the command, stream its output into the log while
    it runs, and wait for it to exit.
    """

    @abstractmethod
    async def run(self, command: ProcessCommand) -> ProcessResult:
        """Run a command to completion.

        Args:
            command: The command to execute.

        Returns:
            ProcessResult for a zero exit status.

        Raises:
            ProcessStartError: The process could not be started.
            ProcessExitError: The process exited with a non-zero status.
            ProcessTimeoutError: The process exceeded its deadline.
        """
