"""
webui_operator.integrations.process.subprocess_runner - Real Process Runner
============================================================================

Spawns external commands with asyncio and supervises them.

Stream Handling:
    stdout and stderr are drained by two concurrently running read loops so
    that neither pipe's OS buffer can fill up and stall the child. Each loop
    splits its stream into lines and logs every line tagged with the stream
    name. Both loops must reach end-of-stream (or fail) before the runner
    waits for the exit status.
    Output without newlines is logged in pieces of at most `max_line_bytes`,
    never splitting a secret across two pieces.

        child ──stdout──→ drain loop ─┐
                                      ├──→ logger ("process_output")
        child ──stderr──→ drain loop ─┘

Deadline:
    With `timeout_seconds` set, the whole run (drain + wait) is bounded. On
    expiry the child is killed and ProcessTimeoutError is raised. Without it,
    a hung child blocks the caller indefinitely.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
from typing import Any, Optional

from webui_operator.core.enums import OutputStream
from webui_operator.core.exceptions import (
    ProcessExitError,
    ProcessStartError,
    ProcessTimeoutError,
)
from webui_operator.core.logging_config import component_logger
from webui_operator.integrations.process.base import (
    MASK,
    ProcessCommand,
    ProcessResult,
    ProcessRunner,
)


_READ_CHUNK_SIZE = 1024
_MAX_LINE_BYTES = 64 * 1024


class SubprocessRunner(ProcessRunner):
    """ProcessRunner backed by ``asyncio.create_subprocess_exec``.

    Example:
        >>> runner = SubprocessRunner(timeout_seconds=600)
        >>> await runner.run(ProcessCommand(program="oc", args=["whoami"]))
    """

    def __init__(
        self,
        *,
        timeout_seconds: Optional[float] = None,
        max_line_bytes: int = _MAX_LINE_BYTES,
        logger: Optional[Any] = None,
    ) -> None:
        """Initialize the runner.

        Args:
            timeout_seconds: Deadline for a single command, None for no deadline.
            max_line_bytes: Output without a newline is logged in pieces of
                this size.
            logger: Injected structlog logger. Defaults to the shared logger.
        """
        self._timeout_seconds = timeout_seconds
        self._max_line_bytes = max_line_bytes
        self._logger = component_logger("subprocess_runner", logger)

    @property
    def timeout_seconds(self) -> Optional[float]:
        return self._timeout_seconds

    async def run(self, command: ProcessCommand) -> ProcessResult:
        display = command.display()
        env = {**os.environ, **command.env}

        self._logger.info("process_starting", command=display)
        try:
            process = await asyncio.create_subprocess_exec(
                *command.argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except OSError as exc:
            self._logger.error("process_start_failed", command=display, error=str(exc))
            raise ProcessStartError(
                message=f"Execution failed: {display}: {exc}",
                command=display,
            ) from exc

        try:
            returncode = await asyncio.wait_for(
                self._communicate(process, command),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError:
            await self._kill(process)
            self._logger.error(
                "process_timed_out",
                command=display,
                timeout_seconds=self._timeout_seconds,
            )
            raise ProcessTimeoutError(
                message=f"Execution exceeded {self._timeout_seconds}s: {display}",
                command=display,
                timeout_seconds=self._timeout_seconds or 0.0,
            )
        except asyncio.CancelledError:
            await self._kill(process)
            raise

        if returncode != 0:
            self._logger.error("process_failed", command=display, returncode=returncode)
            raise ProcessExitError(
                message=f"Execution failed (exit status {returncode}): {display}",
                command=display,
                returncode=returncode,
            )

        self._logger.info("process_finished", command=display, returncode=returncode)
        return ProcessResult(command=display, returncode=returncode)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _communicate(
        self,
        process: asyncio.subprocess.Process,
        command: ProcessCommand,
    ) -> int:
        await asyncio.gather(
            self._drain(process.stdout, OutputStream.STDOUT, command),
            self._drain(process.stderr, OutputStream.STDERR, command),
        )
        return await process.wait()

    async def _drain(
        self,
        stream: Optional[asyncio.StreamReader],
        name: OutputStream,
        command: ProcessCommand,
    ) -> None:
        """Read `stream` until EOF, logging one event per line."""
        if stream is None:
            return

        secrets = [s.encode() for s in command.secrets if s]
        overlap = max((len(s) for s in secrets), default=0)
        pending = b""
        try:
            while True:
                chunk = await stream.read(_READ_CHUNK_SIZE)
                if not chunk:
                    break
                pending += chunk
                *lines, pending = pending.split(b"\n")
                for line in lines:
                    self._log_line(name, line, command)
                while len(pending) >= self._max_line_bytes + overlap:
                    cut = self._cut(pending, secrets)
                    self._log_line(name, pending[:cut], command)
                    pending = pending[cut:]
        except OSError as exc:
            self._logger.error(
                "process_stream_read_failed",
                stream=name.value,
                program=command.program,
                error=str(exc),
            )
        if pending:
            self._log_line(name, pending, command)

    def _cut(self, pending: bytes, secrets: list[bytes]) -> int:
        """Split point for an over-long line that does not cut through a secret."""
        cut = self._max_line_bytes
        for secret in secrets:
            start = pending.find(secret, max(0, cut - len(secret) + 1))
            if start == 0:
                cut = max(cut, len(secret))
            elif 0 < start < cut:
                cut = start
        return cut

    def _log_line(self, name: OutputStream, raw: bytes, command: ProcessCommand) -> None:
        line = raw.decode("utf-8", errors="replace").rstrip("\r")
        for secret in command.secrets:
            if secret:
                line = line.replace(secret, MASK)
        self._logger.info("process_output", stream=name.value, program=command.program, line=line)

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()
