"""
webui_operator.integrations.process - External Process Execution
=================================================================

Available Runners:
    - ProcessRunner:          Abstract base class defining the execution contract.
    - SubprocessRunner:       Spawns real processes with asyncio.
    - RecordingProcessRunner: Records commands and simulates outcomes (tests).
"""

from webui_operator.integrations.process.base import (
    ProcessCommand,
    ProcessResult,
    ProcessRunner,
)
from webui_operator.integrations.process.mock import RecordedCall, RecordingProcessRunner
from webui_operator.integrations.process.subprocess_runner import SubprocessRunner

__all__ = [
    "ProcessCommand",
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
    "RecordingProcessRunner",
    "RecordedCall",
]
