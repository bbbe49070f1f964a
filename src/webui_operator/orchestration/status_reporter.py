"""
webui_operator.orchestration.status_reporter - Status Reporter
===============================================================

Writes status.phase / status.message on the KWebUI resource.

Status is advisory: it tells humans what the last pass did, it is never read
back to make a decision. A failed write is therefore logged and dropped;
set_status() never raises a cluster error.

Each write re-fetches the resource first, so it carries the latest
resourceVersion and does not clobber spec changes made during the pass.
"""

from __future__ import annotations

from typing import Any, Optional

from webui_operator.core.enums import Phase
from webui_operator.core.exceptions import ClusterError
from webui_operator.core.logging_config import component_logger
from webui_operator.core.models import ResourceId, WebUIStatus
from webui_operator.integrations.cluster.base import ClusterClient


class StatusReporter:
    """Best-effort status writer for KWebUI resources."""

    def __init__(self, cluster: ClusterClient, *, logger: Optional[Any] = None) -> None:
        self._cluster = cluster
        self._logger = component_logger("status_reporter", logger)

    async def set_status(self, resource_id: ResourceId, phase: Phase, message: str = "") -> bool:
        """Record `phase` and `message` on the resource.

        Returns:
            True if the write landed, False if it was dropped.
        """
        phase = Phase(phase)
        try:
            resource = await self._cluster.get_webui(resource_id)
        except ClusterError as exc:
            self._logger.error(
                "status_fetch_failed",
                resource=str(resource_id),
                phase=phase.value,
                status_message=message,
                error=str(exc),
            )
            return False

        resource.status = WebUIStatus(phase=phase, message=message)
        try:
            await self._cluster.update_webui(resource)
        except ClusterError as exc:
            self._logger.error(
                "status_update_failed",
                resource=str(resource_id),
                phase=phase.value,
                status_message=message,
                error=str(exc),
            )
            return False

        self._logger.info(
            "status_updated",
            resource=str(resource_id),
            phase=phase.value,
            status_message=message,
        )
        return True
