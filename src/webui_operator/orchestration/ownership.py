"""
webui_operator.orchestration.ownership - Ownership Linker
==========================================================

Makes the KWebUI resource the controlling owner of the `console` Deployment,
so deleting the resource garbage-collects the Web UI.

    KWebUI (uid=U) ◄── ownerReferences[controller=true,
                                       blockOwnerDeletion=true] ── Deployment

A Deployment already controlled by another object is left untouched and
reported as a failure. Every failure records OWNER_REFERENCE_FAILED and
raises OwnerReferenceError; the provisioning that created the Deployment is
not rolled back.
"""

from __future__ import annotations

from typing import Any, Optional

from webui_operator.core.config import ClusterConfig
from webui_operator.core.enums import Phase
from webui_operator.core.exceptions import ClusterError, OwnerReferenceError
from webui_operator.core.logging_config import component_logger
from webui_operator.core.models import DeploymentState, OwnerReference, WebUIResource
from webui_operator.integrations.cluster.base import ClusterClient
from webui_operator.orchestration.status_reporter import StatusReporter


FETCH_FAILED_MESSAGE = (
    "Failed to retrieve the just created kubevirt-web-ui Deployment object "
    "to set owner reference."
)
LINK_FAILED_MESSAGE = "Failed to set Operator CR as the owner of the kubevirt-web-ui Deployment object."


def has_controller(parent: WebUIResource, deployment: DeploymentState) -> bool:
    """Tell whether `parent` is the controlling owner of `deployment`."""
    ref = deployment.controller_reference()
    return ref is not None and ref.uid == parent.uid


class OwnershipLinker:
    """Links the Web UI Deployment to its KWebUI owner."""

    def __init__(
        self,
        cluster: ClusterClient,
        status: StatusReporter,
        config: Optional[ClusterConfig] = None,
        *,
        logger: Optional[Any] = None,
    ) -> None:
        self._cluster = cluster
        self._status = status
        self._config = config or ClusterConfig()
        self._logger = component_logger("ownership_linker", logger)

    def owner_reference(self, parent: WebUIResource) -> OwnerReference:
        return OwnerReference(
            api_version=parent.api_version or self._config.api_version,
            kind=parent.kind or self._config.kind,
            name=parent.id.name,
            uid=parent.uid,
            controller=True,
            block_owner_deletion=True,
        )

    async def link(self, parent: WebUIResource, namespace: str) -> DeploymentState:
        """Set `parent` as the controller of the Deployment in `namespace`.

        Returns:
            The Deployment as written (or as found, if already linked).

        Raises:
            OwnerReferenceError: The Deployment could not be read or written,
                or it is controlled by another object.
        """
        name = self._config.deployment_name
        log = self._logger.bind(resource=str(parent.id), deployment=f"{namespace}/{name}")

        try:
            deployment = await self._cluster.get_deployment(namespace, name)
        except ClusterError as exc:
            log.error("owner_deployment_fetch_failed", error=str(exc))
            await self._status.set_status(parent.id, Phase.OWNER_REFERENCE_FAILED, FETCH_FAILED_MESSAGE)
            raise OwnerReferenceError(
                message=FETCH_FAILED_MESSAGE,
                details={"resource": str(parent.id), "error": str(exc)},
            ) from exc

        if has_controller(parent, deployment):
            log.debug("owner_reference_present")
            return deployment

        current = deployment.controller_reference()
        if current is not None:
            log.error("deployment_controlled_by_other", controller=f"{current.kind}/{current.name}")
            await self._status.set_status(parent.id, Phase.OWNER_REFERENCE_FAILED, LINK_FAILED_MESSAGE)
            raise OwnerReferenceError(
                message=LINK_FAILED_MESSAGE,
                error_code="DEPLOYMENT_ALREADY_CONTROLLED",
                details={
                    "resource": str(parent.id),
                    "controller_kind": current.kind,
                    "controller_name": current.name,
                    "controller_uid": current.uid,
                },
            )

        references = [ref for ref in deployment.owner_references if ref.uid != parent.uid]
        references.append(self.owner_reference(parent))
        deployment = deployment.model_copy(update={"owner_references": references})

        try:
            linked = await self._cluster.update_deployment_owners(deployment)
        except ClusterError as exc:
            log.error("owner_reference_update_failed", error=str(exc))
            await self._status.set_status(parent.id, Phase.OWNER_REFERENCE_FAILED, LINK_FAILED_MESSAGE)
            raise OwnerReferenceError(
                message=LINK_FAILED_MESSAGE,
                details={"resource": str(parent.id), "error": str(exc)},
            ) from exc

        log.info("owner_reference_set", owner_uid=parent.uid)
        return linked
