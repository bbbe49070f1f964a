"""
webui_operator.orchestration.reconciler - Reconciliation Decision Engine
=========================================================================

One reconcile pass compares the version requested on a KWebUI resource with
the version of the running `console` Deployment and runs the playbook(s)
needed to close the gap.

Decision Table (versions compared with a leading "v" stripped on both sides):

    Deployment        Desired          Actual        Action
    ───────────────── ──────────────── ───────────── ──────────────────────────
    not found         empty            -             NOOP (NOT_DEPLOYED)
    not found         set              -             PROVISION
    found             any              unreadable    NOOP (OTHER_ERROR, terminal)
    found             any              "" after "v"  raise EmptyImageTagError
    found             == actual        set           NOOP (PROVISIONED)
    found             empty            set           DEPROVISION
    found             != actual        set           DEPROVISION_THEN_PROVISION

Pass Lifecycle:
    get_webui ─→ get_deployment ─→ decide ─→ workflow(s) ─→ link owner ─→ status
        │              │                         │              │
        └ not found:   └ other error:            └ failure:     └ failure:
          NOOP, no       OTHER_ERROR,              *_FAILED,      OWNER_REFERENCE_FAILED,
          status         raise                     raise          raise

Raising ends the pass with an error; the dispatcher retries it with backoff.
A failed owner link on the in-sync path is only logged.
"""

from __future__ import annotations

from typing import Any, Optional

from webui_operator.core.config import ClusterConfig
from webui_operator.core.enums import Action, Phase, PlaybookAction
from webui_operator.core.exceptions import (
    ClusterError,
    EmptyImageTagError,
    OperatorError,
    OwnerReferenceError,
    ResourceNotFoundError,
)
from webui_operator.core.logging_config import component_logger
from webui_operator.core.models import (
    DeploymentState,
    ReconcileResult,
    ResourceId,
    WebUIResource,
    image_tag,
    normalize_version,
)
from webui_operator.integrations.cluster.base import ClusterClient
from webui_operator.orchestration.ownership import OwnershipLinker, has_controller
from webui_operator.orchestration.status_reporter import StatusReporter
from webui_operator.orchestration.workflow import ProvisioningWorkflow


RESOURCE_FETCH_FAILED_MESSAGE = "Failed to retrieve KWebUI object."
DEPLOYMENT_FETCH_FAILED_MESSAGE = "Failed to retrieve kubevirt-web-ui Deployment object."
UNREADABLE_VERSION_MESSAGE = "Can not read deployed container version."
PROVISION_FINISHED_MESSAGE = "Provision finished."
PROVISION_FAILED_MESSAGE = (
    "Failed to provision Kubevirt Web UI. See operator's log for more details."
)
DEPROVISION_FINISHED_MESSAGE = "Deprovision finished."
DEPROVISION_FAILED_MESSAGE = (
    "Failed to deprovision Kubevirt Web UI. See operator's log for more details."
)


# =============================================================================
# Pure Decision
# =============================================================================
def decide_action(desired: str, actual: Optional[str]) -> Action:
    """Choose the action closing the gap between desired and actual versions.

    Args:
        desired: Version requested on the resource; empty means "not deployed".
        actual: Version of the running Deployment, None if there is none.
            Must not be unreadable or empty; those cases are settled before.

    Example:
        >>> decide_action("v2.0", None)
        <Action.PROVISION: 'provision'>
        >>> decide_action("v1.4", "1.4")
        <Action.NOOP: 'noop'>
    """
    if actual is None:
        return Action.PROVISION if desired else Action.NOOP
    if normalize_version(desired) == normalize_version(actual):
        return Action.NOOP
    if not desired:
        return Action.DEPROVISION
    return Action.DEPROVISION_THEN_PROVISION


def deployed_version(deployment: DeploymentState, container_name: str) -> Optional[str]:
    """Read the running version from the Deployment's container image.

    Returns:
        The normalized version, or None when it cannot be read (no such
        container, or an image without a tag).

    Raises:
        EmptyImageTagError: The tag is empty once the leading "v" is stripped.
    """
    container = deployment.container(container_name)
    if container is None:
        return None
    tag = image_tag(container.image)
    if tag is None:
        return None
    version = normalize_version(tag)
    if not version:
        raise EmptyImageTagError(container.image)
    return version


# =============================================================================
# Reconciler
# =============================================================================
class Reconciler:
    """Runs reconcile passes for KWebUI resources.

    A pass is sequential and holds no state between invocations; every pass
    re-reads the resource and the Deployment.
    """

    def __init__(
        self,
        cluster: ClusterClient,
        workflow: ProvisioningWorkflow,
        status: StatusReporter,
        linker: OwnershipLinker,
        config: Optional[ClusterConfig] = None,
        *,
        logger: Optional[Any] = None,
    ) -> None:
        self._cluster = cluster
        self._workflow = workflow
        self._status = status
        self._linker = linker
        self._config = config or ClusterConfig()
        self._logger = component_logger("reconciler", logger)

    async def reconcile(self, resource_id: ResourceId) -> ReconcileResult:
        """Run one reconcile pass.

        Returns:
            The action taken and the final status, for passes that end
            without error.

        Raises:
            ClusterError: The resource or Deployment could not be read.
            EmptyImageTagError: The deployed image tag is empty.
            ProcessError, ArtifactError, ConfigurationError: A playbook run
                failed.
            OwnerReferenceError: The Deployment could not be linked.
        """
        log = self._logger.bind(resource=str(resource_id))
        log.info("reconcile_started")

        try:
            resource = await self._cluster.get_webui(resource_id)
        except ResourceNotFoundError:
            log.info("resource_not_found")
            return ReconcileResult(resource=resource_id, action=Action.NOOP)
        except ClusterError as exc:
            log.error("resource_fetch_failed", error=str(exc))
            await self._status.set_status(resource_id, Phase.OTHER_ERROR, RESOURCE_FETCH_FAILED_MESSAGE)
            raise

        namespace = resource_id.namespace
        desired = resource.spec.version

        try:
            deployment: Optional[DeploymentState] = await self._cluster.get_deployment(
                namespace, self._config.deployment_name
            )
        except ResourceNotFoundError:
            deployment = None
        except ClusterError as exc:
            log.error("deployment_fetch_failed", error=str(exc))
            await self._status.set_status(resource_id, Phase.OTHER_ERROR, DEPLOYMENT_FETCH_FAILED_MESSAGE)
            raise

        if deployment is None:
            action = decide_action(desired, None)
            log.info("action_decided", action=action.value, desired=desired, actual=None)
            if action == Action.NOOP:
                return await self._finish(resource_id, action, Phase.NOT_DEPLOYED, "")
            return await self._provision(resource, action)

        actual = deployed_version(deployment, self._config.container_name)
        if actual is None:
            container = deployment.container(self._config.container_name)
            log.error(
                "deployed_version_unreadable",
                image=container.image if container else None,
            )
            return await self._finish(
                resource_id, Action.NOOP, Phase.OTHER_ERROR, UNREADABLE_VERSION_MESSAGE
            )

        action = decide_action(desired, actual)
        log.info("action_decided", action=action.value, desired=desired, actual=actual)

        if action == Action.NOOP:
            if not has_controller(resource, deployment):
                try:
                    await self._linker.link(resource, namespace)
                except OwnerReferenceError as exc:
                    # in sync: status stays PROVISIONED, the link is retried next pass
                    log.warning(
                        "owner_reference_repair_failed",
                        error_code=exc.error_code,
                        error=exc.message,
                    )
            message = f"Existing version conform the requested one: {actual}. Nothing to do."
            return await self._finish(resource_id, action, Phase.PROVISIONED, message)

        if action == Action.DEPROVISION:
            await self._deprovision(resource)
            return self._result(
                resource_id, action, Phase.DEPROVISIONED, DEPROVISION_FINISHED_MESSAGE
            )

        try:
            await self._deprovision(resource)
        except OperatorError:
            log.error("deprovision_before_provision_failed")
            raise
        return await self._provision(resource, action)

    # =========================================================================
    # Actions
    # =========================================================================

    async def _provision(self, resource: WebUIResource, action: Action) -> ReconcileResult:
        spec = resource.spec
        await self._status.set_status(
            resource.id, Phase.PROVISION_STARTED, f"Target version: {spec.version}"
        )
        try:
            await self._workflow.run(PlaybookAction.PROVISION, spec, resource.id.namespace)
        except OperatorError as exc:
            self._logger.error(
                "provision_failed",
                resource=str(resource.id),
                error=str(exc),
                error_code=exc.error_code,
            )
            await self._status.set_status(resource.id, Phase.PROVISION_FAILED, PROVISION_FAILED_MESSAGE)
            raise

        await self._linker.link(resource, resource.id.namespace)
        return await self._finish(resource.id, action, Phase.PROVISIONED, PROVISION_FINISHED_MESSAGE)

    async def _deprovision(self, resource: WebUIResource) -> None:
        await self._status.set_status(resource.id, Phase.DEPROVISION_STARTED, "")
        try:
            await self._workflow.run(PlaybookAction.DEPROVISION, resource.spec, resource.id.namespace)
        except OperatorError as exc:
            self._logger.error(
                "deprovision_failed",
                resource=str(resource.id),
                error=str(exc),
                error_code=exc.error_code,
            )
            await self._status.set_status(
                resource.id, Phase.DEPROVISION_FAILED, DEPROVISION_FAILED_MESSAGE
            )
            raise
        await self._status.set_status(
            resource.id, Phase.DEPROVISIONED, DEPROVISION_FINISHED_MESSAGE
        )

    async def _finish(
        self,
        resource_id: ResourceId,
        action: Action,
        phase: Phase,
        message: str,
    ) -> ReconcileResult:
        await self._status.set_status(resource_id, phase, message)
        return self._result(resource_id, action, phase, message)

    def _result(
        self,
        resource_id: ResourceId,
        action: Action,
        phase: Phase,
        message: str,
    ) -> ReconcileResult:
        self._logger.info(
            "reconcile_finished",
            resource=str(resource_id),
            action=action.value,
            phase=phase.value,
        )
        return ReconcileResult(resource=resource_id, action=action, phase=phase, message=message)
