"""
webui_operator.facade - WebUIOperator Top-Level Facade
=======================================================

Wires the operator's components from an OperatorConfig and exposes one call
per reconcile pass.

    ┌──────────────────────────────────────────────────┐
    │              WebUIOperator (Facade)              │
    │                                                  │
    │  ┌────────────────────────────────────────────┐  │
    │  │              Reconciler                    │  │
    │  │  StatusReporter, OwnershipLinker           │  │
    │  └──────────────────────┬─────────────────────┘  │
    │                         │                        │
    │  ┌──────────────────────▼─────────────────────┐  │
    │  │         ProvisioningWorkflow               │  │
    │  │  EphemeralArtifactManager, inventory       │  │
    │  └──────────────────────┬─────────────────────┘  │
    │                         │                        │
    │  ┌──────────────────────▼─────────────────────┐  │
    │  │           Integration Layer                │  │
    │  │  ClusterClient, ProcessRunner, credentials │  │
    │  └────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────┘

Every integration can be overridden, which is how tests and dry runs swap in
InMemoryClusterClient and RecordingProcessRunner.

Usage:
    >>> operator = WebUIOperator(OperatorConfig())
    >>> result = await operator.reconcile("kubevirt-web-ui", "kubevirt-web-ui")
    >>> result.phase
    <Phase.PROVISIONED: 'PROVISIONED'>
"""

from __future__ import annotations

from typing import Any, Optional

from webui_operator.core.config import OperatorConfig
from webui_operator.core.logging_config import component_logger
from webui_operator.core.models import ReconcileResult, ResourceId
from webui_operator.infrastructure.ephemeral import EphemeralArtifactManager
from webui_operator.integrations.cluster.base import ClusterClient
from webui_operator.integrations.cluster.credentials import (
    CredentialsProvider,
    in_cluster_credentials_provider,
)
from webui_operator.integrations.cluster.factory import create_cluster_client
from webui_operator.integrations.process.base import ProcessRunner
from webui_operator.integrations.process.subprocess_runner import SubprocessRunner
from webui_operator.orchestration.ownership import OwnershipLinker
from webui_operator.orchestration.reconciler import Reconciler
from webui_operator.orchestration.status_reporter import StatusReporter
from webui_operator.orchestration.workflow import ProvisioningWorkflow


class WebUIOperator:
    """Top-level facade for the KubeVirt Web UI operator.

    Attributes:
        _config: Operator configuration.
        _cluster: Cluster API access (KWebUI and Deployment).
        _runner: External command execution.
        _reconciler: The decision engine every pass goes through.
    """

    def __init__(
        self,
        config: Optional[OperatorConfig] = None,
        *,
        cluster: Optional[ClusterClient] = None,
        runner: Optional[ProcessRunner] = None,
        credentials_provider: Optional[CredentialsProvider] = None,
        artifacts: Optional[EphemeralArtifactManager] = None,
        logger: Optional[Any] = None,
    ) -> None:
        """Build all components.

        Args:
            config: Operator configuration. Defaults to OperatorConfig().
            cluster: ClusterClient override; otherwise created from
                config.cluster.backend.
            runner: ProcessRunner override; otherwise a SubprocessRunner with
                config.commands.timeout_seconds.
            credentials_provider: Source of the `oc login` credentials;
                otherwise the pod's service account.
            artifacts: Ephemeral file manager override.
            logger: Injected structlog logger handed to every component.
        """
        self._config = config or OperatorConfig()
        self._logger = component_logger("webui_operator", logger)

        self._cluster = cluster or create_cluster_client(self._config.cluster, logger=logger)
        self._runner = runner or SubprocessRunner(
            timeout_seconds=self._config.commands.timeout_seconds,
            logger=logger,
        )
        self._artifacts = artifacts or EphemeralArtifactManager(
            self._config.artifacts,
            logger=logger,
        )

        workflow = ProvisioningWorkflow(
            self._config.commands,
            runner=self._runner,
            artifacts=self._artifacts,
            credentials_provider=(
                credentials_provider or in_cluster_credentials_provider(self._config.cluster)
            ),
            inventory_defaults=self._config.inventory,
            logger=logger,
        )
        status = StatusReporter(self._cluster, logger=logger)
        linker = OwnershipLinker(self._cluster, status, self._config.cluster, logger=logger)
        self._reconciler = Reconciler(
            self._cluster,
            workflow,
            status,
            linker,
            self._config.cluster,
            logger=logger,
        )

        self._logger.info(
            "operator_initialized",
            environment=self._config.environment,
            cluster_backend=self._config.cluster.backend,
            resource=f"{self._config.cluster.plural}.{self._config.cluster.group}",
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> OperatorConfig:
        return self._config

    @property
    def cluster(self) -> ClusterClient:
        return self._cluster

    @property
    def runner(self) -> ProcessRunner:
        return self._runner

    @property
    def reconciler(self) -> Reconciler:
        return self._reconciler

    # =========================================================================
    # Reconcile
    # =========================================================================

    async def reconcile(self, namespace: str, name: str) -> ReconcileResult:
        """Run one reconcile pass for the KWebUI `namespace/name`.

        Raises:
            OperatorError: The pass failed and should be retried.
        """
        return await self._reconciler.reconcile(ResourceId(namespace=namespace, name=name))
