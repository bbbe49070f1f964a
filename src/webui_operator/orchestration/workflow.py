"""
webui_operator.orchestration.workflow - Provisioning Workflow
==============================================================

One playbook run, provision or deprovision, against the operator's own
cluster:

    ┌────────────────┐   ┌──────────────────────────┐
    │ credentials    │──→│ config_<SUFFIX> (0600)   │ KUBECONFIG for every step
    └────────────────┘   └────────────┬─────────────┘
                                      │
      1. oc login <host> --certificate-authority=<ca> --token=<token>
      2. oc project <namespace>
      3. render inventory ──→ inventory_<SUFFIX>.ini
      4. ansible-playbook -i <inventory> <playbook> -vvv
                                      │
                    both files removed, success or not

The first failing step ends the run by raising; later steps are never
started. The bearer token is registered as a secret on the login command so
runners mask it.
"""

from __future__ import annotations

from contextlib import ExitStack
from typing import Any, Optional

from webui_operator.core.config import CommandConfig, InventoryDefaults
from webui_operator.core.enums import PlaybookAction
from webui_operator.core.logging_config import component_logger
from webui_operator.core.models import ClusterCredentials, WebUISpec
from webui_operator.infrastructure.ephemeral import EphemeralArtifactManager
from webui_operator.infrastructure.inventory import render_inventory
from webui_operator.integrations.cluster.credentials import CredentialsProvider
from webui_operator.integrations.process.base import ProcessCommand, ProcessRunner


class ProvisioningWorkflow:
    """Sequences login, project selection and the playbook run.

    Attributes:
        _config: Executables, playbook path and verbosity.
        _runner: Runs each external command.
        _artifacts: Hands out the ephemeral credentials and inventory files.
        _credentials_provider: Returns the credentials passed to `oc login`.
        _defaults: Inventory fallback values.
    """

    def __init__(
        self,
        config: CommandConfig,
        *,
        runner: ProcessRunner,
        artifacts: EphemeralArtifactManager,
        credentials_provider: CredentialsProvider,
        inventory_defaults: Optional[InventoryDefaults] = None,
        logger: Optional[Any] = None,
    ) -> None:
        self._config = config
        self._runner = runner
        self._artifacts = artifacts
        self._credentials_provider = credentials_provider
        self._defaults = inventory_defaults or InventoryDefaults()
        self._logger = component_logger("provisioning_workflow", logger)

    async def run(self, action: PlaybookAction, spec: WebUISpec, namespace: str) -> None:
        """Run one provision or deprovision against `namespace`.

        Args:
            action: apb_action of the playbook run.
            spec: Desired state rendered into the inventory.
            namespace: Namespace of the KWebUI resource.

        Raises:
            ConfigurationError: In-cluster credentials are unavailable.
            ArtifactError: An ephemeral file could not be created or written.
            ProcessError: A command failed to start, exited non-zero or timed
                out.
        """
        action = PlaybookAction(action)
        log = self._logger.bind(action=action.value, namespace=namespace)
        log.info("workflow_started", version=spec.version)

        credentials = self._credentials_provider()

        with ExitStack() as stack:
            kubeconfig = stack.enter_context(self._artifacts.credentials_file())
            env = {self._config.kubeconfig_env: str(kubeconfig)}

            await self._runner.run(self._login_command(credentials, env))
            await self._runner.run(
                ProcessCommand(
                    program=self._config.oc_binary,
                    args=["project", namespace],
                    env=env,
                )
            )

            content = render_inventory(spec, namespace, action, self._defaults)
            inventory = stack.enter_context(self._artifacts.inventory_file(content))

            await self._runner.run(
                ProcessCommand(
                    program=self._config.ansible_playbook_binary,
                    args=[
                        "-i",
                        str(inventory),
                        self._config.playbook_path,
                        self._config.verbosity_flag,
                    ],
                    env=env,
                )
            )

        log.info("workflow_finished")

    def _login_command(
        self,
        credentials: ClusterCredentials,
        env: dict[str, str],
    ) -> ProcessCommand:
        return ProcessCommand(
            program=self._config.oc_binary,
            args=[
                "login",
                credentials.host,
                f"--certificate-authority={credentials.ca_file}",
                f"--token={credentials.token}",
            ],
            env=env,
            secrets=[credentials.token],
        )
