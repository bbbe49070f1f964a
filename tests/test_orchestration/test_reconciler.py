"""
Tests for webui_operator.orchestration.reconciler
=================================================

What's Being Tested:
    - decide_action(): the full decision table
    - deployed_version(): unreadable vs. empty tags
    - Reconciler.reconcile(): every branch of a pass, the order of status
      writes, error propagation, ownership repair and advisory status

The playbook is simulated by a RecordingProcessRunner hook that creates or
deletes the `console` Deployment, like the real playbook does.
"""

from pathlib import Path

import pytest
from structlog.testing import capture_logs

from webui_operator.core.config import ClusterConfig, CommandConfig
from webui_operator.core.enums import Action, Phase
from webui_operator.core.exceptions import (
    ClusterError,
    EmptyImageTagError,
    OwnerReferenceError,
    ProcessExitError,
    ProcessTimeoutError,
)
from webui_operator.core.models import (
    ContainerState,
    OwnerReference,
    ResourceId,
    WebUIResource,
    WebUISpec,
)
from webui_operator.infrastructure.ephemeral import EphemeralArtifactManager
from webui_operator.integrations.cluster.memory import make_deployment
from webui_operator.orchestration.ownership import OwnershipLinker, has_controller
from webui_operator.orchestration.reconciler import (
    DEPLOYMENT_FETCH_FAILED_MESSAGE,
    PROVISION_FAILED_MESSAGE,
    UNREADABLE_VERSION_MESSAGE,
    Reconciler,
    decide_action,
    deployed_version,
)
from webui_operator.orchestration.status_reporter import StatusReporter
from webui_operator.orchestration.workflow import ProvisioningWorkflow


NAMESPACE = "kubevirt-web-ui"
RESOURCE_ID = ResourceId(namespace=NAMESPACE, name="kubevirt-web-ui")
REPOSITORY = "quay.io/kubevirt/kubevirt-web-ui"


# =============================================================================
# Helpers
# =============================================================================
class _RecordingStatusReporter(StatusReporter):
    """StatusReporter that remembers every phase it was asked to write."""

    def __init__(self, cluster) -> None:
        super().__init__(cluster)
        self.phases: list[Phase] = []

    async def set_status(self, resource_id, phase, message=""):
        self.phases.append(phase)
        return await super().set_status(resource_id, phase, message)


def _inventory_values(path: str) -> dict[str, str]:
    lines = Path(path).read_text().splitlines()
    return dict(line.split("=", 1) for line in lines if "=" in line and " " not in line)


def _simulate_playbook(cluster):
    """Hook creating/deleting the Deployment the way the playbook would."""

    def hook(command):
        if command.program != "ansible-playbook":
            return
        values = _inventory_values(command.args[1])
        namespace = values["kubevirt_web_ui_namespace"]
        if values["apb_action"] == "provision":
            cluster.put_deployment(make_deployment(namespace, f"{REPOSITORY}:{values['docker_tag']}"))
        else:
            cluster.delete_deployment(namespace)

    return hook


def _build(config, cluster, runner, credentials) -> tuple[Reconciler, _RecordingStatusReporter]:
    status = _RecordingStatusReporter(cluster)
    workflow = ProvisioningWorkflow(
        CommandConfig(),
        runner=runner,
        artifacts=EphemeralArtifactManager(config.artifacts),
        credentials_provider=lambda: credentials,
    )
    linker = OwnershipLinker(cluster, status, ClusterConfig())
    return Reconciler(cluster, workflow, status, linker, ClusterConfig()), status


def _seed(cluster, version="v2.0", image=None) -> WebUIResource:
    cluster.put_webui(WebUIResource(id=RESOURCE_ID, spec=WebUISpec(version=version)))
    if image is not None:
        cluster.put_deployment(make_deployment(NAMESPACE, image))
    return cluster.webui(RESOURCE_ID)


def _apb_actions(runner) -> list[str]:
    return [
        _inventory_values_from_snapshot(call)["apb_action"]
        for call in runner.calls
        if call.program == "ansible-playbook"
    ]


def _inventory_values_from_snapshot(call) -> dict[str, str]:
    text = call.files[call.args[1]]
    return dict(line.split("=", 1) for line in text.splitlines() if "=" in line and " " not in line)


# =============================================================================
# Tests: Pure Decision
# =============================================================================
class TestDecideAction:
    """The decision table."""

    @pytest.mark.parametrize(
        "desired, actual, expected",
        [
            ("", None, Action.NOOP),
            ("v2.0", None, Action.PROVISION),
            ("v1.4", "1.4", Action.NOOP),
            ("1.4", "1.4", Action.NOOP),
            ("1.4", "v1.4", Action.NOOP),
            ("", "1.4", Action.DEPROVISION),
            ("v2.0", "1.4", Action.DEPROVISION_THEN_PROVISION),
            ("2.0", "v1.4", Action.DEPROVISION_THEN_PROVISION),
        ],
    )
    def test_table(self, desired, actual, expected) -> None:
        assert decide_action(desired, actual) == expected


class TestDeployedVersion:
    """Reading the version from the `console` container."""

    def test_tagged_image(self) -> None:
        assert deployed_version(make_deployment(NAMESPACE, f"{REPOSITORY}:v1.4"), "console") == "1.4"

    def test_untagged_image_is_unreadable(self) -> None:
        assert deployed_version(make_deployment(NAMESPACE, REPOSITORY), "console") is None

    def test_missing_container_is_unreadable(self) -> None:
        deployment = make_deployment(NAMESPACE, f"{REPOSITORY}:v1.4", container_name="web")
        assert deployed_version(deployment, "console") is None

    @pytest.mark.parametrize("image", [f"{REPOSITORY}:v", f"{REPOSITORY}:"])
    def test_empty_tag_raises(self, image) -> None:
        with pytest.raises(EmptyImageTagError):
            deployed_version(make_deployment(NAMESPACE, image), "console")

    def test_picks_named_container(self) -> None:
        deployment = make_deployment(NAMESPACE, f"{REPOSITORY}:v1.4")
        deployment.containers.insert(0, ContainerState(name="proxy", image="oauth-proxy:v9"))
        assert deployed_version(deployment, "console") == "1.4"


# =============================================================================
# Tests: Resource and Deployment Lookup
# =============================================================================
class TestLookup:
    """Branches decided before any workflow runs."""

    async def test_resource_gone(self, config, cluster, runner, credentials) -> None:
        reconciler, status = _build(config, cluster, runner, credentials)

        result = await reconciler.reconcile(RESOURCE_ID)

        assert result.action == Action.NOOP
        assert result.phase is None
        assert status.phases == []
        assert runner.call_count == 0

    async def test_resource_fetch_error(self, config, cluster, runner, credentials) -> None:
        _seed(cluster)
        cluster.fail_next("get_webui", ClusterError("apiserver unavailable"))
        reconciler, status = _build(config, cluster, runner, credentials)

        with pytest.raises(ClusterError):
            await reconciler.reconcile(RESOURCE_ID)

        assert status.phases == [Phase.OTHER_ERROR]
        assert cluster.webui(RESOURCE_ID).status.phase == Phase.OTHER_ERROR

    async def test_deployment_fetch_error(self, config, cluster, runner, credentials) -> None:
        _seed(cluster)
        cluster.fail_next("get_deployment", ClusterError("apiserver unavailable"))
        reconciler, status = _build(config, cluster, runner, credentials)

        with pytest.raises(ClusterError):
            await reconciler.reconcile(RESOURCE_ID)

        resource = cluster.webui(RESOURCE_ID)
        assert resource.status.phase == Phase.OTHER_ERROR
        assert resource.status.message == DEPLOYMENT_FETCH_FAILED_MESSAGE
        assert runner.call_count == 0

    async def test_not_deployed(self, config, cluster, runner, credentials) -> None:
        _seed(cluster, version="")
        reconciler, status = _build(config, cluster, runner, credentials)

        result = await reconciler.reconcile(RESOURCE_ID)

        assert result.action == Action.NOOP
        assert result.phase == Phase.NOT_DEPLOYED
        assert status.phases == [Phase.NOT_DEPLOYED]
        assert runner.call_count == 0

    async def test_unreadable_version_is_terminal(self, config, cluster, runner, credentials) -> None:
        """No tag at all: OTHER_ERROR is written and nothing is raised."""
        _seed(cluster, image=REPOSITORY)
        reconciler, status = _build(config, cluster, runner, credentials)

        result = await reconciler.reconcile(RESOURCE_ID)

        assert result.phase == Phase.OTHER_ERROR
        assert result.message == UNREADABLE_VERSION_MESSAGE
        assert cluster.webui(RESOURCE_ID).status.message == UNREADABLE_VERSION_MESSAGE
        assert runner.call_count == 0

    async def test_empty_tag_raises_without_status(self, config, cluster, runner, credentials) -> None:
        _seed(cluster, image=f"{REPOSITORY}:v")
        reconciler, status = _build(config, cluster, runner, credentials)

        with pytest.raises(EmptyImageTagError):
            await reconciler.reconcile(RESOURCE_ID)

        assert status.phases == []
        assert cluster.webui(RESOURCE_ID).status.phase is None


# =============================================================================
# Tests: In Sync
# =============================================================================
class TestInSync:
    """Desired equals actual after stripping "v"."""

    async def test_nothing_to_do(self, config, cluster, runner, credentials) -> None:
        _seed(cluster, version="v1.4", image=f"{REPOSITORY}:1.4")
        reconciler, status = _build(config, cluster, runner, credentials)

        result = await reconciler.reconcile(RESOURCE_ID)

        assert result.action == Action.NOOP
        assert result.phase == Phase.PROVISIONED
        assert result.message == "Existing version conform the requested one: 1.4. Nothing to do."
        assert runner.call_count == 0

    async def test_repairs_missing_owner_reference(self, config, cluster, runner, credentials) -> None:
        parent = _seed(cluster, version="v1.4", image=f"{REPOSITORY}:v1.4")
        reconciler, _ = _build(config, cluster, runner, credentials)

        await reconciler.reconcile(RESOURCE_ID)

        assert has_controller(parent, cluster.deployment(NAMESPACE))

    async def test_existing_link_not_rewritten(self, config, cluster, runner, credentials) -> None:
        _seed(cluster, version="v1.4", image=f"{REPOSITORY}:v1.4")
        reconciler, _ = _build(config, cluster, runner, credentials)

        await reconciler.reconcile(RESOURCE_ID)
        await reconciler.reconcile(RESOURCE_ID)

        updates = [c for c in cluster.call_history if c.startswith("update_deployment_owners")]
        assert len(updates) == 1

    async def test_foreign_controller_does_not_block_in_sync(
        self, config, cluster, runner, credentials
    ) -> None:
        _seed(cluster, version="v1.4", image=f"{REPOSITORY}:v1.4")
        foreign = OwnerReference(
            api_version="apps/v1", kind="ReplicaSet", name="other", uid="rs-uid", controller=True
        )
        deployment = cluster.deployment(NAMESPACE)
        cluster.put_deployment(deployment.model_copy(update={"owner_references": [foreign]}))

        with capture_logs() as logs:
            reconciler, _ = _build(config, cluster, runner, credentials)
            results = [await reconciler.reconcile(RESOURCE_ID) for _ in range(3)]

        assert [r.action for r in results] == [Action.NOOP] * 3
        assert [r.phase for r in results] == [Phase.PROVISIONED] * 3
        assert cluster.webui(RESOURCE_ID).status.phase == Phase.PROVISIONED
        assert cluster.deployment(NAMESPACE).owner_references == [foreign]
        warnings = [log for log in logs if log["event"] == "owner_reference_repair_failed"]
        assert [w["error_code"] for w in warnings] == ["DEPLOYMENT_ALREADY_CONTROLLED"] * 3

    async def test_transient_link_failure_in_sync(self, config, cluster, runner, credentials) -> None:
        parent = _seed(cluster, version="v1.4", image=f"{REPOSITORY}:v1.4")
        cluster.fail_next("update_deployment_owners", ClusterError("conflict"))
        reconciler, status = _build(config, cluster, runner, credentials)

        result = await reconciler.reconcile(RESOURCE_ID)

        assert result.phase == Phase.PROVISIONED
        assert status.phases == [Phase.OWNER_REFERENCE_FAILED, Phase.PROVISIONED]
        assert not has_controller(parent, cluster.deployment(NAMESPACE))

        await reconciler.reconcile(RESOURCE_ID)

        assert has_controller(parent, cluster.deployment(NAMESPACE))


# =============================================================================
# Tests: Provision
# =============================================================================
class TestProvision:
    """No Deployment and a requested version."""

    async def test_provision_success(self, config, cluster, runner, credentials) -> None:
        parent = _seed(cluster, version="v2.0")
        runner.set_hook(_simulate_playbook(cluster))
        reconciler, status = _build(config, cluster, runner, credentials)

        result = await reconciler.reconcile(RESOURCE_ID)

        assert result.action == Action.PROVISION
        assert result.phase == Phase.PROVISIONED
        assert status.phases == [Phase.PROVISION_STARTED, Phase.PROVISIONED]
        assert _apb_actions(runner) == ["provision"]
        assert has_controller(parent, cluster.deployment(NAMESPACE))

    async def test_target_version_message(self, config, cluster, runner, credentials) -> None:
        _seed(cluster, version="v2.0")
        runner.fail_when(lambda cmd: cmd.program == "ansible-playbook")
        seen = []
        reconciler, status = _build(config, cluster, runner, credentials)
        runner.set_hook(lambda cmd: seen.append(cluster.webui(RESOURCE_ID).status.message))

        with pytest.raises(ProcessExitError):
            await reconciler.reconcile(RESOURCE_ID)

        # hooks only run for successful commands: oc login, oc project
        assert seen == ["Target version: v2.0", "Target version: v2.0"]

    async def test_provision_failure(self, config, cluster, runner, credentials, tmp_path) -> None:
        _seed(cluster, version="v2.0")
        runner.fail_when(lambda cmd: cmd.program == "ansible-playbook", exit_code=2)
        reconciler, status = _build(config, cluster, runner, credentials)

        with pytest.raises(ProcessExitError):
            await reconciler.reconcile(RESOURCE_ID)

        assert status.phases == [Phase.PROVISION_STARTED, Phase.PROVISION_FAILED]
        assert cluster.webui(RESOURCE_ID).status.message == PROVISION_FAILED_MESSAGE
        assert list(tmp_path.iterdir()) == []

    async def test_timeout_is_a_provision_failure(self, config, cluster, runner, credentials) -> None:
        _seed(cluster, version="v2.0")

        def slow_playbook(command):
            if command.program == "ansible-playbook":
                raise ProcessTimeoutError("deadline exceeded", command="ansible-playbook", timeout_seconds=1)

        runner.set_hook(slow_playbook)
        reconciler, status = _build(config, cluster, runner, credentials)

        with pytest.raises(ProcessTimeoutError):
            await reconciler.reconcile(RESOURCE_ID)

        assert status.phases[-1] == Phase.PROVISION_FAILED

    async def test_ownership_failure_keeps_deployment(self, config, cluster, runner, credentials) -> None:
        """Final phase stays OWNER_REFERENCE_FAILED; the next pass repairs it."""
        parent = _seed(cluster, version="v2.0")
        runner.set_hook(_simulate_playbook(cluster))
        cluster.fail_next("update_deployment_owners", ClusterError("forbidden"))
        reconciler, status = _build(config, cluster, runner, credentials)

        with pytest.raises(OwnerReferenceError):
            await reconciler.reconcile(RESOURCE_ID)

        assert status.phases == [Phase.PROVISION_STARTED, Phase.OWNER_REFERENCE_FAILED]
        assert cluster.deployment(NAMESPACE) is not None

        result = await reconciler.reconcile(RESOURCE_ID)

        assert result.action == Action.NOOP
        assert result.phase == Phase.PROVISIONED
        assert has_controller(parent, cluster.deployment(NAMESPACE))
        assert _apb_actions(runner) == ["provision"]

    async def test_status_write_failures_do_not_fail_the_pass(
        self, config, cluster, runner, credentials
    ) -> None:
        _seed(cluster, version="v2.0")
        runner.set_hook(_simulate_playbook(cluster))
        cluster.fail_next("update_webui", ClusterError("conflict"), times=10)
        reconciler, _ = _build(config, cluster, runner, credentials)

        result = await reconciler.reconcile(RESOURCE_ID)

        assert result.phase == Phase.PROVISIONED
        assert cluster.webui(RESOURCE_ID).status.phase is None


# =============================================================================
# Tests: Deprovision
# =============================================================================
class TestDeprovision:
    """Deployment present, no version requested."""

    async def test_deprovision_success(self, config, cluster, runner, credentials) -> None:
        _seed(cluster, version="", image=f"{REPOSITORY}:v1.4")
        runner.set_hook(_simulate_playbook(cluster))
        reconciler, status = _build(config, cluster, runner, credentials)

        result = await reconciler.reconcile(RESOURCE_ID)

        assert result.action == Action.DEPROVISION
        assert result.phase == Phase.DEPROVISIONED
        assert status.phases == [Phase.DEPROVISION_STARTED, Phase.DEPROVISIONED]
        assert _apb_actions(runner) == ["deprovision"]
        assert cluster.deployment(NAMESPACE) is None

    async def test_deprovision_failure(self, config, cluster, runner, credentials) -> None:
        _seed(cluster, version="", image=f"{REPOSITORY}:v1.4")
        runner.fail_when(lambda cmd: cmd.program == "ansible-playbook")
        reconciler, status = _build(config, cluster, runner, credentials)

        with pytest.raises(ProcessExitError):
            await reconciler.reconcile(RESOURCE_ID)

        assert status.phases == [Phase.DEPROVISION_STARTED, Phase.DEPROVISION_FAILED]


# =============================================================================
# Tests: Upgrade
# =============================================================================
class TestDeprovisionThenProvision:
    """Deployment present with a different version."""

    async def test_upgrade(self, config, cluster, runner, credentials) -> None:
        _seed(cluster, version="v2.0", image=f"{REPOSITORY}:v1.4")
        runner.set_hook(_simulate_playbook(cluster))
        reconciler, status = _build(config, cluster, runner, credentials)

        result = await reconciler.reconcile(RESOURCE_ID)

        assert result.action == Action.DEPROVISION_THEN_PROVISION
        assert result.phase == Phase.PROVISIONED
        assert _apb_actions(runner) == ["deprovision", "provision"]
        assert status.phases == [
            Phase.DEPROVISION_STARTED,
            Phase.DEPROVISIONED,
            Phase.PROVISION_STARTED,
            Phase.PROVISIONED,
        ]
        assert cluster.deployment(NAMESPACE).container("console").image == f"{REPOSITORY}:v2.0"

    async def test_deprovision_failure_skips_provision(self, config, cluster, runner, credentials) -> None:
        _seed(cluster, version="v2.0", image=f"{REPOSITORY}:v1.4")
        runner.fail_when(lambda cmd: cmd.program == "ansible-playbook", exit_code=4)
        reconciler, status = _build(config, cluster, runner, credentials)

        with pytest.raises(ProcessExitError) as exc_info:
            await reconciler.reconcile(RESOURCE_ID)

        assert exc_info.value.returncode == 4
        assert _apb_actions(runner) == ["deprovision"]
        assert status.phases == [Phase.DEPROVISION_STARTED, Phase.DEPROVISION_FAILED]
        assert Phase.PROVISION_STARTED not in status.phases
