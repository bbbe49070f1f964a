"""
webui_operator.core.config - Configuration Management
======================================================

Configuration can be loaded from multiple sources with the following priority
(highest first):

    1. Explicit constructor arguments
    2. Environment variables (prefixed with WEBUI_OPERATOR_)
    3. YAML configuration file (webui-operator.yaml)
    4. Default values defined in the models below

Architecture Context:
    The top-level OperatorConfig is created once at startup and handed to
    WebUIOperator, which passes each nested section to the component that
    needs it:

        OperatorConfig
            ├── InventoryDefaults → render_inventory()
            ├── CommandConfig     → ProvisioningWorkflow, SubprocessRunner
            ├── ArtifactConfig    → EphemeralArtifactManager
            └── ClusterConfig     → ClusterClient, Reconciler, OwnershipLinker

Usage:
    # Load from environment variables:
    config = OperatorConfig()

    # Load from YAML file:
    config = load_config("webui-operator.yaml")

    # Explicit overrides:
    config = OperatorConfig(log_level="DEBUG")

Environment Variables:
    WEBUI_OPERATOR_LOG_LEVEL=DEBUG
    WEBUI_OPERATOR_LOG_FORMAT=json
    WEBUI_OPERATOR_COMMANDS__TIMEOUT_SECONDS=1800
    WEBUI_OPERATOR_ARTIFACTS__TEMP_DIR=/var/tmp
    WEBUI_OPERATOR_CLUSTER__BACKEND=memory
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from webui_operator.core.exceptions import ConfigurationError


DEFAULT_CONFIG_FILE = "webui-operator.yaml"


# =============================================================================
# Inventory Defaults
# =============================================================================
# Fallback values used when the KWebUI spec (or the request namespace) leaves
# a field empty. They end up verbatim in the generated inventory.
# =============================================================================
class InventoryDefaults(BaseModel):
    """Defaults substituted into the generated Ansible inventory."""

    registry_url: str = Field(
        default="quay.io",
        description="Container registry used when spec.registry_url is empty",
    )
    registry_namespace: str = Field(
        default="kubevirt",
        description="Registry namespace used when spec.registry_namespace is empty",
    )
    version: str = Field(
        default="v1.4",
        description="docker_tag used when spec.version is empty",
    )
    namespace: str = Field(
        default="kubevirt-web-ui",
        description="kubevirt_web_ui_namespace used when the request namespace is empty",
    )


# =============================================================================
# External Command Configuration
# =============================================================================
class CommandConfig(BaseModel):
    """Executables and arguments of the external provisioning commands.

    Attributes:
        oc_binary: OpenShift client used for login and project selection.
        ansible_playbook_binary: The provisioning engine.
        playbook_path: Fixed entry point of the provisioning playbooks.
        verbosity_flag: Verbosity flag appended to the playbook invocation.
        kubeconfig_env: Environment variable that points every command at
            the ephemeral credentials file.
        timeout_seconds: Deadline for a single command. None keeps the
            historical behavior (wait indefinitely).
    """

    oc_binary: str = Field(default="oc", description="OpenShift CLI executable")
    ansible_playbook_binary: str = Field(
        default="ansible-playbook",
        description="Provisioning engine executable",
    )
    playbook_path: str = Field(
        default="/kubevirt-web-ui-ansible/playbooks/kubevirt-web-ui/config.yml",
        description="Playbook entry point passed to ansible-playbook",
    )
    verbosity_flag: str = Field(default="-vvv", description="Playbook verbosity flag")
    kubeconfig_env: str = Field(
        default="KUBECONFIG",
        description="Env var carrying the ephemeral credentials file path",
    )
    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Per-command deadline in seconds (None = no deadline)",
    )


# =============================================================================
# Ephemeral Artifact Configuration
# =============================================================================
class ArtifactConfig(BaseModel):
    """Where and how ephemeral files are named.

    Files are created as ``<temp_dir>/<pattern>_<suffix><extension>``.
    """

    temp_dir: str = Field(default="/tmp", description="Directory for ephemeral files")
    credentials_prefix: str = Field(default="config", description="Credentials file pattern")
    inventory_prefix: str = Field(default="inventory", description="Inventory file pattern")
    inventory_extension: str = Field(default=".ini", description="Inventory file extension")
    suffix_bytes: int = Field(
        default=5,
        ge=1,
        le=32,
        description="Random bytes per suffix (rendered as upper-case hex)",
    )
    fallback_suffix: str = Field(
        default="abcde",
        description="Literal suffix used when the secure random source fails",
    )
    allow_insecure_fallback: bool = Field(
        default=True,
        description="Use fallback_suffix on random source failure instead of failing",
    )


# =============================================================================
# Cluster Configuration
# =============================================================================
class ClusterConfig(BaseModel):
    """Identity of the managed resource type and of the deployed artifact."""

    backend: Literal["kubernetes", "memory"] = Field(
        default="kubernetes",
        description="ClusterClient implementation: 'kubernetes' or 'memory'",
    )
    group: str = Field(default="kubevirt.io", description="KWebUI API group")
    version: str = Field(default="v1alpha1", description="KWebUI API version")
    plural: str = Field(default="kwebuis", description="KWebUI resource plural")
    kind: str = Field(default="KWebUI", description="KWebUI kind")
    deployment_name: str = Field(
        default="console",
        description="Well-known name of the Web UI Deployment",
    )
    container_name: str = Field(
        default="console",
        description="Container whose image tag carries the deployed version",
    )
    token_path: str = Field(
        default="/var/run/secrets/kubernetes.io/serviceaccount/token",
        description="Service account token mounted into the operator pod",
    )
    ca_path: str = Field(
        default="/var/run/secrets/kubernetes.io/serviceaccount/ca.crt",
        description="Cluster CA bundle mounted into the operator pod",
    )

    @property
    def api_version(self) -> str:
        """``group/version`` string used in owner references."""
        return f"{self.group}/{self.version}"


# =============================================================================
# Main Configuration
# =============================================================================
# Environment Variable Mapping:
#   WEBUI_OPERATOR_LOG_LEVEL                 → config.log_level
#   WEBUI_OPERATOR_COMMANDS__TIMEOUT_SECONDS → config.commands.timeout_seconds
#   WEBUI_OPERATOR_CLUSTER__BACKEND          → config.cluster.backend
# =============================================================================
class OperatorConfig(BaseSettings):
    """Top-level configuration for the KubeVirt Web UI operator.

    Attributes:
        environment: Deployment environment, informational only.
        log_level: Minimum level emitted by structlog.
        log_format: "console" for human-readable output, "json" for log
            aggregators.
        retry_delay_seconds: Delay kopf waits before retrying a failed pass.
        inventory: Defaults for the generated inventory.
        commands: External command settings.
        artifacts: Ephemeral file settings.
        cluster: Managed resource and deployment identity.

    Example:
        >>> config = OperatorConfig(
        ...     log_level="DEBUG",
        ...     commands=CommandConfig(timeout_seconds=900),
        ... )
    """

    environment: Literal["dev", "staging", "prod"] = Field(
        default="prod",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log renderer",
    )
    retry_delay_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Delay before the dispatcher retries a failed reconcile pass",
    )

    inventory: InventoryDefaults = Field(default_factory=InventoryDefaults)
    commands: CommandConfig = Field(default_factory=CommandConfig)
    artifacts: ArtifactConfig = Field(default_factory=ArtifactConfig)
    cluster: ClusterConfig = Field(default_factory=ClusterConfig)

    model_config = {
        "env_prefix": "WEBUI_OPERATOR_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }


# =============================================================================
# Configuration Loader
# =============================================================================
def load_config(path: Optional[str] = None) -> OperatorConfig:
    """Load operator configuration from a YAML file and environment variables.

    Args:
        path: Path to a YAML configuration file. If None, looks for
            'webui-operator.yaml' in the current directory, and falls back to
            pure defaults + environment variables when it does not exist.

    Returns:
        A fully validated OperatorConfig instance.

    Raises:
        FileNotFoundError: If an explicit path is provided but doesn't exist.
        ConfigurationError: If the file is not valid YAML.
    """
    if path is None:
        default_path = Path(DEFAULT_CONFIG_FILE)
        if default_path.exists():
            path = str(default_path)

    yaml_data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(config_path) as f:
            try:
                raw_data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigurationError(
                    message=f"Invalid YAML in configuration file: {path}",
                    error_code="INVALID_CONFIG_FILE",
                    details={"path": path, "error": str(exc)},
                ) from exc
            if isinstance(raw_data, dict):
                yaml_data = raw_data

    return OperatorConfig(**yaml_data)


def get_default_config() -> OperatorConfig:
    """Create an OperatorConfig with all defaults (plus any set env vars)."""
    return OperatorConfig()
