"""
webui_operator.infrastructure.inventory - Ansible Inventory Rendering
======================================================================

Renders the inventory consumed by the kubevirt-web-ui playbook. The output is
a pure function of (spec, namespace, action, defaults).

Example (provision, empty spec, namespace "kubevirt-web-ui"):

    [OSEv3:children]
    masters

    [OSEv3:vars]
    platform=openshift
    apb_action=provision
    registry_url=quay.io
    registry_namespace=kubevirt
    docker_tag=v1.4
    kubevirt_web_ui_namespace=kubevirt-web-ui

    [masters]
    127.0.0.1 ansible_connection=local
"""

from __future__ import annotations

from typing import Optional

from webui_operator.core.config import InventoryDefaults
from webui_operator.core.enums import PlaybookAction
from webui_operator.core.models import WebUISpec


def _or_default(value: str, default: str) -> str:
    return value if value else default


def render_inventory(
    spec: WebUISpec,
    namespace: str,
    action: PlaybookAction,
    defaults: Optional[InventoryDefaults] = None,
) -> str:
    """Render the inventory document for one playbook run.

    Args:
        spec: Desired state; empty fields fall back to `defaults`.
        namespace: Namespace of the KWebUI, used as kubevirt_web_ui_namespace.
        action: provision or deprovision (the apb_action value).
        defaults: Fallback values, InventoryDefaults() when None.

    Returns:
        The inventory text, newline-terminated.
    """
    defaults = defaults or InventoryDefaults()
    action = PlaybookAction(action)

    lines = [
        "[OSEv3:children]",
        "masters",
        "",
        "[OSEv3:vars]",
        "platform=openshift",
        f"apb_action={action.value}",
        f"registry_url={_or_default(spec.registry_url, defaults.registry_url)}",
        f"registry_namespace={_or_default(spec.registry_namespace, defaults.registry_namespace)}",
        f"docker_tag={_or_default(spec.version, defaults.version)}",
        f"kubevirt_web_ui_namespace={_or_default(namespace, defaults.namespace)}",
    ]
    if action == PlaybookAction.DEPROVISION:
        lines.append("preserve_namespace=true")
    if spec.openshift_master_default_subdomain:
        lines.append(
            f"openshift_master_default_subdomain={spec.openshift_master_default_subdomain}"
        )
    if spec.public_master_hostname:
        lines.append(f"public_master_hostname={spec.public_master_hostname}")
    lines += [
        "",
        "[masters]",
        "127.0.0.1 ansible_connection=local",
    ]
    return "\n".join(lines) + "\n"
