"""
Tests for webui_operator.infrastructure.inventory
=================================================

render_inventory() is a pure function, so every test compares full documents.
"""

from webui_operator.core.config import InventoryDefaults
from webui_operator.core.enums import PlaybookAction
from webui_operator.core.models import WebUISpec
from webui_operator.infrastructure.inventory import render_inventory


PROVISION_DEFAULTS = """\
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


class TestRenderInventory:
    """Tests for render_inventory()."""

    def test_provision_with_defaults(self) -> None:
        """Empty spec and namespace fall back to every default."""
        assert render_inventory(WebUISpec(), "", PlaybookAction.PROVISION) == PROVISION_DEFAULTS

    def test_provision_with_values(self) -> None:
        spec = WebUISpec(
            version="v2.0",
            registry_url="registry.local:5000",
            registry_namespace="mirror",
        )

        text = render_inventory(spec, "web", PlaybookAction.PROVISION)

        assert "apb_action=provision\n" in text
        assert "registry_url=registry.local:5000\n" in text
        assert "registry_namespace=mirror\n" in text
        assert "docker_tag=v2.0\n" in text
        assert "kubevirt_web_ui_namespace=web\n" in text
        assert "preserve_namespace" not in text

    def test_deprovision_preserves_namespace(self) -> None:
        text = render_inventory(WebUISpec(), "web", PlaybookAction.DEPROVISION)

        assert "apb_action=deprovision\n" in text
        assert "kubevirt_web_ui_namespace=web\npreserve_namespace=true\n" in text

    def test_optional_hostnames_only_when_set(self) -> None:
        spec = WebUISpec(
            version="v2.0",
            openshift_master_default_subdomain="apps.example.com",
            public_master_hostname="master.example.com",
        )

        text = render_inventory(spec, "web", PlaybookAction.DEPROVISION)

        assert text.splitlines()[10:13] == [
            "preserve_namespace=true",
            "openshift_master_default_subdomain=apps.example.com",
            "public_master_hostname=master.example.com",
        ]
        assert text.endswith("[masters]\n127.0.0.1 ansible_connection=local\n")

    def test_custom_defaults(self) -> None:
        defaults = InventoryDefaults(registry_url="mirror.local", version="v1.5")

        text = render_inventory(WebUISpec(), "web", PlaybookAction.PROVISION, defaults)

        assert "registry_url=mirror.local\n" in text
        assert "docker_tag=v1.5\n" in text

    def test_accepts_plain_string_action(self) -> None:
        assert render_inventory(WebUISpec(), "", "provision") == PROVISION_DEFAULTS

    def test_identical_inputs_identical_output(self) -> None:
        spec = WebUISpec(version="v2.0", public_master_hostname="m.example.com")
        first = render_inventory(spec, "web", PlaybookAction.PROVISION)
        second = render_inventory(spec.model_copy(), "web", PlaybookAction.PROVISION)
        assert first == second
