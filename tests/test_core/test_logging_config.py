"""
Tests for webui_operator.core.logging_config
============================================
"""

import structlog
from structlog.testing import capture_logs

from webui_operator.core.config import OperatorConfig
from webui_operator.core.logging_config import component_logger, configure_logging


class TestComponentLogger:
    """component_logger binds the component name."""

    def test_binds_component(self) -> None:
        with capture_logs() as logs:
            component_logger("reconciler").info("reconcile_started", resource="ns/ui")

        assert logs == [
            {
                "component": "reconciler",
                "resource": "ns/ui",
                "event": "reconcile_started",
                "log_level": "info",
            }
        ]

    def test_uses_injected_logger(self) -> None:
        base = structlog.get_logger().bind(request_id="r-1")
        with capture_logs() as logs:
            component_logger("workflow", base).info("workflow_started")

        assert logs[0]["request_id"] == "r-1"
        assert logs[0]["component"] == "workflow"


class TestConfigureLogging:
    """configure_logging sets the level filter and renderer."""

    def teardown_method(self) -> None:
        structlog.reset_defaults()

    def test_json_renderer(self) -> None:
        configure_logging(OperatorConfig(log_format="json"))
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer(self) -> None:
        configure_logging(OperatorConfig(log_format="console"))
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_level_filter(self, capsys) -> None:
        configure_logging(OperatorConfig(log_level="WARNING", log_format="json"))
        logger = structlog.get_logger()

        logger.info("dropped_event")
        logger.warning("kept_event")

        out = capsys.readouterr().out
        assert "dropped_event" not in out
        assert "kept_event" in out
