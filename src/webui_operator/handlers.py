"""
webui_operator.handlers - kopf Control Loop Entry Point
========================================================

Registers the kopf handlers that drive the operator. kopf watches KWebUI
resources and calls one handler at a time per object; each call runs one
reconcile pass.

Run with:
    kopf run --all-namespaces -m webui_operator.handlers

Failure Mapping:
    ReconcileResult      → handler succeeds
    OperatorError        → kopf.TemporaryError (retried after
                           retry_delay_seconds)

The configuration file is taken from $WEBUI_OPERATOR_CONFIG_FILE, else
webui-operator.yaml in the working directory, else defaults + environment.
"""

from __future__ import annotations

import os
from typing import Any

import kopf

from webui_operator.core.config import load_config
from webui_operator.core.exceptions import OperatorError
from webui_operator.core.logging_config import component_logger, configure_logging
from webui_operator.facade import WebUIOperator


CONFIG_FILE_ENV = "WEBUI_OPERATOR_CONFIG_FILE"

# Resource coordinates must be known when the decorators below are evaluated.
_config = load_config(os.environ.get(CONFIG_FILE_ENV))
_cluster = _config.cluster


@kopf.on.startup()
async def configure_operator(settings: kopf.OperatorSettings, memo: kopf.Memo, **_: Any) -> None:
    """Set up logging and build the WebUIOperator shared by all handlers."""
    configure_logging(_config)
    settings.watching.server_timeout = 210
    memo.operator = WebUIOperator(_config)
    component_logger("handlers").info(
        "operator_started",
        group=_cluster.group,
        version=_cluster.version,
        plural=_cluster.plural,
    )


@kopf.on.resume(_cluster.group, _cluster.version, _cluster.plural)
@kopf.on.create(_cluster.group, _cluster.version, _cluster.plural)
@kopf.on.update(_cluster.group, _cluster.version, _cluster.plural)
async def reconcile_webui(namespace: str, name: str, memo: kopf.Memo, **_: Any) -> None:
    """Run one reconcile pass for the KWebUI that triggered the event."""
    operator: WebUIOperator = memo.operator
    try:
        await operator.reconcile(namespace, name)
    except OperatorError as exc:
        raise kopf.TemporaryError(
            f"{exc.error_code}: {exc.message}",
            delay=_config.retry_delay_seconds,
        ) from exc
