"""
webui_operator.infrastructure.ephemeral - Ephemeral Artifact Manager
=====================================================================

Short-lived files scoped to a single provisioning run:

    <temp_dir>/config_<SUFFIX>             ← kubeconfig written by `oc login`
    <temp_dir>/inventory_<SUFFIX>.ini      ← generated Ansible inventory

SUFFIX is `suffix_bytes` random bytes from ``secrets.token_bytes`` rendered as
upper-case hex (10 characters by default), e.g. ``config_9F03A1C2E7``.

Lifecycle:
    Both files are handed out by context managers; leaving the ``with`` block
    removes the file whether the block succeeded or raised. Removal is
    best-effort: a failure is logged and never replaces the original error.

Random Source Failure:
    allow_insecure_fallback=True   → log a warning, use `fallback_suffix`
                                     (concurrent runs may then collide)
    allow_insecure_fallback=False  → raise ArtifactError
"""

from __future__ import annotations

import os
import secrets
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from webui_operator.core.config import ArtifactConfig
from webui_operator.core.exceptions import ArtifactError
from webui_operator.core.logging_config import component_logger


RandomSource = Callable[[int], bytes]


class EphemeralArtifactManager:
    """Creates and removes the per-run credentials and inventory files.

    Attributes:
        _config: Directory, naming and fallback settings.
        _random_source: Callable returning n random bytes.
    """

    def __init__(
        self,
        config: Optional[ArtifactConfig] = None,
        *,
        random_source: RandomSource = secrets.token_bytes,
        logger: Optional[Any] = None,
    ) -> None:
        self._config = config or ArtifactConfig()
        self._random_source = random_source
        self._logger = component_logger("ephemeral_artifacts", logger)

    # =========================================================================
    # Naming
    # =========================================================================

    def unique_suffix(self) -> str:
        """Return a fresh file-name suffix.

        Raises:
            ArtifactError: The random source failed and the fallback is
                disabled.
        """
        try:
            return self._random_source(self._config.suffix_bytes).hex().upper()
        except Exception as exc:
            if not self._config.allow_insecure_fallback:
                raise ArtifactError(
                    message="Secure random source unavailable",
                    error_code="RANDOM_SOURCE_FAILED",
                    details={"error": str(exc)},
                ) from exc
            self._logger.warning(
                "random_source_failed",
                error=str(exc),
                fallback=self._config.fallback_suffix,
            )
            return self._config.fallback_suffix

    def credentials_path(self) -> Path:
        return Path(self._config.temp_dir) / f"{self._config.credentials_prefix}_{self.unique_suffix()}"

    def inventory_path(self) -> Path:
        return Path(self._config.temp_dir) / (
            f"{self._config.inventory_prefix}_{self.unique_suffix()}"
            f"{self._config.inventory_extension}"
        )

    # =========================================================================
    # Artifacts
    # =========================================================================

    @contextmanager
    def credentials_file(self) -> Iterator[Path]:
        """Yield the path of a new, empty, owner-only credentials file.

        Raises:
            ArtifactError: The file could not be created.
        """
        path = self.credentials_path()
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            os.close(fd)
        except OSError as exc:
            raise ArtifactError(
                message=f"Failed to create credentials file: {exc}",
                path=str(path),
                error_code="CREDENTIALS_FILE_FAILED",
            ) from exc

        self._logger.debug("artifact_created", kind="credentials", path=str(path))
        try:
            yield path
        finally:
            self.remove(path)

    @contextmanager
    def inventory_file(self, content: str) -> Iterator[Path]:
        """Write `content` to a new inventory file and yield its path.

        Raises:
            ArtifactError: The file could not be written. Nothing is left
                behind in that case.
        """
        path = self.inventory_path()
        try:
            path.write_text(content)
        except OSError as exc:
            self.remove(path)
            raise ArtifactError(
                message=f"Failed to write inventory file: {exc}",
                path=str(path),
                error_code="INVENTORY_WRITE_FAILED",
            ) from exc

        self._logger.debug("artifact_created", kind="inventory", path=str(path))
        try:
            yield path
        finally:
            self.remove(path)

    def remove(self, path: Path) -> bool:
        """Remove `path`, logging instead of raising on failure.

        Returns:
            True if nothing is left at `path`.
        """
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as exc:
            self._logger.warning("artifact_remove_failed", path=str(path), error=str(exc))
            return False
        self._logger.debug("artifact_removed", path=str(path))
        return True
