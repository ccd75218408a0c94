"""
Adapter registry — central dispatch for all adapter operations.

Installer steps never talk to adapters directly — always through the
registry.  The registry owns dry-run (mutating actions are validated
and skipped, read-only probes still run) and mock mode.
"""

from __future__ import annotations

import logging
import time

from devsetup.adapters.base import Adapter, ExecutionContext
from devsetup.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Central registry and dispatcher for adapters."""

    def __init__(self, mock_mode: bool = False, dry_run: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self._mock_mode = mock_mode
        self._mock_adapter: Adapter | None = None
        self._dry_run = dry_run

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def set_mock_mode(self, enabled: bool, mock_adapter: Adapter | None = None) -> None:
        """Route every action to *mock_adapter* (or a built-in success stub)."""
        self._mock_mode = enabled
        self._mock_adapter = mock_adapter

    def register(self, adapter: Adapter) -> None:
        name = adapter.name
        if name in self._adapters:
            logger.warning("Overwriting existing adapter: %s", name)
        self._adapters[name] = adapter
        logger.debug("Registered adapter: %s", name)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def execute(self, action: Action, env: dict[str, str] | None = None) -> Receipt:
        """Execute an action through the appropriate adapter.

        Resolves the adapter (or mock), validates, honours dry-run,
        executes and stamps the duration.  Never raises.
        """
        start_time = time.monotonic()

        context = ExecutionContext(
            action=action,
            env=env,
            dry_run=self._dry_run,
            params=action.params,
        )

        adapter: Adapter | None
        if self._mock_mode and self._mock_adapter:
            adapter = self._mock_adapter
        elif self._mock_mode:
            return Receipt.success(
                adapter=action.adapter,
                action_id=action.id,
                output="",
                metadata={"mock": True},
            )
        else:
            adapter = self._adapters.get(action.adapter)

        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        try:
            is_valid, error_msg = adapter.validate(context)
        except Exception as e:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Validation error: {e}",
            )
        if not is_valid:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Validation failed: {error_msg}",
            )

        if self._dry_run and not action.read_only:
            return Receipt.skip(
                adapter=action.adapter,
                action_id=action.id,
                reason=f"[dry-run] would run: {action.label or action.id}",
                metadata={"dry_run": True},
            )

        logger.debug("Executing %s via %s", action.id, adapter.name)
        try:
            receipt = adapter.execute(context)
        except Exception as e:
            # Adapters should never raise
            logger.error("Adapter %s raised during execution: %s", action.adapter, e)
            receipt = Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Unexpected error: {e}",
            )

        receipt.duration_ms = int((time.monotonic() - start_time) * 1000)
        logger.info("%s → %s (%dms)", action.id, receipt.status, receipt.duration_ms)
        return receipt
