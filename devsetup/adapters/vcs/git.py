"""
Git adapter — global identity configuration.

Reads and writes user-level (``--global``) git configuration through
the git CLI.  Repository-level config is never touched.
"""

from __future__ import annotations

import logging
import shutil
import subprocess

from devsetup.adapters.base import Adapter, ExecutionContext
from devsetup.core.models.action import Receipt

logger = logging.getLogger(__name__)

_KEY_PREFIXES = ("user.",)


class GitAdapter(Adapter):
    """Global git config operations.

    Action params:
        operation (str): 'config_get' or 'config_set'.
        key (str): Config key; only ``user.*`` keys are accepted.
        value (str): New value (for 'config_set').
        timeout (int): Timeout in seconds (default: 15).
    """

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.action.params.get("operation", "")
        valid_ops = {"config_get", "config_set"}
        if operation not in valid_ops:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(valid_ops))}"

        key = context.action.params.get("key", "")
        if not key:
            return False, "Missing required param: 'key'"
        if not key.startswith(_KEY_PREFIXES):
            return False, f"Refusing to touch non-identity key '{key}'"

        if operation == "config_set":
            value = context.action.params.get("value", "")
            if not isinstance(value, str) or not value.strip():
                return False, "Missing required param: 'value' for config_set"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.action.params["operation"]
        try:
            if operation == "config_get":
                return self._config_get(context)
            return self._config_set(context)
        except FileNotFoundError:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error="git is not installed",
                return_code=127,
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Git error: {e}",
            )

    # ── Operations ──────────────────────────────────────────────

    def _config_get(self, ctx: ExecutionContext) -> Receipt:
        key = ctx.action.params["key"]
        result = self._git(["config", "--global", "--get", key], ctx)

        # Exit 1 means "key not set", which is an answer, not an error.
        if result.returncode in (0, 1):
            value = result.stdout.strip() if result.returncode == 0 else ""
            return Receipt.success(
                adapter=self.name,
                action_id=ctx.action.id,
                output=value,
                return_code=result.returncode,
                metadata={"key": key, "set": bool(value)},
            )
        return Receipt.failure(
            adapter=self.name,
            action_id=ctx.action.id,
            error=result.stderr.strip() or f"git config exited with {result.returncode}",
            return_code=result.returncode,
        )

    def _config_set(self, ctx: ExecutionContext) -> Receipt:
        key = ctx.action.params["key"]
        value = ctx.action.params["value"]
        result = self._git(["config", "--global", key, value], ctx)
        if result.returncode != 0:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=result.stderr.strip() or f"git config exited with {result.returncode}",
                return_code=result.returncode,
            )
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=value,
            return_code=0,
            metadata={"key": key},
        )

    # ── Helpers ─────────────────────────────────────────────────

    def _git(self, args: list[str], ctx: ExecutionContext) -> subprocess.CompletedProcess:
        timeout = ctx.action.params.get("timeout", 15)
        return subprocess.run(
            ["git", *args],
            env=ctx.env,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
