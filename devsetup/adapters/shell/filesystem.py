"""
Filesystem adapter — startup-file operations with receipts.

Appends are idempotent: a line that already occurs anywhere in the
file (substring match on the exact line) is never written again.
"""

from __future__ import annotations

import logging
import shutil
import time
from pathlib import Path

from devsetup.adapters.base import Adapter, ExecutionContext
from devsetup.core.models.action import Receipt

logger = logging.getLogger(__name__)

MARKER = "# Added by devsetup"


def _free_backup_path(target: Path) -> str:
    """``<path>.backup.<epoch>``, suffixed ``.1``, ``.2`` ... if taken."""
    base = f"{target}.backup.{int(time.time())}"
    candidate, n = base, 1
    while Path(candidate).exists():
        candidate = f"{base}.{n}"
        n += 1
    return candidate


class FilesystemAdapter(Adapter):
    """File operations with receipts.

    Action params:
        operation (str): One of 'exists', 'read', 'touch', 'append_line'.
        path (str): Absolute target path.
        line (str): Line to append (for 'append_line').
        backup (bool): Copy the file to ``<path>.backup.<epoch>`` before
            appending (for 'append_line', default: False).  An existing
            backup is never overwritten; a numeric suffix is added instead.
    """

    _OPERATIONS = {"exists", "read", "touch", "append_line"}

    @property
    def name(self) -> str:
        return "filesystem"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.action.params.get("operation", "")
        if not operation:
            return False, "Missing required param: 'operation'"
        if operation not in self._OPERATIONS:
            return False, (
                f"Unknown operation '{operation}'. "
                f"Valid: {', '.join(sorted(self._OPERATIONS))}"
            )

        path = context.action.params.get("path", "")
        if not path:
            return False, "Missing required param: 'path'"
        if not Path(path).is_absolute():
            return False, f"Path must be absolute: {path}"

        if operation == "append_line":
            line = context.action.params.get("line", "")
            if not line or not line.strip():
                return False, "Missing required param: 'line' for append_line"
            if "\n" in line:
                return False, "Param 'line' must be a single line"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.action.params["operation"]
        target = Path(context.action.params["path"])

        try:
            if operation == "exists":
                return self._exists(context, target)
            if operation == "read":
                return self._read(context, target)
            if operation == "touch":
                return self._touch(context, target)
            return self._append_line(context, target)
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Filesystem error: {e}",
                metadata={"path": str(target)},
            )

    # ── Operations ──────────────────────────────────────────────

    def _exists(self, ctx: ExecutionContext, target: Path) -> Receipt:
        exists = target.exists()
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=str(exists).lower(),
            metadata={"path": str(target), "exists": exists},
        )

    def _read(self, ctx: ExecutionContext, target: Path) -> Receipt:
        if not target.is_file():
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"File not found: {target}",
            )
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=target.read_text(encoding="utf-8"),
            metadata={"path": str(target)},
        )

    def _touch(self, ctx: ExecutionContext, target: Path) -> Receipt:
        created = not target.exists()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.touch(exist_ok=True)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output="created" if created else "exists",
            metadata={"path": str(target), "created": created},
        )

    def _append_line(self, ctx: ExecutionContext, target: Path) -> Receipt:
        line = ctx.action.params["line"]

        existing = target.read_text(encoding="utf-8") if target.is_file() else ""
        if line in existing:
            return Receipt.success(
                adapter=self.name,
                action_id=ctx.action.id,
                output="already present",
                metadata={"path": str(target), "added": False},
            )

        backup_path = None
        if ctx.action.params.get("backup") and target.is_file():
            backup_path = _free_backup_path(target)
            shutil.copy2(target, backup_path)

        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "a", encoding="utf-8") as f:
            if existing and not existing.endswith("\n"):
                f.write("\n")
            f.write(f"\n{MARKER}\n{line}\n")

        logger.debug("Appended to %s: %s", target, line)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output="added",
            metadata={"path": str(target), "added": True, "backup": backup_path},
        )
