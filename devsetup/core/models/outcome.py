"""
Step outcomes and the run report.

Each installer step returns a StepOutcome.  The orchestrator collects
them in a RunReport; the Reporter reads the report and never anything
else.  There is no process-wide error counter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, Field

from devsetup.core.models.settings import RunMode

StepStatus = Literal["ok", "skipped", "failed", "not_run"]


class StepOutcome(BaseModel):
    """What one installer step did."""

    step: str
    title: str = ""
    status: StepStatus = "ok"
    message: str = ""
    errors: list[str] = Field(default_factory=list)
    # Directories the step made reachable; folded into the environment.
    path_additions: list[str] = Field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def ok(cls, step: str, message: str = "", **kwargs) -> StepOutcome:
        return cls(step=step, status="ok", message=message, **kwargs)

    @classmethod
    def skipped(cls, step: str, message: str = "", **kwargs) -> StepOutcome:
        return cls(step=step, status="skipped", message=message, **kwargs)

    @classmethod
    def failure(cls, step: str, error: str, **kwargs) -> StepOutcome:
        errors = kwargs.pop("errors", None) or [error]
        return cls(step=step, status="failed", message=error, errors=errors, **kwargs)


class ToolCheck(BaseModel):
    """One verification line."""

    label: str
    executable: str
    present: bool = False
    version: str | None = None
    location: str | None = None
    # Present-but-unverifiable tools (assistant CLI before a new shell)
    # are warnings rather than failures.
    warn_only: bool = False


@dataclass
class RunReport:
    """Aggregated result of a setup run."""

    mode: RunMode = RunMode.BEST_EFFORT
    outcomes: list[StepOutcome] = field(default_factory=list)
    checks: list[ToolCheck] = field(default_factory=list)
    aborted_at: str | None = None
    startup_file: str = ""
    dry_run: bool = False

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.failed)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.status == "ok")

    @property
    def skipped(self) -> int:
        return sum(1 for o in self.outcomes if o.status == "skipped")

    @property
    def failed_steps(self) -> list[StepOutcome]:
        return [o for o in self.outcomes if o.failed]

    @property
    def aborted(self) -> bool:
        return self.aborted_at is not None

    @property
    def status(self) -> str:
        if self.aborted:
            return "aborted"
        if self.failed == 0:
            return "ok"
        return "partial"

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "status": self.status,
            "failed": self.failed,
            "succeeded": self.succeeded,
            "skipped": self.skipped,
            "aborted_at": self.aborted_at,
            "startup_file": self.startup_file,
            "dry_run": self.dry_run,
            "steps": [o.model_dump(mode="json") for o in self.outcomes],
            "verification": [c.model_dump(mode="json") for c in self.checks],
        }
