"""
Domain models — Pydantic types for devsetup.

All models are re-exported here for convenient access:

    from devsetup.core.models import HostEnvironment, StepOutcome, Action, Receipt
"""

from devsetup.core.models.action import Action, Receipt
from devsetup.core.models.environment import (
    BREW_PREFIXES,
    ArchitectureClass,
    HostEnvironment,
    ShellKind,
)
from devsetup.core.models.outcome import RunReport, StepOutcome, ToolCheck
from devsetup.core.models.settings import (
    AssistantSettings,
    EditorSettings,
    GitSettings,
    HomebrewSettings,
    RunMode,
    SetupSettings,
)

__all__ = [
    "BREW_PREFIXES",
    # action.py
    "Action",
    # environment.py
    "ArchitectureClass",
    # settings.py
    "AssistantSettings",
    "EditorSettings",
    "GitSettings",
    "HomebrewSettings",
    "HostEnvironment",
    "Receipt",
    "RunMode",
    # outcome.py
    "RunReport",
    "SetupSettings",
    "ShellKind",
    "StepOutcome",
    "ToolCheck",
]
