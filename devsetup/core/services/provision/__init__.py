"""
Workstation provisioning service — package re-exports.

Layers, innermost first: data → detection → execution → orchestration.

    from devsetup.core.services.provision import run_setup, detect_environment
"""

# ── L0: Data ──
from devsetup.core.services.provision.data.catalog import (  # noqa: F401
    STEP_NAMES,
    STEP_TITLES,
    VERIFY_CATALOG,
    ToolSpec,
)

# ── L3: Detection ──
from devsetup.core.services.provision.detection.environment import (  # noqa: F401
    detect_architecture,
    detect_environment,
    detect_shell,
    ensure_startup_file,
    startup_file_for,
)
from devsetup.core.services.provision.detection.identity import (  # noqa: F401
    IdentityHints,
    MacIdentityHints,
    NullIdentityHints,
    StaticIdentityHints,
)
from devsetup.core.services.provision.detection.presence import (  # noqa: F401
    PresenceChecker,
)
from devsetup.core.services.provision.detection.tool_version import (  # noqa: F401
    get_version_line,
    verify_installations,
)

# ── L4: Execution ──
from devsetup.core.services.provision.execution.operator import (  # noqa: F401
    ConsoleOperator,
    Operator,
    OperatorError,
    ScriptedOperator,
)
from devsetup.core.services.provision.execution.step_executors import (  # noqa: F401
    STEP_EXECUTORS,
    StepContext,
)

# ── L5: Orchestration ──
from devsetup.core.services.provision.orchestration.orchestrator import (  # noqa: F401
    run_setup,
    select_steps,
)
