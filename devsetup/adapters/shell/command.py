"""
Shell command adapter — run external programs and capture output.

This is the most fundamental adapter: every installer invocation
(``xcode-select``, the Homebrew bootstrap, ``brew install``, the
assistant installer) goes through it.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

from devsetup.adapters.base import Adapter, ExecutionContext
from devsetup.core.models.action import Receipt

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 900
STDERR_FD = 2


class ShellCommandAdapter(Adapter):
    """Execute commands and capture output.

    Action params:
        argv (list[str]): Program and arguments, run without a shell.
        command (str): Shell string, run through ``/bin/bash -c``.
            Exactly one of ``argv`` / ``command`` is required.
        interactive (bool): Inherit the terminal instead of capturing
            (installers that prompt for sudo). Default: False.
        timeout (int | None): Seconds; None disables. Default: 900,
            or None when interactive.
        stdout_to_stderr (bool): With ``interactive``, send the child's
            stdout to file descriptor 2 so the parent's stdout carries
            only machine-readable output. Default: False.
    """

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("bash") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        argv = context.action.params.get("argv")
        command = context.action.params.get("command")
        if not argv and not command:
            return False, "Missing required param: 'argv' or 'command'"
        if argv and command:
            return False, "Params 'argv' and 'command' are mutually exclusive"
        if argv is not None and not isinstance(argv, list):
            return False, "Param 'argv' must be a list"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        argv = params.get("argv")
        command = params.get("command")
        interactive = bool(params.get("interactive", False))
        to_stderr = bool(params.get("stdout_to_stderr", False))
        timeout = params.get("timeout", None if interactive else DEFAULT_TIMEOUT)

        cmd = list(argv) if argv else ["/bin/bash", "-c", command]
        display = " ".join(cmd) if argv else command

        logger.debug("Executing: %s (interactive=%s)", display, interactive)
        start = time.monotonic()

        try:
            if interactive:
                result = subprocess.run(
                    cmd,
                    env=context.env,
                    timeout=timeout,
                    stdout=STDERR_FD if to_stderr else None,
                )
                stdout, stderr = "", ""
            else:
                result = subprocess.run(
                    cmd,
                    env=context.env,
                    capture_output=True,
                    text=True,
                    timeout=timeout,
                )
                stdout = result.stdout.strip()
                stderr = result.stderr.strip()
        except FileNotFoundError:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command not found: {cmd[0]}",
                return_code=127,
                metadata={"command": display},
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command timed out after {timeout}s",
                metadata={"command": display, "timeout": timeout},
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command execution error: {e}",
                metadata={"command": display},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)

        if result.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=context.action.id,
                output=stdout,
                return_code=0,
                duration_ms=elapsed_ms,
                metadata={"command": display, "stderr": stderr},
            )
        return Receipt.failure(
            adapter=self.name,
            action_id=context.action.id,
            error=stderr or f"Command exited with code {result.returncode}",
            return_code=result.returncode,
            duration_ms=elapsed_ms,
            metadata={"command": display, "stdout": stdout},
        )
