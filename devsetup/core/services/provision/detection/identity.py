"""
L3 Detection — Identity hints for the git configuration prompt.

Best-effort, platform-specific guesses for the operator's name and
email.  Every lookup may come back empty; callers treat ``None`` as
"no hint available".
"""

from __future__ import annotations

import getpass
import logging
import re
import subprocess
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)+")

CommandProbe = Callable[[list[str]], Optional[str]]


class IdentityHints(Protocol):
    """Capability interface: suggest a git name and email."""

    def suggest_name(self) -> str | None: ...

    def suggest_email(self) -> str | None: ...


class NullIdentityHints:
    """No hints at all (non-macOS hosts, tests)."""

    def suggest_name(self) -> str | None:
        return None

    def suggest_email(self) -> str | None:
        return None


class StaticIdentityHints:
    """Fixed hints."""

    def __init__(self, name: str | None = None, email: str | None = None):
        self._name = name
        self._email = email

    def suggest_name(self) -> str | None:
        return self._name

    def suggest_email(self) -> str | None:
        return self._email


def _run_probe(cmd: list[str]) -> str | None:
    """Run a read-only lookup; stdout on success, else None."""
    try:
        r = subprocess.run(cmd, capture_output=True, text=True, timeout=10)
    except (FileNotFoundError, subprocess.TimeoutExpired, OSError):
        return None
    if r.returncode != 0:
        return None
    return r.stdout


def _clean(value: str | None) -> str | None:
    """Collapse whitespace the way ``xargs`` does; empty → None."""
    if not value:
        return None
    cleaned = " ".join(value.split())
    return cleaned or None


class MacIdentityHints:
    """Hints from macOS directory services and the iCloud account cache.

    Name sources, in order: ``id -F``, ``dscl . -read /Users/<u> RealName``,
    ``scutil --get ComputerName``.  Email: ``defaults read MobileMeAccounts
    Accounts``.
    """

    def __init__(self, probe: CommandProbe | None = None, username: str | None = None):
        self._probe = probe or _run_probe
        self._username = username

    def _user(self) -> str:
        if self._username:
            return self._username
        try:
            return getpass.getuser()
        except (KeyError, OSError):
            return ""

    def suggest_name(self) -> str | None:
        full_name = _clean(self._probe(["id", "-F"]))
        if full_name:
            return full_name

        user = self._user()
        if user:
            out = self._probe(["dscl", ".", "-read", f"/Users/{user}", "RealName"])
            if out:
                lines = [ln for ln in out.strip().splitlines() if ln.strip()]
                # Either "RealName: Jane Doe" or "RealName:\n Jane Doe"
                if lines:
                    last = lines[-1].strip()
                    if last.startswith("RealName:"):
                        last = last[len("RealName:"):]
                    real = _clean(last)
                    if real:
                        return real

        computer = _clean(self._probe(["scutil", "--get", "ComputerName"]))
        if computer:
            return computer

        logger.debug("No name hint available")
        return None

    def suggest_email(self) -> str | None:
        out = self._probe(["defaults", "read", "MobileMeAccounts", "Accounts"])
        if not out:
            return None
        for line in out.splitlines():
            if "@" in line:
                match = _EMAIL_RE.search(line)
                if match:
                    return match.group(0)
        return None
