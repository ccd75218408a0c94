"""
Config check use case — validate devsetup.yml without running anything.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from devsetup.core.config.loader import ConfigError, find_config_file, load_settings
from devsetup.core.models.settings import SetupSettings


@dataclass
class ConfigCheckResult:
    valid: bool = False
    path: Path | None = None
    settings: SetupSettings | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "path": str(self.path) if self.path else None,
            "settings": self.settings.model_dump(mode="json") if self.settings else None,
            "errors": self.errors,
            "warnings": self.warnings,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    result = ConfigCheckResult()
    result.path = config_path or find_config_file()

    try:
        settings = load_settings(result.path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    result.valid = True
    result.settings = settings

    if result.path is None:
        result.warnings.append("No config file found; using built-in defaults")
    if not settings.packages:
        result.warnings.append("Package list is empty; the packages step will do nothing")
    if not settings.git.placeholder_email:
        result.warnings.append(
            "git.placeholder_email is empty; the email prompt will repeat until answered"
        )
    return result
