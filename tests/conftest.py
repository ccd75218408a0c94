"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from devsetup.adapters.mock import MockAdapter
from devsetup.adapters.registry import AdapterRegistry
from devsetup.adapters.shell.filesystem import FilesystemAdapter
from devsetup.core.models.environment import ArchitectureClass, HostEnvironment, ShellKind
from devsetup.core.services.provision.detection.environment import detect_environment


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """An empty home directory."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    return home_dir


@pytest.fixture
def env(home: Path) -> HostEnvironment:
    """Apple Silicon + zsh, startup file created."""
    return detect_environment(
        home=home,
        shell_env="/bin/zsh",
        machine="arm64",
        path_env="/usr/bin:/bin",
    )


@pytest.fixture
def intel_bash_env(home: Path) -> HostEnvironment:
    return HostEnvironment(
        arch=ArchitectureClass.INTEL,
        shell=ShellKind.BASH,
        home=home,
        startup_file=home / ".bash_profile",
        base_path="/usr/bin:/bin",
    )


@pytest.fixture
def shell_mock() -> MockAdapter:
    return MockAdapter(adapter_name="shell")


@pytest.fixture
def git_mock() -> MockAdapter:
    return MockAdapter(adapter_name="git")


@pytest.fixture
def registry(shell_mock: MockAdapter, git_mock: MockAdapter) -> AdapterRegistry:
    """Mocked installers and git, real startup-file writes."""
    reg = AdapterRegistry()
    reg.register(shell_mock)
    reg.register(git_mock)
    reg.register(FilesystemAdapter())
    return reg


@pytest.fixture
def dry_registry(shell_mock: MockAdapter, git_mock: MockAdapter) -> AdapterRegistry:
    reg = AdapterRegistry(dry_run=True)
    reg.register(shell_mock)
    reg.register(git_mock)
    reg.register(FilesystemAdapter())
    return reg


@pytest.fixture
def clean_config_env(tmp_path: Path, home: Path, monkeypatch):
    """No config file anywhere: cwd, $DEVSETUP_CONFIG and ~ are isolated."""
    monkeypatch.delenv("DEVSETUP_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    return tmp_path
