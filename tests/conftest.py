"""
Pytest configuration and fixtures.
"""

import io
import os
import stat
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import pytest

# Set test environment before any settings are created
os.environ["META_HOME"] = tempfile.mkdtemp(prefix="meta-plugin-test-")
os.environ["META_LOG_LEVEL"] = "WARNING"

ROOT = Path(__file__).resolve().parents[1]
FIXTURES = Path(__file__).resolve().parent / "fixtures"

from meta_plugin.core.harness import PluginDefinition, handle  # noqa: E402
from meta_plugin.core.results import CommandResult, Message  # noqa: E402
from meta_plugin.models.protocol import PluginHelp, PluginInfo, PluginRequest  # noqa: E402


@dataclass
class Invocation:
    """Captured outcome of one in-process harness run."""

    exit_code: int
    stdout: str
    stderr: str


@pytest.fixture
def sample_info() -> PluginInfo:
    """Plugin info with structured help."""
    return PluginInfo(
        name="git",
        version="0.4.0",
        commands=["pull", "status"],
        description="Git operations across projects",
        help=PluginHelp(
            usage="meta git <command> [args...]",
            commands={"pull": "fetch+merge"},
            examples=["meta git pull", "meta git status --json"],
            note="Run raw git commands with: meta exec -- git <args>",
        ),
    )


@pytest.fixture
def bare_info() -> PluginInfo:
    """Plugin info without structured help."""
    return PluginInfo(
        name="project",
        version="1.0.0",
        commands=["list"],
        description="Project management",
    )


@pytest.fixture
def invoke(sample_info: PluginInfo) -> Callable[..., Invocation]:
    """Run the harness in-process with string streams.

    Usage: invoke(result_or_execute, *flags, stdin="...", info=...)
    """

    def _invoke(
        execute: CommandResult | Callable[[PluginRequest], CommandResult] = Message(""),
        *flags: str,
        stdin: str = '{"command": "status"}',
        info: PluginInfo | None = None,
    ) -> Invocation:
        fn = execute if callable(execute) else (lambda request: execute)
        plugin = PluginDefinition(info=info or sample_info, execute=fn)
        stdout, stderr = io.StringIO(), io.StringIO()
        argv = ["meta-git", *flags]
        code = handle(plugin, argv, io.StringIO(stdin), stdout, stderr)
        return Invocation(code, stdout.getvalue(), stderr.getvalue())

    return _invoke


@pytest.fixture
def echo_plugin_path() -> Path:
    """Path to the echo plugin script (run with sys.executable)."""
    return FIXTURES / "echo_plugin.py"


@pytest.fixture
def plugin_env(monkeypatch):
    """Make the package importable from plugin subprocesses."""
    existing = os.environ.get("PYTHONPATH", "")
    monkeypatch.setenv(
        "PYTHONPATH", str(ROOT) + (os.pathsep + existing if existing else "")
    )


@pytest.fixture
def plugin_bin_dir(tmp_path: Path, echo_plugin_path: Path, plugin_env) -> Path:
    """A directory holding an executable meta-echo wrapper."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    wrapper = bin_dir / "meta-echo"
    wrapper.write_text(
        f'#!/bin/sh\nexec "{sys.executable}" "{echo_plugin_path}" "$@"\n'
    )
    wrapper.chmod(wrapper.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    return bin_dir
