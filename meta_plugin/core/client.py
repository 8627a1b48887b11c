"""
Host side of the plugin handshake.

Spawns a plugin executable with --meta-plugin-info or --meta-plugin-exec and
interprets what comes back. Running the commands of a returned plan is left
to the host's own scheduler.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from meta_plugin.core.harness import EXEC_FLAG, INFO_FLAG
from meta_plugin.lib.errors import (
    PluginExecutionError,
    PluginLaunchError,
    PluginProtocolError,
)
from meta_plugin.models.protocol import (
    ExecutionPlan,
    PlanResponse,
    PluginInfo,
    PluginRequest,
)

logger = logging.getLogger(__name__)


@dataclass
class PluginResponse:
    """Everything a plugin produced for one --meta-plugin-exec invocation."""

    exit_code: int
    stdout: str
    stderr: str
    plan: Optional[ExecutionPlan] = None
    plugin: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def message(self) -> str:
        """Plain text output, or "" when the plugin returned a plan."""
        if self.plan is not None:
            return ""
        return self.stdout.rstrip("\n")

    def raise_for_status(self) -> "PluginResponse":
        """Raise PluginExecutionError if the plugin exited non-zero."""
        if not self.ok:
            detail = self.stderr.strip().splitlines()
            raise PluginExecutionError(
                detail[0] if detail else f"exited with status {self.exit_code}",
                exit_code=self.exit_code,
                stderr=self.stderr,
                plugin=self.plugin,
            )
        return self


def parse_plan(stdout: str) -> Optional[ExecutionPlan]:
    """Extract an ExecutionPlan from plugin stdout, if that is what it holds."""
    text = stdout.strip()
    if not text.startswith("{"):
        return None
    try:
        return PlanResponse.from_json(text).plan
    except ValidationError:
        logger.debug("Plugin stdout looks like JSON but is not a plan response")
        return None


class PluginClient:
    """Invokes one plugin executable over the stdio protocol.

    Each call is an independent process; the only state kept is the cached
    discovery document.
    """

    def __init__(self, path: Path | str, launcher: Sequence[str] = ()):
        self.path = Path(path)
        # e.g. (sys.executable,) to run a plugin script without an exec bit
        self.launcher = tuple(launcher)
        self._info: Optional[PluginInfo] = None

    @property
    def label(self) -> str:
        return self._info.name if self._info else self.path.name

    async def _run(self, flag: str, stdin_data: Optional[bytes] = None) -> tuple[int, str, str]:
        args = [*self.launcher, str(self.path), flag]
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.PIPE if stdin_data is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise PluginLaunchError(f"Failed to start plugin: {e}", plugin=self.label) from e

        stdout, stderr = await proc.communicate(stdin_data)
        return (
            proc.returncode if proc.returncode is not None else 1,
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )

    async def info(self) -> PluginInfo:
        """Query the plugin's PluginInfo (cached after the first call)."""
        if self._info is not None:
            return self._info

        code, stdout, stderr = await self._run(INFO_FLAG)
        if code != 0:
            raise PluginProtocolError(
                f"Discovery exited with status {code}: {stderr.strip()}",
                plugin=self.path.name,
            )
        try:
            self._info = PluginInfo.from_json(stdout)
        except ValidationError as e:
            raise PluginProtocolError(
                f"Invalid plugin info: {e}", plugin=self.path.name
            ) from e

        logger.debug(f"Discovered plugin {self._info.name} v{self._info.version} at {self.path}")
        return self._info

    async def execute(self, request: PluginRequest) -> PluginResponse:
        """Send a request and collect the plugin's response.

        A non-zero exit is returned, not raised; call raise_for_status()
        to turn it into a PluginExecutionError.
        """
        logger.debug(f"Invoking {self.label} command {request.command!r}")
        code, stdout, stderr = await self._run(EXEC_FLAG, request.to_json().encode("utf-8"))

        plan = parse_plan(stdout) if code == 0 else None
        if code != 0:
            logger.info(f"Plugin {self.label} exited with status {code}")

        return PluginResponse(
            exit_code=code,
            stdout=stdout,
            stderr=stderr,
            plan=plan,
            plugin=self.label,
        )
