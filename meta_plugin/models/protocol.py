"""
Plugin protocol models.

The meta host talks to subprocess plugins (meta-git, meta-project, ...) with
three JSON documents:

  --meta-plugin-info   plugin -> host   PluginInfo (pretty-printed)
  --meta-plugin-exec   host -> plugin   PluginRequest (stdin, read to EOF)
                       plugin -> host   PlanResponse (one compact line)
                                        or free-form text

Absent optional fields always deserialize to their documented defaults.
Validation is strict: a JSON string or number never stands in for a bool,
and a string never stands in for an integer.
"""

import fnmatch
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Plugin discovery ---


class PluginHelp(BaseModel):
    """Structured help for a plugin's commands."""

    model_config = ConfigDict(strict=True)

    usage: str  # e.g. "meta git <command> [args...]"
    commands: dict[str, str] = Field(default_factory=dict)  # command -> description
    examples: list[str] = Field(default_factory=list)
    note: Optional[str] = None  # e.g. how to run raw commands


class PluginInfo(BaseModel):
    """Metadata returned in response to --meta-plugin-info."""

    model_config = ConfigDict(strict=True)

    name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    commands: list[str]  # Informational, need not be exhaustive
    description: Optional[str] = None
    help: Optional[PluginHelp] = None

    def to_json(self) -> str:
        """Pretty-printed discovery document."""
        return self.model_dump_json(indent=2)

    @classmethod
    def from_json(cls, text: str) -> "PluginInfo":
        return cls.model_validate_json(text)


# --- Host to plugin ---


class PluginRequestOptions(BaseModel):
    """Orchestration flags forwarded from the host's own command line."""

    model_config = ConfigDict(strict=True)

    json_output: bool = False
    verbose: bool = False
    parallel: bool = False
    dry_run: bool = False
    silent: bool = False
    recursive: bool = False
    depth: Optional[int] = Field(default=None, ge=0)  # Bounds plugin-side recursion
    include_filters: Optional[list[str]] = None
    exclude_filters: Optional[list[str]] = None

    def matches_filters(self, project: str) -> bool:
        """Check a project identifier against the include/exclude globs."""
        if self.include_filters and not any(
            fnmatch.fnmatch(project, pattern) for pattern in self.include_filters
        ):
            return False
        if self.exclude_filters and any(
            fnmatch.fnmatch(project, pattern) for pattern in self.exclude_filters
        ):
            return False
        return True


class PluginRequest(BaseModel):
    """A request from the host, sent as JSON on the plugin's stdin."""

    model_config = ConfigDict(strict=True)

    command: str = Field(min_length=1)
    args: list[str] = Field(default_factory=list)
    projects: list[str] = Field(default_factory=list)
    cwd: str = ""
    options: PluginRequestOptions = Field(default_factory=PluginRequestOptions)

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, text: str) -> "PluginRequest":
        return cls.model_validate_json(text)


# --- Plugin to host ---


class PlannedCommand(BaseModel):
    """A single shell command the host runs on the plugin's behalf."""

    model_config = ConfigDict(strict=True)

    dir: str  # Relative to the meta root, or absolute
    cmd: str
    env: Optional[dict[str, str]] = None  # Overlay on the host environment

    def merged_env(self, base: dict[str, str]) -> dict[str, str]:
        """Overlay this command's variables on the host environment."""
        merged = dict(base)
        if self.env:
            merged.update(self.env)
        return merged


class ExecutionPlan(BaseModel):
    """A batch of planned commands plus an execution-mode hint."""

    model_config = ConfigDict(strict=True)

    commands: list[PlannedCommand]
    parallel: Optional[bool] = None  # Overrides the host's --parallel for this batch


class PlanResponse(BaseModel):
    """The envelope a plugin writes to stdout to hand back a plan."""

    model_config = ConfigDict(strict=True)

    plan: ExecutionPlan

    def to_json(self) -> str:
        """Compact single-line JSON, omitting unset optionals."""
        return self.model_dump_json(exclude_none=True)

    @classmethod
    def from_json(cls, text: str) -> "PlanResponse":
        return cls.model_validate_json(text)
