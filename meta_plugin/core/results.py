"""
Command results returned by a plugin's execute function.

CommandResult is a closed union of four variants. The harness maps each one
to its own output stream and exit status:

    Plan      -> PlanResponse JSON on stdout, exit 0
    Message   -> text on stdout (nothing if empty), exit 0
    Error     -> "Error: ..." on stderr, exit 1
    ShowHelp  -> help on stdout, exit 0; or "error: ..." + help on stderr, exit 1
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from meta_plugin.models.protocol import PlannedCommand


@dataclass(frozen=True)
class Plan:
    """Commands for the host to execute on its own scheduler."""

    commands: list[PlannedCommand] = field(default_factory=list)
    parallel: Optional[bool] = None  # None leaves the host's --parallel in charge

    @property
    def exit_code(self) -> int:
        return 0


@dataclass(frozen=True)
class Message:
    """Text to display; an empty message is a silent success."""

    text: str = ""

    @property
    def exit_code(self) -> int:
        return 0


@dataclass(frozen=True)
class Error:
    """A failure inside the plugin's own logic."""

    text: str

    @property
    def exit_code(self) -> int:
        return 1


@dataclass(frozen=True)
class ShowHelp:
    """Show help text, optionally prefixed by a usage error."""

    error: Optional[str] = None

    @property
    def exit_code(self) -> int:
        return 1 if self.error is not None else 0


CommandResult = Union[Plan, Message, Error, ShowHelp]

COMMAND_RESULT_TYPES = (Plan, Message, Error, ShowHelp)
