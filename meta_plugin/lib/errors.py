"""
Typed errors for the plugin protocol.

The error kinds mirror the ways a plugin invocation can fail, so host code
can tell a malformed handshake apart from a plugin reporting a failure.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Error kinds for programmatic handling."""

    # Malformed invocation, malformed JSON, unparsable plugin output
    PROTOCOL = "protocol"

    # Well-formed request, plugin logic failed (CommandResult Error)
    BUSINESS = "business"

    # Missing/unknown flag, or help shown with an error attached
    USAGE = "usage"


class MetaPluginError(Exception):
    """Base class for plugin protocol errors."""

    kind: ErrorKind = ErrorKind.PROTOCOL

    def __init__(self, message: str, plugin: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.plugin = plugin

    def __str__(self) -> str:
        if self.plugin:
            return f"{self.plugin}: {self.message}"
        return self.message


class PluginLaunchError(MetaPluginError):
    """The plugin executable could not be started."""


class PluginProtocolError(MetaPluginError):
    """The plugin violated the wire contract (bad flag handling or output)."""


class PluginExecutionError(MetaPluginError):
    """The plugin exited non-zero while executing a request."""

    kind = ErrorKind.BUSINESS

    def __init__(
        self,
        message: str,
        exit_code: int,
        stderr: str = "",
        plugin: Optional[str] = None,
    ):
        super().__init__(message, plugin=plugin)
        self.exit_code = exit_code
        self.stderr = stderr
        # Help printed alongside an error is a usage failure, not a logic one
        if stderr.startswith("error: "):
            self.kind = ErrorKind.USAGE
