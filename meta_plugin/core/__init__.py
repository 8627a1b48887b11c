"""
Plugin harness and host-side protocol logic.
"""

from meta_plugin.core.client import PluginClient, PluginResponse
from meta_plugin.core.harness import PluginDefinition, handle, run_plugin
from meta_plugin.core.help import format_help, render_help
from meta_plugin.core.results import CommandResult, Error, Message, Plan, ShowHelp

__all__ = [
    "PluginDefinition",
    "handle",
    "run_plugin",
    "render_help",
    "format_help",
    "CommandResult",
    "Plan",
    "Message",
    "Error",
    "ShowHelp",
    "PluginClient",
    "PluginResponse",
]
