"""
meta-plugin-protocol: the wire contract and harness for meta subprocess plugins.
"""

from meta_plugin.core.harness import PluginDefinition, run_plugin
from meta_plugin.core.results import CommandResult, Error, Message, Plan, ShowHelp
from meta_plugin.models.protocol import (
    ExecutionPlan,
    PlannedCommand,
    PlanResponse,
    PluginHelp,
    PluginInfo,
    PluginRequest,
    PluginRequestOptions,
)

__version__ = "0.1.0"

__all__ = [
    "PluginDefinition",
    "run_plugin",
    "CommandResult",
    "Plan",
    "Message",
    "Error",
    "ShowHelp",
    "PluginInfo",
    "PluginHelp",
    "PluginRequest",
    "PluginRequestOptions",
    "PlannedCommand",
    "ExecutionPlan",
    "PlanResponse",
]
