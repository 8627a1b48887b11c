"""
Pydantic models for the meta plugin protocol.
"""

from meta_plugin.models.protocol import (
    ExecutionPlan,
    PlannedCommand,
    PlanResponse,
    PluginHelp,
    PluginInfo,
    PluginRequest,
    PluginRequestOptions,
)
from meta_plugin.models.plugin import DiscoveredPlugin

__all__ = [
    # Discovery
    "PluginInfo",
    "PluginHelp",
    "DiscoveredPlugin",
    # Requests
    "PluginRequest",
    "PluginRequestOptions",
    # Responses
    "PlannedCommand",
    "ExecutionPlan",
    "PlanResponse",
]
