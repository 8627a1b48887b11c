"""
Host-side plugin models.

A plugin is any executable named {prefix}{name} (meta-git, meta-project, ...)
found in a configured plugin directory or on $PATH.
"""

from pydantic import BaseModel

from meta_plugin.models.protocol import PluginInfo


class DiscoveredPlugin(BaseModel):
    """A plugin executable together with its discovery document."""

    name: str  # From PluginInfo
    path: str  # Absolute path on disk
    info: PluginInfo

    @property
    def commands(self) -> list[str]:
        return self.info.commands
