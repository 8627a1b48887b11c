"""
Plugin discovery and indexing.

Discovers plugin executables from:
1. Configured plugin_dirs: explicit locations from config.yaml / env
2. $PATH: anything installed alongside the host

A plugin is an executable file named {prefix}{name} (default prefix "meta-").
Each one is asked for its PluginInfo via --meta-plugin-info.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Iterable, Optional, Sequence

from meta_plugin.config import Settings
from meta_plugin.core.client import PluginClient
from meta_plugin.lib.errors import MetaPluginError
from meta_plugin.models.plugin import DiscoveredPlugin

logger = logging.getLogger(__name__)


def _is_plugin_file(entry: Path, prefix: str) -> bool:
    return (
        entry.name.startswith(prefix)
        and len(entry.name) > len(prefix)
        and entry.is_file()
        and os.access(entry, os.X_OK)
    )


def find_plugin_executables(
    dirs: Iterable[str | Path],
    prefix: str = "meta-",
    search_path: bool = True,
) -> list[Path]:
    """Find plugin executables.

    Configured directories come first, then $PATH. When the same file name
    appears twice, the first occurrence wins, like shell lookup.
    """
    search_dirs: list[Path] = []

    for dir_str in dirs:
        plugin_dir = Path(dir_str).expanduser().resolve()
        if plugin_dir.is_dir():
            search_dirs.append(plugin_dir)
        else:
            logger.warning(f"Plugin directory not found, skipping: {plugin_dir}")

    if search_path:
        for entry in os.environ.get("PATH", "").split(os.pathsep):
            if entry and Path(entry).is_dir():
                search_dirs.append(Path(entry))

    found: list[Path] = []
    seen: set[str] = set()
    for plugin_dir in search_dirs:
        try:
            entries = sorted(plugin_dir.iterdir())
        except OSError as e:
            logger.warning(f"Cannot list plugin directory {plugin_dir}: {e}")
            continue

        for entry in entries:
            if entry.name in seen or not _is_plugin_file(entry, prefix):
                continue
            seen.add(entry.name)
            found.append(entry)

    return found


async def _describe(path: Path, launcher: Sequence[str]) -> Optional[DiscoveredPlugin]:
    client = PluginClient(path, launcher=launcher)
    try:
        info = await client.info()
    except MetaPluginError as e:
        logger.warning(f"Failed to query plugin at {path}: {e}")
        return None
    return DiscoveredPlugin(name=info.name, path=str(path), info=info)


async def describe_plugins(
    paths: Sequence[Path],
    launcher: Sequence[str] = (),
) -> list[DiscoveredPlugin]:
    """Query PluginInfo from every executable concurrently.

    Plugins that fail discovery are logged and left out.
    """
    results = await asyncio.gather(*(_describe(p, launcher) for p in paths))
    return [plugin for plugin in results if plugin is not None]


async def discover_plugins(settings: Settings) -> list[DiscoveredPlugin]:
    """Discover and describe all plugins visible under the given settings."""
    paths = find_plugin_executables(
        settings.plugin_dirs,
        prefix=settings.plugin_prefix,
        search_path=settings.search_path,
    )
    plugins = await describe_plugins(paths)
    logger.info(f"Discovered {len(plugins)} plugins")
    return plugins


class PluginIndex:
    """Lookup table over discovered plugins."""

    def __init__(self, plugins: Iterable[DiscoveredPlugin]):
        self._by_name: dict[str, DiscoveredPlugin] = {}
        self._by_command: dict[str, DiscoveredPlugin] = {}

        for plugin in plugins:
            if plugin.name in self._by_name:
                logger.warning(
                    f"Duplicate plugin name {plugin.name!r} at {plugin.path}, "
                    f"keeping {self._by_name[plugin.name].path}"
                )
                continue
            self._by_name[plugin.name] = plugin
            for command in plugin.commands:
                self._by_command.setdefault(command, plugin)

    def __len__(self) -> int:
        return len(self._by_name)

    def __iter__(self):
        return iter(self._by_name.values())

    def get(self, name: str) -> Optional[DiscoveredPlugin]:
        """Get a plugin by its advertised name."""
        return self._by_name.get(name)

    def for_command(self, command: str) -> Optional[DiscoveredPlugin]:
        """Get the first plugin advertising ``command``."""
        return self._by_command.get(command)

    def names(self) -> list[str]:
        return sorted(self._by_name)
