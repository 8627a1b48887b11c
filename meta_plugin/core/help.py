"""
Plugin help rendering.

Help goes to stdout for plain --help and to stderr when it accompanies a
usage error, so rendering takes any text sink.
"""

import io
from typing import TextIO

from meta_plugin.models.protocol import PluginInfo

COMMAND_COLUMN_WIDTH = 20


def render_help(info: PluginInfo, out: TextIO) -> None:
    """Write a plugin's help text to ``out``.

    Without structured help, falls back to "<name> v<version>" and the
    one-line description.
    """
    plugin_help = info.help
    if plugin_help is None:
        out.write(f"{info.name} v{info.version}\n")
        if info.description is not None:
            out.write(f"{info.description}\n")
        return

    out.write(f"{plugin_help.usage}\n")
    out.write("\n")

    if plugin_help.commands:
        out.write("Commands:\n")
        for command, description in plugin_help.commands.items():
            out.write(f"  {command:<{COMMAND_COLUMN_WIDTH}} {description}\n")
        out.write("\n")

    if plugin_help.examples:
        out.write("Examples:\n")
        for example in plugin_help.examples:
            out.write(f"  {example}\n")
        out.write("\n")

    if plugin_help.note is not None:
        out.write(f"{plugin_help.note}\n")


def format_help(info: PluginInfo) -> str:
    """Render help to a string."""
    buf = io.StringIO()
    render_help(info, buf)
    return buf.getvalue()
