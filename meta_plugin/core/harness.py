"""
Plugin harness: the main loop shared by every plugin executable.

A plugin only defines its PluginInfo and an execute function:

    from meta_plugin import Message, PluginDefinition, PluginInfo, run_plugin

    def execute(request):
        return Message(f"{request.command}: {len(request.projects)} projects")

    if __name__ == "__main__":
        run_plugin(PluginDefinition(
            info=PluginInfo(name="demo", version="0.1.0", commands=["demo"]),
            execute=execute,
        ))

The harness handles --meta-plugin-info, --meta-plugin-exec and --help, and
turns the returned CommandResult into stdout/stderr output and an exit status.
"""

import io
import logging
import sys
from dataclasses import dataclass
from typing import Callable, NoReturn, Optional, Sequence, TextIO

from pydantic import ValidationError

from meta_plugin.core.help import render_help
from meta_plugin.core.results import (
    COMMAND_RESULT_TYPES,
    CommandResult,
    Error,
    Message,
    Plan,
    ShowHelp,
)
from meta_plugin.lib.logger import setup_logging
from meta_plugin.models.protocol import (
    ExecutionPlan,
    PlannedCommand,
    PlanResponse,
    PluginInfo,
    PluginRequest,
)

logger = logging.getLogger(__name__)

HOST_NAME = "meta"
INFO_FLAG = "--meta-plugin-info"
EXEC_FLAG = "--meta-plugin-exec"
HELP_FLAGS = ("--help", "-h")

EXIT_OK = 0
EXIT_FAILURE = 1


@dataclass(frozen=True)
class PluginDefinition:
    """A plugin's identity plus its single execute capability."""

    info: PluginInfo
    execute: Callable[[PluginRequest], CommandResult]


def output_execution_plan(
    commands: list[PlannedCommand],
    parallel: Optional[bool],
    out: TextIO,
) -> None:
    """Serialize an execution plan as one compact JSON line."""
    response = PlanResponse(plan=ExecutionPlan(commands=commands, parallel=parallel))
    out.write(response.to_json() + "\n")


def read_request(stream: TextIO) -> PluginRequest:
    """Read stdin to EOF and parse it as a PluginRequest.

    Raises:
        ValidationError: malformed JSON or missing required fields
    """
    return PluginRequest.from_json(stream.read())


def _print(out: TextIO, text: str = "") -> None:
    out.write(text + "\n")


def _dispatch(
    plugin: PluginDefinition,
    result: CommandResult,
    stdout: TextIO,
    stderr: TextIO,
) -> int:
    """Map a CommandResult onto output streams and an exit status."""
    if isinstance(result, Plan):
        output_execution_plan(list(result.commands), result.parallel, stdout)
    elif isinstance(result, Message):
        if result.text:
            _print(stdout, result.text)
    elif isinstance(result, Error):
        _print(stderr, f"Error: {result.text}")
    elif isinstance(result, ShowHelp):
        if result.error is not None:
            # stderr so the message survives the host capturing stdout
            _print(stderr, f"error: {result.error}")
            _print(stderr)
            render_help(plugin.info, stderr)
        else:
            render_help(plugin.info, stdout)
    return result.exit_code


def _execute(
    plugin: PluginDefinition,
    stdin: TextIO,
    stdout: TextIO,
    stderr: TextIO,
) -> int:
    try:
        request = read_request(stdin)
    except (ValidationError, UnicodeDecodeError) as e:
        _print(stderr, f"Failed to parse plugin request: {e}")
        return EXIT_FAILURE

    logger.debug(
        f"Executing {plugin.info.name} command {request.command!r} "
        f"({len(request.args)} args, {len(request.projects)} projects)"
    )

    try:
        result = plugin.execute(request)
    except Exception as e:
        logger.exception(f"Plugin {plugin.info.name} raised while executing {request.command!r}")
        _print(stderr, f"Error: {e}")
        return EXIT_FAILURE

    if not isinstance(result, COMMAND_RESULT_TYPES):
        _print(
            stderr,
            f"Error: plugin {plugin.info.name} returned {type(result).__name__}, "
            "expected a CommandResult",
        )
        return EXIT_FAILURE

    return _dispatch(plugin, result, stdout, stderr)


def handle(
    plugin: PluginDefinition,
    argv: Sequence[str],
    stdin: TextIO,
    stdout: TextIO,
    stderr: TextIO,
) -> int:
    """Run one plugin invocation and return its exit status.

    ``argv`` includes the program name at index 0, like ``sys.argv``.
    """
    name = plugin.info.name

    if len(argv) < 2:
        _print(stderr, f"This binary is a {HOST_NAME} plugin. Use via: {HOST_NAME} {name}")
        return EXIT_FAILURE

    flag = argv[1]

    if flag == INFO_FLAG:
        _print(stdout, plugin.info.to_json())
        return EXIT_OK

    if flag == EXEC_FLAG:
        return _execute(plugin, stdin, stdout, stderr)

    if flag in HELP_FLAGS:
        render_help(plugin.info, stdout)
        return EXIT_OK

    _print(stderr, f"Unknown flag: {flag}. This binary is a {HOST_NAME} plugin.")
    _print(stderr, f"Use via: {HOST_NAME} {name}")
    return EXIT_FAILURE


def run_plugin(plugin: PluginDefinition, argv: Optional[Sequence[str]] = None) -> NoReturn:
    """Plugin entry point: handle the process arguments and exit."""
    setup_logging()
    # The wire format is UTF-8 regardless of the locale
    for stream in (sys.stdin, sys.stdout):
        if isinstance(stream, io.TextIOWrapper) and stream.encoding.lower() != "utf-8":
            stream.reconfigure(encoding="utf-8")
    code = handle(
        plugin,
        sys.argv if argv is None else argv,
        sys.stdin,
        sys.stdout,
        sys.stderr,
    )
    sys.stdout.flush()
    sys.exit(code)
