"""
Echo plugin used by the integration tests.

Each command exercises one CommandResult variant.
"""

from meta_plugin import (
    Error,
    Message,
    Plan,
    PlannedCommand,
    PluginDefinition,
    PluginHelp,
    PluginInfo,
    ShowHelp,
    run_plugin,
)

INFO = PluginInfo(
    name="echo",
    version="1.2.3",
    commands=["status", "pull", "fail", "help", "silent", "crash"],
    description="Echo plugin for protocol tests",
    help=PluginHelp(
        usage="meta echo <command> [args...]",
        commands={"pull": "fetch+merge", "status": "show status"},
        examples=["meta echo status", "meta echo pull --parallel"],
        note="Unknown commands print this help.",
    ),
)


def execute(request):
    if request.command == "status":
        return Message("clean")
    if request.command == "pull":
        commands = [
            PlannedCommand(dir=project, cmd="git pull")
            for project in request.projects
            if request.options.matches_filters(project)
        ]
        return Plan(commands, True if request.options.parallel else None)
    if request.command == "fail":
        return Error("boom")
    if request.command == "help":
        return ShowHelp(request.args[0] if request.args else None)
    if request.command == "silent":
        return Message("")
    if request.command == "crash":
        raise RuntimeError("kaboom")
    return ShowHelp(f"unknown command: {request.command}")


if __name__ == "__main__":
    run_plugin(PluginDefinition(info=INFO, execute=execute))
