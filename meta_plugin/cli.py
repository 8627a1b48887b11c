"""
meta-plugin CLI: inspect and exercise meta plugins from a shell.

Usage:
    meta-plugin list                          # Discovered plugins
    meta-plugin info NAME                     # Plugin help
    meta-plugin info NAME --json              # Raw PluginInfo JSON
    meta-plugin exec [OPTIONS] NAME COMMAND [ARGS...]  # Send a request, print the result
        OPTIONS: [--project P]... [--cwd DIR] [--dry-run] [--parallel] [--verbose]
                 [--recursive] [--depth N] [--include GLOB]... [--exclude GLOB]... [--json]
        (everything after COMMAND is passed to the plugin untouched)
    meta-plugin config show                   # Show current config
    meta-plugin config set KEY VALUE          # Set a config value
    meta-plugin config get KEY                # Get a config value

Plans returned by a plugin are printed, never run.
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

from pydantic import ValidationError

from meta_plugin.config import (
    CONFIG_KEYS,
    _load_yaml_config,
    _resolve_meta_home,
    get_config_path,
    get_settings,
    save_yaml_config,
)
from meta_plugin.core.client import PluginClient, PluginResponse
from meta_plugin.core.discovery import PluginIndex, discover_plugins
from meta_plugin.core.help import render_help
from meta_plugin.lib.errors import MetaPluginError
from meta_plugin.lib.logger import setup_logging
from meta_plugin.models.plugin import DiscoveredPlugin
from meta_plugin.models.protocol import ExecutionPlan, PluginRequest, PluginRequestOptions

BOOL_KEYS = {"search_path", "debug"}
LIST_KEYS = {"plugin_dirs"}


# --- Helpers ---


def _get_meta_home() -> Path:
    """Resolve the meta home directory from env or default."""
    return _resolve_meta_home()


def _load_index() -> PluginIndex:
    return PluginIndex(asyncio.run(discover_plugins(get_settings())))


def _require_plugin(index: PluginIndex, name: str) -> DiscoveredPlugin:
    plugin = index.get(name) or index.for_command(name)
    if plugin is None:
        print(f"Plugin '{name}' not found.", file=sys.stderr)
        if len(index):
            print(f"Available plugins: {', '.join(index.names())}", file=sys.stderr)
        sys.exit(1)
    return plugin


def _print_plan(plan: ExecutionPlan) -> None:
    if not plan.commands:
        print("(empty plan)")
        return

    mode = "default" if plan.parallel is None else ("parallel" if plan.parallel else "sequential")
    print(f"Plan: {len(plan.commands)} commands ({mode})")
    dir_width = max(len(c.dir) for c in plan.commands)
    for command in plan.commands:
        env = ""
        if command.env:
            env = "  [" + " ".join(f"{k}={v}" for k, v in sorted(command.env.items())) + "]"
        print(f"  {command.dir:<{dir_width}}  {command.cmd}{env}")


def _build_request(args: argparse.Namespace) -> PluginRequest:
    return PluginRequest(
        command=args.plugin_command,
        args=list(args.args),
        projects=list(args.project or []),
        cwd=args.cwd or os.getcwd(),
        options=PluginRequestOptions(
            json_output=args.json,
            verbose=args.verbose,
            parallel=args.parallel,
            dry_run=args.dry_run,
            silent=args.silent,
            recursive=args.recursive,
            depth=args.depth,
            include_filters=args.include,
            exclude_filters=args.exclude,
        ),
    )


# --- Plugin commands ---


def cmd_list(args: argparse.Namespace) -> None:
    """List discovered plugins."""
    index = _load_index()
    plugins = list(index)

    if not plugins:
        print("No plugins found.")
        return

    print(f"\nPlugins ({len(plugins)}):\n")
    name_width = max(len(p.name) for p in plugins)
    version_width = max(len(p.info.version) for p in plugins)
    for p in sorted(plugins, key=lambda p: p.name):
        print(
            f"  {p.name:<{name_width}}  "
            f"{p.info.version:<{version_width}}  "
            f"{p.info.description or ''}"
        )
        if args.verbose:
            print(f"  {'':<{name_width}}  path: {p.path}")
            print(f"  {'':<{name_width}}  commands: {', '.join(p.commands) or '(none)'}")


def cmd_info(args: argparse.Namespace) -> None:
    """Show a plugin's help or raw discovery document."""
    plugin = _require_plugin(_load_index(), args.name)
    if args.json:
        print(plugin.info.to_json())
    else:
        render_help(plugin.info, sys.stdout)


def cmd_exec(args: argparse.Namespace) -> None:
    """Send a request to a plugin and print what it returns."""
    plugin = _require_plugin(_load_index(), args.name)
    try:
        request = _build_request(args)
    except ValidationError as e:
        print(f"Error: invalid request: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        response: PluginResponse = asyncio.run(PluginClient(plugin.path).execute(request))
    except MetaPluginError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if response.stderr:
        sys.stderr.write(response.stderr)

    if not response.ok:
        sys.exit(response.exit_code or 1)

    if response.plan is not None:
        if args.json:
            print(response.plan.model_dump_json(indent=2, exclude_none=True))
        else:
            _print_plan(response.plan)
    elif response.message:
        print(response.message)


# --- Config commands ---


def cmd_config(args: argparse.Namespace) -> None:
    """Config management: show, set, get."""
    action = getattr(args, "action", None)

    if action == "show":
        _config_show()
    elif action == "set":
        _config_set(args.key, args.value)
    elif action == "get":
        _config_get(args.key)
    else:
        print("Usage: meta-plugin config {show|set|get}")


def _config_show() -> None:
    """Show current config with env overrides noted."""
    meta_home = _get_meta_home()
    config = _load_yaml_config(meta_home)

    print(f"\nConfig: {get_config_path(meta_home)}")
    print("-" * 40)

    if not config:
        print("  (empty, using defaults)")
        return

    for key, value in config.items():
        env_key = f"META_{key.upper()}"
        override = f" (overridden by env: {env_key})" if os.environ.get(env_key) else ""
        print(f"  {key}: {value}{override}")


def _config_set(key: str, value: str) -> None:
    """Set a config value."""
    if key not in CONFIG_KEYS:
        print(f"Unknown key: {key}")
        print(f"Valid keys: {', '.join(sorted(CONFIG_KEYS))}")
        sys.exit(1)

    meta_home = _get_meta_home()
    config = _load_yaml_config(meta_home)

    # Type conversion
    converted: object = value
    if key in BOOL_KEYS:
        converted = value.lower() in ("true", "1", "yes")
    elif key in LIST_KEYS:
        converted = [v.strip() for v in value.split(",") if v.strip()]
    elif key == "log_level":
        converted = value.upper()
        if converted not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            print(f"Error: log_level must be a logging level name, got '{value}'")
            sys.exit(1)

    config[key] = converted
    save_yaml_config(meta_home, config)
    print(f"Set {key} = {converted}")


def _config_get(key: str) -> None:
    """Get a single config value."""
    meta_home = _get_meta_home()
    config = _load_yaml_config(meta_home)

    # Check env override first
    env_val = os.environ.get(f"META_{key.upper()}")
    if env_val:
        print(env_val)
        return

    if key in config:
        print(config[key])
    else:
        print(f"Key '{key}' not set in config.yaml")
        sys.exit(1)


# --- CLI entry point ---


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meta-plugin",
        description="Inspect and exercise meta subprocess plugins",
    )
    subparsers = parser.add_subparsers(dest="command")

    # list
    list_parser = subparsers.add_parser("list", help="List discovered plugins")
    list_parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Show plugin paths and commands",
    )

    # info
    info_parser = subparsers.add_parser("info", help="Show a plugin's help")
    info_parser.add_argument("name", help="Plugin name or one of its commands")
    info_parser.add_argument(
        "--json", action="store_true",
        help="Print the raw PluginInfo JSON",
    )

    # exec
    exec_parser = subparsers.add_parser("exec", help="Send a request to a plugin")
    exec_parser.add_argument("name", help="Plugin name or one of its commands")
    exec_parser.add_argument("plugin_command", metavar="COMMAND", help="Command passed to the plugin")
    exec_parser.add_argument("args", nargs=argparse.REMAINDER, help="Arguments passed to the plugin")
    exec_parser.add_argument(
        "--project", "-p", action="append",
        help="Target project (repeatable)",
    )
    exec_parser.add_argument("--cwd", help="Working directory sent to the plugin (default: current)")
    exec_parser.add_argument("--json", action="store_true", help="Request and print JSON output")
    exec_parser.add_argument("--verbose", "-v", action="store_true", help="Set options.verbose")
    exec_parser.add_argument("--parallel", action="store_true", help="Set options.parallel")
    exec_parser.add_argument("--dry-run", action="store_true", help="Set options.dry_run")
    exec_parser.add_argument("--silent", action="store_true", help="Set options.silent")
    exec_parser.add_argument("--recursive", "-r", action="store_true", help="Set options.recursive")
    exec_parser.add_argument("--depth", type=int, help="Set options.depth")
    exec_parser.add_argument("--include", action="append", help="Include filter glob (repeatable)")
    exec_parser.add_argument("--exclude", action="append", help="Exclude filter glob (repeatable)")

    # config subcommand
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_sub = config_parser.add_subparsers(dest="action")
    config_sub.add_parser("show", help="Show current config")
    config_set_parser = config_sub.add_parser("set", help="Set a config value")
    config_set_parser.add_argument("key", help="Config key")
    config_set_parser.add_argument("value", help="Config value")
    config_get_parser = config_sub.add_parser("get", help="Get a config value")
    config_get_parser.add_argument("key", help="Config key")

    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    setup_logging()

    if args.command == "list":
        cmd_list(args)
    elif args.command == "info":
        cmd_info(args)
    elif args.command == "exec":
        cmd_exec(args)
    elif args.command == "config":
        cmd_config(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
