"""orgpilot: command-line entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TextIO

from orgpilot import __version__
from orgpilot.api_client import APIError, OrgAPIClient
from orgpilot.config import OrgPilotConfig, get_config
from orgpilot.logging_config import setup_logging
from orgpilot.paths import TUI_LOG_PATH
from orgpilot.storage import CookieStore, StorageBridge, build_bridge
from orgpilot.viewmode import FEATURES, ViewModeFeature, ViewModeStore, ViewModeSync, get_feature

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_API_ERROR = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="orgpilot", description="Browse organisation hierarchies.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None, help="Path to orgpilot.yml")
    parser.add_argument("--base-url", default=None, help="Backend base URL (overrides config)")
    parser.add_argument("--log-level", default=None, help="Log level (overrides ORGPILOT_LOG_LEVEL)")

    commands = parser.add_subparsers(dest="command", required=True)

    browse = commands.add_parser("browse", help="Open the interactive organisation browser")
    browse.add_argument("--node", type=int, default=None, help="Start focused on this node id")

    reports = commands.add_parser("reports", help="Print the direct reports of a node")
    reports.add_argument("node_id", type=int)

    view_mode = commands.add_parser("view-mode", help="Read, write or watch a view-mode preference")
    view_mode_commands = view_mode.add_subparsers(dest="view_mode_command", required=True)
    for name, help_text in (
        ("get", "Print the current value"),
        ("set", "Persist a new value"),
        ("watch", "Print the value whenever another process changes it"),
    ):
        sub = view_mode_commands.add_parser(name, help=help_text)
        sub.add_argument("feature", choices=sorted(FEATURES))
        if name == "set":
            sub.add_argument("value")
    return parser


def _apply_overrides(config: OrgPilotConfig, args: argparse.Namespace) -> OrgPilotConfig:
    if not args.base_url:
        return config
    if not args.base_url.startswith(("http://", "https://")):
        raise ValueError(f"--base-url must start with http:// or https://, got: {args.base_url}")
    api = config.api.model_copy(update={"base_url": args.base_url.rstrip("/")})
    return config.model_copy(update={"api": api})


def _build_client(config: OrgPilotConfig, bridge: StorageBridge) -> OrgAPIClient:
    # The backend renders initial view modes from the same cookies we persist
    cookies = bridge.primary.cookies if isinstance(bridge.primary, CookieStore) else None
    return OrgAPIClient(config.api.base_url, timeout_s=config.api.timeout_s, cookies=cookies)


async def _print_reports(client: OrgAPIClient, node_id: int, out: TextIO) -> int:
    async with client:
        reports = await client.get_direct_reports(node_id)
    if not reports:
        out.write(f"Node {node_id} has no direct reports\n")
        return EXIT_OK
    for report in reports:
        line = f"{report.id}\t{report.full_name}"
        if report.title:
            line += f"\t{report.title}"
        if report.status_label:
            line += f"\t[{report.status_label}]"
        out.write(line + "\n")
    return EXIT_OK


async def watch_view_mode(
    sync: ViewModeSync,
    feature: ViewModeFeature,
    out: TextIO,
    shutdown_event: asyncio.Event | None = None,
) -> None:
    """Print the current value, then every change picked up by polling."""

    def _print(value: str) -> None:
        out.write(f"{feature.name}: {value}\n")
        out.flush()

    _print(sync.watch(feature, _print))
    try:
        await sync.run(shutdown_event or asyncio.Event())
    finally:
        sync.close()


def _view_mode_command(args: argparse.Namespace, config: OrgPilotConfig, store: ViewModeStore, out: TextIO) -> int:
    feature = get_feature(args.feature)
    if args.view_mode_command == "get":
        out.write(f"{store.read(feature)}\n")
        return EXIT_OK
    if args.view_mode_command == "set":
        store.write(feature, args.value)
        logger.info("Set %s view mode to %s", feature.name, args.value)
        return EXIT_OK
    sync = ViewModeSync(store, interval_s=config.view_mode.poll_interval_s)
    asyncio.run(watch_view_mode(sync, feature, out))
    return EXIT_OK


def _browse(args: argparse.Namespace, config: OrgPilotConfig, bridge: StorageBridge, store: ViewModeStore) -> int:
    # Imported lazily: textual is only needed for the interactive browser
    from orgpilot.cli.tui.app import OrgBrowserApp

    setup_logging(args.log_level, log_file=TUI_LOG_PATH)
    app = OrgBrowserApp(
        _build_client(config, bridge),
        store,
        node_id=args.node,
        poll_interval_s=config.view_mode.poll_interval_s,
        fetch_timeout_s=config.api.fetch_timeout_s,
    )
    app.run()
    return EXIT_OK


def run(argv: list[str] | None = None, *, out: TextIO | None = None) -> int:
    """Parse argv and execute one command; returns the process exit code."""
    out = out or sys.stdout
    args = build_parser().parse_args(argv)
    if args.command != "browse":
        setup_logging(args.log_level)

    try:
        config = _apply_overrides(get_config(args.config), args)
    except ValueError as e:
        sys.stderr.write(f"orgpilot error: {e}\n")
        return EXIT_USAGE

    bridge = build_bridge(config.storage)
    store = ViewModeStore(bridge)

    try:
        if args.command == "browse":
            return _browse(args, config, bridge, store)
        if args.command == "reports":
            return asyncio.run(_print_reports(_build_client(config, bridge), args.node_id, out))
        return _view_mode_command(args, config, store, out)
    except APIError as e:
        sys.stderr.write(f"orgpilot error: {e}\n")
        return EXIT_API_ERROR
    except ValueError as e:
        sys.stderr.write(f"orgpilot error: {e}\n")
        return EXIT_USAGE


def main() -> None:
    try:
        sys.exit(run())
    except KeyboardInterrupt:
        sys.exit(EXIT_INTERRUPTED)


if __name__ == "__main__":
    main()
