#!/usr/bin/env python3
"""
bStats command line

Shows the data a proxy installation would report, or sends it once.

Usage:
    python -m bstats show --plugins-dir ./plugins
    python -m bstats send --plugins-dir ./plugins --plugin-name MyPlugin --plugin-version 1.0
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from bstats.collector import ServerDataCollector
from bstats.config_loader import CONFIG_DIR_NAME, MetricsConfig
from bstats.host import PluginDescription, ProxyServer
from bstats.logging_config import setup_logging
from bstats.metrics import build_plugin_data
from bstats.registry import MetricsRegistry
from bstats.sender import URL, SubmissionJob

logger = logging.getLogger("bstats")


class StaticProxy(ProxyServer):
    """Proxy facts given on the command line"""

    def __init__(self, players: int, online_mode: bool, version: Optional[str], servers: int):
        self.players = players
        self.online_mode = online_mode
        self.version = version
        self.servers = servers

    def get_player_count(self) -> int:
        return self.players

    def is_online_mode(self) -> bool:
        return self.online_mode

    def get_version(self) -> Optional[str]:
        return self.version

    def get_all_servers(self) -> List[str]:
        return [f"server-{i}" for i in range(self.servers)]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bstats", description="bStats Lite reporter")
    parser.add_argument("--plugins-dir", default="./plugins", help="Directory holding the plugin artifacts")
    parser.add_argument("--players", type=int, default=0)
    parser.add_argument("--online-mode", action="store_true")
    parser.add_argument("--proxy-version", default=None)
    parser.add_argument("--servers", type=int, default=0, help="Number of managed backend servers")
    parser.add_argument("--endpoint", default=URL)
    parser.add_argument("--json-logs", action="store_true", help="Log in structured JSON")
    parser.add_argument("--log-trace", action="store_true", help="Add thread and source location to JSON logs")
    parser.add_argument("--log-level", default="INFO")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("show", help="Print the server data that would be sent")

    send = subparsers.add_parser("send", help="Send one submission immediately")
    send.add_argument("--plugin-name", required=True)
    send.add_argument("--plugin-version", required=True)

    return parser


def show(args, proxy: ProxyServer) -> int:
    config = MetricsConfig(Path(args.plugins_dir) / CONFIG_DIR_NAME)
    collector = ServerDataCollector(proxy, config.server_uuid)

    print(collector.to_readable_string())
    print("\nJSON Format:")
    print(collector.to_json())
    print(f"\nEnabled: {config.enabled}")
    return 0


async def send(args, proxy: ProxyServer) -> int:
    plugins_dir = Path(args.plugins_dir)
    plugin = PluginDescription(
        name=args.plugin_name,
        version=args.plugin_version,
        source=plugins_dir / f"{args.plugin_name}.py",
    )
    config = MetricsConfig.for_plugin_source(plugin.source)
    if not config.enabled:
        logger.info("bStats is disabled, skipping send")
        return 1

    # A private registry so the one-shot send does not touch the shared marker
    registry = MetricsRegistry()
    registry.link(_OneShotPlugin(plugin))
    job = SubmissionJob(
        registry,
        ServerDataCollector(proxy, config.server_uuid),
        config,
        logger,
        endpoint=args.endpoint,
    )

    if await job.submit_data():
        print("✓ Data sent successfully!")
        return 0
    print("✗ Failed to send data")
    return 1


class _OneShotPlugin:
    def __init__(self, plugin: PluginDescription):
        self.plugin = plugin

    def get_plugin_data(self):
        return build_plugin_data(self.plugin)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, structured=args.json_logs, include_trace=args.log_trace)

    proxy = StaticProxy(args.players, args.online_mode, args.proxy_version, args.servers)

    if args.command == "show":
        return show(args, proxy)
    return asyncio.run(send(args, proxy))


if __name__ == "__main__":
    sys.exit(main())
