"""
Server Data Collector for bStats

Collects the anonymous server facts sent with every submission.

Data collected:
- Server UUID: Random, persistent identifier from bStats/config.toml
- Proxy: player amount (capped at 500), online mode, version, backend count
- Runtime: interpreter (or host runtime) version
- OS: name, architecture and version
- Core Count: Number of logical CPU cores
"""

import json
import logging
import os
import platform
from typing import Any, Dict, Optional

import psutil

from bstats.host import ProxyServer

logger = logging.getLogger(__name__)

MAX_PLAYER_AMOUNT = 500


def clamp_player_amount(player_count: int) -> int:
    """Cap the reported player amount"""
    return MAX_PLAYER_AMOUNT if player_count > MAX_PLAYER_AMOUNT else player_count


class ServerDataCollector:
    """Collects proxy and system information"""

    def __init__(self, proxy: ProxyServer, server_uuid: Optional[str]):
        """
        Initialize server data collector

        Args:
            proxy: The proxy the reporter is running in
            server_uuid: Persistent server identifier from the config
        """
        self.proxy = proxy
        self.server_uuid = server_uuid

    def _get_proxy_info(self) -> Dict[str, Any]:
        return {
            "playerAmount": clamp_player_amount(self.proxy.get_player_count()),
            "managedServers": len(self.proxy.get_all_servers()),
            "onlineMode": 1 if self.proxy.is_online_mode() else 0,
            "velocityVersion": self.proxy.get_version(),
        }

    def _get_runtime_version(self) -> str:
        return self.proxy.get_runtime_version() or platform.python_version()

    def _get_os_info(self) -> Dict[str, str]:
        """
        Get operating system information

        Returns:
            Dictionary with OS name, architecture and version
        """
        return {
            "osName": platform.system(),
            "osArch": platform.machine(),
            "osVersion": platform.release(),
        }

    def _get_core_count(self) -> int:
        # psutil returns None on platforms where the count is undetermined
        return psutil.cpu_count(logical=True) or os.cpu_count() or 1

    def collect(self) -> Dict[str, Any]:
        """
        Collect all server data

        Returns:
            Dictionary containing the server section of a submission
        """
        data = {"serverUUID": self.server_uuid}
        data.update(self._get_proxy_info())
        data["javaVersion"] = self._get_runtime_version()
        data.update(self._get_os_info())
        data["coreCount"] = self._get_core_count()
        return data

    def to_json(self) -> str:
        return json.dumps(self.collect(), indent=2)

    def to_readable_string(self) -> str:
        """
        Get server data as human-readable string

        Returns:
            Formatted string with server information
        """
        data = self.collect()
        lines = [
            "=== bStats Server Data ===",
            f"Server UUID: {data['serverUUID']}",
            "",
            "Proxy:",
            f"  Version: {data['velocityVersion']}",
            f"  Players: {data['playerAmount']}",
            f"  Managed Servers: {data['managedServers']}",
            f"  Online Mode: {'yes' if data['onlineMode'] else 'no'}",
            "",
            "System:",
            f"  Runtime Version: {data['javaVersion']}",
            f"  OS: {data['osName']} {data['osVersion']} ({data['osArch']})",
            f"  Cores: {data['coreCount']}",
            "==========================",
        ]
        return "\n".join(lines)
