"""Shared fixtures for the bStats tests"""

from typing import List, Optional

import pytest

from bstats import registry
from bstats.host import PluginDescription, ProxyServer


class FakeProxy(ProxyServer):
    def __init__(self, players: int = 12, online_mode: bool = True,
                 version: Optional[str] = "3.3.0", servers: int = 3):
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
        return [f"lobby-{i}" for i in range(self.servers)]


@pytest.fixture(autouse=True)
def isolated_registry(monkeypatch):
    """Each test gets an empty process-wide registry and no env overrides"""
    fresh = registry.MetricsRegistry()
    monkeypatch.setattr(registry, "_registry", fresh)
    for env_var in ("BSTATS_ENABLED", "BSTATS_LOG_FAILED_REQUESTS",
                    "BSTATS_LOG_SENT_DATA", "BSTATS_LOG_RESPONSE_STATUS_TEXT"):
        monkeypatch.delenv(env_var, raising=False)
    return fresh


@pytest.fixture
def proxy():
    return FakeProxy()


@pytest.fixture
def plugins_dir(tmp_path):
    path = tmp_path / "plugins"
    path.mkdir()
    return path


@pytest.fixture
def make_plugin(plugins_dir):
    def _make(name: str = "ExamplePlugin", version: str = "1.0.0") -> PluginDescription:
        return PluginDescription(name=name, version=version, source=plugins_dir / f"{name}.py")
    return _make
