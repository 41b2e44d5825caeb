#!/usr/bin/env python3
"""
Tests for the server data collector
"""

import json
import platform

from bstats.collector import MAX_PLAYER_AMOUNT, ServerDataCollector, clamp_player_amount
from conftest import FakeProxy


def test_player_amount_is_capped():
    assert clamp_player_amount(0) == 0
    assert clamp_player_amount(499) == 499
    assert clamp_player_amount(500) == 500
    assert clamp_player_amount(501) == MAX_PLAYER_AMOUNT
    assert clamp_player_amount(12000) == 500


def test_collect_server_data():
    collector = ServerDataCollector(FakeProxy(players=1234, online_mode=False, servers=4), "uuid-1")
    data = collector.collect()

    assert data["serverUUID"] == "uuid-1"
    assert data["playerAmount"] == 500
    assert data["managedServers"] == 4
    assert data["onlineMode"] == 0
    assert data["velocityVersion"] == "3.3.0"
    assert data["javaVersion"] == platform.python_version()
    assert data["osName"] == platform.system()
    assert data["osArch"] == platform.machine()
    assert data["osVersion"] == platform.release()
    assert isinstance(data["coreCount"], int) and data["coreCount"] >= 1
    assert "plugins" not in data


def test_online_mode_is_numeric():
    data = ServerDataCollector(FakeProxy(online_mode=True), "uuid-1").collect()
    assert data["onlineMode"] == 1


def test_host_runtime_version_wins():
    class JvmProxy(FakeProxy):
        def get_runtime_version(self):
            return "17.0.9"

    data = ServerDataCollector(JvmProxy(), "uuid-1").collect()
    assert data["javaVersion"] == "17.0.9"


def test_json_and_readable_output():
    collector = ServerDataCollector(FakeProxy(players=7), "uuid-2")

    assert json.loads(collector.to_json())["playerAmount"] == 7

    text = collector.to_readable_string()
    assert "Server UUID: uuid-2" in text
    assert "Players: 7" in text
