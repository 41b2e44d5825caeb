"""
bStats Lite for Python proxies

Collects and sends anonymous usage data for proxy plugins to bStats.org.
All data collected is transparent and can be disabled in bStats/config.toml.
"""

from bstats.host import PluginDescription, ProxyServer
from bstats.metrics import MetricsLite

__all__ = ['MetricsLite', 'PluginDescription', 'ProxyServer']
