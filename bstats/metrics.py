"""
bStats collects some data for plugin authors.

Check out https://bStats.org/ to learn more about bStats!
"""

import logging
from typing import Any, Dict, Optional

from bstats import registry as local_registry
from bstats.collector import ServerDataCollector
from bstats.config_loader import MetricsConfig
from bstats.host import PluginDescription, ProxyServer
from bstats.sender import INITIAL_DELAY_SECONDS, INTERVAL_SECONDS, URL, SubmissionJob


def build_plugin_data(plugin: PluginDescription) -> Dict[str, Any]:
    return {
        "pluginName": plugin.name,
        "pluginVersion": plugin.version,
        "customCharts": [],
    }


class MetricsLite:
    """
    Anonymous usage reporter for one plugin.

    Construct it once while the plugin initializes, from inside the proxy's
    event loop. Nothing raised here reaches the plugin.
    """

    def __init__(
        self,
        plugin: PluginDescription,
        proxy: ProxyServer,
        plugin_logger: Optional[logging.Logger] = None,
        endpoint: str = URL,
        initial_delay: float = INITIAL_DELAY_SECONDS,
        interval: float = INTERVAL_SECONDS,
    ):
        self.plugin = plugin
        self.proxy = proxy
        self.plugin_logger = plugin_logger or logging.getLogger(f"plugin.{plugin.name}")
        self.config: Optional[MetricsConfig] = None
        self.job: Optional[SubmissionJob] = None
        self.linked = False
        self.is_leader = False

        try:
            self.config = MetricsConfig.for_plugin_source(plugin.source)
        except Exception:
            self.plugin_logger.warning("Failed to load bStats config!", exc_info=True)
            return

        # We are not allowed to send data about this server
        if not self.config.enabled:
            return

        try:
            registry_module = local_registry.resolve_registry_module(self.config.config_dir)
        except (OSError, ValueError):
            if self.config.log_failed_requests:
                self.plugin_logger.warning("Failed to get first bStats registry!", exc_info=True)
            return

        registry_module = self._link(registry_module)
        if self.is_leader:
            self._start_submitting(registry_module, endpoint, initial_delay, interval)

    def _link(self, registry_module):
        """Link with the resolved registry, falling back to this copy's own"""
        if registry_module is not local_registry:
            try:
                self.is_leader = bool(registry_module.link_metrics(self))
                self.linked = True
                return registry_module
            except Exception:
                if self.config.log_failed_requests:
                    self.plugin_logger.warning(
                        f"Failed to link to first bStats registry {registry_module.__name__}!",
                        exc_info=True,
                    )

        self.is_leader = local_registry.link_metrics(self)
        self.linked = True
        return local_registry

    def _start_submitting(self, registry_module, endpoint: str, initial_delay: float, interval: float):
        collector = ServerDataCollector(self.proxy, self.config.server_uuid)
        self.job = SubmissionJob(
            registry_module.get_registry(),
            collector,
            self.config,
            self.plugin_logger,
            endpoint=endpoint,
            initial_delay=initial_delay,
            interval=interval,
        )
        try:
            self.job.start()
        except RuntimeError:
            self.plugin_logger.warning("No running event loop, bStats submission not scheduled")

    def get_plugin_data(self) -> Dict[str, Any]:
        """
        Gets the plugin specific data.

        Called by the leading reporter, possibly from another copy of this library.
        """
        return build_plugin_data(self.plugin)

    def __repr__(self) -> str:
        return f"MetricsLite(plugin={self.plugin.name!r}, leader={self.is_leader})"
