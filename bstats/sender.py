"""
bStats Submission

Sends the collected data to bStats.org every 30 minutes, the first time two
minutes after the leader starts so other plugins have time to link their
reporters. Every failure is contained to its own cycle.
"""

import asyncio
import gzip
import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from bstats.collector import ServerDataCollector
from bstats.config_loader import MetricsConfig
from bstats.registry import MetricsRegistry

logger = logging.getLogger(__name__)

# The version of this bStats submission format
B_STATS_VERSION = 1

URL = "https://bStats.org/submitData/velocity"

INITIAL_DELAY_SECONDS = 2 * 60
INTERVAL_SECONDS = 30 * 60

STATE_IDLE = "idle"
STATE_SCHEDULED = "scheduled"


def compress(text: Optional[str]) -> Optional[bytes]:
    """Gzip a string encoded as UTF-8"""
    if text is None:
        return None
    return gzip.compress(text.encode("utf-8"))


def build_headers(content_length: int) -> Dict[str, str]:
    return {
        "Accept": "application/json",
        "Connection": "close",
        "Content-Encoding": "gzip",
        "Content-Length": str(content_length),
        "Content-Type": "application/json",
        "User-Agent": f"MC-Server/{B_STATS_VERSION}",
    }


async def send_data(
    data: Dict[str, Any],
    plugin_logger: logging.Logger,
    log_sent_data: bool = False,
    log_response_status_text: bool = False,
    endpoint: str = URL,
) -> str:
    """
    Send the data to the bStats server

    Args:
        data: The submission document
        plugin_logger: Logger of the embedding plugin
        log_sent_data: Log the document before sending it
        log_response_status_text: Log the response body
        endpoint: URL to post to

    Returns:
        The response body

    Raises:
        ValueError: If data is None
        aiohttp.ClientError: If the request fails or the server answers with an error status
    """
    if data is None:
        raise ValueError("Data cannot be null")

    payload = json.dumps(data, separators=(",", ":"))
    if log_sent_data:
        plugin_logger.info(f"Sending data to bStats: {payload}")

    # Compress the data to save bandwidth
    compressed_data = compress(payload)

    async with aiohttp.ClientSession() as session:
        async with session.post(
            endpoint,
            data=compressed_data,
            headers=build_headers(len(compressed_data)),
        ) as response:
            response.raise_for_status()
            response_text = await response.text()

    if log_response_status_text:
        plugin_logger.info(f"Sent data to bStats and received response: {response_text}")
    return response_text


class SubmissionJob:
    """Collects and submits data periodically on behalf of a registry"""

    def __init__(
        self,
        registry: MetricsRegistry,
        collector: ServerDataCollector,
        config: MetricsConfig,
        plugin_logger: logging.Logger,
        endpoint: str = URL,
        initial_delay: float = INITIAL_DELAY_SECONDS,
        interval: float = INTERVAL_SECONDS,
    ):
        """
        Initialize submission job

        Args:
            registry: Registry whose reporters contribute plugin data
            collector: Source of the server data section
            config: Logging switches
            plugin_logger: Logger of the leading plugin
            endpoint: URL to send data to
            initial_delay: Seconds before the first submission
            interval: Seconds between submissions
        """
        self.registry = registry
        self.collector = collector
        self.config = config
        self.plugin_logger = plugin_logger
        self.endpoint = endpoint
        self.initial_delay = initial_delay
        self.interval = interval
        self.cycles = 0
        self._task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()

    @property
    def state(self) -> str:
        if self._task is not None and not self._task.done():
            return STATE_SCHEDULED
        return STATE_IDLE

    def collect_plugin_data(self) -> List[Dict[str, Any]]:
        """Query every linked reporter, skipping any that fail"""
        plugin_data = []
        for metrics in self.registry.instances():
            try:
                plugin = metrics.get_plugin_data()
            except Exception as e:
                logger.debug(f"Skipping plugin data of {metrics!r}: {e}")
                continue
            if isinstance(plugin, dict):
                plugin_data.append(plugin)
        return plugin_data

    def build_payload(self) -> Dict[str, Any]:
        data = self.collector.collect()
        data["plugins"] = self.collect_plugin_data()
        return data

    async def submit_data(self) -> bool:
        """
        Collect the data and send it

        Returns:
            True if the data was accepted, False otherwise
        """
        self.cycles += 1
        try:
            data = self.build_payload()
            await send_data(
                data,
                self.plugin_logger,
                log_sent_data=self.config.log_sent_data,
                log_response_status_text=self.config.log_response_status_text,
                endpoint=self.endpoint,
            )
            return True
        except Exception:
            if self.config.log_failed_requests:
                self.plugin_logger.warning("Could not submit plugin stats!", exc_info=True)
            return False

    async def _periodic_sender(self):
        """Background task that submits data periodically"""
        logger.debug(
            f"bStats submission scheduled (delay: {self.initial_delay}s, interval: {self.interval}s)"
        )

        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self.initial_delay)
            return
        except asyncio.TimeoutError:
            pass

        while not self._stop_event.is_set():
            await self.submit_data()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                break
            except asyncio.TimeoutError:
                continue

    def start(self):
        """
        Schedule the job on the running event loop

        Raises:
            RuntimeError: If no event loop is running
        """
        if self.state == STATE_SCHEDULED:
            logger.warning("bStats submission is already scheduled")
            return

        self._stop_event.clear()
        self._task = asyncio.get_running_loop().create_task(self._periodic_sender())

    async def stop(self):
        """Stop the job and wait for the current cycle to finish"""
        if self.state == STATE_IDLE:
            return

        self._stop_event.set()
        try:
            await asyncio.wait_for(self._task, timeout=5.0)
        except asyncio.TimeoutError:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
