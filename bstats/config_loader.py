"""
bStats Configuration Loader

Loads the per-plugin-directory bStats settings with precedence:
1. Environment variables (highest priority)
2. bStats/config.toml (TOML format, created with defaults on first run)
3. Built-in defaults (lowest priority)

The file is shared by every plugin on the proxy, so it is written once and
never rewritten afterwards.
"""

import os
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

import toml

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = "bStats"
CONFIG_FILE_NAME = "config.toml"

CONFIG_HEADER = (
    "#bStats collects some data for plugin authors like how many servers are using their plugins.",
    "#To honor their work, you should not disable it.",
    "#This has nearly no effect on the server performance!",
    "#Check out https://bStats.org/ to learn more :)",
)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


class MetricsConfig:
    """bStats configuration for one proxy installation"""

    def __init__(self, config_dir: Path):
        """
        Load configuration, creating the config file if it does not exist

        Args:
            config_dir: The bStats directory next to the plugin jars

        Raises:
            OSError: If the directory or file cannot be created or read
            toml.TomlDecodeError: If the existing file is not valid TOML
            ValueError: If a switch in the file is not a boolean
        """
        self.config_dir = Path(config_dir)
        self.config_file = self.config_dir / CONFIG_FILE_NAME
        self.config: Dict[str, Any] = {}

        self._load_defaults()
        self._load_config_file()
        self._load_env_overrides()

    @classmethod
    def for_plugin_source(cls, source: Path) -> "MetricsConfig":
        """Load the config that lives beside a plugin artifact"""
        return cls(Path(source).parent / CONFIG_DIR_NAME)

    def _load_defaults(self):
        self.config = {
            "enabled": True,
            "serverUuid": None,
            "logFailedRequests": False,
            "logSentData": False,
            "logResponseStatusText": False,
        }

    def _load_config_file(self):
        """Load bStats/config.toml, writing the defaults first if missing"""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        if not self.config_file.exists():
            self._write_default_file()

        file_config = toml.load(self.config_file)
        logger.debug(f"Loaded bStats configuration from: {self.config_file}")

        for key, default in self.config.items():
            if key not in file_config:
                continue
            value = file_config[key]
            if isinstance(default, bool) and not isinstance(value, bool):
                raise ValueError(f"{key} must be true or false in {self.config_file}, got {value!r}")
            self.config[key] = value

    def _write_default_file(self):
        server_uuid = str(uuid.uuid4())
        lines = list(CONFIG_HEADER) + [
            "enabled = true",
            f'serverUuid = "{server_uuid}"',
            "logFailedRequests = false",
            "logSentData = false",
            "logResponseStatusText = false",
        ]
        self.config_file.write_text("\n".join(lines) + "\n", encoding="utf-8")
        logger.info(f"Created bStats config file: {self.config_file}")

    def _load_env_overrides(self):
        """Load environment variable overrides"""
        env_mappings = {
            "BSTATS_ENABLED": ("enabled", _parse_bool),
            "BSTATS_LOG_FAILED_REQUESTS": ("logFailedRequests", _parse_bool),
            "BSTATS_LOG_SENT_DATA": ("logSentData", _parse_bool),
            "BSTATS_LOG_RESPONSE_STATUS_TEXT": ("logResponseStatusText", _parse_bool),
        }

        for env_var, (key, converter) in env_mappings.items():
            value = os.getenv(env_var)
            if value is None:
                continue
            self.config[key] = converter(value)
            logger.debug(f"Environment override: {env_var}={value}")

    @property
    def enabled(self) -> bool:
        return self.config["enabled"]

    @property
    def server_uuid(self) -> Optional[str]:
        return self.config["serverUuid"]

    @property
    def log_failed_requests(self) -> bool:
        return self.config["logFailedRequests"]

    @property
    def log_sent_data(self) -> bool:
        return self.config["logSentData"]

    @property
    def log_response_status_text(self) -> bool:
        return self.config["logResponseStatusText"]

