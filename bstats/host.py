"""
Proxy host interface

The reporter only needs a handful of facts from the proxy it runs in.
Proxies (or their Python bindings) implement ProxyServer to provide them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional


@dataclass
class PluginDescription:
    """Description of the plugin that embeds the reporter"""
    name: str
    version: str
    source: Path

    def __post_init__(self):
        self.source = Path(self.source)


class ProxyServer(ABC):
    """Facts about the running proxy"""

    @abstractmethod
    def get_player_count(self) -> int:
        """Number of players currently connected"""
        pass

    @abstractmethod
    def is_online_mode(self) -> bool:
        """Whether the proxy authenticates players against the account service"""
        pass

    @abstractmethod
    def get_version(self) -> Optional[str]:
        """Proxy implementation version, None if unknown"""
        pass

    @abstractmethod
    def get_all_servers(self) -> List[Any]:
        """Backend servers registered with the proxy"""
        pass

    def get_runtime_version(self) -> Optional[str]:
        """
        Version of the runtime the proxy runs on.

        Proxies running on a different runtime than this interpreter
        override this; None means the interpreter version is reported.
        """
        return None
