"""
Process-wide registry of bStats reporters

Every plugin ships its own copy of this library, usually vendored under its
own package name. All copies loaded into one proxy process agree on a single
registry: the first copy to start records its module name in the marker file
and the others link their reporters into that module's registry. The first
reporter linked into a registry becomes its leader and owns the submission
job; the leader queries every linked reporter on each cycle.
"""

import importlib
import logging
import sys
import threading
from pathlib import Path
from types import ModuleType
from typing import Any, List, Optional

logger = logging.getLogger(__name__)

MARKER_FILE_NAME = "temp.txt"


class MetricsRegistry:
    """Append-only list of linked reporters, first registrant leads"""

    def __init__(self):
        self._lock = threading.Lock()
        self._instances: List[Any] = []
        self._leader: Optional[Any] = None

    def link(self, metrics: Any) -> bool:
        """
        Link a reporter

        Args:
            metrics: Any object exposing get_plugin_data()

        Returns:
            True if the reporter became the leader of this registry
        """
        with self._lock:
            self._instances.append(metrics)
            if self._leader is None:
                self._leader = metrics
                return True
            return False

    @property
    def leader(self) -> Optional[Any]:
        return self._leader

    def instances(self) -> List[Any]:
        """Snapshot of the linked reporters in link order"""
        with self._lock:
            return list(self._instances)

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)


_registry = MetricsRegistry()


def get_registry() -> MetricsRegistry:
    """Get this copy's registry"""
    return _registry


def link_metrics(metrics: Any) -> bool:
    """
    Link a reporter with this copy's registry.

    Called by other copies of the library after resolving the marker file.
    """
    return _registry.link(metrics)


def read_marker(marker_file: Path) -> Optional[str]:
    """
    Read the first line of the marker file

    Returns:
        The recorded module name, or None if the file is missing or empty
    """
    if not marker_file.exists():
        return None
    with open(marker_file, "r", encoding="utf-8", errors="replace") as f:
        line = f.readline().strip()
    return line or None


def write_marker(marker_file: Path, module_name: str):
    marker_file.write_text(module_name + "\n", encoding="utf-8")


def _load_registry_module(module_name: str) -> Optional[ModuleType]:
    try:
        module = importlib.import_module(module_name)
    except Exception as e:
        logger.debug(f"Recorded bStats registry {module_name} is not loadable: {e}")
        return None

    if not callable(getattr(module, "link_metrics", None)):
        return None
    if not callable(getattr(module, "get_registry", None)):
        return None
    return module


def resolve_registry_module(config_dir: Path) -> ModuleType:
    """
    Find the registry module all copies in this process link into

    If the marker names a loadable, compatible module that module is used.
    Otherwise this copy takes over and records itself in the marker.

    Args:
        config_dir: The shared bStats directory

    Returns:
        Module exposing link_metrics() and get_registry()

    Raises:
        OSError: If the marker file cannot be read or written
    """
    config_dir = Path(config_dir)
    config_dir.mkdir(parents=True, exist_ok=True)
    marker_file = config_dir / MARKER_FILE_NAME

    module_name = read_marker(marker_file)
    if module_name:
        module = _load_registry_module(module_name)
        if module is not None:
            return module

    write_marker(marker_file, __name__)
    logger.debug(f"Recorded {__name__} as the bStats registry")
    return sys.modules[__name__]
