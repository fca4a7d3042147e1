"""Extension layer — plugin system via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints.
INVARIANT: Plugin failures are warnings, never errors.
"""

from workforce.plugins.event_bus import EventBus
from workforce.plugins.manager import PluginManager

__all__ = ["EventBus", "PluginManager"]
