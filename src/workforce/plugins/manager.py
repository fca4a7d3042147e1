"""Listener discovery for domain events.

Listeners are plain classes whose methods carry ``@hookimpl`` and are
named after an event hook (``employee_terminated``, ``leave_approved``,
...). They come from two places:

- packages installed with a ``workforce.plugins`` entry point, such as a
  payroll export or a directory sync;
- single-file listeners dropped into ``.workforce/plugins/`` next to the
  database, for site-specific follow-up work.

The built-in audit and offboarding listeners are registered directly by
the store and do not go through discovery.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from typing import TYPE_CHECKING

import pluggy

from workforce.plugins.hookspecs import WorkforceHookSpec

if TYPE_CHECKING:
    from pathlib import Path
    from types import ModuleType

PROJECT_NAME = "workforce"
ENTRYPOINT_GROUP = "workforce.plugins"
LOCAL_MODULE_PREFIX = "workforce_local_plugin_"

logger = logging.getLogger(__name__)


class PluginManager:
    """Registry of event listeners plus the hook relay the event bus calls."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(WorkforceHookSpec)
        self._loaded: bool = False

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load installed listeners, then any found in *local_dir*.

        Returns the names of every registered listener.
        """
        self._pm.load_setuptools_entrypoints(ENTRYPOINT_GROUP)
        self._normalize_plugin_instances()
        if local_dir is not None:
            self._discover_local(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered listener: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        """One attribute per event hook, e.g. ``hook.leave_approved(event=...)``."""
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # .workforce/plugins/
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Register listener classes from every ``*.py`` file in *local_dir*.

        Files starting with ``_`` are helpers and are not loaded. A file
        that fails to import is logged and skipped so one broken listener
        cannot stop hiring or leave processing.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module = self._load_local_module(py_file)
            if module is not None:
                self._register_listener_classes(module, py_file)

    @staticmethod
    def _load_local_module(py_file: Path) -> ModuleType | None:
        module_name = f"{LOCAL_MODULE_PREFIX}{py_file.stem}"
        try:
            spec = importlib.util.spec_from_file_location(module_name, py_file)
            if spec is None or spec.loader is None:
                logger.warning("Could not create module spec for %s", py_file)
                return None
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            spec.loader.exec_module(module)
        except Exception:
            logger.warning("Failed to load local listener %s", py_file, exc_info=True)
            sys.modules.pop(module_name, None)
            return None
        return module

    def _register_listener_classes(self, module: ModuleType, py_file: Path) -> None:
        # Classes imported into the file from elsewhere are ignored.
        for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
            if obj.__module__ != module.__name__ or not self._has_hook_impls(obj):
                continue
            try:
                self.register_plugin(obj(), name=module.__name__)
            except Exception:
                logger.warning(
                    "Failed to instantiate listener %s from %s",
                    obj.__name__,
                    py_file,
                    exc_info=True,
                )

    def _normalize_plugin_instances(self) -> None:
        """Swap entry-point listener classes for instances.

        Entry points may name a class; hooks called on it would get no ``self``.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin) or not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point listener %s", plugin_name, exc_info=True
                )
                continue
            self._pm.register(instance, name=plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, f"{PROJECT_NAME}_impl", None):
                return True
        return False
