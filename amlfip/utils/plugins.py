#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Plugin modules adding service providers, e.g. vendor encryption blocks.

Importing a plugin module is enough to make its providers available, they register through
subclassing. Plugins come either from an entry point group of an installed distribution
or from a Python source file.
"""

import functools
import logging
import os
import sys
from importlib.util import module_from_spec, spec_from_file_location
from types import ModuleType
from typing import Optional

import importlib_metadata

from amlfip.exceptions import AMLFIPError

logger = logging.getLogger(__name__)

# Entry point group of encryption block plugins
ENCRYPTION_BLOCK_GROUP = "amlfip.eb"


class PluginsManager:
    """Registry of imported plugin modules."""

    def __init__(self) -> None:
        self.plugins: dict[str, ModuleType] = {}

    def register(self, module: ModuleType) -> bool:
        """Add a module to the registry.

        :param module: Imported plugin module.
        :return: False when a module of the same name is already registered.
        """
        if module.__name__ in self.plugins:
            logger.debug(f"Plugin {module.__name__} is already registered")
            return False
        self.plugins[module.__name__] = module
        logger.debug(f"Plugin {module.__name__} registered")
        return True

    def get_plugin(self, name: str) -> Optional[ModuleType]:
        """Get registered plugin module by name."""
        return self.plugins.get(name)

    def load_from_entrypoints(self, group: str) -> int:
        """Import all plugins of an entry point group.

        Plugins that fail to import are skipped with a warning.

        :param group: Entry point group, e.g. :data:`ENCRYPTION_BLOCK_GROUP`.
        :return: Number of newly registered plugins.
        """
        count = 0
        for entry_point in importlib_metadata.entry_points(group=group):
            try:
                module = entry_point.load()
            except ImportError as exc:
                logger.warning(
                    f"Plugin {entry_point.name} ({entry_point.module}) not loaded: {exc}"
                )
                continue
            if isinstance(module, ModuleType) and self.register(module):
                logger.info(f"Plugin {entry_point.name} loaded from group {group}")
                count += 1
        return count

    def load_from_source_file(
        self, source_file: str, module_name: Optional[str] = None
    ) -> ModuleType:
        """Import a plugin from Python source file.

        :param source_file: Path to the source file.
        :param module_name: Module name, the file name without extension by default.
        :raises AMLFIPError: The file cannot be imported.
        :return: Imported module.
        """
        name = module_name or os.path.splitext(os.path.basename(source_file))[0]
        spec = spec_from_file_location(name, source_file)
        if spec is None or spec.loader is None:
            raise AMLFIPError(f"Plugin source '{source_file}' is not an importable Python file")
        module = module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            del sys.modules[name]
            raise AMLFIPError(f"Plugin '{source_file}' failed to import: {exc}") from exc
        self.register(module)
        return module


@functools.lru_cache(maxsize=None)
def get_plugins_manager() -> PluginsManager:
    """Get the plugin registry shared by the whole process."""
    return PluginsManager()
