#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Configuration loaded from a YAML or JSON file.

Relative file paths inside the configuration are relative to the directory of the
configuration file, not to the current working directory.
"""

import logging
import os
from typing import Any, Optional

from typing_extensions import Self

from amlfip.exceptions import AMLFIPError
from amlfip.utils.misc import find_file, load_configuration
from amlfip.utils.schema_validator import check_config

logger = logging.getLogger(__name__)


class Config(dict):
    """Configuration dictionary aware of the directory it was loaded from."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.config_dir = os.getcwd()
        self.config_name = ""

    @classmethod
    def create_from_file(cls, file_path: str) -> Self:
        """Load configuration file.

        :param file_path: Path to the YAML or JSON file.
        :return: Configuration.
        """
        abs_path = os.path.abspath(file_path)
        cfg = cls(load_configuration(abs_path))
        cfg.config_dir = os.path.dirname(abs_path)
        cfg.config_name = os.path.basename(abs_path)
        logger.debug(f"Configuration {cfg.config_name} loaded from {cfg.config_dir}")
        return cfg

    @property
    def search_paths(self) -> list[str]:
        """Directories where relative input files are looked up."""
        return [self.config_dir]

    def get_str(self, key: str, default: Optional[str] = None) -> str:
        """Get text value.

        :param key: Configuration key.
        :param default: Value used when the key is missing.
        :raises AMLFIPError: The key is missing and has no default, or the value is not text.
        :return: Text value.
        """
        value = self.get(key, default)
        if value is None:
            raise AMLFIPError(f"Configuration {self.config_name} has no '{key}' value")
        if not isinstance(value, str):
            raise AMLFIPError(f"Configuration value '{key}' must be text, got: {value!r}")
        return value

    def get_input_file_name(self, key: str) -> str:
        """Get absolute path of an existing input file.

        :param key: Configuration key holding the path.
        :raises AMLFIPError: The file does not exist.
        :return: Absolute path.
        """
        path = self.get_str(key)
        try:
            return find_file(path, search_paths=self.search_paths)
        except AMLFIPError as exc:
            raise AMLFIPError(f"Cannot find input file for '{key}': {exc.description}") from exc

    def get_output_file_name(self, key: str) -> str:
        """Get absolute path of an output file, the file does not have to exist.

        :param key: Configuration key holding the path.
        :return: Absolute path.
        """
        return os.path.abspath(os.path.join(self.config_dir, self.get_str(key)))

    def check(self, schemas: list[dict[str, Any]], check_unknown_props: bool = False) -> None:
        """Validate the configuration.

        :param schemas: JSON schemas merged before validation.
        :param check_unknown_props: Report keys the schemas do not define.
        """
        check_config(
            self, schemas, search_paths=self.search_paths, check_unknown_props=check_unknown_props
        )
