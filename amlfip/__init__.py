#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""AMLFIP - Amlogic S905X Firmware Image Package builder.

Builds the boot image consumed by the Amlogic GXL boot ROM: the finalized BL2 followed by
an encrypted FIP table of contents and the BL30, BL31 and BL33 stages laid out at the
offsets the ROM loader expects.

The package can be used as a pure Python library or through the ``amlfip`` command line tool.
Behavior can be tuned with environment variables:

* ``AMLFIP_DEBUG`` dumps merged schemas and validated configurations into the working directory.
* ``AMLFIP_DEBUG_LOGGING_DISABLED`` disables the rotating debug log file.
* ``AMLFIP_DEBUG_LOG_FILE`` overrides the location of the debug log file.
* ``AMLFIP_SCHEMA_STRICT`` turns unknown configuration keys into errors.
"""

import os

from packaging.version import Version, parse
from platformdirs import PlatformDirs


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "t", "true", "yes", "on")


def _read_version() -> Version:
    try:
        from .__version__ import __version__ as version_str
    except ImportError:
        # installed without the generated version module
        from importlib_metadata import version as dist_version

        version_str = dist_version("amlfip")
    return parse(version_str)


version = _read_version()

__author__ = "AMLFIP Developers"
__license__ = "BSD-3-Clause"
__version__ = str(version)

AMLFIP_PLATFORM_DIRS = PlatformDirs(
    appname="amlfip", appauthor=False, version=version.base_version, ensure_exists=False
)

AMLFIP_DEBUG = _env_flag("AMLFIP_DEBUG")
AMLFIP_DEBUG_LOGGING_DISABLED = _env_flag("AMLFIP_DEBUG_LOGGING_DISABLED")
AMLFIP_DEBUG_LOG_FILE = os.environ.get(
    "AMLFIP_DEBUG_LOG_FILE", os.path.join(AMLFIP_PLATFORM_DIRS.user_log_dir, "debug.log")
)
AMLFIP_SCHEMA_STRICT = _env_flag("AMLFIP_SCHEMA_STRICT")

AMLFIP_YML_INDENT = 2
