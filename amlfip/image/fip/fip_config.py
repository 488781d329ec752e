#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Configuration file of the boot image build."""

import logging
import os
from typing import Any

from amlfip.image.fip.assembler import build_fip
from amlfip.image.fip.encryption_block import get_encryption_block
from amlfip.image.fip.toc import TocEntry
from amlfip.utils.config import Config
from amlfip.utils.schema_validator import get_yaml_template

logger = logging.getLogger(__name__)

DEFAULT_ENCRYPTION_BLOCK = "type=none"

FIP_CONFIG_SCHEMA: dict[str, Any] = {
    "type": "object",
    "title": "Amlogic GXL boot image",
    "properties": {
        "bl2": {
            "type": "string",
            "format": "file",
            "title": "BL2 image",
            "description": "Finalized BL2 image, 0xC000 bytes long.",
            "template_value": "bl2.bin.enc",
        },
        "bl30": {
            "type": "string",
            "format": "file",
            "title": "BL30 image",
            "description": "SCP firmware image.",
            "template_value": "bl30.bin.enc",
        },
        "bl31": {
            "type": "string",
            "format": "file",
            "title": "BL31 image",
            "description": "EL3 runtime firmware image.",
            "template_value": "bl31.img.enc",
        },
        "bl33": {
            "type": "string",
            "format": "file",
            "title": "BL33 image",
            "description": "Non-trusted firmware image, usually U-Boot.",
            "template_value": "u-boot.bin.enc",
        },
        "output": {
            "type": "string",
            "format": "file_name",
            "title": "Output boot image",
            "description": "Path of the produced boot image.",
            "template_value": "u-boot.bin",
        },
        "encryption_block": {
            "type": "string",
            "title": "Encryption block",
            "description": (
                "Rendering of the FIP TOC, 'type=none' stores it as is.\n"
                "Example: type=tool;command=aml_encrypt_gxl --bl3enc --input {input} "
                "--output {output}"
            ),
            "default": DEFAULT_ENCRYPTION_BLOCK,
        },
    },
    "required": ["bl2", "bl30", "bl31", "bl33", "output"],
}


def get_validation_schemas() -> list[dict[str, Any]]:
    """Get validation schemas of the build configuration."""
    return [FIP_CONFIG_SCHEMA]


def get_config_template() -> str:
    """Get commented YAML template of the build configuration."""
    return get_yaml_template("Amlogic GXL boot image configuration", get_validation_schemas())


def build_fip_from_config(config: Config) -> list[TocEntry]:
    """Build the boot image described by configuration.

    Missing parent directories of the output file are created.

    :param config: Build configuration.
    :return: Recorded TOC entries.
    """
    config.check(get_validation_schemas(), check_unknown_props=True)
    encryption_block = get_encryption_block(
        config.get_str("encryption_block", DEFAULT_ENCRYPTION_BLOCK)
    )
    output = config.get_output_file_name("output")
    os.makedirs(os.path.dirname(output), exist_ok=True)
    return build_fip(
        bl2=config.get_input_file_name("bl2"),
        bl30=config.get_input_file_name("bl30"),
        bl31=config.get_input_file_name("bl31"),
        bl33=config.get_input_file_name("bl33"),
        output=output,
        encryption_block=encryption_block,
    )
