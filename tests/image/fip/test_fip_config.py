#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Tests of the configuration driven boot image build."""

import os

import pytest
import yaml

from amlfip.exceptions import AMLFIPError
from amlfip.image.fip.constants import BL2_SIZE
from amlfip.image.fip.fip_config import build_fip_from_config, get_config_template
from amlfip.utils.config import Config
from amlfip.utils.misc import load_binary, write_file


def write_config(tmpdir: str, **overrides: str) -> str:
    config = {
        "bl2": "bl2.bin",
        "bl30": "bl30.bin",
        "bl31": "bl31.bin",
        "bl33": "bl33.bin",
        "output": "out/u-boot.bin",
    }
    config.update(overrides)
    path = os.path.join(tmpdir, "config.yaml")
    write_file(yaml.safe_dump(config), path)
    return path


def test_config_template() -> None:
    template = yaml.safe_load(get_config_template())
    assert template["bl2"] == "bl2.bin.enc"
    assert template["output"] == "u-boot.bin"
    assert template["encryption_block"] == "type=none"


def test_build_from_config(tmpdir: str, stage_images: dict[str, str]) -> None:
    cfg = Config.create_from_file(write_config(tmpdir, encryption_block="type=none"))
    entries = build_fip_from_config(cfg)
    assert [entry.stage_label for entry in entries] == ["BL30", "BL31", "BL33"]
    data = load_binary(os.path.join(tmpdir, "out", "u-boot.bin"))
    assert len(data) == BL2_SIZE + 0x10000
    assert data[:BL2_SIZE] == load_binary(stage_images["bl2"])


def test_build_from_config_missing_image(tmpdir: str, stage_images: dict[str, str]) -> None:
    cfg = Config.create_from_file(write_config(tmpdir, bl31="missing.bin"))
    with pytest.raises(AMLFIPError, match="Non-existing file"):
        build_fip_from_config(cfg)


def test_build_from_config_missing_key(tmpdir: str, stage_images: dict[str, str]) -> None:
    path = write_config(tmpdir)
    cfg = Config.create_from_file(path)
    del cfg["bl33"]
    with pytest.raises(AMLFIPError, match="bl33"):
        build_fip_from_config(cfg)


def test_build_from_config_creates_output_dirs(
    tmpdir: str, stage_images: dict[str, str]
) -> None:
    output = os.path.join("build", "gxl", "u-boot.bin")
    assert not os.path.exists(os.path.join(tmpdir, "build"))
    build_fip_from_config(Config.create_from_file(write_config(tmpdir, output=output)))
    assert len(load_binary(os.path.join(tmpdir, output))) == BL2_SIZE + 0x10000
