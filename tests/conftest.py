#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""AMLFIP pytest configuration and shared test fixtures."""

import os
import struct
from typing import Callable, Optional

import pytest

os.environ["AMLFIP_DEBUG_LOGGING_DISABLED"] = "True"

# pylint: disable=wrong-import-position
from tests.cli_runner import CliRunner

BL31_TAG = struct.pack("<I", 0x12348765)


def make_image(size: int, fill: int = 0x5A, bl31_header: Optional[bytes] = None) -> bytes:
    """Create a boot stage image.

    :param size: Image size.
    :param fill: Fill byte of the image.
    :param bl31_header: Data placed at offset 256 of the image.
    :return: Image data.
    """
    data = bytearray([fill]) * size
    if bl31_header is not None:
        data[256 : 256 + len(bl31_header)] = bl31_header
    return bytes(data[:size])


@pytest.fixture
def cli_runner() -> CliRunner:
    """Get CLI runner instance for testing."""
    return CliRunner()


@pytest.fixture
def image_factory(tmpdir: str) -> Callable[..., str]:
    """Factory writing boot stage images into temporary directory.

    :return: Function taking file name and :func:`make_image` arguments and returning the path.
    """

    def factory(name: str, size: int, fill: int = 0x5A, bl31_header: Optional[bytes] = None) -> str:
        path = os.path.join(tmpdir, name)
        with open(path, "wb") as f:
            f.write(make_image(size, fill=fill, bl31_header=bl31_header))
        return path

    return factory


@pytest.fixture
def stage_images(image_factory: Callable[..., str]) -> dict[str, str]:
    """Paths to BL2, BL30, BL31 and BL33 images of the basic 100/50/10 bytes layout."""
    return {
        "bl2": image_factory("bl2.bin", 0xC000, fill=0x22),
        "bl30": image_factory("bl30.bin", 100, fill=0x30),
        "bl31": image_factory("bl31.bin", 50, fill=0x31),
        "bl33": image_factory("bl33.bin", 10, fill=0x33),
    }
