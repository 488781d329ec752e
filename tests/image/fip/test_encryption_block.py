#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Tests of the encryption blocks."""

import os
import shlex
import sys

import pytest

from amlfip.exceptions import (
    AMLFIPError,
    AMLFIPKeyError,
    AMLFIPUnsupportedOperation,
    AMLFIPValueError,
)
from amlfip.image.exceptions import AMLFIPEncryptionBlockError
from amlfip.image.fip.encryption_block import (
    EncryptionBlock,
    ExternalToolEncryptionBlock,
    NoEncryption,
    get_encryption_block,
    load_encryption_block_plugin,
)

TOOL_COPY = """
import sys
data = open(sys.argv[1], "rb").read()
open(sys.argv[2], "wb").write(bytes(b ^ 0x5A for b in data))
"""
TOOL_FAIL = """
import sys
sys.stderr.write("invalid key material")
sys.exit(3)
"""
TOOL_HEADER = """
import sys
data = open(sys.argv[1], "rb").read()
open(sys.argv[2], "wb").write(b"\\xa5" * 0x200 + data)
"""
TOOL_NO_OUTPUT = "pass\n"
TOOL_SLOW = "import time\ntime.sleep(10)\n"

PLUGIN = """
from amlfip.image.fip.encryption_block import EncryptionBlock


class ReverseEncryption(EncryptionBlock):
    identifier = "reverse"

    def __init__(self, suffix: str = "") -> None:
        self.suffix = suffix

    def encode(self, toc_blob: bytes) -> bytes:
        return bytes(toc_blob)[::-1]
"""


def tool_command(tmpdir: str, script: str) -> str:
    path = os.path.join(tmpdir, "tool.py")
    with open(path, "w", encoding="utf-8") as f:
        f.write(script)
    return f"{shlex.quote(sys.executable)} {shlex.quote(path)} {{input}} {{output}}"


def test_no_encryption() -> None:
    blob = bytes(range(256)) * 64
    encryption_block = NoEncryption()
    assert encryption_block.encode(blob) == blob
    assert encryption_block.decode(blob) == blob
    assert encryption_block.input_size == 0x4000
    assert encryption_block.output_size == 0x4000


def test_decode_not_supported() -> None:
    with pytest.raises(AMLFIPUnsupportedOperation):
        ExternalToolEncryptionBlock("tool {input} {output}").decode(bytes(0x4000))


def test_get_encryption_block() -> None:
    assert isinstance(get_encryption_block(), NoEncryption)
    assert isinstance(get_encryption_block("type=none"), NoEncryption)
    tool = get_encryption_block("type=tool;command=enc --in {input} --out {output};timeout=5")
    assert isinstance(tool, ExternalToolEncryptionBlock)
    assert tool.timeout == 5.0
    assert tool.get_command("a.bin", "b.bin") == ["enc", "--in", "a.bin", "--out", "b.bin"]
    assert {"none", "tool"} <= set(EncryptionBlock.get_types())


@pytest.mark.parametrize(
    "config,exception",
    [
        ("type=unknown", AMLFIPError),
        ("command=tool", AMLFIPKeyError),
        ("type", AMLFIPValueError),
        ("type=tool;command=tool --input {input}", AMLFIPValueError),
        ("type=tool;command=tool {input} {output};timeout=never", AMLFIPValueError),
        ("type=tool;command=tool {input} {output};input_size=big", AMLFIPValueError),
        ("type=tool;command=tool {input} {output};input_size=0", AMLFIPValueError),
        ("type=tool;command=tool {input} {output};input_size=0x4001", AMLFIPValueError),
    ],
)
def test_get_encryption_block_invalid(config: str, exception: type) -> None:
    with pytest.raises(exception):
        get_encryption_block(config)


def test_external_tool(tmpdir: str) -> None:
    encryption_block = ExternalToolEncryptionBlock(tool_command(tmpdir, TOOL_COPY))
    blob = bytes(range(256)) * 64
    assert encryption_block.encode(blob) == bytes(b ^ 0x5A for b in blob)


def test_external_tool_failure(tmpdir: str) -> None:
    encryption_block = ExternalToolEncryptionBlock(tool_command(tmpdir, TOOL_FAIL))
    with pytest.raises(AMLFIPEncryptionBlockError) as exc:
        encryption_block.encode(bytes(0x4000))
    assert "invalid key material" in str(exc.value)
    assert "exit code 3" in str(exc.value)


def test_external_tool_no_output(tmpdir: str) -> None:
    encryption_block = ExternalToolEncryptionBlock(tool_command(tmpdir, TOOL_NO_OUTPUT))
    with pytest.raises(AMLFIPEncryptionBlockError):
        encryption_block.encode(bytes(0x4000))


def test_external_tool_timeout(tmpdir: str) -> None:
    encryption_block = ExternalToolEncryptionBlock(
        tool_command(tmpdir, TOOL_SLOW), timeout="0.5"
    )
    with pytest.raises(AMLFIPEncryptionBlockError):
        encryption_block.encode(bytes(0x4000))


def test_external_tool_not_found() -> None:
    encryption_block = ExternalToolEncryptionBlock("amlfip-no-such-tool {input} {output}")
    with pytest.raises(AMLFIPEncryptionBlockError):
        encryption_block.encode(bytes(0x4000))


def test_plugin_from_source_file(tmpdir: str) -> None:
    plugin = os.path.join(tmpdir, "reverse_plugin.py")
    with open(plugin, "w", encoding="utf-8") as f:
        f.write(PLUGIN)
    load_encryption_block_plugin(plugin)
    encryption_block = get_encryption_block("type=reverse;suffix=x")
    assert encryption_block.encode(b"\x01\x02\x03") == b"\x03\x02\x01"


def test_external_tool_adding_header(tmpdir: str) -> None:
    command = tool_command(tmpdir, TOOL_HEADER)
    encryption_block = get_encryption_block(f"type=tool;command={command};input_size=0x3E00")
    assert encryption_block.input_size == 0x3E00
    assert encryption_block.output_size == 0x4000
    toc_blob = bytes(range(256)) * 64
    rendered = encryption_block.render(toc_blob)
    assert rendered == b"\xa5" * 0x200 + toc_blob[:0x3E00]


def test_render_size_mismatch(tmpdir: str) -> None:
    encryption_block = ExternalToolEncryptionBlock(tool_command(tmpdir, TOOL_HEADER))
    with pytest.raises(AMLFIPEncryptionBlockError, match="16896 bytes"):
        encryption_block.render(bytes(0x4000))
