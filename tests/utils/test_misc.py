#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Tests of miscellaneous utilities."""

import errno
import os

import pytest

from amlfip.exceptions import AMLFIPError, AMLFIPIOError, AMLFIPValueError
from amlfip.utils.misc import (
    align,
    extend_block,
    find_file,
    load_binary,
    load_configuration,
    size_fmt,
    write_file,
)


@pytest.mark.parametrize(
    "test_input,alignment,expected",
    [
        (0, 0x4000, 0),
        (1, 0x4000, 0x4000),
        (0x4000, 0x4000, 0x4000),
        (0x4001, 0x4000, 0x8000),
        (5, 4, 8),
    ],
)
def test_align(test_input: int, alignment: int, expected: int) -> None:
    assert align(test_input, alignment) == expected


@pytest.mark.parametrize("test_input,alignment", [(-1, 4), (1, 0)])
def test_align_invalid(test_input: int, alignment: int) -> None:
    with pytest.raises(AMLFIPValueError):
        align(test_input, alignment)


def test_extend_block() -> None:
    assert extend_block(b"\x01", 3) == b"\x01\x00\x00"
    assert extend_block(b"\x01", 3, padding=0xFF) == b"\x01\xff\xff"
    assert extend_block(b"\x01\x02", 2) == b"\x01\x02"
    with pytest.raises(AMLFIPValueError):
        extend_block(b"\x01\x02", 1)


@pytest.mark.parametrize(
    "num,expected",
    [
        (0, "0 B"),
        (100, "100 B"),
        (1023, "1023 B"),
        (0x4000, "16.0 kiB"),
        (0x1C000, "112.0 kiB"),
        (0x180000, "1.5 MiB"),
    ],
)
def test_size_fmt(num: int, expected: str) -> None:
    assert size_fmt(num) == expected


def test_write_and_load_binary(tmpdir: str) -> None:
    path = os.path.join(tmpdir, "nested", "dir", "image.bin")
    assert write_file(b"\x00\x01\x02", path, mode="wb") == 3
    assert load_binary(path) == b"\x00\x01\x02"
    assert load_binary("image.bin", search_paths=[os.path.dirname(path)]) == b"\x00\x01\x02"


def test_find_file(tmpdir: str, monkeypatch: pytest.MonkeyPatch) -> None:
    expected = os.path.abspath(os.path.join(tmpdir, "file.txt"))
    write_file("data", expected)
    assert find_file("file.txt", search_paths=[str(tmpdir)]) == expected
    assert find_file(expected, search_paths=["/nonexistent"]) == expected
    monkeypatch.chdir(tmpdir)
    assert find_file("file.txt") == expected


def test_find_file_missing(tmpdir: str) -> None:
    assert find_file("missing.txt", search_paths=[str(tmpdir)], raise_exc=False) == ""
    with pytest.raises(AMLFIPIOError) as exc:
        find_file("missing.txt", search_paths=[str(tmpdir)])
    assert exc.value.errno == errno.ENOENT
    assert str(tmpdir) in str(exc.value)


def test_load_configuration(tmpdir: str) -> None:
    yaml_path = os.path.join(tmpdir, "config.yaml")
    write_file("bl2: bl2.bin\noutput: out.bin\n", yaml_path)
    assert load_configuration(yaml_path) == {"bl2": "bl2.bin", "output": "out.bin"}

    json_path = os.path.join(tmpdir, "config.json")
    write_file('{"bl2": "bl2.bin"}', json_path)
    assert load_configuration("config.json", search_paths=[str(tmpdir)]) == {"bl2": "bl2.bin"}

    list_path = os.path.join(tmpdir, "list.yaml")
    write_file("- bl2.bin\n", list_path)
    with pytest.raises(AMLFIPError, match="key-value mapping"):
        load_configuration(list_path)
    with pytest.raises(AMLFIPError):
        load_configuration(os.path.join(tmpdir, "missing.yaml"))
