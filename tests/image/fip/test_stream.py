#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Tests of the block copy between streams."""

import errno
import io
from typing import Optional

import pytest

from amlfip.exceptions import AMLFIPIOError
from amlfip.image.fip.stream import copy_stream, read_block, write_block


class TrickleReader(io.RawIOBase):
    """Raw stream returning at most ``chunk`` bytes per read."""

    def __init__(self, data: bytes, chunk: int) -> None:
        super().__init__()
        self.data = data
        self.chunk = chunk
        self.position = 0

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray) -> int:  # type: ignore[override]
        size = min(len(buffer), self.chunk, len(self.data) - self.position)
        buffer[:size] = self.data[self.position : self.position + size]
        self.position += size
        return size


class TrickleWriter(io.BytesIO):
    """Stream accepting at most ``chunk`` bytes per write."""

    def __init__(self, chunk: int) -> None:
        super().__init__()
        self.chunk = chunk

    def write(self, data: bytes) -> int:  # type: ignore[override]
        return super().write(bytes(data[: self.chunk]))


class StalledWriter(io.BytesIO):
    """Stream accepting ``chunk`` bytes once, then returning ``result`` forever."""

    def __init__(self, chunk: int, result: Optional[int]) -> None:
        super().__init__()
        self.chunk = chunk
        self.result = result
        self.calls = 0

    def write(self, data: bytes) -> Optional[int]:  # type: ignore[override]
        self.calls += 1
        if self.calls > 1:
            return self.result
        return super().write(bytes(data[: self.chunk]))


class FailingReader(io.RawIOBase):
    def readable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray) -> int:  # type: ignore[override]
        raise OSError(5, "Input/output error")


def test_read_block_short_reads() -> None:
    data = bytes(range(256)) * 3
    src = TrickleReader(data, chunk=7)
    assert read_block(src, 100) == data[:100]
    assert read_block(src, 1000) == data[100:]
    assert read_block(src, 10) == b""


def test_write_block_partial_writes() -> None:
    dst = TrickleWriter(chunk=5)
    data = bytes(range(64))
    assert write_block(dst, data) == len(data)
    assert dst.getvalue() == data


@pytest.mark.parametrize("result,code", [(None, errno.EAGAIN), (0, errno.EIO)])
def test_write_block_no_progress(result: Optional[int], code: int) -> None:
    dst = StalledWriter(chunk=5, result=result)
    with pytest.raises(AMLFIPIOError) as exc:
        write_block(dst, bytes(64))
    assert exc.value.errno == code
    assert "59 of 64 bytes" in str(exc.value)
    assert dst.calls == 2


def test_copy_stream_at_offset() -> None:
    data = bytes(range(256)) * 5
    dst = io.BytesIO(b"\xee" * 16)
    copied = copy_stream(io.BytesIO(data), dst, dst_offset=0x100)
    assert copied == len(data)
    result = dst.getvalue()
    assert result[:16] == b"\xee" * 16
    assert result[16:0x100] == bytes(0x100 - 16)
    assert result[0x100:] == data


def test_copy_stream_trickle() -> None:
    data = bytes(range(200)) * 7
    dst = TrickleWriter(chunk=33)
    assert copy_stream(TrickleReader(data, chunk=13), dst, dst_offset=0) == len(data)
    assert dst.getvalue() == data


def test_copy_stream_empty_input() -> None:
    dst = io.BytesIO()
    assert copy_stream(io.BytesIO(), dst, dst_offset=0) == 0
    assert dst.getvalue() == b""


def test_copy_stream_read_error() -> None:
    with pytest.raises(OSError) as exc:
        copy_stream(FailingReader(), io.BytesIO(), dst_offset=0)
    assert exc.value.errno == 5
