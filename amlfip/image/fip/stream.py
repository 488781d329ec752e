#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Block copy between binary streams.

Raw (unbuffered) streams may transfer fewer bytes than requested. The helpers here keep
reading or writing the remainder until the block is complete or the input ends. A write
that accepts nothing at all raises :class:`AMLFIPIOError`. Errors of the underlying stream
are not caught.
"""

import errno
import logging
from typing import BinaryIO

from amlfip.exceptions import AMLFIPIOError
from amlfip.image.fip.constants import COPY_BLOCK_SIZE

logger = logging.getLogger(__name__)


def read_block(src: BinaryIO, size: int) -> bytes:
    """Read a block of data from a stream.

    :param src: Stream to read from.
    :param size: Number of bytes to read.
    :return: Read data, shorter than ``size`` only when the end of input has been reached.
    """
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = src.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def write_block(dst: BinaryIO, data: bytes) -> int:
    """Write a whole block of data into a stream.

    :param dst: Stream to write into.
    :param data: Data to write.
    :raises AMLFIPIOError: The stream accepted nothing, ``errno`` is ``EAGAIN`` for a
        non-blocking stream that would block and ``EIO`` otherwise.
    :return: Number of written bytes, always the length of ``data``.
    """
    view = memoryview(data)
    while view:
        written = dst.write(view)
        if not written:
            # None from a non-blocking stream means it would block
            code = errno.EAGAIN if written is None else errno.EIO
            raise AMLFIPIOError(
                f"Stream accepted no data, {len(view)} of {len(data)} bytes left unwritten",
                errno=code,
            )
        view = view[written:]
    return len(data)


def copy_stream(
    src: BinaryIO, dst: BinaryIO, dst_offset: int, block_size: int = COPY_BLOCK_SIZE
) -> int:
    """Copy the rest of the source stream into destination at given offset.

    :param src: Source stream, read from its current position until the end.
    :param dst: Destination stream, must be seekable.
    :param dst_offset: Offset in the destination where the data are written.
    :param block_size: Size of the copied blocks.
    :return: Number of copied bytes.
    """
    dst.seek(dst_offset)
    copied = 0
    while True:
        block = read_block(src, block_size)
        if not block:
            break
        copied += write_block(dst, block)
    logger.debug(f"Copied {copied} bytes to offset 0x{dst_offset:X}")
    return copied
