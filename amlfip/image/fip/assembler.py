#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Assembly of the final Amlogic boot image.

Layout of the produced file::

    0x0000  BL2 (BL2_SIZE bytes, finalized upstream)
    0xC000  encoded FIP TOC (FIP_SIZE bytes)
    0x10000 BL30, BL31, BL33, each padded up to FIP_ALIGNMENT

The build is not transactional, the output file is invalid when the build fails.
"""

import logging
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Optional

from amlfip.exceptions import AMLFIPIOError
from amlfip.image.fip.constants import BL2_SIZE
from amlfip.image.fip.encryption_block import EncryptionBlock, NoEncryption
from amlfip.image.fip.packer import pack_image
from amlfip.image.fip.stages import BootStageType
from amlfip.image.fip.stream import copy_stream, write_block
from amlfip.image.fip.toc import TocBuilder, TocEntry
from amlfip.utils.misc import size_fmt

logger = logging.getLogger(__name__)

# Packing order sets the entry table order and the image offsets
FIP_STAGES = (BootStageType.BL30, BootStageType.BL31, BootStageType.BL33)


@contextmanager
def open_image_file(path: str, mode: str, name: str) -> Iterator[BinaryIO]:
    """Open a boot image file.

    :param path: Path to the file.
    :param mode: Binary open mode.
    :param name: Name of the file used in the error message.
    :raises AMLFIPIOError: The file cannot be opened.
    """
    try:
        handle = open(path, mode)  # pylint: disable=consider-using-with
    except OSError as exc:
        raise AMLFIPIOError(
            f"Cannot open {name} file {path}: {exc.strerror}", errno=exc.errno
        ) from exc
    with handle:
        yield handle  # type: ignore[misc]


def build_fip(
    bl2: str,
    bl30: str,
    bl31: str,
    bl33: str,
    output: str,
    encryption_block: Optional[EncryptionBlock] = None,
) -> list[TocEntry]:
    """Build the boot image.

    :param bl2: Path to finalized BL2 image.
    :param bl30: Path to BL30 image.
    :param bl31: Path to BL31 image.
    :param bl33: Path to BL33 image.
    :param output: Path to the output boot image, truncated when it exists.
    :param encryption_block: Rendering of the TOC blob, stored as is if not specified.
    :raises AMLFIPIOError: An input or the output file cannot be opened.
    :raises AMLFIPEncryptionBlockError: Encoded TOC block is not ``output_size`` bytes long.
    :return: Recorded TOC entries in table order.
    """
    encryption_block = encryption_block or NoEncryption()
    logger.debug(f"Create FIP final image in {output}")

    entries: list[TocEntry] = []
    with TocBuilder.create() as toc_builder:
        with open_image_file(output, "w+b", "output") as fout:
            with open_image_file(bl2, "rb", "bl2") as fin:
                bl2_size = copy_stream(fin, fout, 0)
            if bl2_size != BL2_SIZE:
                logger.warning(
                    f"BL2 image {bl2} has {bl2_size} bytes, expected finalized BL2 "
                    f"of {BL2_SIZE} bytes"
                )

            for stage, path in zip(FIP_STAGES, (bl30, bl31, bl33)):
                with open_image_file(path, "rb", stage.label) as fin:
                    entries.append(pack_image(toc_builder, fin, stage, fout))

            encoded = encryption_block.render(toc_builder.finalize_view())
            fout.seek(BL2_SIZE)
            write_block(fout, encoded)

            total_size = BL2_SIZE + toc_builder.next_offset()
            fout.truncate(total_size)

    logger.info(
        f"FIP image {output} created: {len(entries)} entries, {size_fmt(total_size)}"
    )
    return entries
