#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Reader of assembled Amlogic boot images."""

import logging
import os
from typing import Optional

from typing_extensions import Self

from amlfip.crypto.hash import get_hash
from amlfip.image.exceptions import AMLFIPNotEnoughBytesException
from amlfip.image.fip.constants import BL2_SIZE, FIP_ALIGNMENT
from amlfip.image.fip.encryption_block import EncryptionBlock, NoEncryption
from amlfip.image.fip.toc import FipToc, TocEntry
from amlfip.utils.abstract import BinaryStructure
from amlfip.utils.misc import align, extend_block, write_file

logger = logging.getLogger(__name__)


def get_entry_file_name(index: int, entry: TocEntry) -> str:
    """Get file name of exported entry image.

    :param index: Entry index in the TOC.
    :param entry: TOC entry.
    :return: File name, ``bl31.bin`` for known stages and ``entry_<index>.bin`` otherwise.
    """
    stage = entry.stage
    return f"{stage.label}.bin" if stage else f"entry_{index}.bin"


class FipContainer(BinaryStructure):
    """Assembled boot image split into BL2, the TOC and the stage images."""

    def __init__(
        self,
        bl2: bytes,
        toc: FipToc,
        images: list[bytes],
        encryption_block: Optional[EncryptionBlock] = None,
    ) -> None:
        """Initialize the container.

        :param bl2: BL2 region of the boot image.
        :param toc: Plaintext TOC.
        :param images: Stage images in TOC entry order.
        :param encryption_block: Rendering of the TOC blob.
        """
        self.bl2 = bl2
        self.toc = toc
        self.images = images
        self.encryption_block = encryption_block or NoEncryption()

    def __repr__(self) -> str:
        return f"FipContainer(entries={len(self.toc.entries)})"

    def __str__(self) -> str:
        lines = [f"BL2: {len(self.bl2)} B, SHA256 {get_hash(self.bl2).hex()}", str(self.toc.header)]
        for idx, (entry, image) in enumerate(zip(self.toc.entries, self.images)):
            bl31 = " [BL31 header]" if idx in self.toc.bl31_headers else ""
            lines.append(f"  #{idx} {entry}, SHA256 {get_hash(image).hex()}{bl31}")
        return "\n".join(lines)

    def __eq__(self, obj: object) -> bool:
        return (
            isinstance(obj, FipContainer)
            and self.bl2 == obj.bl2
            and self.toc == obj.toc
            and self.images == obj.images
        )

    def export(self) -> bytes:
        """Export the boot image.

        :return: Boot image with the TOC rendered by the encryption block.
        """
        data = extend_block(self.bl2, BL2_SIZE)
        data += self.encryption_block.render(self.toc.export())
        for entry, image in zip(self.toc.entries, self.images):
            data = extend_block(data, BL2_SIZE + entry.offset)
            data += image
        if self.toc.entries:
            last = self.toc.entries[-1]
            data = extend_block(data, BL2_SIZE + last.offset + align(last.size, FIP_ALIGNMENT))
        return data

    @classmethod
    def parse(cls, data: bytes, encryption_block: Optional[EncryptionBlock] = None) -> Self:
        """Parse the boot image.

        :param data: Boot image data.
        :param encryption_block: Rendering of the TOC blob used to decode the TOC.
        :raises AMLFIPNotEnoughBytesException: The data are shorter than the described layout.
        :return: Parsed container.
        """
        encryption_block = encryption_block or NoEncryption()
        toc_end = BL2_SIZE + encryption_block.output_size
        if len(data) < toc_end:
            raise AMLFIPNotEnoughBytesException(
                f"Boot image has {len(data)} bytes, at least {toc_end} expected"
            )
        toc_blob = encryption_block.decode(data[BL2_SIZE:toc_end])
        toc = FipToc.parse(toc_blob)
        images = []
        for entry in toc.entries:
            start = BL2_SIZE + entry.offset
            end = start + entry.size
            if end > len(data):
                raise AMLFIPNotEnoughBytesException(
                    f"Image of {entry.stage_label} ends at 0x{end:X}, "
                    f"beyond the end of boot image (0x{len(data):X})"
                )
            images.append(data[start:end])
        return cls(
            bl2=data[:BL2_SIZE], toc=toc, images=images, encryption_block=encryption_block
        )

    def export_images(self, output_dir: str) -> list[str]:
        """Write BL2 and the stage images into a directory.

        :param output_dir: Output directory, created if missing.
        :return: Paths of written files.
        """
        files = [os.path.join(output_dir, "bl2.bin")]
        write_file(self.bl2, files[0], mode="wb")
        for idx, (entry, image) in enumerate(zip(self.toc.entries, self.images)):
            path = os.path.join(output_dir, get_entry_file_name(idx, entry))
            write_file(image, path, mode="wb")
            files.append(path)
        logger.info(f"Exported {len(files)} images into {output_dir}")
        return files
