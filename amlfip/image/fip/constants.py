#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Layout constants of the Amlogic GXL FIP boot image.

None of these values are documented by the vendor. Each one was observed in images produced
by the vendor ``aml_encrypt_gxl`` tool; the note next to each constant says where.
"""

# Finalized BL2 length; the FIP region starts right after it in the boot image.
BL2_SIZE = 0xC000

# Size of the TOC area. Also the alignment of every image in the data region.
FIP_SIZE = 0x4000
FIP_ALIGNMENT = 0x4000

# TOC header: name, serial and flags (same as the ARM TF-A ToC header).
TOC_HEADER_FORMAT = "<IIQ"
TOC_HEADER_NAME = 0xAA640001
TOC_HEADER_SERIAL = 0x12345678
TOC_HEADER_SIZE = 0x10

# TOC entry: uuid, offset from the FIP base, exact image size, flags.
UUID_LEN = 16
TOC_ENTRY_FORMAT = f"<{UUID_LEN}sQQQ"
TOC_ENTRY_SIZE = 0x28

# End of the entry table; 0x80 bytes of 0xFF at 0xC00 whatever the entry count.
TOC_SENTINEL_OFFSET = 0xC00
TOC_SENTINEL_SIZE = 0x80
TOC_SENTINEL_WORD = 0xFFFFFFFFFFFFFFFF

# First image lands one TOC area past the FIP base.
TOC_FIRST_OFFSET = FIP_SIZE

# BL31 images carry this little endian tag at byte 256 of the file.
BL31_TAG_OFFSET = 256
BL31_MAGIC = 0x12348765

# Entry point marker written into the TOC when a BL31 image is packed.
BL31_ENTRY_MARKER_OFFSET = 0x400
BL31_ENTRY_MAGIC = 0x87654321
BL31_ENTRY_MARKER = (BL31_ENTRY_MAGIC, 0x1)
BL31_ENTRY_MARKER_FORMAT = "<II"

# The entry table ends where the BL31 marker starts, 25 slots.
TOC_ENTRIES_MAX = (BL31_ENTRY_MARKER_OFFSET - TOC_HEADER_SIZE) // TOC_ENTRY_SIZE

# Copy of the BL31 image header, one 0x50 slot per entry index.
BL31_HEADER_BASE = 0x430
BL31_HEADER_SIZE = 0x50

# Block size of the stream copy.
COPY_BLOCK_SIZE = 512


def bl31_header_offset(entry_index: int) -> int:
    """Get the TOC offset of the BL31 header copy for given entry index."""
    return BL31_HEADER_BASE + BL31_HEADER_SIZE * entry_index


def toc_entry_offset(entry_index: int) -> int:
    """Get the TOC offset of the entry table slot for given entry index."""
    return TOC_HEADER_SIZE + TOC_ENTRY_SIZE * entry_index
