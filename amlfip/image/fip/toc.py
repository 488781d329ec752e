#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""FIP table of contents.

The TOC blob is ``FIP_SIZE`` bytes long. It starts with the TOC header followed by the
entry table, the entry table ends with an all-ones sentinel at ``TOC_SENTINEL_OFFSET``.
When a BL31 image is packed, an entry point marker and a copy of the BL31 image header are
stored in the area behind the entry table.
"""

import logging
import struct
from types import TracebackType
from typing import Optional, Type

from typing_extensions import Self

from amlfip.exceptions import AMLFIPError, AMLFIPIOError, AMLFIPParsingError, AMLFIPValueError
from amlfip.image.exceptions import AMLFIPTocFullError
from amlfip.image.fip.constants import (
    BL31_ENTRY_MARKER,
    BL31_ENTRY_MARKER_FORMAT,
    BL31_ENTRY_MARKER_OFFSET,
    BL31_HEADER_SIZE,
    FIP_ALIGNMENT,
    FIP_SIZE,
    TOC_ENTRIES_MAX,
    TOC_ENTRY_FORMAT,
    TOC_ENTRY_SIZE,
    TOC_FIRST_OFFSET,
    TOC_HEADER_FORMAT,
    TOC_HEADER_NAME,
    TOC_HEADER_SERIAL,
    TOC_HEADER_SIZE,
    TOC_SENTINEL_OFFSET,
    TOC_SENTINEL_SIZE,
    TOC_SENTINEL_WORD,
    UUID_LEN,
    bl31_header_offset,
    toc_entry_offset,
)
from amlfip.image.fip.stages import BootStageType, identifier_for, stage_for
from amlfip.utils.abstract import BinaryStructure
from amlfip.utils.misc import align

logger = logging.getLogger(__name__)


class TocHeader(BinaryStructure):
    """FIP TOC header."""

    FORMAT = TOC_HEADER_FORMAT
    SIZE = TOC_HEADER_SIZE

    def __init__(
        self, name: int = TOC_HEADER_NAME, serial: int = TOC_HEADER_SERIAL, flags: int = 0
    ) -> None:
        """Initialize the TOC header.

        :param name: Format magic.
        :param serial: Vendor serial number.
        :param flags: Reserved flags.
        """
        self.name = name
        self.serial = serial
        self.flags = flags

    def __repr__(self) -> str:
        return f"TocHeader(name=0x{self.name:08X}, serial=0x{self.serial:08X})"

    def __str__(self) -> str:
        return (
            f"TOC header: name 0x{self.name:08X}, serial 0x{self.serial:08X}, "
            f"flags 0x{self.flags:X}"
        )

    @property
    def is_valid(self) -> bool:
        """Header holds the expected format magic."""
        return self.name == TOC_HEADER_NAME

    def export(self) -> bytes:
        """Export the header into little endian bytes."""
        return struct.pack(self.FORMAT, self.name, self.serial, self.flags)

    @classmethod
    def parse(cls, data: bytes) -> Self:
        """Parse the header from binary data.

        :param data: Binary data starting with the header.
        :raises AMLFIPParsingError: Data are shorter than the header.
        :return: Parsed header.
        """
        if len(data) < cls.SIZE:
            raise AMLFIPParsingError(
                f"Not enough data for TOC header: {len(data)} < {cls.SIZE} bytes"
            )
        name, serial, flags = struct.unpack_from(cls.FORMAT, data)
        return cls(name=name, serial=serial, flags=flags)


class TocEntry(BinaryStructure):
    """FIP TOC entry.

    The offset is relative to the FIP base (the start of the TOC area), the size is the
    exact image length without alignment padding.
    """

    FORMAT = TOC_ENTRY_FORMAT
    SIZE = TOC_ENTRY_SIZE

    def __init__(self, identifier: bytes, offset: int, size: int, flags: int = 0) -> None:
        """Initialize the TOC entry.

        :param identifier: 16 bytes long stage identifier.
        :param offset: Offset of the image data from the FIP base.
        :param size: Exact image size in bytes.
        :param flags: Reserved flags.
        :raises AMLFIPValueError: Invalid identifier length.
        """
        if len(identifier) != UUID_LEN:
            raise AMLFIPValueError(
                f"Invalid identifier length: {len(identifier)}, expected {UUID_LEN} bytes"
            )
        self.identifier = bytes(identifier)
        self.offset = offset
        self.size = size
        self.flags = flags

    @classmethod
    def from_stage(cls, stage: BootStageType, offset: int, size: int) -> Self:
        """Create an entry for given boot stage.

        :param stage: Boot stage of the image.
        :param offset: Offset of the image data from the FIP base.
        :param size: Exact image size in bytes.
        :return: TOC entry.
        """
        return cls(identifier=identifier_for(stage), offset=offset, size=size)

    @property
    def stage(self) -> Optional[BootStageType]:
        """Boot stage of the entry, None for an unknown identifier."""
        return stage_for(self.identifier)

    @property
    def stage_label(self) -> str:
        """Printable name of the entry stage."""
        stage = self.stage
        return stage.label.upper() if stage else self.identifier.hex()

    def __repr__(self) -> str:
        return f"TocEntry({self.stage_label}, offset=0x{self.offset:X}, size={self.size})"

    def __str__(self) -> str:
        return f"{self.stage_label}: offset 0x{self.offset:X}, size {self.size} B"

    def export(self) -> bytes:
        """Export the entry into little endian bytes."""
        return struct.pack(self.FORMAT, self.identifier, self.offset, self.size, self.flags)

    @classmethod
    def parse(cls, data: bytes) -> Self:
        """Parse the entry from binary data.

        :param data: Binary data starting with the entry.
        :raises AMLFIPParsingError: Data are shorter than the entry.
        :return: Parsed entry.
        """
        if len(data) < cls.SIZE:
            raise AMLFIPParsingError(
                f"Not enough data for TOC entry: {len(data)} < {cls.SIZE} bytes"
            )
        identifier, offset, size, flags = struct.unpack_from(cls.FORMAT, data)
        return cls(identifier=identifier, offset=offset, size=size, flags=flags)


class TocBuilder:
    """Staging buffer of the TOC blob being built.

    The builder owns the blob for the duration of one build. It keeps the offset where
    the next image goes (``next_offset``) and the number of recorded entries. The buffer is
    released by :meth:`close`, any later use raises :class:`AMLFIPError`.
    """

    def __init__(self) -> None:
        """Allocate the staging buffer and write the header and the sentinel."""
        try:
            self._buffer: Optional[bytearray] = bytearray(FIP_SIZE)
        except MemoryError as exc:
            raise AMLFIPIOError("Cannot allocate FIP TOC staging buffer") from exc
        self._next_offset = TOC_FIRST_OFFSET
        self._entry_count = 0
        self._write(0, TocHeader().export())
        sentinel = struct.pack("<Q", TOC_SENTINEL_WORD) * (TOC_SENTINEL_SIZE // 8)
        self._write(TOC_SENTINEL_OFFSET, sentinel)

    @classmethod
    def create(cls) -> Self:
        """Create a new TOC builder."""
        return cls()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"TocBuilder(entries={self._entry_count}, next_offset=0x{self._next_offset:X})"

    def close(self) -> None:
        """Release the staging buffer."""
        self._buffer = None

    @property
    def closed(self) -> bool:
        """Staging buffer has been released."""
        return self._buffer is None

    def _get_buffer(self) -> bytearray:
        if self._buffer is None:
            raise AMLFIPError("FIP TOC staging buffer has been already released")
        return self._buffer

    def _write(self, offset: int, data: bytes) -> None:
        buffer = self._get_buffer()
        buffer[offset : offset + len(data)] = data

    def next_offset(self) -> int:
        """Get the offset from the FIP base where the next image is placed."""
        return self._next_offset

    def entry_count(self) -> int:
        """Get the number of recorded entries."""
        return self._entry_count

    def record_entry(self, entry: TocEntry) -> None:
        """Write the entry into the next free table slot.

        :param entry: TOC entry to record.
        :raises AMLFIPTocFullError: No free slot before the BL31 entry point marker.
        """
        if self._entry_count >= TOC_ENTRIES_MAX:
            raise AMLFIPTocFullError(
                f"FIP TOC is full, it can hold at most {TOC_ENTRIES_MAX} entries"
            )
        self._write(toc_entry_offset(self._entry_count), entry.export())
        self._entry_count += 1

    def patch_bl31_header(self, entry_index: int, header: bytes) -> None:
        """Store the BL31 entry point marker and the BL31 header copy.

        The marker always goes to the same place, so patching more entries rewrites it.

        :param entry_index: Index of the BL31 entry in the table.
        :param header: BL31 header, ``BL31_HEADER_SIZE`` bytes long.
        :raises AMLFIPValueError: Invalid header length.
        :raises AMLFIPTocFullError: Header copy would overlap the sentinel.
        """
        if len(header) != BL31_HEADER_SIZE:
            raise AMLFIPValueError(
                f"Invalid BL31 header length: {len(header)}, expected {BL31_HEADER_SIZE} bytes"
            )
        header_offset = bl31_header_offset(entry_index)
        if entry_index < 0 or header_offset + BL31_HEADER_SIZE > TOC_SENTINEL_OFFSET:
            raise AMLFIPTocFullError(
                f"No room for BL31 header of entry {entry_index} in the FIP TOC"
            )
        self._write(
            BL31_ENTRY_MARKER_OFFSET, struct.pack(BL31_ENTRY_MARKER_FORMAT, *BL31_ENTRY_MARKER)
        )
        self._write(header_offset, header)

    def advance_cursor(self, amount: int) -> None:
        """Move the next image offset past an image of given size.

        :param amount: Size of the placed image.
        """
        self._next_offset += align(amount, FIP_ALIGNMENT)

    def finalize_view(self) -> memoryview:
        """Get read-only view of the whole TOC blob."""
        return memoryview(self._get_buffer()).toreadonly()


class FipToc(BinaryStructure):
    """Parsed FIP TOC blob."""

    def __init__(
        self,
        header: Optional[TocHeader] = None,
        entries: Optional[list[TocEntry]] = None,
        bl31_headers: Optional[dict[int, bytes]] = None,
    ) -> None:
        """Initialize the TOC.

        :param header: TOC header, default header is used if not specified.
        :param entries: TOC entries in table order.
        :param bl31_headers: BL31 header copies by entry index.
        """
        self.header = header or TocHeader()
        self.entries = entries or []
        self.bl31_headers = bl31_headers or {}

    def __repr__(self) -> str:
        return f"FipToc(entries={len(self.entries)})"

    def __str__(self) -> str:
        lines = [str(self.header)]
        lines.extend(f"  #{idx} {entry}" for idx, entry in enumerate(self.entries))
        if self.bl31_marker:
            lines.append(f"  BL31 entry point for entries: {sorted(self.bl31_headers)}")
        return "\n".join(lines)

    @property
    def bl31_marker(self) -> bool:
        """The TOC carries the BL31 entry point marker."""
        return bool(self.bl31_headers)

    def bl31_header(self, index: int) -> bytes:
        """Get BL31 header copy of given entry.

        :param index: Entry index.
        :raises AMLFIPValueError: The entry has no BL31 header.
        :return: BL31 header.
        """
        if index not in self.bl31_headers:
            raise AMLFIPValueError(f"Entry {index} has no BL31 header in the FIP TOC")
        return self.bl31_headers[index]

    def get_entry(self, stage: BootStageType) -> Optional[TocEntry]:
        """Get first entry of given boot stage."""
        for entry in self.entries:
            if entry.stage == stage:
                return entry
        return None

    def export(self) -> bytes:
        """Export the TOC into ``FIP_SIZE`` long blob."""
        with TocBuilder() as builder:
            builder._write(0, self.header.export())
            for entry in self.entries:
                builder.record_entry(entry)
            for index, header in sorted(self.bl31_headers.items()):
                builder.patch_bl31_header(index, header)
            return builder.finalize_view().tobytes()

    @staticmethod
    def _is_table_end(identifier: bytes) -> bool:
        return identifier in (b"\xff" * UUID_LEN, bytes(UUID_LEN))

    @classmethod
    def parse(cls, data: bytes) -> Self:
        """Parse the TOC blob.

        Entries are read until the sentinel, an empty slot or the table capacity.

        :param data: TOC blob.
        :raises AMLFIPParsingError: Invalid TOC header magic or data too short.
        :return: Parsed TOC.
        """
        data = bytes(data)
        header = TocHeader.parse(data)
        if not header.is_valid:
            raise AMLFIPParsingError(
                f"Invalid FIP TOC magic: 0x{header.name:08X}, expected 0x{TOC_HEADER_NAME:08X}"
            )
        entries: list[TocEntry] = []
        for index in range(TOC_ENTRIES_MAX):
            offset = toc_entry_offset(index)
            if offset + TOC_ENTRY_SIZE > len(data):
                break
            entry = TocEntry.parse(data[offset:])
            if cls._is_table_end(entry.identifier):
                break
            entries.append(entry)
        logger.debug(f"Parsed {len(entries)} FIP TOC entries")

        bl31_headers: dict[int, bytes] = {}
        marker_end = BL31_ENTRY_MARKER_OFFSET + struct.calcsize(BL31_ENTRY_MARKER_FORMAT)
        if len(data) >= marker_end:
            marker = struct.unpack_from(BL31_ENTRY_MARKER_FORMAT, data, BL31_ENTRY_MARKER_OFFSET)
            if marker == BL31_ENTRY_MARKER:
                for index in range(len(entries)):
                    start = bl31_header_offset(index)
                    end = start + BL31_HEADER_SIZE
                    if end > min(len(data), TOC_SENTINEL_OFFSET):
                        break
                    if any(data[start:end]):
                        bl31_headers[index] = data[start:end]
        return cls(header=header, entries=entries, bl31_headers=bl31_headers)
