#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Boot stage registry.

Maps each boot stage to the 16 byte identifier stored in its TOC entry. BL2 to BL33
identifiers match the ARM Trusted Firmware ToC entry UUIDs.
"""

from typing import Optional

from amlfip.utils.amlfip_enum import AmlfipEnum


class BootStageType(AmlfipEnum):
    """Boot stages known to the Amlogic GXL boot flow."""

    BL2 = (0, "bl2", "Trusted Boot Firmware BL2")
    BL30 = (1, "bl30", "SCP Firmware BL30")
    BL31 = (2, "bl31", "EL3 Runtime Firmware BL31")
    BL32 = (3, "bl32", "Secure Payload BL32")
    BL33 = (4, "bl33", "Non-Trusted Firmware BL33")


STAGE_IDENTIFIERS: dict[BootStageType, bytes] = {
    BootStageType.BL2: bytes.fromhex("5ff9ec0b4d223e4da544c39d81c73f0a"),
    BootStageType.BL30: bytes.fromhex("9766fd3d89bee849ae5d78a140608213"),
    BootStageType.BL31: bytes.fromhex("47d4086d4cfe98469b952950cbbd5a00"),
    BootStageType.BL32: bytes.fromhex("05d0e18953dc13478d2b500a4b7a3e38"),
    BootStageType.BL33: bytes.fromhex("d6d0eea7fcead54b97829934f234b6e4"),
}


def identifier_for(stage: BootStageType) -> bytes:
    """Get TOC identifier of a boot stage.

    :param stage: Boot stage.
    :return: 16 bytes long identifier.
    """
    return STAGE_IDENTIFIERS[stage]


def stage_for(identifier: bytes) -> Optional[BootStageType]:
    """Get boot stage from TOC identifier.

    :param identifier: 16 bytes long identifier.
    :return: Boot stage or None for identifier of unknown stage.
    """
    for stage, stage_id in STAGE_IDENTIFIERS.items():
        if stage_id == bytes(identifier):
            return stage
    return None
