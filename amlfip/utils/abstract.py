#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Base of the structures stored in the boot image."""

from abc import ABC, abstractmethod

from typing_extensions import Self


class BinaryStructure(ABC):
    """Structure with a binary form.

    Two structures are equal when they are of the same type and hold the same attributes.
    """

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and vars(other) == vars(self)

    @abstractmethod
    def export(self) -> bytes:
        """Serialize the structure."""

    @classmethod
    @abstractmethod
    def parse(cls, data: bytes) -> Self:
        """Deserialize the structure from the start of ``data``."""
