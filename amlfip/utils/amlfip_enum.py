#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Enumeration with numeric tags and text labels."""

from enum import Enum
from typing import Optional, Union

from typing_extensions import Self

from amlfip.exceptions import AMLFIPKeyError


class AmlfipEnum(Enum):
    """Enumeration whose members are declared as ``NAME = (tag, label, description)``.

    Members can be looked up by their tag or by their label, labels ignore case.
    """

    def __init__(self, tag: int, label: str, description: Optional[str] = None) -> None:
        self.tag = tag
        self.label = label
        self.description = description

    @classmethod
    def labels(cls) -> list[str]:
        """Get labels of all members in declaration order."""
        return [member.label for member in cls]

    @classmethod
    def from_tag(cls, tag: int) -> Self:
        """Get member with given tag.

        :param tag: Numeric tag.
        :raises AMLFIPKeyError: No member has the tag.
        :return: Enumeration member.
        """
        for member in cls:
            if member.tag == tag:
                return member
        raise AMLFIPKeyError(f"{cls.__name__} has no member with tag {tag}")

    @classmethod
    def from_label(cls, label: str) -> Self:
        """Get member with given label.

        :param label: Label, case is ignored.
        :raises AMLFIPKeyError: No member has the label.
        :return: Enumeration member.
        """
        wanted = str(label).lower()
        for member in cls:
            if member.label.lower() == wanted:
                return member
        raise AMLFIPKeyError(f"{cls.__name__} has no member labelled '{label}'")

    @classmethod
    def contains(cls, key: Union[int, str]) -> bool:
        """Check whether a member with given tag or label exists."""
        lookup = cls.from_tag if isinstance(key, int) else cls.from_label
        try:
            lookup(key)  # type: ignore[arg-type]
        except AMLFIPKeyError:
            return False
        return True
