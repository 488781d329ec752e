#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Small helpers shared by the image and application layers.

Block alignment and padding, file lookup relative to a configuration file, binary and
configuration file loading.
"""

import errno
import logging
import os
from typing import Optional, Union

import yaml

from amlfip.exceptions import AMLFIPError, AMLFIPIOError, AMLFIPValueError

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def align(number: int, alignment: int = 4) -> int:
    """Round a size or an offset up to a multiple of ``alignment``.

    :param number: Non-negative value to align.
    :param alignment: Positive alignment.
    :raises AMLFIPValueError: Negative number or non-positive alignment.
    :return: Smallest multiple of ``alignment`` not lower than ``number``.
    """
    if alignment <= 0 or number < 0:
        raise AMLFIPValueError(f"Cannot align {number} to {alignment}")
    remainder = number % alignment
    return number + alignment - remainder if remainder else number


def extend_block(data: bytes, length: int, padding: int = 0) -> bytes:
    """Pad a block up to ``length`` bytes.

    :param data: Block to pad.
    :param length: Requested length, not lower than the block length.
    :param padding: Padding byte value.
    :raises AMLFIPValueError: The block is already longer than ``length``.
    :return: Padded block.
    """
    missing = length - len(data)
    if missing < 0:
        raise AMLFIPValueError(f"Block of {len(data)} bytes does not fit into {length} bytes")
    if not missing:
        return data
    return data + bytes([padding]) * missing


def find_file(
    path: PathLike, search_paths: Optional[list[PathLike]] = None, raise_exc: bool = True
) -> str:
    """Find an existing file.

    A relative path is tried against each search directory first, then against the current
    working directory.

    :param path: Absolute or relative file path.
    :param search_paths: Directories to look in.
    :param raise_exc: Raise when the file is missing, return empty string otherwise.
    :raises AMLFIPIOError: The file does not exist.
    :return: Absolute path to the file.
    """
    path = os.fspath(path)
    candidates = []
    if not os.path.isabs(path):
        candidates.extend(os.path.join(os.fspath(d), path) for d in search_paths or [] if d)
    candidates.append(path)
    for candidate in candidates:
        if os.path.isfile(candidate):
            return os.path.abspath(candidate)
    if not raise_exc:
        return ""
    raise AMLFIPIOError(
        f"File '{path}' not found, tried: {', '.join(candidates)}", errno=errno.ENOENT
    )


def load_binary(path: PathLike, search_paths: Optional[list[PathLike]] = None) -> bytes:
    """Read whole binary file.

    :param path: Path to the file.
    :param search_paths: Directories to look in, see :func:`find_file`.
    :return: File content.
    """
    file_path = find_file(path, search_paths=search_paths)
    logger.debug(f"Loading binary file {file_path}")
    with open(file_path, "rb") as f:
        return f.read()


def write_file(
    data: Union[str, bytes], path: PathLike, mode: str = "w", encoding: str = "utf-8"
) -> int:
    """Write a file, missing parent directories are created.

    :param data: Text or binary data.
    :param path: Path to the file.
    :param mode: ``w`` for text, ``wb`` for binary data.
    :param encoding: Encoding of text data.
    :return: Number of written characters or bytes.
    """
    path = os.fspath(path)
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    logger.debug(f"Writing {len(data)} {'bytes' if 'b' in mode else 'characters'} to {path}")
    with open(path, mode, encoding=None if "b" in mode else encoding) as f:
        return f.write(data)


def size_fmt(num: int) -> str:
    """Format a byte count with binary prefixes, e.g. ``100 B`` or ``112.0 kiB``."""
    value = float(num)
    unit = "B"
    for unit in ("B", "kiB", "MiB", "GiB"):
        if value < 1024 or unit == "GiB":
            break
        value /= 1024
    return f"{num} B" if unit == "B" else f"{value:.1f} {unit}"


def load_configuration(path: PathLike, search_paths: Optional[list[PathLike]] = None) -> dict:
    """Load a YAML or JSON configuration file.

    :param path: Path to the file.
    :param search_paths: Directories to look in, see :func:`find_file`.
    :raises AMLFIPError: The file cannot be read or does not hold a mapping.
    :return: Configuration data.
    """
    file_path = find_file(path, search_paths=search_paths)
    try:
        with open(file_path, encoding="utf-8") as f:
            # JSON documents are valid YAML
            config = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise AMLFIPError(f"Cannot load configuration file {file_path}: {exc}") from exc
    if not config or not isinstance(config, dict):
        raise AMLFIPError(f"Configuration file {file_path} does not hold a key-value mapping")
    return config
