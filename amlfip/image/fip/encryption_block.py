#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Encryption blocks rendering the plaintext FIP TOC blob into its on-disk form.

The boot ROM expects the TOC area of the boot image in the vendor encrypted format. This
module defines the interface of a component doing that rendering, the identity rendering
used for inspection of the layout and a rendering delegated to an external tool.
Additional encryption blocks can be provided by plugins registered under the ``amlfip.eb``
entry point group.
"""

import abc
import logging
import os
import shlex
import subprocess
import tempfile
from typing import Optional, Union

from amlfip.exceptions import AMLFIPError, AMLFIPUnsupportedOperation, AMLFIPValueError
from amlfip.image.exceptions import AMLFIPEncryptionBlockError
from amlfip.image.fip.constants import FIP_SIZE
from amlfip.utils.misc import load_binary, write_file
from amlfip.utils.plugins import ENCRYPTION_BLOCK_GROUP, get_plugins_manager
from amlfip.utils.service_provider import ServiceProvider

logger = logging.getLogger(__name__)


class EncryptionBlock(ServiceProvider):
    """Abstract encryption block.

    Turns the leading ``input_size`` bytes of the plaintext TOC blob into the
    ``output_size`` long block stored in the boot image right after BL2. A block that
    prepends its own header takes a correspondingly shorter plaintext, e.g. the vendor
    format encrypts 0x3E00 bytes and adds a 0x200 bytes header.

    :cvar plugin_group: Entry point group of encryption block plugins.
    :cvar input_size: Length of the plaintext passed to :meth:`encode`.
    :cvar output_size: Length of the encoded block, the TOC area of the boot image.
    """

    plugin_group = ENCRYPTION_BLOCK_GROUP

    input_size = FIP_SIZE
    output_size = FIP_SIZE

    @abc.abstractmethod
    def encode(self, toc_blob: bytes) -> bytes:
        """Render the plaintext TOC blob.

        :param toc_blob: Plaintext TOC blob, ``input_size`` bytes long.
        :return: Encoded block, ``output_size`` bytes long.
        """

    def decode(self, data: bytes) -> bytes:
        """Recover the plaintext TOC blob from encoded block.

        :param data: Encoded block.
        :raises AMLFIPUnsupportedOperation: The encryption block cannot decode.
        :return: Plaintext TOC blob.
        """
        raise AMLFIPUnsupportedOperation(
            f"Encryption block '{self.identifier}' does not support decoding"
        )

    def render(self, toc_blob: Union[bytes, memoryview]) -> bytes:
        """Encode the TOC blob truncated to ``input_size`` and check the encoded length.

        :param toc_blob: Whole plaintext TOC blob.
        :raises AMLFIPEncryptionBlockError: Encoded block is not ``output_size`` bytes long.
        :return: Encoded block.
        """
        encoded = self.encode(bytes(toc_blob[: self.input_size]))
        if len(encoded) != self.output_size:
            raise AMLFIPEncryptionBlockError(
                f"Encoded FIP TOC has {len(encoded)} bytes, expected {self.output_size} bytes "
                f"({self.info()}, plaintext of {self.input_size} bytes)"
            )
        return encoded


class NoEncryption(EncryptionBlock):
    """Identity rendering, the TOC blob is stored as is."""

    identifier = "none"

    def encode(self, toc_blob: bytes) -> bytes:
        return bytes(toc_blob)

    def decode(self, data: bytes) -> bytes:
        return bytes(data[: self.output_size])


class ExternalToolEncryptionBlock(EncryptionBlock):
    """Encryption block delegating the rendering to an external tool.

    The command is a template with ``{input}`` and ``{output}`` placeholders, e.g.
    ``aml_encrypt_gxl --bl3enc --input {input} --output {output}``. The plaintext blob is
    written to the input file, the tool writes the encoded block to the output file.
    """

    identifier = "tool"

    def __init__(
        self, command: str, timeout: str = "60", input_size: Optional[str] = None
    ) -> None:
        """Initialize the encryption block.

        :param command: Command template of the tool.
        :param timeout: Timeout of the tool in seconds.
        :param input_size: Plaintext length given to the tool, e.g. ``0x3E00`` for a tool
            adding a 0x200 bytes header. The whole TOC area by default.
        :raises AMLFIPValueError: Missing placeholder in the command, invalid timeout or
            invalid plaintext length.
        """
        for placeholder in ("{input}", "{output}"):
            if placeholder not in command:
                raise AMLFIPValueError(f"Encryption tool command is missing {placeholder}")
        try:
            self.timeout = float(timeout)
        except ValueError as exc:
            raise AMLFIPValueError(f"Invalid encryption tool timeout: {timeout}") from exc
        if input_size is not None:
            try:
                self.input_size = int(input_size, 0)
            except ValueError as exc:
                raise AMLFIPValueError(f"Invalid encryption tool input size: {input_size}") from exc
            if not 0 < self.input_size <= FIP_SIZE:
                raise AMLFIPValueError(
                    f"Encryption tool input size 0x{self.input_size:X} is out of "
                    f"range (0, 0x{FIP_SIZE:X}]"
                )
        self.command = command

    def info(self) -> str:
        return f"{self.__class__.__name__}: {self.command}"

    def get_command(self, input_path: str, output_path: str) -> list[str]:
        """Get command line of the tool for given files.

        :param input_path: Path to the plaintext TOC blob.
        :param output_path: Path to the encoded block.
        :return: List of command line arguments.
        """
        return [
            arg.format(input=input_path, output=output_path) for arg in shlex.split(self.command)
        ]

    def encode(self, toc_blob: bytes) -> bytes:
        """Run the tool on the TOC blob.

        :param toc_blob: Plaintext TOC blob.
        :raises AMLFIPEncryptionBlockError: The tool failed or did not produce the output.
        :return: Encoded block.
        """
        with tempfile.TemporaryDirectory(prefix="amlfip_") as tmp_dir:
            input_path = os.path.join(tmp_dir, "fip.bin")
            output_path = os.path.join(tmp_dir, "fip.enc")
            write_file(bytes(toc_blob), input_path, mode="wb")
            cmd = self.get_command(input_path, output_path)
            logger.debug(f"Running encryption tool: {' '.join(cmd)}")
            try:
                result = subprocess.run(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    text=True,
                    timeout=self.timeout,
                    check=False,
                )
            except subprocess.TimeoutExpired as exc:
                raise AMLFIPEncryptionBlockError(
                    f"Encryption tool timed out after {self.timeout} s: {exc.stderr or ''}"
                ) from exc
            except OSError as exc:
                raise AMLFIPEncryptionBlockError(
                    f"Cannot run encryption tool '{cmd[0]}': {exc}"
                ) from exc
            if result.returncode != 0:
                raise AMLFIPEncryptionBlockError(
                    f"Encryption tool failed with exit code {result.returncode}\n"
                    f"STDOUT:\n{result.stdout}\nSTDERR:\n{result.stderr}"
                )
            if not os.path.isfile(output_path):
                raise AMLFIPEncryptionBlockError(
                    f"Encryption tool did not produce output file\nSTDERR:\n{result.stderr}"
                )
            return load_binary(output_path)


def get_encryption_block(config_str: Optional[str] = None) -> EncryptionBlock:
    """Create encryption block from configuration string.

    :param config_str: Configuration string such as ``type=tool;command=...``,
        identity rendering is used when not specified.
    :raises AMLFIPError: Unknown encryption block type.
    :return: Encryption block instance.
    """
    if not config_str:
        return NoEncryption()
    encryption_block = EncryptionBlock.create(config_str)
    if not encryption_block:
        raise AMLFIPError(
            f"Encryption block could not be created from config '{config_str}'. "
            f"Available types: {', '.join(EncryptionBlock.get_types())}"
        )
    logger.debug(f"Using encryption block {encryption_block.info()}")
    return encryption_block


def load_encryption_block_plugin(source_file: str) -> None:
    """Load encryption block implementation from a Python source file.

    :param source_file: Path to the plugin source file.
    """
    get_plugins_manager().load_from_source_file(source_file)
