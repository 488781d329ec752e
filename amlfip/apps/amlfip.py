#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Console script for building and inspecting Amlogic GXL boot images."""

import logging
import sys
from typing import Optional

import click

from amlfip.apps.utils import amlfip_logger
from amlfip.apps.utils.common_cli_options import (
    amlfip_apps_common_options,
    amlfip_config_option,
    amlfip_encryption_block_option,
    amlfip_output_option,
    amlfip_plugin_option,
)
from amlfip.apps.utils.utils import (
    AMLFIPAppError,
    catch_amlfip_error,
    format_raw_data,
    get_printable_path,
    print_files,
)
from amlfip.image.fip.assembler import build_fip
from amlfip.image.fip.container import FipContainer
from amlfip.image.fip.encryption_block import get_encryption_block, load_encryption_block_plugin
from amlfip.image.fip.fip_config import build_fip_from_config, get_config_template
from amlfip.image.fip.toc import FipToc, TocEntry
from amlfip.utils.config import Config
from amlfip.utils.misc import load_binary, write_file

logger = logging.getLogger(__name__)


def _print_entries(entries: list[TocEntry]) -> None:
    for idx, entry in enumerate(entries):
        click.echo(f"  #{idx} {entry}")


def _print_bl31_headers(toc: FipToc) -> None:
    for idx, header in sorted(toc.bl31_headers.items()):
        click.echo(f"BL31 header of entry #{idx}:")
        click.echo(format_raw_data(header, use_hexdump=True))


@click.group(name="amlfip", no_args_is_help=True)
@amlfip_apps_common_options
def main(log_level: int) -> None:
    """Utility for building Amlogic S905X (GXL) FIP boot images."""
    amlfip_logger.install(level=log_level)


@main.command(name="create", no_args_is_help=True)
@click.option(
    "--bl2", type=click.Path(dir_okay=False), required=True, help="Finalized BL2 image."
)
@click.option("--bl30", type=click.Path(dir_okay=False), required=True, help="BL30 image.")
@click.option("--bl31", type=click.Path(dir_okay=False), required=True, help="BL31 image.")
@click.option("--bl33", type=click.Path(dir_okay=False), required=True, help="BL33 image.")
@amlfip_output_option(help_text="Path to the produced boot image.")
@amlfip_encryption_block_option
@amlfip_plugin_option
def create(
    bl2: str,
    bl30: str,
    bl31: str,
    bl33: str,
    output: str,
    encryption_block: str,
    plugin: Optional[str],
) -> None:
    """Create boot image from BL2, BL30, BL31 and BL33 images."""
    if plugin:
        load_encryption_block_plugin(plugin)
    entries = build_fip(
        bl2=bl2,
        bl30=bl30,
        bl31=bl31,
        bl33=bl33,
        output=output,
        encryption_block=get_encryption_block(encryption_block),
    )
    _print_entries(entries)
    click.echo(f"Success. (Boot image: {get_printable_path(output)} created.)")


@main.command(name="export", no_args_is_help=True)
@amlfip_config_option()
@amlfip_plugin_option
def export(config: str, plugin: Optional[str]) -> None:
    """Create boot image described by configuration file."""
    if plugin:
        load_encryption_block_plugin(plugin)
    cfg = Config.create_from_file(config)
    entries = build_fip_from_config(cfg)
    _print_entries(entries)
    output = cfg.get_output_file_name("output")
    click.echo(f"Success. (Boot image: {get_printable_path(output)} created.)")


@main.command(name="get-template", no_args_is_help=True)
@amlfip_output_option(force=True)
def get_template(output: str) -> None:
    """Create template of configuration file for the 'export' command."""
    write_file(get_config_template(), output)
    click.echo(f"The configuration template file has been created: {get_printable_path(output)}")


@main.command(name="parse", no_args_is_help=True)
@click.option(
    "-b",
    "--binary",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Boot image to parse, or a bare TOC blob with --toc-only.",
)
@amlfip_output_option(
    required=False,
    directory=True,
    help_text="Directory where to store the extracted images, required without --toc-only.",
)
@amlfip_encryption_block_option
@amlfip_plugin_option
@click.option(
    "--toc-only",
    is_flag=True,
    default=False,
    help="The binary is a plaintext TOC blob, only the TOC is printed.",
)
def parse(
    binary: str,
    output: Optional[str],
    encryption_block: str,
    plugin: Optional[str],
    toc_only: bool,
) -> None:
    """Parse boot image, print its TOC and extract the stage images."""
    if not toc_only and not output:
        raise click.UsageError("Option '-o' / '--output' is required unless --toc-only is given.")
    if plugin:
        load_encryption_block_plugin(plugin)
    data = load_binary(binary)
    if toc_only:
        toc = FipToc.parse(data)
        click.echo(str(toc))
        _print_bl31_headers(toc)
        return
    container = FipContainer.parse(data, encryption_block=get_encryption_block(encryption_block))
    if not container.toc.entries:
        raise AMLFIPAppError(f"No FIP entries found in {get_printable_path(binary)}")
    click.echo(str(container))
    _print_bl31_headers(container.toc)
    files = container.export_images(output)
    print_files(files, title=f"Extracted images (in {get_printable_path(output)}):")


@catch_amlfip_error
def safe_main() -> None:
    """Call the main function."""
    sys.exit(main())  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":
    safe_main()
