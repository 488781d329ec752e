#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Click options shared by AMLFIP commands."""

import logging
import os
from typing import Any, Callable, Optional, TypeVar, Union

import click

from amlfip import __version__ as amlfip_version

FC = TypeVar("FC", bound=Union[Callable[..., Any], click.Command])


def _stack(func: FC, *decorators: Callable[[FC], FC]) -> FC:
    """Apply decorators as if they were written above ``func`` in the given order."""
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def amlfip_apps_common_options(func: FC) -> FC:
    """Add ``--help``, ``--version`` and the verbosity switches.

    Provides ``log_level``: INFO for ``-v``, DEBUG for ``-vv``, None otherwise.
    """
    return _stack(
        func,
        click.help_option("--help"),
        click.version_option(amlfip_version, "--version"),
        click.option(
            "-v", "--verbose", "log_level", flag_value=logging.INFO, help="Print progress."
        ),
        click.option(
            "-vv", "--debug", "log_level", flag_value=logging.DEBUG, help="Print debug messages."
        ),
    )


def amlfip_plugin_option(func: FC) -> FC:
    """Add ``--plugin``, a Python file with additional encryption blocks."""
    return click.option(
        "--plugin",
        type=click.Path(exists=True, dir_okay=False, resolve_path=True),
        help="Python file defining a custom encryption block.",
    )(func)


def amlfip_encryption_block_option(func: FC) -> FC:
    """Add ``-e/--encryption-block``, the configuration string of the TOC rendering."""
    return click.option(
        "-e",
        "--encryption-block",
        default="type=none",
        show_default=True,
        help=(
            "Encryption block rendering the FIP TOC, e.g. "
            "'type=tool;command=aml_encrypt_gxl --bl3enc --input {input} --output {output}'."
        ),
    )(func)


def amlfip_config_option(
    required: bool = True, help_text: Optional[str] = None
) -> Callable[[FC], FC]:
    """Get ``-c/--config`` option, an existing YAML or JSON file."""
    return click.option(
        "-c",
        "--config",
        type=click.Path(exists=True, dir_okay=False, resolve_path=True),
        required=required,
        help=help_text or "YAML or JSON configuration file.",
    )


def amlfip_output_option(
    required: bool = True,
    directory: bool = False,
    force: bool = False,
    help_text: Optional[str] = None,
) -> Callable[[FC], FC]:
    """Get ``-o/--output`` option.

    With ``force``, an existing output file or a non-empty output directory is kept unless
    ``--force`` is given. The ``--force`` flag itself is not passed to the command. A
    required output directory is created.

    :param required: The option must be given.
    :param directory: The output is a directory.
    :param force: Add the ``--force`` flag.
    :param help_text: Help of the option.
    :return: Click decorator.
    """

    def check_output(ctx: click.Context, _param: click.Parameter, value: Optional[str]) -> Any:
        overwrite = ctx.params.pop("force", False)
        if ctx.resilient_parsing or not value:
            return value
        if force and not overwrite and os.path.exists(value):
            if not directory or os.listdir(value):
                kind = "directory" if directory else "file"
                click.echo(f"Output {kind} {value} already exists, use --force to overwrite it.")
                ctx.abort()
        if directory and required:
            os.makedirs(value, exist_ok=True)
        return value

    output = click.option(
        "-o",
        "--output",
        type=click.Path(dir_okay=directory, file_okay=not directory, resolve_path=True),
        required=required,
        callback=check_output,
        help=help_text or ("Output directory." if directory else "Output file."),
    )
    if not force:
        return output
    overwrite_flag = click.option(
        "--force", is_flag=True, is_eager=True, help="Overwrite existing output."
    )
    return lambda func: _stack(func, overwrite_flag, output)
