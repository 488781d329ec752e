#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""AMLFIP schema-based configuration validation utilities.

Configuration dictionaries are validated against JSON schemas compiled with fastjsonschema.
Several partial schemas may be merged together before validation. The module also renders
a commented YAML template from a schema.
"""

import copy
import json
import logging
import os
from typing import Any, Callable, Optional

import fastjsonschema
from deepmerge import always_merger

from amlfip import AMLFIP_DEBUG, AMLFIP_SCHEMA_STRICT, AMLFIP_YML_INDENT
from amlfip.exceptions import AMLFIPError
from amlfip.utils.misc import find_file, write_file

ENABLE_DEBUG = AMLFIP_DEBUG

logger = logging.getLogger(__name__)


def _merge_schemas(schemas: list[dict[str, Any]]) -> dict[str, Any]:
    """Merge partial schemas into one, later schemas extend earlier ones."""
    schema: dict[str, Any] = {}
    for partial in schemas:
        always_merger.merge(schema, copy.deepcopy(partial))
    return schema


def _describe_failure(exc: fastjsonschema.JsonSchemaValueException) -> str:
    """Extend validation error message with the missing fields or files."""
    message = str(exc)
    if exc.rule == "required" and isinstance(exc.value, dict):
        missing = [field for field in exc.rule_definition if field not in exc.value]
        message += f"; Missing field(s): {', '.join(missing)}"
    elif exc.rule == "format" and exc.rule_definition == "file":
        message += f"; Non-existing file: {exc.value}"
    return message


def check_unknown_properties(config_dict: dict, schema_dict: dict, path: str = "") -> None:
    """Check for configuration properties that the schema does not define.

    Unknown properties raise in strict mode (AMLFIP_SCHEMA_STRICT) and warn otherwise.

    :param config_dict: Configuration dictionary to check.
    :param schema_dict: Schema dictionary with 'properties'.
    :param path: Current key path used in messages.
    :raises AMLFIPError: Unknown property found in strict mode.
    """
    properties = schema_dict.get("properties", {})
    for key, value in config_dict.items():
        current_path = f"{path}/{key}" if path else key
        if key not in properties:
            message = f"Unknown property '{current_path}' found in configuration"
            if AMLFIP_SCHEMA_STRICT:
                raise AMLFIPError(message)
            logger.warning(message)
            continue
        if isinstance(value, dict) and "properties" in properties[key]:
            check_unknown_properties(value, properties[key], current_path)


def check_config(
    config: dict[str, Any],
    schemas: list[dict[str, Any]],
    extra_formatters: Optional[dict[str, Callable[[str], bool]]] = None,
    search_paths: Optional[list[str]] = None,
    check_unknown_props: bool = False,
) -> None:
    """Validate configuration against merged schemas.

    Besides the standard formats, ``file`` accepts a path of an existing file (relative
    paths are looked up in ``search_paths``) and ``file_name`` a path ending with a name.

    :param config: Configuration to validate.
    :param schemas: Partial schemas, merged in order.
    :param extra_formatters: Additional format checkers by format name.
    :param search_paths: Directories for relative file paths.
    :param check_unknown_props: Report keys the schemas do not define.
    :raises AMLFIPError: Invalid schema or invalid configuration.
    """
    formats: dict[str, Callable[[str], bool]] = {
        "file": lambda x: bool(find_file(x, search_paths=search_paths, raise_exc=False)),
        "file_name": lambda x: bool(os.path.basename(x.replace("\\", "/"))),
    }
    formats.update(extra_formatters or {})
    schema = _merge_schemas(schemas)
    config_to_check = copy.deepcopy(dict(config))
    if check_unknown_props and "properties" in schema:
        check_unknown_properties(config_to_check, schema)

    if ENABLE_DEBUG:
        write_file(json.dumps(schema, indent=2), "merged_schema.json")
        write_file(json.dumps(config_to_check, indent=2), "config.json")
    try:
        validator = fastjsonschema.compile(schema, formats=formats)
    except (TypeError, fastjsonschema.JsonSchemaDefinitionException) as exc:
        raise AMLFIPError(f"Invalid configuration schema: {exc}") from exc
    try:
        validator(config_to_check)
    except fastjsonschema.JsonSchemaValueException as exc:
        raise AMLFIPError(f"Configuration validation failed: {_describe_failure(exc)}") from exc


def get_yaml_template(title: str, schemas: list[dict[str, Any]]) -> str:
    """Render a commented YAML configuration template from schemas.

    Each property is preceded by its title and description; required properties are marked.

    :param title: Title placed at the top of the template.
    :param schemas: List of schemas to merge and render.
    :return: YAML template as string.
    """
    schema = _merge_schemas(schemas)
    required = schema.get("required", [])
    indent = " " * AMLFIP_YML_INDENT

    lines = [f"# {'=' * 70}", f"# {title}", f"# {'=' * 70}", ""]
    for key, prop in schema.get("properties", {}).items():
        requirement = "REQUIRED" if key in required else "OPTIONAL"
        lines.append(f"# {'-' * 70}")
        lines.append(f"# {indent}{prop.get('title', key)} [{requirement}]")
        for desc_line in prop.get("description", "").splitlines():
            lines.append(f"# {indent}{desc_line}")
        value = prop.get("template_value", prop.get("default", ""))
        lines.append(f"{key}: {value}")
    lines.append("")
    return "\n".join(lines)
