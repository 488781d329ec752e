#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

"""Schema validator tests."""

import os
from typing import Any

import pytest
import yaml

from amlfip.exceptions import AMLFIPError
from amlfip.utils import schema_validator
from amlfip.utils.schema_validator import check_config, get_yaml_template

SCHEMA_FILES: dict[str, Any] = {
    "type": "object",
    "properties": {
        "image": {"type": "string", "format": "file", "title": "Image", "template_value": "a.bin"},
        "output": {"type": "string", "format": "file_name", "description": "Output file."},
    },
    "required": ["image"],
}
SCHEMA_KEY: dict[str, Any] = {
    "properties": {
        "key": {"type": "string", "format": "hex_key", "default": "00ff"},
    },
}


@pytest.fixture
def image_dir(tmpdir: str) -> str:
    """Directory with ``a.bin`` image."""
    with open(os.path.join(tmpdir, "a.bin"), "wb") as f:
        f.write(b"\x00")
    return str(tmpdir)


def test_check_config_files(image_dir: str) -> None:
    paths = [image_dir]
    check_config({"image": "a.bin", "output": "out/u.bin"}, [SCHEMA_FILES], search_paths=paths)
    check_config({"image": os.path.join(image_dir, "a.bin")}, [SCHEMA_FILES])
    with pytest.raises(AMLFIPError, match="Non-existing file"):
        check_config({"image": "b.bin"}, [SCHEMA_FILES], search_paths=paths)
    with pytest.raises(AMLFIPError, match="Missing field"):
        check_config({"output": "out.bin"}, [SCHEMA_FILES], search_paths=paths)
    with pytest.raises(AMLFIPError):
        check_config({"image": "a.bin", "output": "out/"}, [SCHEMA_FILES], search_paths=paths)


def test_check_config_merged_schemas(image_dir: str) -> None:
    schemas = [SCHEMA_FILES, SCHEMA_KEY]
    formats = {"hex_key": lambda x: all(c in "0123456789abcdef" for c in x.lower())}
    config = {"image": "a.bin", "key": "00FF"}
    check_config(config, schemas, extra_formatters=formats, search_paths=[image_dir])
    config["key"] = "not a key"
    with pytest.raises(AMLFIPError, match="hex_key"):
        check_config(config, schemas, extra_formatters=formats, search_paths=[image_dir])


def test_check_config_invalid_schema() -> None:
    with pytest.raises(AMLFIPError, match="Invalid configuration schema"):
        check_config({"key": "00"}, [SCHEMA_KEY])


def test_check_unknown_properties(caplog: pytest.LogCaptureFixture) -> None:
    schema = {"type": "object", "properties": {"name": {"type": "string"}}}
    check_config({"name": "x", "typo": 1}, [schema], check_unknown_props=True)
    assert "typo" in caplog.text


def test_check_unknown_properties_strict(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(schema_validator, "AMLFIP_SCHEMA_STRICT", True)
    schema = {"type": "object", "properties": {"name": {"type": "string"}}}
    with pytest.raises(AMLFIPError, match="typo"):
        check_config({"name": "x", "typo": 1}, [schema], check_unknown_props=True)


def test_yaml_template() -> None:
    template = get_yaml_template("Test template", [SCHEMA_FILES, SCHEMA_KEY])
    assert "# Test template" in template
    assert "Image [REQUIRED]" in template
    assert "output [OPTIONAL]" in template
    assert "# " + " " * 2 + "Output file." in template
    assert yaml.safe_load(template) == {"image": "a.bin", "output": None, "key": "00ff"}
