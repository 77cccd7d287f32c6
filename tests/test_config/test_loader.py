"""Tests for the shared YAML loader."""

from pathlib import Path

import pytest

from operator_agent.config.loader import ConfigLoadError, load_yaml_file


class CustomError(Exception):
    pass


def test_load_mapping(tmp_path: Path) -> None:
    path = tmp_path / "file.yaml"
    path.write_text("key: value\nnested:\n  n: 1\n")

    assert load_yaml_file(path) == {"key": "value", "nested": {"n": 1}}


def test_empty_file_is_empty_mapping(tmp_path: Path) -> None:
    path = tmp_path / "file.yaml"
    path.write_text("")

    assert load_yaml_file(path) == {}


def test_missing_file_uses_error_class(tmp_path: Path) -> None:
    with pytest.raises(CustomError, match="not found"):
        load_yaml_file(tmp_path / "missing.yaml", error_class=CustomError)


def test_non_mapping_rejected(tmp_path: Path) -> None:
    path = tmp_path / "file.yaml"
    path.write_text("- a\n- b\n")

    with pytest.raises(ConfigLoadError, match="mapping"):
        load_yaml_file(path)
