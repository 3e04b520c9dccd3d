"""
Unit tests for validation settings and command line overrides.
"""

import pytest
from pydantic import ValidationError

from ftcalib.schema import ValidationConfig, load_config_with_overrides


def test_defaults():
    cfg = ValidationConfig()
    assert not cfg.bin_by_bin
    assert not cfg.ignore_extended
    assert cfg.ignore == []
    assert cfg.expand_aliases
    assert cfg.merge_same_analyses
    assert cfg.log_level == "INFO"


def test_subscript_access():
    cfg = ValidationConfig(bin_by_bin=True)
    assert cfg["bin_by_bin"]
    assert cfg.get("missing", 3) == 3
    assert "ignore" in cfg


def test_log_level_normalised():
    assert ValidationConfig(log_level="debug").log_level == "DEBUG"


def test_bad_log_level():
    with pytest.raises(ValidationError, match="Invalid log level"):
        ValidationConfig(log_level="chatty")


def test_overrides_applied():
    cfg = load_config_with_overrides(
        {"ignore": ["a:0-pt-1"]}, ["bin_by_bin=true", "log_level=WARNING"]
    )
    assert cfg.bin_by_bin
    assert cfg.log_level == "WARNING"
    assert cfg.ignore == ["a:0-pt-1"]


def test_override_beats_base():
    cfg = load_config_with_overrides({"ignore_extended": False}, ["ignore_extended=true"])
    assert cfg.ignore_extended


def test_base_not_modified():
    base = {"ignore": ["x"]}
    load_config_with_overrides(base, ["ignore=[y]"])
    assert base == {"ignore": ["x"]}


def test_unknown_key():
    with pytest.raises(KeyError, match="non-existent setting: colour"):
        load_config_with_overrides(None, ["colour=red"])


def test_bad_format():
    with pytest.raises(ValueError, match="Invalid override format"):
        load_config_with_overrides(None, ["bin_by_bin"])
