"""Tests for adapter configuration loading."""

import pytest

from common.constants import BLOCK_SIZE_BYTES
from folderstore.config import AdapterConfig, load_config


def test_defaults(monkeypatch):
    monkeypatch.delenv("LFS_FOLDERSTORE_HARDLINKS", raising=False)
    monkeypatch.delenv("LFS_FOLDERSTORE_TEMP_DIR", raising=False)

    config = load_config("/srv/lfs")

    assert config == AdapterConfig(base_dir="/srv/lfs")
    assert config.use_hardlinks is False
    assert config.temp_dir is None
    assert config.block_size == BLOCK_SIZE_BYTES


@pytest.mark.parametrize("value,expected", [
    ("1", True),
    ("true", True),
    ("YES", True),
    (" on ", True),
    ("0", False),
    ("", False),
    ("nope", False),
])
def test_hardlinks_from_environment(monkeypatch, value, expected):
    monkeypatch.setenv("LFS_FOLDERSTORE_HARDLINKS", value)

    assert load_config("/srv/lfs").use_hardlinks is expected


def test_explicit_values_override_environment(monkeypatch):
    monkeypatch.setenv("LFS_FOLDERSTORE_HARDLINKS", "1")
    monkeypatch.setenv("LFS_FOLDERSTORE_TEMP_DIR", "/var/tmp/env")

    config = load_config("/srv/lfs", use_hardlinks=False, temp_dir="/var/tmp/arg")

    assert config.use_hardlinks is False
    assert config.temp_dir == "/var/tmp/arg"


def test_temp_dir_from_environment(monkeypatch):
    monkeypatch.setenv("LFS_FOLDERSTORE_TEMP_DIR", "/var/tmp/env")

    assert load_config("/srv/lfs").temp_dir == "/var/tmp/env"


def test_config_is_immutable():
    config = AdapterConfig(base_dir="/srv/lfs")

    with pytest.raises(AttributeError):
        config.use_hardlinks = True
