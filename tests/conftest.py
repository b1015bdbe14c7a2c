"""Shared pytest fixtures for all tests."""

import io
import json
import os

import pytest

from common.protocol import ResponseWriter
from folderstore.config import AdapterConfig

SAMPLE_OID = "abcd" + "0123456789abcdef" * 3 + "01234567890a"


@pytest.fixture
def base_dir(tmp_path):
    """
    Create an empty object store directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to the store root
    """
    store = tmp_path / 'store'
    store.mkdir()
    return store


@pytest.fixture
def temp_dir(tmp_path):
    """Directory receiving download temp files, so tests can inspect it."""
    downloads = tmp_path / 'downloads'
    downloads.mkdir()
    return downloads


@pytest.fixture
def config(base_dir, temp_dir):
    """AdapterConfig pointing at the temporary store."""
    return AdapterConfig(base_dir=str(base_dir), temp_dir=str(temp_dir))


@pytest.fixture
def make_file(tmp_path):
    """
    Factory creating a source file filled with random bytes.

    Returns:
        Callable(name, size) -> Path
    """
    def _make(name: str, size: int):
        path = tmp_path / name
        path.write_bytes(os.urandom(size))
        return path
    return _make


@pytest.fixture
def output():
    """Text buffer standing in for the adapter's stdout."""
    return io.StringIO()


@pytest.fixture
def responder(output):
    return ResponseWriter(output)


def read_messages(output: io.StringIO) -> list:
    """Decode every line written to the output buffer."""
    return [json.loads(line) for line in output.getvalue().splitlines()]
