"""Pytest configuration helpers for test collection.

Ensure the project root is on sys.path so tests can import the package
without requiring PYTHONPATH to be set externally, and keep the process
environment from leaking storage settings into tests.
"""
import sys
from pathlib import Path

import pytest

from kvstore_lib.config import ENV_VARS


def pytest_configure(config):
    # Insert repo root (one level up from tests/) to sys.path
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for attr, name in vars(ENV_VARS).items():
        if not attr.startswith("_"):
            monkeypatch.delenv(name, raising=False)
    # Point the YAML config lookup at a file that does not exist.
    monkeypatch.setenv(ENV_VARS.CONFIG_FILE, str(tmp_path / "missing.yml"))


@pytest.fixture
def local_storage_dir(tmp_path):
    d = tmp_path / "storage"
    d.mkdir()
    return d
