"""
Pytest Configuration and Shared Fixtures

This file is automatically loaded by pytest and provides:
- An isolated home directory and working directory per test
- Removal of the environment variables the tests bind to

Run tests:
    pytest layerconfig/tests/ -v
"""

from pathlib import Path

import pytest


# Every variable name bound by a test record
BOUND_VARIABLES = [
    "PORT",
    "USERNAME",
    "HOST",
    "LEVEL",
    "DEBUG",
    "TAGS",
    "LIMITS",
    "TIMEOUT",
    "SERVER_PORT",
    "SERVER_HOST",
    "SERVER_USERNAME",
    "APP_USERNAME",
    "LOGGING_ENV",
    "LOGGING_LEVEL",
    "APP_PORT",
    "APP_SERVER_PORT",
    "API_KEY",
    "DATABASE",
    "DB_HOST",
    "DB_PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without any bound variable set."""
    for name in BOUND_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def home(tmp_path, monkeypatch) -> Path:
    """A fresh home directory, used by Path.home()."""
    path = tmp_path / "home"
    path.mkdir()
    monkeypatch.setenv("HOME", str(path))
    return path


@pytest.fixture
def workdir(tmp_path, monkeypatch, home) -> Path:
    """A fresh current working directory, distinct from the home directory."""
    path = tmp_path / "work"
    path.mkdir()
    monkeypatch.chdir(path)
    return path


@pytest.fixture
def write_file():
    """Write text to a file and return its path."""
    def _write(path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path
    return _write
