# tests/conftest.py

"""Shared pytest fixtures for all package tracker tests."""

from collections.abc import Generator
from pathlib import Path

import pytest

from src.config.settings import Settings

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def isolated_paths(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> Generator[Path, None, None]:
    """Point every on-disk location at a per-test temp directory."""
    monkeypatch.setattr(Settings, "STATE_DIR", tmp_path / "state")
    monkeypatch.setattr(
        Settings, "STORE_JSON_PATH", tmp_path / "state" / "storage.json"
    )
    monkeypatch.setattr(
        Settings, "STORE_DB_PATH", tmp_path / "state" / "storage.db"
    )
    monkeypatch.setattr(Settings, "RESULTS_DIR", tmp_path / "results")
    monkeypatch.setattr(Settings, "LOGS_DIR", tmp_path / "logs")
    yield tmp_path
