"""Shared test fixtures and configuration."""

from collections.abc import Callable, Iterable, Mapping
import json
import os
from pathlib import Path
from typing import Any

import pytest


# Complete test environment that overrides every config value
TEST_ENV = {
    "SNAPSHOT_PATH": "index.snapshot",
    "FORCE_REBUILD": "false",
    "WARMUP_TERMS": "lombok,AUTHORS,README.md",
    "LOG_LEVEL": "info",
    "LOG_JSON": "true",
}


for key, value in TEST_ENV.items():
    os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Pin configuration env vars to test defaults for each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    # Optional values stay unset so pydantic falls back to ``None`` defaults
    monkeypatch.delenv("ARCHIVE_LISTING_PATH", raising=False)
    monkeypatch.delenv("RECORD_LIMIT", raising=False)
    monkeypatch.delenv("METRICS_TEXTFILE", raising=False)


@pytest.fixture
def sample_records() -> list[dict[str, Any]]:
    """Three archives with overlapping entry paths."""
    return [
        {"name": "lombok-1.18.jar", "files": ["lombok/core/AST.class", "META-INF/MANIFEST.MF", "AUTHORS"]},
        {"name": "commons-io-2.4.jar", "files": ["org/apache/commons/io/IOUtils.class", "META-INF/MANIFEST.MF"]},
        {"name": "docs.zip", "files": ["README.md", "docs/index.md"]},
    ]


@pytest.fixture
def write_listing(tmp_path: Path) -> Callable[..., Path]:
    """Write records as newline-delimited JSON and return the file path."""

    def _write(records: Iterable[Mapping[str, Any] | str], name: str = "listing.jsonl") -> Path:
        path = tmp_path / name
        lines = [entry if isinstance(entry, str) else json.dumps(entry) for entry in records]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
