"""Unit tests for the process entry point."""

from __future__ import annotations

import logging

import pytest

from archive_search import app
from archive_search.errors import ArgumentError
from archive_search.search.snapshot import SnapshotStore


pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def configured_env(monkeypatch, write_listing, sample_records, tmp_path):
    listing = write_listing(sample_records)
    snapshot = tmp_path / "app.snapshot"
    monkeypatch.setenv("ARCHIVE_LISTING_PATH", str(listing))
    monkeypatch.setenv("SNAPSHOT_PATH", str(snapshot))
    monkeypatch.setenv("LOG_JSON", "false")
    return snapshot


def test_bootstrap_builds_index_and_runs_warmup(configured_env, caplog) -> None:
    caplog.set_level(logging.INFO, logger="archive_search")

    service = app.bootstrap(app.load_settings())

    assert service.index.document_count == 3
    assert SnapshotStore(configured_env).exists()
    assert any("Warm-up search" in record.getMessage() and "2 matches" in record.getMessage() for record in caplog.records)


def test_bootstrap_restores_from_snapshot_on_second_start(configured_env) -> None:
    app.bootstrap(app.load_settings())
    first_bytes = configured_env.read_bytes()

    service = app.bootstrap(app.load_settings())

    assert service.index.document_count == 3
    assert configured_env.read_bytes() == first_bytes


def test_main_returns_zero_on_success(configured_env) -> None:
    assert app.main() == 0


def test_main_returns_one_when_index_cannot_be_built(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("SNAPSHOT_PATH", str(tmp_path / "missing.snapshot"))
    monkeypatch.setenv("LOG_JSON", "false")

    assert app.main() == 1


def test_load_settings_wraps_validation_errors(monkeypatch) -> None:
    monkeypatch.setenv("RECORD_LIMIT", "-5")

    with pytest.raises(ArgumentError, match="Invalid configuration"):
        app.load_settings()


def test_main_returns_one_on_invalid_configuration(monkeypatch, caplog) -> None:
    monkeypatch.setenv("RECORD_LIMIT", "-5")

    assert app.main() == 1
    failures = [record for record in caplog.records if record.exc_info]
    assert len(failures) == 1
    assert failures[0].exc_info[0] is ArgumentError


def test_main_exports_metrics_textfile(configured_env, monkeypatch, tmp_path) -> None:
    metrics_path = tmp_path / "metrics" / "archive_search.prom"
    monkeypatch.setenv("METRICS_TEXTFILE", str(metrics_path))

    assert app.main() == 0
    assert 'archive_search_index_documents{source="live"} 3.0' in metrics_path.read_text()
