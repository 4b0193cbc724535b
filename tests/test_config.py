from __future__ import annotations

import pytest

from pagesmith.config import EngineConfig


def test_defaults() -> None:
    config = EngineConfig()
    assert config.producer == "pagesmith"
    assert config.max_workers == 1
    assert config.default_page_size == "A4"


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PAGESMITH_PRODUCER", "  acme  ")
    monkeypatch.setenv("PAGESMITH_MAX_WORKERS", "4")
    config = EngineConfig.from_env()
    assert config.producer == "acme"
    assert config.creator == "pagesmith"
    assert config.max_workers == 4


def test_from_env_ignores_bad_worker_count(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PAGESMITH_MAX_WORKERS", "lots")
    assert EngineConfig.from_env().max_workers == 1


def test_rejects_zero_workers() -> None:
    with pytest.raises(ValueError):
        EngineConfig(max_workers=0)
