"""Engine-wide configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from .core.utils import get_logger

LOGGER = get_logger("pagesmith.config")

_PRODUCER_ENV_VARS = ("PAGESMITH_PRODUCER",)
_CREATOR_ENV_VARS = ("PAGESMITH_CREATOR",)
_WORKERS_ENV_VARS = ("PAGESMITH_MAX_WORKERS",)


def _first_env(names: tuple[str, ...]) -> str | None:
    for env_name in names:
        value = os.getenv(env_name)
        if value is not None and value.strip():
            return value.strip()
    return None


@dataclass(frozen=True)
class EngineConfig:
    """Settings shared by every operation of one :class:`~pagesmith.engine.AssemblyEngine`.

    ``max_workers`` above 1 enables thread pools for work that is independent
    per element (image preparation, split serialization). ``clock`` supplies
    the time used for timestamps.
    """

    producer: str = "pagesmith"
    creator: str = "pagesmith"
    max_workers: int = 1
    font_name: str = "Helvetica"
    bold_font_name: str = "Helvetica-Bold"
    default_page_size: str = "A4"
    clock: Callable[[], datetime] = field(default=datetime.now, compare=False)

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a config from ``PAGESMITH_*`` environment variables."""

        kwargs: dict[str, object] = {}
        producer = _first_env(_PRODUCER_ENV_VARS)
        if producer:
            kwargs["producer"] = producer
        creator = _first_env(_CREATOR_ENV_VARS)
        if creator:
            kwargs["creator"] = creator
        workers = _first_env(_WORKERS_ENV_VARS)
        if workers:
            try:
                kwargs["max_workers"] = max(1, int(workers))
            except ValueError:
                LOGGER.warning("Ignoring non-integer PAGESMITH_MAX_WORKERS=%r", workers)
        return cls(**kwargs)  # type: ignore[arg-type]


__all__ = ["EngineConfig"]
