"""Core interfaces and context objects shared by pagesmith tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from ...config import EngineConfig
from ...core.utils import CancellationToken
from ...engine import AssemblyEngine
from ...types import NamedSource


@dataclass
class ToolContext:
    """Holds shared execution state for a tool invocation.

    ``inputs`` are in-memory buffers; tools never touch the filesystem.
    The tool's return value is also stored in ``resources["result"]``.
    """

    inputs: Sequence[NamedSource] = ()
    options: Any = None
    config: EngineConfig = field(default_factory=EngineConfig)
    cancel: Optional[CancellationToken] = None
    resources: dict[str, Any] = field(default_factory=dict)

    def engine(self) -> AssemblyEngine:
        engine = self.resources.get("engine")
        if engine is None:
            engine = AssemblyEngine(self.config)
            self.resources["engine"] = engine
        return engine

    def with_updates(self, *, options: Any = None, config: EngineConfig | None = None) -> "ToolContext":
        return ToolContext(
            inputs=list(self.inputs),
            options=options if options is not None else self.options,
            config=config or self.config,
            cancel=self.cancel,
            resources=dict(self.resources),
        )


class BaseTool:
    """Base class for all pluggable pagesmith tools."""

    name: str

    def __init__(self, context: ToolContext) -> None:
        self.context = context

    def run(self) -> Any:  # pragma: no cover - to be implemented by subclasses
        raise NotImplementedError


ToolFactory = Callable[[ToolContext], BaseTool]
