"""Namespace for pluggable pagesmith tools."""

from __future__ import annotations

from .common.pipeline import registry


def load_builtin_plugins() -> None:
    from . import compress  # noqa: F401
    from . import images  # noqa: F401
    from . import merge  # noqa: F401
    from . import split  # noqa: F401


__all__ = ["registry", "load_builtin_plugins"]
