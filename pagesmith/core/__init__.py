"""Pure planning helpers: page geometry and page range math."""

from . import layout, ranges
from .ranges import PageRange

__all__ = ["layout", "ranges", "PageRange"]
