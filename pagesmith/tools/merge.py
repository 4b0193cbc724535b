"""Plugin exposing document merging through the registry."""

from __future__ import annotations

from ..core.utils import get_logger
from ..exceptions import InvalidOptionsError
from ..options import MergeOptions
from .common.interfaces import BaseTool
from .common.pipeline import register_tool

LOGGER = get_logger("pagesmith.tools.merge")


@register_tool("merge")
class MergeTool(BaseTool):
    name = "merge"

    def run(self) -> bytes:
        context = self.context
        options = context.options or MergeOptions()
        if not isinstance(options, MergeOptions):
            raise InvalidOptionsError("Merge tool requires MergeOptions")
        LOGGER.debug("Merging %d input(s)", len(context.inputs))
        return context.engine().merge(list(context.inputs), options, cancel=context.cancel)
