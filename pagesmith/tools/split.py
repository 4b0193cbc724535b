"""Plugin exposing document splitting through the registry."""

from __future__ import annotations

from typing import List

from ..core.utils import get_logger
from ..exceptions import InvalidOptionsError
from ..options import SplitOptions
from ..types import SplitOutput
from .common.interfaces import BaseTool
from .common.pipeline import register_tool

LOGGER = get_logger("pagesmith.tools.split")


@register_tool("split")
class SplitTool(BaseTool):
    name = "split"

    def run(self) -> List[SplitOutput]:
        context = self.context
        if len(context.inputs) != 1:
            raise InvalidOptionsError(f"Split tool takes exactly one input, got {len(context.inputs)}")
        options = context.options or SplitOptions()
        if not isinstance(options, SplitOptions):
            raise InvalidOptionsError("Split tool requires SplitOptions")
        LOGGER.debug("Splitting %s with strategy %s", context.inputs[0].name, options.strategy.value)
        return context.engine().split(context.inputs[0], options, cancel=context.cancel)
