"""Plugin exposing document compression through the registry."""

from __future__ import annotations

from ..compression import CompressionResult
from ..exceptions import InvalidOptionsError
from ..options import CompressOptions
from .common.interfaces import BaseTool
from .common.pipeline import register_tool


@register_tool("compress")
class CompressTool(BaseTool):
    name = "compress"

    def run(self) -> CompressionResult:
        context = self.context
        if len(context.inputs) != 1:
            raise InvalidOptionsError(f"Compress tool takes exactly one input, got {len(context.inputs)}")
        options = context.options or CompressOptions()
        if not isinstance(options, CompressOptions):
            raise InvalidOptionsError("Compress tool requires CompressOptions")
        return context.engine().compress(context.inputs[0], options, cancel=context.cancel)
