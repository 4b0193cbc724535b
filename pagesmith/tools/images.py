"""Plugin assembling raster images into a document."""

from __future__ import annotations

from ..exceptions import InvalidOptionsError
from ..options import ImageAssemblyOptions
from .common.interfaces import BaseTool
from .common.pipeline import register_tool


@register_tool("images")
class ImagesTool(BaseTool):
    name = "images"

    def run(self) -> bytes:
        context = self.context
        options = context.options or ImageAssemblyOptions()
        if not isinstance(options, ImageAssemblyOptions):
            raise InvalidOptionsError("Images tool requires ImageAssemblyOptions")
        images = [item.data for item in context.inputs]
        return context.engine().images_to_document(images, options, cancel=context.cancel)
