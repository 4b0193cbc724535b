"""Size reduction for existing documents.

Compression runs a fixed pipeline over a cloned writer: structural removals,
image re-encoding, content stream recompression, then object deduplication.
Each stage is switched by :class:`~pagesmith.options.CompressOptions`; the
level only selects a :class:`CompressionProfile`.
"""

from __future__ import annotations

import dataclasses
from typing import Dict, Optional

from pypdf import PdfWriter
from pypdf.generic import NameObject

from .backends import PypdfBackend
from .backends.pillow_backend import downsample, encode_jpeg
from .core.utils import CancellationToken, check_cancelled, format_file_size, get_logger
from .exceptions import ElementError
from .options import CompressionLevel, CompressOptions

LOGGER = get_logger("pagesmith.compression")

# Image modes that survive a JPEG round trip without losing information
# beyond the lossy encoding itself.
_REENCODABLE_MODES = frozenset({"RGB", "L", "CMYK"})


@dataclasses.dataclass(frozen=True)
class CompressionProfile:
    """Behavioural knobs selected by a compression level."""

    level: CompressionLevel
    objects_per_tick: int
    zlib_level: int
    dedupe_objects: bool
    image_quality_ceiling: int


COMPRESSION_PROFILES: Dict[CompressionLevel, CompressionProfile] = {
    CompressionLevel.LOW: CompressionProfile(CompressionLevel.LOW, 100, 6, False, 95),
    CompressionLevel.MEDIUM: CompressionProfile(CompressionLevel.MEDIUM, 50, 9, True, 85),
    CompressionLevel.HIGH: CompressionProfile(CompressionLevel.HIGH, 25, 9, True, 70),
    CompressionLevel.MAXIMUM: CompressionProfile(CompressionLevel.MAXIMUM, 10, 9, True, 50),
}


def profile_for(level: CompressionLevel | str) -> CompressionProfile:
    return COMPRESSION_PROFILES[CompressionLevel(level)]


@dataclasses.dataclass(frozen=True)
class CompressionPlan:
    """Concrete settings for one run: the options resolved against a profile."""

    profile: CompressionProfile
    image_quality: int
    options: CompressOptions

    @classmethod
    def from_options(cls, options: CompressOptions) -> "CompressionPlan":
        profile = profile_for(options.level)
        quality = min(options.image_quality, profile.image_quality_ceiling)
        return cls(profile=profile, image_quality=quality, options=options)


@dataclasses.dataclass
class CompressionResult:
    """Represents the outcome of a compression run."""

    data: bytes
    level: CompressionLevel
    original_size: int
    compressed_size: int
    images_optimized: int = 0
    images_skipped: int = 0

    @property
    def bytes_saved(self) -> int:
        return max(self.original_size - self.compressed_size, 0)

    @property
    def size_ratio(self) -> float:
        """Compressed size as a fraction of the original."""
        if self.original_size == 0:
            return 1.0
        return self.compressed_size / self.original_size

    @property
    def compression_ratio(self) -> float:
        """Percentage of the original size saved, rounded to one decimal."""
        return round((1 - self.size_ratio) * 100, 1)

    def is_worth_keeping(self, threshold: float = 0.95) -> bool:
        """True when the output is below ``threshold`` of the original size."""
        return self.size_ratio < threshold


class _Ticker:
    """Polls the cancellation token once every ``every`` processed objects."""

    def __init__(self, token: Optional[CancellationToken], every: int) -> None:
        self._token = token
        self._every = max(1, every)
        self._count = 0

    def tick(self) -> None:
        self._count += 1
        if self._count % self._every == 0:
            check_cancelled(self._token)


class Compressor:
    """Runs the compression pipeline.

    ``producer`` is written to the output info dictionary unless metadata
    removal was requested.
    """

    def __init__(self, backend: Optional[PypdfBackend] = None, *, producer: str = "pagesmith") -> None:
        self.backend = backend or PypdfBackend()
        self.producer = producer

    def compress(
        self,
        data: bytes,
        options: Optional[CompressOptions] = None,
        *,
        cancel: Optional[CancellationToken] = None,
    ) -> CompressionResult:
        """Compress ``data``; never returns output larger than the input."""

        options = options or CompressOptions()
        plan = CompressionPlan.from_options(options)
        source = self.backend.load(data)
        check_cancelled(cancel)

        writer = PdfWriter(clone_from=source.reader)
        ticker = _Ticker(cancel, plan.profile.objects_per_tick)

        self._remove_structures(writer, options)
        if not options.remove_metadata:
            writer.add_metadata({"/Producer": self.producer})

        optimized = skipped = 0
        if options.optimize_images or options.downsample_images or options.convert_to_grayscale:
            optimized, skipped = self._process_images(writer, plan, ticker)

        if options.compress_streams:
            for page in writer.pages:
                ticker.tick()
                page.compress_content_streams(level=plan.profile.zlib_level)

        if plan.profile.dedupe_objects or options.remove_unused_objects:
            writer.compress_identical_objects(
                remove_identicals=plan.profile.dedupe_objects,
                remove_orphans=options.remove_unused_objects,
            )
        check_cancelled(cancel)

        output = self.backend.write(writer)
        if len(output) >= len(data):
            LOGGER.info(
                "Compression at level %s did not reduce %s; keeping the original",
                plan.profile.level.value,
                format_file_size(len(data)),
            )
            output = data

        result = CompressionResult(
            data=output,
            level=plan.profile.level,
            original_size=len(data),
            compressed_size=len(output),
            images_optimized=optimized,
            images_skipped=skipped,
        )
        LOGGER.info(
            "Compressed %s -> %s (%.1f%% saved, %d image(s) re-encoded)",
            format_file_size(result.original_size),
            format_file_size(result.compressed_size),
            result.compression_ratio,
            optimized,
        )
        return result

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------
    @staticmethod
    def _remove_structures(writer: PdfWriter, options: CompressOptions) -> None:
        root = writer._root_object
        names = root.get("/Names")
        names = names.get_object() if names is not None else None

        if options.remove_metadata:
            writer.metadata = None
            root.pop(NameObject("/Metadata"), None)
        if options.remove_annotations:
            writer.remove_annotations(subtypes=None)
        if options.remove_bookmarks:
            root.pop(NameObject("/Outlines"), None)
            if root.get("/PageMode") == "/UseOutlines":
                root.pop(NameObject("/PageMode"), None)
        if options.remove_javascript:
            if names is not None:
                names.pop(NameObject("/JavaScript"), None)
            root.pop(NameObject("/AA"), None)
            open_action = root.get("/OpenAction")
            if open_action is not None:
                action = open_action.get_object()
                if hasattr(action, "get") and action.get("/S") == "/JavaScript":
                    root.pop(NameObject("/OpenAction"), None)
        if options.remove_attachments and names is not None:
            names.pop(NameObject("/EmbeddedFiles"), None)

    def _process_images(self, writer: PdfWriter, plan: CompressionPlan, ticker: _Ticker) -> tuple[int, int]:
        optimized = skipped = 0
        for page_number, page in enumerate(writer.pages, start=1):
            width_in = float(page.mediabox.width) / 72
            height_in = float(page.mediabox.height) / 72
            try:
                images = list(page.images)
            except Exception as exc:
                LOGGER.debug("Cannot enumerate images on page %s: %s", page_number, exc)
                continue
            for image_file in images:
                ticker.tick()
                try:
                    if self._optimize_image(image_file, width_in, height_in, plan):
                        optimized += 1
                except ElementError as exc:
                    skipped += 1
                    LOGGER.warning("Skipping image %s on page %s: %s", image_file.name, page_number, exc.message)
                except Exception as exc:
                    skipped += 1
                    LOGGER.warning("Skipping image %s on page %s: %s", image_file.name, page_number, exc)
        return optimized, skipped

    @staticmethod
    def _optimize_image(image_file, width_in: float, height_in: float, plan: CompressionPlan) -> bool:
        """Re-encode one image in place; returns whether it was replaced."""

        options = plan.options
        reference = image_file.indirect_reference
        if reference is None:
            return False
        xobject = reference.get_object()
        if "/SMask" in xobject or "/Mask" in xobject:
            return False

        image = image_file.image
        if image is None or image.mode not in _REENCODABLE_MODES:
            return False

        if options.downsample_images and width_in > 0 and height_in > 0:
            dpi = max(image.width / width_in, image.height / height_in)
            if dpi > options.max_image_dpi:
                image = downsample(image, options.max_image_dpi / dpi)
        if options.convert_to_grayscale:
            image = image.convert("L")
        elif image.mode == "CMYK":
            image = image.convert("RGB")

        original_length = len(getattr(xobject, "_data", b"") or b"")
        encoded = encode_jpeg(image, plan.image_quality, grayscale=options.convert_to_grayscale)
        if original_length and len(encoded) >= original_length:
            return False

        image_file.replace(image, quality=plan.image_quality)
        return True


__all__ = [
    "CompressionProfile",
    "COMPRESSION_PROFILES",
    "profile_for",
    "CompressionPlan",
    "CompressionResult",
    "Compressor",
]
