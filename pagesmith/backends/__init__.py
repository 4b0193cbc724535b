"""Backend implementations for document and image codecs."""

from .base import BackendDocument, DocumentBackend
from .pypdf_backend import PypdfBackend, PypdfDocument

__all__ = ["BackendDocument", "DocumentBackend", "PypdfBackend", "PypdfDocument"]
