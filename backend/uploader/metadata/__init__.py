"""Upload metadata persistence (``image_metadata`` table)."""

from .schema import image_metadata, metadata_obj
from .store import MetadataStore

__all__ = [
    "MetadataStore",
    "image_metadata",
    "metadata_obj",
]
