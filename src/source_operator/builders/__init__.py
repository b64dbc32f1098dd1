"""Builders computing dependent object state from a Source."""

from .claim import mutate_claim, set_controller_reference
from .source import SourceSpec
from .volume import mutate_volume, volume_attributes

__all__ = [
    "SourceSpec",
    "mutate_claim",
    "mutate_volume",
    "set_controller_reference",
    "volume_attributes",
]
