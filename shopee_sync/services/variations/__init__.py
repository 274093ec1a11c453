"""Variation index reconciliation."""

from shopee_sync.services.variations.engine import VariationEngine, structure_fingerprint
from shopee_sync.services.variations.store import ShopeeVariationStore, VariationStore

__all__ = [
    'ShopeeVariationStore',
    'VariationEngine',
    'VariationStore',
    'structure_fingerprint',
]
