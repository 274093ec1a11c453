"""Resolve an option label against a tier."""
from dataclasses import dataclass
from typing import List, Sequence, Union

from shopee_sync.schemas.variations import TierVariation, VariationModel


@dataclass(frozen=True)
class OptionFound:
    index: int
    used: bool


@dataclass(frozen=True)
class OptionNotFound:
    append_index: int


OptionResolution = Union[OptionFound, OptionNotFound]


def normalize_label(label: str) -> str:
    return label.strip().casefold()


def build_tier_index(tier_position: int, option_index: int, other_tier_index: Sequence[int] = ()) -> List[int]:
    """Full tier_index of a model: ``option_index`` at ``tier_position``, the rest from ``other_tier_index``."""
    tier_index = list(other_tier_index)
    tier_index.insert(tier_position, option_index)
    return tier_index


def resolve_option(
    tier: TierVariation,
    tier_position: int,
    models: List[VariationModel],
    label: str,
    other_tier_index: Sequence[int] = (),
) -> OptionResolution:
    """
    Look ``label`` up in ``tier`` case-insensitively.

    ``used`` is True when a model already exists for the combination the
    option would produce. On a single-tier item that means the option
    already has its SKU. A missing label resolves to the append position,
    the only place a new option can go without shifting existing indices.
    """
    wanted = normalize_label(label)
    for index, option in enumerate(tier.option_list):
        if normalize_label(option.option) == wanted:
            candidate = build_tier_index(tier_position, index, other_tier_index)
            used = any(m.tier_index == candidate for m in models)
            return OptionFound(index=index, used=used)
    return OptionNotFound(append_index=len(tier.option_list))
