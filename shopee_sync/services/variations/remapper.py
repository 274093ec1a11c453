"""
Rebuild tiers and models after removing a set of options.

Options are addressed by position, so removing one shifts every later
option of its tier down. The remapper computes the old -> new index mapping
of every tier, drops the models that sit on a removed option, and rewrites
the tier_index of the rest. The result is submitted upstream as a whole;
never send part of it.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

from shopee_sync.core.errors import EmptyTierError, InvalidSelectionError
from shopee_sync.schemas.variations import OptionRef, TierOption, TierVariation, VariationModel

_logger = logging.getLogger(__name__)


@dataclass
class RemapResult:
    tier_variation: List[TierVariation]
    model: List[VariationModel]
    mapping: List[Dict[int, int]]
    dropped: List[VariationModel] = field(default_factory=list)


def normalize_selection(
    tiers: List[TierVariation], selection: Iterable[OptionRef]
) -> Set[Tuple[int, int]]:
    """Validate a selection against ``tiers`` and collapse duplicates."""
    doomed: Set[Tuple[int, int]] = set()
    for ref in selection:
        if ref.tier_index >= len(tiers):
            raise InvalidSelectionError(
                f"Tier {ref.tier_index} does not exist (item has {len(tiers)} tier(s))"
            )
        options = tiers[ref.tier_index].option_list
        if ref.option_index >= len(options):
            raise InvalidSelectionError(
                f"Option {ref.option_index} does not exist in tier "
                f"'{tiers[ref.tier_index].name}' ({len(options)} option(s))"
            )
        doomed.add((ref.tier_index, ref.option_index))
    return doomed


def remap_for_deletion(
    tiers: List[TierVariation],
    models: List[VariationModel],
    doomed: Set[Tuple[int, int]],
) -> RemapResult:
    """
    Remove the ``(tier_index, option_index)`` pairs in ``doomed``.

    Raises:
        EmptyTierError: if a tier would be left without options. Checked on
            the whole selection, before anything else is computed.
    """
    new_tiers: List[TierVariation] = []
    for t, tier in enumerate(tiers):
        survivors = [
            TierOption(option=opt.option, image=opt.image)
            for o, opt in enumerate(tier.option_list)
            if (t, o) not in doomed
        ]
        if not survivors:
            raise EmptyTierError(t, tier.name)
        new_tiers.append(TierVariation(name=tier.name, option_list=survivors))

    mapping: List[Dict[int, int]] = []
    for t, tier in enumerate(tiers):
        surviving = [o for o in range(len(tier.option_list)) if (t, o) not in doomed]
        mapping.append({old: new for new, old in enumerate(surviving)})

    kept: List[VariationModel] = []
    dropped: List[VariationModel] = []
    for model in models:
        # A model without one index per tier has no slot in the new structure.
        if len(model.tier_index) != len(tiers) or any(
            idx not in mapping[t] for t, idx in enumerate(model.tier_index)
        ):
            dropped.append(model)
            continue
        kept.append(VariationModel(
            model_sku=model.model_sku,
            tier_index=[mapping[t][idx] for t, idx in enumerate(model.tier_index)],
        ))

    _logger.info(
        f"Remapped {len(doomed)} removed option(s): kept {len(kept)} model(s), dropped {len(dropped)}"
    )
    return RemapResult(tier_variation=new_tiers, model=kept, mapping=mapping, dropped=dropped)
