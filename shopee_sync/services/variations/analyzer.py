"""Find variation options that can be removed from an item."""
import logging
from typing import List

from shopee_sync.schemas.variations import DeletableOption, VariationModel, VariationSnapshot

_logger = logging.getLogger(__name__)


def zero_stock_models(snapshot: VariationSnapshot) -> List[VariationModel]:
    return [m for m in snapshot.model if m.available_stock == 0]


def _references(model: VariationModel, tier_index: int, option_index: int) -> bool:
    return len(model.tier_index) > tier_index and model.tier_index[tier_index] == option_index


def list_deletable_options(snapshot: VariationSnapshot) -> List[DeletableOption]:
    """
    An option is deletable when at least one model uses it, every model that
    uses it has no available stock, and its tier has more than one option.

    Options without any model are left alone. The result is only a proposal:
    a selection of several candidates can still empty a tier, which the
    remapper rejects.
    """
    deletable: List[DeletableOption] = []
    for t, tier in enumerate(snapshot.tier_variation):
        if len(tier.option_list) <= 1:
            continue
        for o, option in enumerate(tier.option_list):
            refs = [m for m in snapshot.model if _references(m, t, o)]
            if not refs:
                continue
            if all(m.available_stock == 0 for m in refs):
                deletable.append(DeletableOption(
                    tier_index=t,
                    option_index=o,
                    tier_name=tier.name,
                    option_name=option.option,
                    affected_models=len(refs),
                ))

    _logger.info(
        f"Item {snapshot.item_id}: {len(deletable)} deletable option(s) "
        f"out of {sum(len(t.option_list) for t in snapshot.tier_variation)}"
    )
    return deletable
