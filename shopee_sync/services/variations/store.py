"""
Collaborator contract of the variation engine and its Shopee implementation.

The engine only ever reads a fresh snapshot, replaces the whole tier
structure in one call, or creates a model. Everything else about Shopee
(signing, transport, JSON) stays behind this seam.
"""
import logging
from typing import Any, Dict, List, Protocol

from shopee_sync.core.errors import TransientIndexError, UpstreamError
from shopee_sync.schemas.variations import (
    ModelAttributes,
    TierVariation,
    VariationModel,
    VariationSnapshot,
)
from shopee_sync.services.shopee import (
    ShopeeAPIError,
    ShopeeClient,
    add_model,
    get_model_list,
    update_tier_variation,
)

_logger = logging.getLogger(__name__)

TRANSIENT_INDEX_MARKER = "tier_index"


class VariationStore(Protocol):
    def fetch_snapshot(self, item_id: int) -> VariationSnapshot:
        ...

    def replace_tier_structure(
        self, item_id: int, tiers: List[TierVariation], models: List[VariationModel]
    ) -> Dict[str, Any]:
        ...

    def create_model(self, item_id: int, tier_index: List[int], attributes: ModelAttributes) -> int:
        ...


def is_transient_index_error(error: ShopeeAPIError) -> bool:
    """Shopee reports a not-yet-propagated tier structure as a tier_index error."""
    text = f"{error.error or ''} {error.message or ''}".lower()
    return TRANSIENT_INDEX_MARKER in text


def _upstream(error: ShopeeAPIError) -> UpstreamError:
    return UpstreamError(error.message, error=error.error, request_id=error.request_id)


class ShopeeVariationStore:
    """VariationStore backed by the Shopee product API."""

    def __init__(self, client: ShopeeClient):
        self.client = client

    def fetch_snapshot(self, item_id: int) -> VariationSnapshot:
        try:
            response = get_model_list(self.client, item_id)
        except ShopeeAPIError as e:
            raise _upstream(e) from e
        return VariationSnapshot.from_shopee(item_id, response)

    def replace_tier_structure(
        self, item_id: int, tiers: List[TierVariation], models: List[VariationModel]
    ) -> Dict[str, Any]:
        try:
            return update_tier_variation(
                self.client,
                item_id,
                [tier.to_shopee() for tier in tiers],
                [model.to_shopee() for model in models],
            )
        except ShopeeAPIError as e:
            raise _upstream(e) from e

    def create_model(self, item_id: int, tier_index: List[int], attributes: ModelAttributes) -> int:
        try:
            response = add_model(self.client, item_id, [attributes.to_shopee(tier_index)])
        except ShopeeAPIError as e:
            if is_transient_index_error(e):
                raise TransientIndexError(e.message, error=e.error, request_id=e.request_id) from e
            raise _upstream(e) from e

        created = response.get("model") or []
        if not created or created[0].get("model_id") is None:
            raise UpstreamError(f"add_model returned no model for item {item_id}: {response}")
        return created[0]["model_id"]
