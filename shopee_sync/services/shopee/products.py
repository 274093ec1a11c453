"""Shopee product endpoints used by the dashboard."""

import logging
from typing import Any, Dict, List, Optional

from shopee_sync.services.shopee.client import ShopeeClient

__logger__ = logging.getLogger(__name__)

GET_MODEL_LIST = "/api/v2/product/get_model_list"
UPDATE_TIER_VARIATION = "/api/v2/product/update_tier_variation"
ADD_MODEL = "/api/v2/product/add_model"
UPDATE_MODEL = "/api/v2/product/update_model"
DELETE_MODEL = "/api/v2/product/delete_model"
UPDATE_STOCK = "/api/v2/product/update_stock"


def get_model_list(client: ShopeeClient, item_id: int) -> Dict[str, Any]:
    """
    Fetch tier variations and models of an item.

    Returns:
        The ``response`` object: {"tier_variation": [...], "model": [...]}
    """
    data = client.get(GET_MODEL_LIST, params={"item_id": item_id})
    return data.get("response") or {}


def update_tier_variation(
    client: ShopeeClient,
    item_id: int,
    tier_variation: List[Dict[str, Any]],
    model: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    Replace the tier structure of an item in one call.

    ``model`` maps every surviving model to its new ``tier_index``; Shopee
    deletes models that are not listed.
    """
    body: Dict[str, Any] = {"item_id": item_id, "tier_variation": tier_variation}
    if model is not None:
        body["model"] = model
    __logger__.info(
        f"update_tier_variation item={item_id}: {len(tier_variation)} tier(s), "
        f"{len(model) if model is not None else 'unchanged'} model(s)"
    )
    return client.post(UPDATE_TIER_VARIATION, body)


def add_model(client: ShopeeClient, item_id: int, model_list: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Create models for existing tier indices.

    Returns:
        The ``response`` object, ``{"model": [{"model_id": ..., "tier_index": [...]}]}``
    """
    data = client.post(ADD_MODEL, {"item_id": item_id, "model_list": model_list})
    return data.get("response") or {}


def update_model(client: ShopeeClient, item_id: int, model_list: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Update model attributes (sku, pre-order, ...) keyed by model_id."""
    data = client.post(UPDATE_MODEL, {"item_id": item_id, "model": model_list})
    return data.get("response") or {}


def delete_model(client: ShopeeClient, item_id: int, model_id: int) -> Dict[str, Any]:
    data = client.post(DELETE_MODEL, {"item_id": item_id, "model_id": model_id})
    return data.get("response") or {}


def update_stock(client: ShopeeClient, item_id: int, stock_items: List[Dict[str, int]]) -> Dict[str, Any]:
    """
    Set seller stock for several models of one item.

    Args:
        stock_items: [{"model_id": 1, "stock": 10}, ...]
    """
    stock_list = [
        {"model_id": item["model_id"], "seller_stock": [{"stock": item["stock"]}]}
        for item in stock_items
    ]
    data = client.post(UPDATE_STOCK, {"item_id": item_id, "stock_list": stock_list})
    return data.get("response") or {}
