"""Pass-through product endpoints: model list, stock and model updates."""
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from shopee_sync.api.deps import get_shopee_client
from shopee_sync.api.errors import http_error
from shopee_sync.services import shopee
from shopee_sync.services.shopee import ShopeeAPIError, ShopeeClient

router = APIRouter(prefix="/products", tags=["products"])
_logger = logging.getLogger(__name__)


class StockItem(BaseModel):
    model_id: int
    stock: int = Field(..., ge=0)

    model_config = {"protected_namespaces": ()}


class StockUpdateRequest(BaseModel):
    stock_items: List[StockItem] = Field(..., min_length=1)


class ModelUpdateRequest(BaseModel):
    model_list: List[Dict[str, Any]] = Field(..., min_length=1)

    model_config = {"protected_namespaces": ()}


@router.get("/{item_id}/models")
def get_models(item_id: int, client: ShopeeClient = Depends(get_shopee_client)):
    try:
        return shopee.get_model_list(client, item_id)
    except ShopeeAPIError as e:
        raise http_error(e)


@router.post("/{item_id}/stock")
def update_stock(item_id: int, body: StockUpdateRequest, client: ShopeeClient = Depends(get_shopee_client)):
    try:
        result = shopee.update_stock(client, item_id, [s.model_dump() for s in body.stock_items])
    except ShopeeAPIError as e:
        raise http_error(e)
    return {
        "success": True,
        "message": f"Successfully updated stock for {len(body.stock_items)} model(s)",
        "response": result,
    }


@router.post("/{item_id}/models/update")
def update_models(item_id: int, body: ModelUpdateRequest, client: ShopeeClient = Depends(get_shopee_client)):
    try:
        result = shopee.update_model(client, item_id, body.model_list)
    except ShopeeAPIError as e:
        raise http_error(e)
    return {"success": True, "response": result}


@router.delete("/{item_id}/models/{model_id}")
def delete_model(item_id: int, model_id: int, client: ShopeeClient = Depends(get_shopee_client)):
    _logger.info(f"Deleting model {model_id} of item {item_id}")
    try:
        result = shopee.delete_model(client, item_id, model_id)
    except ShopeeAPIError as e:
        raise http_error(e)
    return {"success": True, "response": result}
