"""
Endpoints for tier variation maintenance

Endpoints:
- GET /products/{item_id}/deletable-options - Options whose models are all out of stock
- POST /products/{item_id}/delete-options - Remove options and remap the remaining models
- POST /products/{item_id}/models - Add a model, appending its option when missing
"""
import logging

from fastapi import APIRouter, Depends

from shopee_sync.api.deps import get_variation_engine
from shopee_sync.api.errors import http_error
from shopee_sync.core.errors import VariationSyncError
from shopee_sync.schemas.variations import (
    AddModelRequest,
    DeletableOptionsReport,
    DeleteOptionsRequest,
    DeleteOptionsResult,
    EnsureModelResult,
)
from shopee_sync.services.variations import VariationEngine

router = APIRouter(prefix="/products", tags=["variations"])
_logger = logging.getLogger(__name__)


@router.get("/{item_id}/deletable-options", response_model=DeletableOptionsReport)
def get_deletable_options(item_id: int, engine: VariationEngine = Depends(get_variation_engine)):
    try:
        return engine.list_deletable_options(item_id)
    except VariationSyncError as e:
        raise http_error(e)


@router.post("/{item_id}/delete-options", response_model=DeleteOptionsResult)
def delete_options(
    item_id: int,
    body: DeleteOptionsRequest,
    engine: VariationEngine = Depends(get_variation_engine),
):
    _logger.info(f"Deleting {len(body.options_to_delete)} option(s) from item {item_id}")
    try:
        return engine.delete_options(
            item_id, body.options_to_delete, expected_fingerprint=body.expected_fingerprint
        )
    except VariationSyncError as e:
        _logger.warning(f"Delete options failed for item {item_id}: {e.message}")
        raise http_error(e)


@router.post("/{item_id}/models", response_model=EnsureModelResult)
def add_model(
    item_id: int,
    body: AddModelRequest,
    engine: VariationEngine = Depends(get_variation_engine),
):
    _logger.info(f"Adding model '{body.model_name}' to item {item_id}")
    try:
        return engine.ensure_model(
            item_id,
            body.model_name,
            body.attributes(),
            tier=body.tier,
            other_tier_index=body.other_tier_index,
        )
    except VariationSyncError as e:
        _logger.warning(f"Add model failed for item {item_id}: {e.message}")
        raise http_error(e)
