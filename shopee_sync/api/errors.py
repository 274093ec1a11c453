"""Translate service errors into HTTP responses."""
import logging

from fastapi import HTTPException

from shopee_sync.core.errors import (
    DuplicateOptionError,
    StaleSnapshotError,
    UpstreamError,
    VariationSyncError,
    VariationValidationError,
)
from shopee_sync.services.shopee import ShopeeAPIError

_logger = logging.getLogger(__name__)


def http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, (DuplicateOptionError, StaleSnapshotError)):
        return HTTPException(status_code=409, detail=exc.message)
    if isinstance(exc, VariationValidationError):
        return HTTPException(status_code=400, detail=exc.message)
    if isinstance(exc, UpstreamError):
        return HTTPException(
            status_code=502,
            detail={"message": exc.message, "error": exc.error, "request_id": exc.request_id},
        )
    if isinstance(exc, ShopeeAPIError):
        return HTTPException(
            status_code=502,
            detail={"message": exc.message, "error": exc.error, "request_id": exc.request_id},
        )
    if isinstance(exc, VariationSyncError):
        return HTTPException(status_code=500, detail=exc.message)
    _logger.exception("Unexpected error")
    return HTTPException(status_code=500, detail="Internal server error")
