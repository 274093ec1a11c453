"""Error taxonomy for variation reconciliation.

Validation errors are raised locally before any call to Shopee. Upstream
errors wrap a failed Shopee call and keep its message verbatim.
"""
from typing import Optional


class VariationSyncError(Exception):
    """Base class for every error raised by the variation engine."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class VariationValidationError(VariationSyncError):
    """A request was rejected before anything was written upstream."""


class EmptyTierError(VariationValidationError):
    def __init__(self, tier_index: int, tier_name: str):
        super().__init__(
            f"Cannot delete all options from tier '{tier_name}' ({tier_index}). "
            "At least one option must remain."
        )
        self.tier_index = tier_index
        self.tier_name = tier_name


class DuplicateOptionError(VariationValidationError):
    def __init__(self, option_name: str, option_index: int):
        super().__init__(f"Model '{option_name}' already exists (option index {option_index})")
        self.option_name = option_name
        self.option_index = option_index


class InvalidSelectionError(VariationValidationError):
    """An option selection points at a tier or option that does not exist."""


class NoTierVariationError(VariationValidationError):
    def __init__(self, item_id: int):
        super().__init__(f"Item {item_id} has no tier variations")
        self.item_id = item_id


class StaleSnapshotError(VariationValidationError):
    """The item changed since the caller read it."""

    def __init__(self, item_id: int, expected: str, actual: str):
        super().__init__(
            f"Variation structure of item {item_id} changed since it was read "
            f"(expected {expected}, found {actual})"
        )
        self.item_id = item_id
        self.expected = expected
        self.actual = actual


class UpstreamError(VariationSyncError):
    """A Shopee call failed. Never retried unless it is a TransientIndexError."""

    def __init__(self, message: str, error: Optional[str] = None, request_id: Optional[str] = None):
        super().__init__(message)
        self.error = error
        self.request_id = request_id


class TransientIndexError(UpstreamError):
    """Shopee has not caught up with a tier structure edit yet."""
