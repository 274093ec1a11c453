"""
Variation reconciliation engine.

Keeps an item's tier structure and its model list consistent when options
are removed (``delete_options``) or a model is added for a new option
(``ensure_model``). Every operation reads a fresh snapshot, validates
locally, then writes. Shopee applies structural edits asynchronously, so
model creation right after an option was appended is retried while Shopee
still rejects the new tier_index.
"""
import hashlib
import json
import logging
import time
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)

from shopee_sync.core.config import Settings, settings as default_settings
from shopee_sync.core.errors import (
    DuplicateOptionError,
    InvalidSelectionError,
    NoTierVariationError,
    StaleSnapshotError,
    TransientIndexError,
    UpstreamError,
)
from shopee_sync.schemas.variations import (
    DeletableOptionsReport,
    DeleteOptionsResult,
    EnsureModelResult,
    ModelAttributes,
    OptionRef,
    TierOption,
    TierVariation,
    VariationModel,
    VariationSnapshot,
)
from shopee_sync.services.variations.analyzer import list_deletable_options, zero_stock_models
from shopee_sync.services.variations.remapper import normalize_selection, remap_for_deletion
from shopee_sync.services.variations.resolver import (
    OptionFound,
    build_tier_index,
    resolve_option,
)
from shopee_sync.services.variations.store import VariationStore

_logger = logging.getLogger(__name__)


def structure_fingerprint(snapshot: VariationSnapshot) -> str:
    """Digest of tier names, option labels and model positions."""
    payload = {
        "tiers": [[t.name, [o.option for o in t.option_list]] for t in snapshot.tier_variation],
        "models": sorted(m.tier_index for m in snapshot.model),
    }
    raw = json.dumps(payload, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]


class VariationEngine:
    def __init__(
        self,
        store: VariationStore,
        settle_delay: float = 1.0,
        retry_delay: float = 1.0,
        max_attempts: int = 3,
        retry_backoff: str = "fixed",
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if retry_backoff not in ("fixed", "exponential"):
            raise ValueError(f"Unknown retry backoff: {retry_backoff}")
        self.store = store
        self.settle_delay = settle_delay
        self.retry_delay = retry_delay
        self.max_attempts = max_attempts
        self.retry_backoff = retry_backoff
        self.sleep = sleep

    @classmethod
    def from_settings(
        cls,
        store: VariationStore,
        config: Settings = default_settings,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "VariationEngine":
        return cls(
            store,
            settle_delay=config.tier_settle_delay,
            retry_delay=config.add_model_retry_delay,
            max_attempts=config.add_model_max_attempts,
            retry_backoff=config.add_model_retry_backoff,
            sleep=sleep,
        )

    # ==================== READ ====================

    def list_deletable_options(self, item_id: int) -> DeletableOptionsReport:
        snapshot = self.store.fetch_snapshot(item_id)
        zero_stock = zero_stock_models(snapshot)
        return DeletableOptionsReport(
            item_id=item_id,
            tier_variations=snapshot.tier_variation,
            models=zero_stock,
            total_models=len(snapshot.model),
            zero_stock_count=len(zero_stock),
            deletable_options=list_deletable_options(snapshot),
            fingerprint=structure_fingerprint(snapshot),
        )

    # ==================== STRUCTURAL WRITE ====================

    def replace_structure(
        self, item_id: int, tiers: List[TierVariation], models: List[VariationModel]
    ) -> dict:
        """Submit tiers and models as a single update. Not retried."""
        _logger.info(f"Replacing tier structure of item {item_id}")
        _logger.debug(f"New tiers: {[t.to_shopee() for t in tiers]}, models: {[m.to_shopee() for m in models]}")
        try:
            return self.store.replace_tier_structure(item_id, tiers, models)
        except UpstreamError as e:
            _logger.error(f"update_tier_variation failed for item {item_id}: {e.message}")
            raise

    # ==================== DELETION ====================

    def delete_options(
        self,
        item_id: int,
        selection: Iterable[OptionRef],
        expected_fingerprint: Optional[str] = None,
    ) -> DeleteOptionsResult:
        snapshot = self.store.fetch_snapshot(item_id)
        if not snapshot.tier_variation:
            raise NoTierVariationError(item_id)

        doomed = normalize_selection(snapshot.tier_variation, selection)
        if not doomed:
            raise InvalidSelectionError("No options selected for deletion")

        if expected_fingerprint is not None:
            actual = structure_fingerprint(snapshot)
            if actual != expected_fingerprint:
                raise StaleSnapshotError(item_id, expected_fingerprint, actual)

        result = remap_for_deletion(snapshot.tier_variation, snapshot.model, doomed)
        self.replace_structure(item_id, result.tier_variation, result.model)

        return DeleteOptionsResult(
            item_id=item_id,
            message=f"Successfully deleted {len(doomed)} variation option(s)",
            deleted_options=len(doomed),
            kept_models=len(result.model),
            dropped_models=len(result.dropped),
        )

    # ==================== CREATION ====================

    def _retrying(self) -> Retrying:
        if self.retry_backoff == "exponential":
            wait = wait_exponential(multiplier=self.retry_delay, min=self.retry_delay)
        else:
            wait = wait_fixed(self.retry_delay)
        return Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait,
            retry=retry_if_exception_type(TransientIndexError),
            before_sleep=before_sleep_log(_logger, logging.WARNING),
            sleep=self.sleep,
            reraise=True,
        )

    def create_model_with_retry(
        self, item_id: int, tier_index: List[int], attributes: ModelAttributes
    ) -> Tuple[int, int]:
        """
        Call add_model, retrying only while Shopee rejects the tier_index.

        Returns the new model_id and the number of attempts used. After the last
        attempt the final TransientIndexError is raised as is.
        """
        model_id = None
        attempts = 0
        for attempt in self._retrying():
            with attempt:
                attempts = attempt.retry_state.attempt_number
                _logger.info(f"Add model attempt {attempts}/{self.max_attempts} for item {item_id} at {tier_index}")
                model_id = self.store.create_model(item_id, tier_index, attributes)
        _logger.info(f"Model {model_id} created for item {item_id} at {tier_index}")
        return model_id, attempts

    def _other_tier_index(
        self, tiers: List[TierVariation], tier: int, other_tier_index: Optional[Sequence[int]]
    ) -> List[int]:
        others = [t for i, t in enumerate(tiers) if i != tier]
        if other_tier_index is None:
            return [0] * len(others)
        if len(other_tier_index) != len(others):
            raise InvalidSelectionError(
                f"Expected {len(others)} index(es) for the other tiers, got {len(other_tier_index)}"
            )
        for other, idx in zip(others, other_tier_index):
            if not 0 <= idx < len(other.option_list):
                raise InvalidSelectionError(f"Option {idx} does not exist in tier '{other.name}'")
        return list(other_tier_index)

    def ensure_model(
        self,
        item_id: int,
        option_label: str,
        attributes: ModelAttributes,
        tier: int = 0,
        other_tier_index: Optional[Sequence[int]] = None,
    ) -> EnsureModelResult:
        """
        Make sure a model exists for ``option_label`` in ``tier``.

        An existing option without a model is reused; a missing one is
        appended to the tier first. Fails with DuplicateOptionError when the
        option already has its model.
        """
        option_label = option_label.strip()
        if not option_label:
            raise InvalidSelectionError("Option label must not be blank")

        snapshot = self.store.fetch_snapshot(item_id)
        tiers = snapshot.tier_variation
        if not tiers:
            raise NoTierVariationError(item_id)
        if not 0 <= tier < len(tiers):
            raise InvalidSelectionError(f"Tier {tier} does not exist (item has {len(tiers)} tier(s))")
        others = self._other_tier_index(tiers, tier, other_tier_index)

        resolution = resolve_option(tiers[tier], tier, snapshot.model, option_label, others)
        option_created = False
        if isinstance(resolution, OptionFound):
            if resolution.used:
                raise DuplicateOptionError(option_label, resolution.index)
            target = resolution.index
            _logger.info(f"Option '{option_label}' exists at index {target} without model")
        else:
            target = resolution.append_index
            _logger.info(f"Option '{option_label}' not found, appending at index {target}")
            new_tiers = [
                TierVariation(
                    name=t.name,
                    option_list=list(t.option_list) + ([TierOption(option=option_label)] if i == tier else []),
                )
                for i, t in enumerate(tiers)
            ]
            # Appending never shifts existing indices; models are resubmitted unchanged.
            self.replace_structure(item_id, new_tiers, snapshot.model)
            option_created = True
            _logger.info(f"Waiting {self.settle_delay}s for Shopee to apply the tier update")
            self.sleep(self.settle_delay)

        tier_index = build_tier_index(tier, target, others)
        model_id, attempts = self.create_model_with_retry(item_id, tier_index, attributes)
        return EnsureModelResult(
            item_id=item_id,
            model_id=model_id,
            model_name=option_label,
            tier_index=tier_index,
            option_created=option_created,
            attempts=attempts,
        )
