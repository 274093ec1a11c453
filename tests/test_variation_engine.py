"""Tests for the deletion and model creation flows of VariationEngine."""
import pytest
from pydantic import ValidationError

from conftest import FakeStore, make_snapshot, transient
from shopee_sync.core.config import Settings
from shopee_sync.core.errors import (
    DuplicateOptionError,
    EmptyTierError,
    InvalidSelectionError,
    NoTierVariationError,
    StaleSnapshotError,
    TransientIndexError,
    UpstreamError,
)
from shopee_sync.schemas.variations import ModelAttributes, OptionRef
from shopee_sync.services.variations import VariationEngine, structure_fingerprint

ITEM_ID = 812345


def refs(*pairs):
    return [OptionRef(tier_index=t, option_index=o) for t, o in pairs]


# ==================== LIST / DELETE ====================

def test_list_deletable_options_report(engine_for):
    store = FakeStore(make_snapshot(ITEM_ID, {"Color": ["Red", "Blue"]}, [
        {"tier_index": [0], "stock": 0},
        {"tier_index": [1], "stock": 5},
    ]))

    report = engine_for(store).list_deletable_options(ITEM_ID)

    assert report.total_models == 2
    assert report.zero_stock_count == 1
    assert [(d.tier_index, d.option_index) for d in report.deletable_options] == [(0, 0)]
    assert report.fingerprint == structure_fingerprint(store.snapshot)
    assert store.replacements == []


def test_delete_options_submits_one_structural_write(engine_for):
    store = FakeStore(make_snapshot(ITEM_ID, {"Size": ["S", "M", "L"]}, [
        {"tier_index": [0], "sku": "S"},
        {"tier_index": [1], "sku": "M"},
        {"tier_index": [2], "sku": "L"},
    ]))

    result = engine_for(store).delete_options(ITEM_ID, refs((0, 0), (0, 2)))

    assert result.deleted_options == 2
    assert result.kept_models == 1
    assert result.dropped_models == 2
    assert len(store.replacements) == 1
    item_id, tiers, models = store.replacements[0]
    assert item_id == ITEM_ID
    assert [o.option for o in tiers[0].option_list] == ["M"]
    assert [(m.model_sku, m.tier_index) for m in models] == [("M", [0])]


def test_delete_options_rejects_empty_tier_without_writing(engine_for):
    store = FakeStore(make_snapshot(ITEM_ID, {"Size": ["S", "M"]}, [
        {"tier_index": [0]},
        {"tier_index": [1]},
    ]))

    with pytest.raises(EmptyTierError):
        engine_for(store).delete_options(ITEM_ID, refs((0, 0), (0, 1)))

    assert store.replacements == []


def test_delete_options_rejects_unknown_option(engine_for):
    store = FakeStore(make_snapshot(ITEM_ID, {"Size": ["S", "M"]}, []))

    with pytest.raises(InvalidSelectionError):
        engine_for(store).delete_options(ITEM_ID, refs((0, 5)))

    assert store.replacements == []


def test_delete_options_on_item_without_tiers(engine_for):
    store = FakeStore(make_snapshot(ITEM_ID, {}, []))

    with pytest.raises(NoTierVariationError):
        engine_for(store).delete_options(ITEM_ID, refs((0, 0)))


def test_delete_options_stale_fingerprint(engine_for):
    store = FakeStore(make_snapshot(ITEM_ID, {"Size": ["S", "M"]}, [{"tier_index": [0]}]))

    with pytest.raises(StaleSnapshotError):
        engine_for(store).delete_options(ITEM_ID, refs((0, 0)), expected_fingerprint="0000000000000000")

    assert store.replacements == []


def test_delete_options_matching_fingerprint(engine_for):
    store = FakeStore(make_snapshot(ITEM_ID, {"Size": ["S", "M"]}, [{"tier_index": [0]}]))
    fingerprint = structure_fingerprint(store.snapshot)

    engine_for(store).delete_options(ITEM_ID, refs((0, 0)), expected_fingerprint=fingerprint)

    assert len(store.replacements) == 1


def test_delete_options_upstream_failure_is_not_retried(engine_for):
    store = FakeStore(make_snapshot(ITEM_ID, {"Size": ["S", "M"]}, [{"tier_index": [0]}]))

    def fail(*args):
        store.replacements.append(args)
        raise UpstreamError("Item is under review", error="product.error_busi")

    store.replace_tier_structure = fail

    with pytest.raises(UpstreamError) as exc:
        engine_for(store).delete_options(ITEM_ID, refs((0, 0)))

    assert exc.value.message == "Item is under review"
    assert len(store.replacements) == 1


# ==================== ENSURE MODEL ====================

def test_ensure_model_appends_option_then_creates(engine_for, sleeper):
    """Two transient failures, success on the third attempt"""
    store = FakeStore(
        make_snapshot(ITEM_ID, {"Size": ["S", "M", "L"]}, [
            {"tier_index": [0], "sku": "S"},
            {"tier_index": [1], "sku": "M"},
        ]),
        create_outcomes=transient(2) + [777],
    )

    result = engine_for(store).ensure_model(ITEM_ID, "XL", ModelAttributes(price=10))

    assert result.model_id == 777
    assert result.tier_index == [3]
    assert result.option_created is True
    assert result.attempts == 3
    _, tiers, models = store.replacements[0]
    assert [o.option for o in tiers[0].option_list] == ["S", "M", "L", "XL"]
    assert [m.tier_index for m in models] == [[0], [1]]
    assert [c[1] for c in store.creations] == [[3], [3], [3]]
    # settle delay, then one backoff per retry
    assert sleeper.calls == [1.0, 1.0, 1.0]


def test_ensure_model_failed_append_stops_before_create(engine_for, sleeper):
    """A rejected structural write surfaces without settle delay or add_model"""
    store = FakeStore(make_snapshot(ITEM_ID, {"Size": ["S"]}, [{"tier_index": [0]}]))
    failure = UpstreamError("Tier variation update rejected", error="product.error_busi")

    def reject(item_id, tiers, models):
        store.replacements.append((item_id, tiers, models))
        raise failure

    store.replace_tier_structure = reject

    with pytest.raises(UpstreamError) as exc:
        engine_for(store).ensure_model(ITEM_ID, "M", ModelAttributes(price=10))

    assert exc.value is failure
    assert len(store.replacements) == 1
    assert store.creations == []
    assert sleeper.calls == []


def test_ensure_model_exhausts_retry_budget(engine_for):
    """Three transient failures surface the last one"""
    errors = transient(3)
    store = FakeStore(make_snapshot(ITEM_ID, {"Size": ["S"]}, [{"tier_index": [0]}]), create_outcomes=errors)

    with pytest.raises(TransientIndexError) as exc:
        engine_for(store).ensure_model(ITEM_ID, "M", ModelAttributes(price=10))

    assert exc.value is errors[-1]
    assert len(store.creations) == 3
    # the appended option is not rolled back
    assert len(store.replacements) == 1


def test_ensure_model_reuses_unused_option(engine_for, sleeper):
    store = FakeStore(make_snapshot(ITEM_ID, {"Size": ["S", "M"]}, [{"tier_index": [0]}]))

    result = engine_for(store).ensure_model(ITEM_ID, "  m ", ModelAttributes(price=10))

    assert result.tier_index == [1]
    assert result.option_created is False
    assert store.replacements == []
    assert sleeper.calls == []


def test_ensure_model_rejects_option_with_model(engine_for):
    store = FakeStore(make_snapshot(ITEM_ID, {"Size": ["S", "M"]}, [{"tier_index": [1]}]))

    with pytest.raises(DuplicateOptionError) as exc:
        engine_for(store).ensure_model(ITEM_ID, "M", ModelAttributes(price=10))

    assert exc.value.option_index == 1
    assert store.replacements == []
    assert store.creations == []


def test_ensure_model_other_errors_fail_fast(engine_for):
    store = FakeStore(
        make_snapshot(ITEM_ID, {"Size": ["S", "M"]}, []),
        create_outcomes=[UpstreamError("Price is out of range", error="product.error_price")],
    )

    with pytest.raises(UpstreamError) as exc:
        engine_for(store).ensure_model(ITEM_ID, "S", ModelAttributes(price=10))

    assert not isinstance(exc.value, TransientIndexError)
    assert len(store.creations) == 1


def test_ensure_model_on_item_without_tiers(engine_for):
    store = FakeStore(make_snapshot(ITEM_ID, {}, []))

    with pytest.raises(NoTierVariationError):
        engine_for(store).ensure_model(ITEM_ID, "S", ModelAttributes(price=10))


def test_ensure_model_multi_tier(engine_for):
    store = FakeStore(make_snapshot(ITEM_ID, {"Color": ["Red"], "Size": ["S", "M"]}, [
        {"tier_index": [0, 0]},
    ]))
    engine = engine_for(store)

    result = engine.ensure_model(ITEM_ID, "M", ModelAttributes(price=10), tier=1, other_tier_index=[0])
    assert result.tier_index == [0, 1]

    with pytest.raises(DuplicateOptionError):
        engine.ensure_model(ITEM_ID, "s", ModelAttributes(price=10), tier=1, other_tier_index=[0])

    with pytest.raises(InvalidSelectionError):
        engine.ensure_model(ITEM_ID, "M", ModelAttributes(price=10), tier=1, other_tier_index=[3])


@pytest.mark.parametrize("tier", [-1, 2])
def test_ensure_model_rejects_unknown_tier_before_writing(engine_for, tier):
    store = FakeStore(make_snapshot(ITEM_ID, {"Color": ["Red"], "Size": ["S", "M"]}, [
        {"tier_index": [0, 0]},
    ]))

    with pytest.raises(InvalidSelectionError):
        engine_for(store).ensure_model(ITEM_ID, "L", ModelAttributes(price=10), tier=tier)

    assert store.replacements == []
    assert store.creations == []


def test_exponential_backoff_is_opt_in(engine_for, sleeper):
    store = FakeStore(make_snapshot(ITEM_ID, {"Size": ["S", "M"]}, []), create_outcomes=transient(2) + [1])

    engine_for(store, retry_delay=0.5, retry_backoff="exponential").ensure_model(
        ITEM_ID, "S", ModelAttributes(price=10)
    )

    assert sleeper.calls == [0.5, 1.0]


def test_engine_from_settings(sleeper):
    config = Settings(tier_settle_delay=0.2, add_model_retry_delay=0.3, add_model_max_attempts=5)

    engine = VariationEngine.from_settings(FakeStore(make_snapshot(ITEM_ID, {}, [])), config, sleep=sleeper)

    assert engine.settle_delay == 0.2
    assert engine.retry_delay == 0.3
    assert engine.max_attempts == 5


def test_unknown_retry_backoff_is_rejected():
    with pytest.raises(ValidationError):
        Settings(add_model_retry_backoff="exponentail")

    with pytest.raises(ValueError):
        VariationEngine(FakeStore(make_snapshot(ITEM_ID, {}, [])), retry_backoff="linear")
