from typing import Dict, List, Optional

import pytest

from shopee_sync.core.errors import TransientIndexError
from shopee_sync.schemas.variations import (
    ModelAttributes,
    TierOption,
    TierVariation,
    VariationModel,
    VariationSnapshot,
)
from shopee_sync.services.variations import VariationEngine


def make_snapshot(item_id: int, tiers: Dict[str, List[str]], models: List[dict]) -> VariationSnapshot:
    """tiers: {"Color": ["Red", "Blue"]}; models: [{"tier_index": [0], "stock": 0, ...}]"""
    return VariationSnapshot(
        item_id=item_id,
        tier_variation=[
            TierVariation(name=name, option_list=[TierOption(option=o) for o in options])
            for name, options in tiers.items()
        ],
        model=[
            VariationModel(
                model_id=m.get("model_id", 1000 + i),
                model_sku=m.get("sku", f"SKU-{i}"),
                tier_index=m["tier_index"],
                available_stock=m.get("stock", 0),
            )
            for i, m in enumerate(models)
        ],
    )


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text or str(payload)

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    """Stands in for requests.Session; replays canned responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, params=None, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeStore:
    """In-memory VariationStore that records every call."""

    def __init__(self, snapshot: VariationSnapshot, create_outcomes: Optional[list] = None):
        self.snapshot = snapshot
        self.create_outcomes = list(create_outcomes or [])
        self.fetches = 0
        self.replacements = []
        self.creations = []
        self.next_model_id = 5000

    def fetch_snapshot(self, item_id: int) -> VariationSnapshot:
        self.fetches += 1
        return self.snapshot.model_copy(deep=True)

    def replace_tier_structure(self, item_id, tiers, models):
        self.replacements.append((item_id, tiers, models))
        return {"error": "", "message": ""}

    def create_model(self, item_id: int, tier_index: List[int], attributes: ModelAttributes) -> int:
        self.creations.append((item_id, list(tier_index), attributes))
        if self.create_outcomes:
            outcome = self.create_outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        self.next_model_id += 1
        return self.next_model_id


def transient(n: int = 1) -> List[TransientIndexError]:
    return [
        TransientIndexError(f"Model tier_index error (attempt {i + 1})", error="product.error_param")
        for i in range(n)
    ]


class SleepRecorder:
    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def engine_for(sleeper):
    def build(store, **kwargs) -> VariationEngine:
        return VariationEngine(store, sleep=sleeper, **kwargs)
    return build
