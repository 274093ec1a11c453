"""
Pydantic schemas for Shopee tier variations and models.

A product has an ordered list of tiers (``tier_variation``), each an ordered
list of options. A model (SKU) addresses one option per tier through its
``tier_index``. Options are identified by position, not by label.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ==================== STRUCTURE ====================

class OptionImage(BaseModel):
    image_id: str
    image_url: Optional[str] = None


class TierOption(BaseModel):
    """One option of a tier (e.g. Red, XL)"""
    option: str = Field(..., description="Option label")
    image: Optional[OptionImage] = None

    def to_shopee(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"option": self.option}
        if self.image:
            data["image"] = {"image_id": self.image.image_id}
        return data


class TierVariation(BaseModel):
    """A named axis of variation (e.g. Color) with its ordered options"""
    name: str
    option_list: List[TierOption] = Field(default_factory=list)

    def to_shopee(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "option_list": [opt.to_shopee() for opt in self.option_list],
        }


class VariationModel(BaseModel):
    """A purchasable SKU addressed by one option index per tier"""
    model_config = ConfigDict(protected_namespaces=())

    model_id: Optional[int] = None
    model_sku: Optional[str] = None
    tier_index: List[int] = Field(default_factory=list)
    available_stock: int = 0
    price: Optional[float] = None

    @field_validator("tier_index", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or []

    @classmethod
    def from_shopee(cls, raw: Dict[str, Any]) -> "VariationModel":
        """Build from an entry of get_model_list ``response.model``."""
        summary = (raw.get("stock_info_v2") or {}).get("summary_info") or {}
        price_info = raw.get("price_info") or []
        price = price_info[0].get("original_price") if price_info else None
        return cls(
            model_id=raw.get("model_id"),
            model_sku=raw.get("model_sku") or None,
            tier_index=raw.get("tier_index") or [],
            available_stock=summary.get("total_available_stock") or 0,
            price=price,
        )

    def to_shopee(self) -> Dict[str, Any]:
        """Model entry for update_tier_variation: only durable keys."""
        data: Dict[str, Any] = {"tier_index": list(self.tier_index)}
        if self.model_sku:
            data["model_sku"] = self.model_sku
        return data


class VariationSnapshot(BaseModel):
    """Point-in-time read of an item's tiers and models"""
    item_id: int
    tier_variation: List[TierVariation] = Field(default_factory=list)
    model: List[VariationModel] = Field(default_factory=list)

    @classmethod
    def from_shopee(cls, item_id: int, response: Dict[str, Any]) -> "VariationSnapshot":
        """Build from the ``response`` object of get_model_list."""
        return cls(
            item_id=item_id,
            tier_variation=[TierVariation.model_validate(t) for t in response.get("tier_variation") or []],
            model=[VariationModel.from_shopee(m) for m in response.get("model") or []],
        )


# ==================== DELETION ====================

class OptionRef(BaseModel):
    tier_index: int = Field(..., ge=0)
    option_index: int = Field(..., ge=0)


class DeletableOption(BaseModel):
    tier_index: int
    option_index: int
    tier_name: str
    option_name: str
    affected_models: int


class DeletableOptionsReport(BaseModel):
    item_id: int
    tier_variations: List[TierVariation] = Field(default_factory=list)
    models: List[VariationModel] = Field(default_factory=list, description="Models with zero stock")
    total_models: int = 0
    zero_stock_count: int = 0
    deletable_options: List[DeletableOption] = Field(default_factory=list)
    fingerprint: Optional[str] = Field(None, description="Structure fingerprint for stale checks")


class DeleteOptionsRequest(BaseModel):
    options_to_delete: List[OptionRef] = Field(..., min_length=1)
    expected_fingerprint: Optional[str] = None


class DeleteOptionsResult(BaseModel):
    success: bool = True
    item_id: int
    message: str
    deleted_options: int
    kept_models: int
    dropped_models: int


# ==================== CREATION ====================

class ModelAttributes(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    price: float = Field(..., gt=0)
    stock: int = Field(default=1, ge=0)
    weight: Optional[float] = Field(None, gt=0)
    model_sku: Optional[str] = None

    def to_shopee(self, tier_index: List[int]) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "tier_index": list(tier_index),
            "original_price": self.price,
            "seller_stock": [{"stock": self.stock}],
        }
        if self.weight is not None:
            data["weight"] = self.weight
        if self.model_sku:
            data["model_sku"] = self.model_sku
        return data


class AddModelRequest(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_name: str = Field(..., min_length=1, description="Option label of the new model")
    price: float = Field(..., gt=0)
    stock: int = Field(default=1, ge=0)
    weight: Optional[float] = Field(None, gt=0)
    model_sku: Optional[str] = None
    tier: int = Field(default=0, ge=0, description="Tier the option belongs to")
    other_tier_index: Optional[List[int]] = Field(
        None, description="Indices for the remaining tiers of multi-tier items"
    )

    @field_validator("model_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("model_name must not be blank")
        return v

    def attributes(self) -> ModelAttributes:
        return ModelAttributes(
            price=self.price, stock=self.stock, weight=self.weight, model_sku=self.model_sku
        )


class EnsureModelResult(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    success: bool = True
    item_id: int
    model_id: Optional[int] = None
    model_name: str
    tier_index: List[int]
    option_created: bool = False
    attempts: int = 1
