"""Schemas for the Shopee shop authorization flow."""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ShopeeToken(BaseModel):
    access_token: str
    refresh_token: str
    expire_in: int = Field(0, description="Access token lifetime in seconds")

    @classmethod
    def from_shopee(cls, raw: Dict[str, Any]) -> "ShopeeToken":
        return cls(
            access_token=raw.get("access_token") or "",
            refresh_token=raw.get("refresh_token") or "",
            expire_in=raw.get("expire_in") or 0,
        )


class AuthLinkResponse(BaseModel):
    auth_link: str


class AuthStatus(BaseModel):
    is_connected: bool
    shop_id: Optional[int] = None


class RefreshResult(BaseModel):
    success: bool = True
    shop_id: int
    expire_in: int
