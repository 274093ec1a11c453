"""Request-scoped dependencies."""
from typing import Optional

import requests
from fastapi import Cookie, Depends, HTTPException

from shopee_sync.core.config import Settings, get_settings
from shopee_sync.services.shopee import ShopeeClient, ShopeeCredentials, ShopeeShopAuth
from shopee_sync.services.variations import ShopeeVariationStore, VariationEngine


def get_shop_auth(
    shopee_access_token: Optional[str] = Cookie(None),
    shopee_shop_id: Optional[str] = Cookie(None),
) -> ShopeeShopAuth:
    """Shop credentials stored in the dashboard session cookies."""
    if not shopee_access_token or not shopee_shop_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        shop_id = int(shopee_shop_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid shop id in session")
    return ShopeeShopAuth(access_token=shopee_access_token, shop_id=shop_id)


def get_partner_credentials(config: Settings = Depends(get_settings)) -> ShopeeCredentials:
    return ShopeeCredentials.from_settings(config)


def get_http_session() -> requests.Session:
    return requests.Session()


def get_shopee_client(
    auth: ShopeeShopAuth = Depends(get_shop_auth),
    credentials: ShopeeCredentials = Depends(get_partner_credentials),
    session: requests.Session = Depends(get_http_session),
) -> ShopeeClient:
    return ShopeeClient(credentials, auth, session=session)


def get_variation_engine(
    client: ShopeeClient = Depends(get_shopee_client),
    config: Settings = Depends(get_settings),
) -> VariationEngine:
    return VariationEngine.from_settings(ShopeeVariationStore(client), config)
