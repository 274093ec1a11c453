"""
Endpoints for connecting a Shopee shop

Endpoints:
- GET /auth/link - Partner authorization URL the seller opens
- GET /auth/callback - Shopee redirect target; exchanges the code and stores the session cookies
- POST /auth/refresh - Renew the access token from the refresh token cookie
- GET /auth/status - Whether the session holds shop credentials
- DELETE /auth/status - Disconnect (clear the session cookies)
"""
import logging
from typing import Optional
from urllib.parse import urlencode

import requests
from fastapi import APIRouter, Cookie, Depends, HTTPException, Response
from fastapi.responses import RedirectResponse

from shopee_sync.api.deps import get_http_session, get_partner_credentials
from shopee_sync.api.errors import http_error
from shopee_sync.core.config import Settings, get_settings
from shopee_sync.schemas.auth import AuthLinkResponse, AuthStatus, RefreshResult, ShopeeToken
from shopee_sync.services.shopee import (
    ShopeeAPIError,
    ShopeeCredentials,
    generate_auth_link,
    get_access_token,
    refresh_access_token,
)

router = APIRouter(prefix="/auth", tags=["auth"])
_logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "shopee_access_token"
REFRESH_TOKEN_COOKIE = "shopee_refresh_token"
SHOP_ID_COOKIE = "shopee_shop_id"


def _dashboard_redirect(config: Settings, **params) -> RedirectResponse:
    return RedirectResponse(f"{config.dashboard_url}?{urlencode(params)}")


def _store_session(response: Response, config: Settings, token: ShopeeToken, shop_id: int) -> None:
    cookie = {"httponly": True, "secure": config.cookie_secure, "samesite": "lax"}
    response.set_cookie(ACCESS_TOKEN_COOKIE, token.access_token, max_age=config.access_token_max_age, **cookie)
    response.set_cookie(REFRESH_TOKEN_COOKIE, token.refresh_token, max_age=config.refresh_token_max_age, **cookie)
    response.set_cookie(SHOP_ID_COOKIE, str(shop_id), max_age=config.refresh_token_max_age, **cookie)


@router.get("/link", response_model=AuthLinkResponse)
def get_auth_link(
    config: Settings = Depends(get_settings),
    credentials: ShopeeCredentials = Depends(get_partner_credentials),
):
    redirect_url = f"{config.public_url.rstrip('/')}/api/v1/auth/callback"
    return AuthLinkResponse(auth_link=generate_auth_link(credentials, redirect_url))


@router.get("/callback")
def auth_callback(
    code: Optional[str] = None,
    shop_id: Optional[int] = None,
    config: Settings = Depends(get_settings),
    credentials: ShopeeCredentials = Depends(get_partner_credentials),
    session: requests.Session = Depends(get_http_session),
):
    if not code or not shop_id:
        return _dashboard_redirect(config, error="missing_params")

    try:
        token = ShopeeToken.from_shopee(get_access_token(credentials, code, shop_id, session=session))
    except ShopeeAPIError as e:
        _logger.error(f"Token exchange failed for shop {shop_id}: {e}")
        return _dashboard_redirect(config, error=e.error or "token_exchange_failed")

    _logger.info(f"Shop {shop_id} connected")
    response = _dashboard_redirect(config, connected="true")
    _store_session(response, config, token, shop_id)
    return response


@router.post("/refresh", response_model=RefreshResult)
def refresh_session(
    response: Response,
    shopee_refresh_token: Optional[str] = Cookie(None),
    shopee_shop_id: Optional[str] = Cookie(None),
    config: Settings = Depends(get_settings),
    credentials: ShopeeCredentials = Depends(get_partner_credentials),
    session: requests.Session = Depends(get_http_session),
):
    if not shopee_refresh_token or not shopee_shop_id or not shopee_shop_id.isdigit():
        raise HTTPException(status_code=401, detail="Not authenticated")
    shop_id = int(shopee_shop_id)

    try:
        raw = refresh_access_token(credentials, shopee_refresh_token, shop_id, session=session)
    except ShopeeAPIError as e:
        raise http_error(e)

    token = ShopeeToken.from_shopee(raw)
    _store_session(response, config, token, shop_id)
    return RefreshResult(shop_id=shop_id, expire_in=token.expire_in)


@router.get("/status", response_model=AuthStatus)
def auth_status(
    shopee_access_token: Optional[str] = Cookie(None),
    shopee_shop_id: Optional[str] = Cookie(None),
):
    connected = bool(shopee_access_token and shopee_shop_id and shopee_shop_id.isdigit())
    return AuthStatus(is_connected=connected, shop_id=int(shopee_shop_id) if connected else None)


@router.delete("/status")
def disconnect(response: Response):
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, SHOP_ID_COOKIE):
        response.delete_cookie(name)
    return {"success": True}
