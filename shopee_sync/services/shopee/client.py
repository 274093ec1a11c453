"""Shopee Open Platform v2 API client utilities."""

import hashlib
import hmac
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests

from shopee_sync.core.config import Settings, settings as default_settings

__logger__ = logging.getLogger(__name__)

AUTH_PARTNER_PATH = "/api/v2/shop/auth_partner"
TOKEN_GET_PATH = "/api/v2/auth/token/get"
ACCESS_TOKEN_REFRESH_PATH = "/api/v2/auth/access_token/get"


class ShopeeAPIError(Exception):
    """A Shopee call returned a non-2xx status or a non-empty ``error`` field."""

    def __init__(
        self,
        path: str,
        message: str,
        error: Optional[str] = None,
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(f"Shopee API error on {path}: {error or status_code} - {message}")
        self.path = path
        self.message = message
        self.error = error
        self.status_code = status_code
        self.request_id = request_id


@dataclass(frozen=True)
class ShopeeCredentials:
    """Partner application credentials."""
    partner_id: str
    partner_key: str
    api_url: str
    timeout: float = 30.0

    @classmethod
    def from_settings(cls, config: Settings = default_settings) -> "ShopeeCredentials":
        return cls(
            partner_id=config.shopee_partner_id,
            partner_key=config.shopee_partner_key,
            api_url=config.shopee_api_url.rstrip("/"),
            timeout=config.shopee_request_timeout,
        )


@dataclass(frozen=True)
class ShopeeShopAuth:
    """Shop-level authorization obtained through the OAuth callback."""
    access_token: str
    shop_id: int


def generate_sign(
    partner_key: str,
    partner_id: str,
    path: str,
    timestamp: int,
    access_token: Optional[str] = None,
    shop_id: Optional[int] = None,
) -> str:
    """
    HMAC-SHA256 signature required on every Shopee v2 call.

    The base string is partner_id + path + timestamp, followed by the access
    token and shop id for shop-level calls.
    """
    base_string = f"{partner_id}{path}{timestamp}"
    if access_token:
        base_string += access_token
    if shop_id:
        base_string += str(shop_id)
    return hmac.new(
        partner_key.encode("utf-8"), base_string.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def generate_auth_link(credentials: ShopeeCredentials, redirect_url: str, timestamp: Optional[int] = None) -> str:
    """OAuth partner authorization URL the seller is redirected to."""
    path = AUTH_PARTNER_PATH
    timestamp = timestamp or int(time.time())
    sign = generate_sign(credentials.partner_key, credentials.partner_id, path, timestamp)
    params = {
        "partner_id": credentials.partner_id,
        "timestamp": str(timestamp),
        "sign": sign,
        "redirect": redirect_url,
    }
    return f"{credentials.api_url}{path}?{urlencode(params)}"


def _send(
    session: requests.Session,
    method: str,
    url: str,
    path: str,
    query: Dict[str, str],
    body: Optional[Dict[str, Any]],
    timeout: float,
) -> Dict[str, Any]:
    """Issue a signed call and raise ShopeeAPIError on any failure."""
    __logger__.debug(f"Shopee Request: {method} {path} body: {body}")
    try:
        r = session.request(
            method,
            url,
            params=query,
            json=body if method == "POST" else None,
            timeout=timeout,
        )
    except requests.RequestException as e:
        __logger__.error(f"Shopee {method} transport error on {path}: {e}")
        raise ShopeeAPIError(path, str(e)) from e

    try:
        data = r.json()
    except ValueError:
        data = {}

    error = data.get("error") if isinstance(data, dict) else None
    if not r.ok or error:
        message = (data.get("message") if isinstance(data, dict) else None) or r.text
        __logger__.error(f"Shopee {method} error on {path}: {r.status_code} - {error} - {message}")
        raise ShopeeAPIError(
            path,
            message,
            error=error or None,
            status_code=r.status_code,
            request_id=data.get("request_id") if isinstance(data, dict) else None,
        )
    __logger__.debug(f"Shopee Response: {data}")
    return data


# ==================== PARTNER-LEVEL AUTH ====================

def _partner_post(
    credentials: ShopeeCredentials,
    path: str,
    body: Dict[str, Any],
    session: Optional[requests.Session] = None,
) -> Dict[str, Any]:
    timestamp = int(time.time())
    query = {
        "partner_id": credentials.partner_id,
        "timestamp": str(timestamp),
        "sign": generate_sign(credentials.partner_key, credentials.partner_id, path, timestamp),
    }
    return _send(
        session or requests.Session(),
        "POST",
        f"{credentials.api_url}{path}",
        path,
        query,
        body,
        credentials.timeout,
    )


def get_access_token(
    credentials: ShopeeCredentials,
    code: str,
    shop_id: int,
    session: Optional[requests.Session] = None,
) -> Dict[str, Any]:
    """Exchange the authorization code from the OAuth callback for shop tokens."""
    __logger__.info(f"Exchanging authorization code for shop {shop_id}")
    return _partner_post(
        credentials,
        TOKEN_GET_PATH,
        {"code": code, "shop_id": shop_id, "partner_id": int(credentials.partner_id)},
        session,
    )


def refresh_access_token(
    credentials: ShopeeCredentials,
    refresh_token: str,
    shop_id: int,
    session: Optional[requests.Session] = None,
) -> Dict[str, Any]:
    """Trade a refresh token for a new access/refresh token pair."""
    __logger__.info(f"Refreshing access token for shop {shop_id}")
    return _partner_post(
        credentials,
        ACCESS_TOKEN_REFRESH_PATH,
        {"refresh_token": refresh_token, "shop_id": shop_id, "partner_id": int(credentials.partner_id)},
        session,
    )


# ==================== SHOP-LEVEL CLIENT ====================

class ShopeeClient:
    """Signed client for shop-level Shopee v2 endpoints."""

    def __init__(
        self,
        credentials: ShopeeCredentials,
        auth: ShopeeShopAuth,
        session: Optional[requests.Session] = None,
    ):
        self.credentials = credentials
        self.auth = auth
        self.session = session or requests.Session()

    def _common_params(self, path: str) -> Dict[str, str]:
        timestamp = int(time.time())
        sign = generate_sign(
            self.credentials.partner_key,
            self.credentials.partner_id,
            path,
            timestamp,
            self.auth.access_token,
            self.auth.shop_id,
        )
        return {
            "partner_id": self.credentials.partner_id,
            "timestamp": str(timestamp),
            "access_token": self.auth.access_token,
            "shop_id": str(self.auth.shop_id),
            "sign": sign,
        }

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        query = self._common_params(path)
        if params:
            query.update({k: str(v) for k, v in params.items() if v is not None})
        return _send(
            self.session,
            method,
            f"{self.credentials.api_url}{path}",
            path,
            query,
            body,
            self.credentials.timeout,
        )

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute GET request to Shopee API."""
        return self._request("GET", path, params=params)

    def post(self, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute POST request to Shopee API."""
        return self._request("POST", path, body=body or {})
