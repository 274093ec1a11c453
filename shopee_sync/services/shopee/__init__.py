"""Shopee services package."""

from shopee_sync.services.shopee.client import (
    ShopeeAPIError,
    ShopeeClient,
    ShopeeCredentials,
    ShopeeShopAuth,
    generate_auth_link,
    generate_sign,
    get_access_token,
    refresh_access_token,
)

from shopee_sync.services.shopee.products import (
    add_model,
    delete_model,
    get_model_list,
    update_model,
    update_stock,
    update_tier_variation,
)

__all__ = [
    # Client
    'ShopeeAPIError',
    'ShopeeClient',
    'ShopeeCredentials',
    'ShopeeShopAuth',
    'generate_auth_link',
    'generate_sign',
    'get_access_token',
    'refresh_access_token',
    # Products
    'add_model',
    'delete_model',
    'get_model_list',
    'update_model',
    'update_stock',
    'update_tier_variation',
]
