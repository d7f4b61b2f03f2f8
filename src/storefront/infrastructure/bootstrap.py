"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from storefront.application.submit_order import CheckoutPolicy, SubmitOrderHandler
from storefront.domain.service.coupon_service import CouponEngine
from storefront.domain.service.inventory_ledger import InventoryLedger
from storefront.domain.service.pricing_service import PricingEngine, ShippingPolicy
from storefront.infrastructure.config import Settings, load_settings
from storefront.infrastructure.persistence.json_cart_repository import JsonCartRepository
from storefront.infrastructure.persistence.json_coupon_repository import (
    JsonCouponRepository,
)
from storefront.infrastructure.persistence.json_inventory_repository import (
    JsonInventoryRepository,
)
from storefront.infrastructure.persistence.json_order_repository import JsonOrderRepository
from storefront.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from storefront.infrastructure.realtime.in_process_change_feed import InProcessChangeFeed

# One feed per process, shared by every order repository built here.
_FEED = InProcessChangeFeed()


def settings() -> Settings:
    return load_settings()


def change_feed() -> InProcessChangeFeed:
    return _FEED


def product_repository(cfg: Settings | None = None) -> JsonProductRepository:
    cfg = cfg or settings()
    return JsonProductRepository(cfg.data_dir / "products.json", cfg.store_timeout)


def order_repository(cfg: Settings | None = None) -> JsonOrderRepository:
    cfg = cfg or settings()
    return JsonOrderRepository(cfg.data_dir / "orders.json", _FEED, cfg.store_timeout)


def coupon_repository(cfg: Settings | None = None) -> JsonCouponRepository:
    cfg = cfg or settings()
    return JsonCouponRepository(cfg.data_dir / "coupons.json", cfg.store_timeout)


def inventory_repository(cfg: Settings | None = None) -> JsonInventoryRepository:
    cfg = cfg or settings()
    return JsonInventoryRepository(cfg.data_dir / "inventory.json", cfg.store_timeout)


def cart_repository(cfg: Settings | None = None) -> JsonCartRepository:
    cfg = cfg or settings()
    return JsonCartRepository(cfg.data_dir / "carts.json", cfg.store_timeout)


def pricing_engine(cfg: Settings | None = None) -> PricingEngine:
    cfg = cfg or settings()
    policy = ShippingPolicy(
        enabled=cfg.shipping_enabled,
        free_threshold=cfg.free_shipping_threshold,
        flat_fee=cfg.shipping_fee,
    )
    return PricingEngine(policy, tax_rate=cfg.tax_rate)


def coupon_engine(cfg: Settings | None = None) -> CouponEngine:
    return CouponEngine(coupon_repository(cfg))


def checkout_policy(cfg: Settings | None = None) -> CheckoutPolicy:
    cfg = cfg or settings()
    return CheckoutPolicy(
        store_name=cfg.store_name,
        enabled_methods=cfg.enabled_methods,
        whatsapp_phone=cfg.whatsapp_phone,
        strict_stock=cfg.strict_stock,
        reconcile_partial_failures=cfg.reconcile_partial_failures,
    )


def submit_order_handler(cfg: Settings | None = None) -> SubmitOrderHandler:
    cfg = cfg or settings()
    return SubmitOrderHandler(
        order_repo=order_repository(cfg),
        cart_repo=cart_repository(cfg),
        pricing=pricing_engine(cfg),
        coupons=coupon_engine(cfg),
        ledger=InventoryLedger(inventory_repository(cfg)),
        policy=checkout_policy(cfg),
    )
