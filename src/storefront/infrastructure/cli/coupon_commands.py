"""CLI commands for coupons."""

from __future__ import annotations

from datetime import timezone

import click

from storefront.application.apply_coupon import ApplyCouponHandler
from storefront.application.manage_catalog import AddCouponHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import (
    cart_repository,
    coupon_engine,
    coupon_repository,
    pricing_engine,
    settings,
)
from storefront.infrastructure.cli.cart_commands import session_option
from storefront.infrastructure.cli.display import show_cart


@click.command("apply")
@session_option
@click.option("--code", required=True, help="Coupon code.")
def coupon_apply(session_id: str, code: str) -> None:
    """Apply a coupon to the cart."""
    cfg = settings()
    handler = ApplyCouponHandler(
        cart_repo=cart_repository(cfg),
        coupons=coupon_engine(cfg),
        pricing=pricing_engine(cfg),
    )

    try:
        descriptor, dto = handler.apply(session_id, code)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Coupon {descriptor.code} applied ({descriptor.describe()} off)")
    show_cart(dto)


@click.command("remove")
@session_option
def coupon_remove(session_id: str) -> None:
    """Remove the applied coupon from the cart."""
    cfg = settings()
    handler = ApplyCouponHandler(
        cart_repo=cart_repository(cfg),
        coupons=coupon_engine(cfg),
        pricing=pricing_engine(cfg),
    )

    try:
        dto = handler.remove(session_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Coupon removed.")
    show_cart(dto)


@click.command("add")
@click.option("--code", required=True, help="Coupon code (stored upper-case).")
@click.option(
    "--type", "kind", required=True, type=click.Choice(["percentage", "fixed"]), help="Discount type."
)
@click.option("--value", required=True, help="Percent off or fixed amount off.")
@click.option("--min-order", default=None, help="Minimum cart subtotal.")
@click.option("--expires", default=None, type=click.DateTime(), help="Expiry (UTC).")
@click.option("--max-uses", default=None, type=int, help="Redemption cap.")
def coupon_add(code, kind, value, min_order, expires, max_uses) -> None:
    """Create a coupon."""
    handler = AddCouponHandler(coupon_repo=coupon_repository())

    try:
        coupon = handler.handle(
            code=code,
            kind=kind,
            value=value,
            min_order_amount=min_order,
            expires_at=expires.replace(tzinfo=timezone.utc) if expires else None,
            max_uses=max_uses,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Coupon {coupon.code} created ({coupon.descriptor().describe()} off)")


@click.command("list")
def coupon_list() -> None:
    """List all coupons."""
    try:
        coupons = coupon_repository().list_all()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not coupons:
        click.echo("No coupons found.")
        return

    click.echo(f"{'Code':<14} {'Discount':>10} {'Min order':>10} {'Used':>9} {'Expires':<17} Active")
    click.echo("-" * 70)
    for c in coupons:
        used = f"{c.used_count}/{c.max_uses}" if c.max_uses is not None else str(c.used_count)
        minimum = f"{c.min_order_amount:.2f}" if c.min_order_amount is not None else "-"
        expires = c.expires_at.strftime("%Y-%m-%d %H:%M") if c.expires_at else "-"
        click.echo(
            f"{c.code:<14} {c.descriptor().describe():>10} {minimum:>10} {used:>9} "
            f"{expires:<17} {'yes' if c.is_active else 'no'}"
        )
