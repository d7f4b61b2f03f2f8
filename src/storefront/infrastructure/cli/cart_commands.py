"""CLI commands for the shopping cart."""

from __future__ import annotations

import click

from storefront.application.apply_coupon import ShowCartHandler
from storefront.application.manage_cart import AddToCartHandler, UpdateCartHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import (
    cart_repository,
    coupon_engine,
    pricing_engine,
    product_repository,
    settings,
)
from storefront.infrastructure.cli.display import show_cart

session_option = click.option(
    "--session", "session_id", default="default", show_default=True, help="Cart session id."
)


@click.command("add")
@session_option
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--variant", "variant_id", default=None, help="Variant ID for products with options.")
@click.option("--quantity", default=1, show_default=True, type=int, help="Units to add.")
def cart_add(session_id: str, product_id: str, variant_id: str | None, quantity: int) -> None:
    """Add a product to the cart."""
    cfg = settings()
    handler = AddToCartHandler(
        cart_repo=cart_repository(cfg),
        product_repo=product_repository(cfg),
        pricing=pricing_engine(cfg),
    )

    try:
        dto = handler.handle(session_id, product_id, quantity=quantity, variant_id=variant_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Added {quantity} x product {product_id} to cart '{session_id}'")
    show_cart(dto)


@click.command("update")
@session_option
@click.option("--variant", "variant_id", required=True, help="Variant ID of the cart line.")
@click.option("--quantity", required=True, type=int, help="New quantity (0 removes the line).")
def cart_update(session_id: str, variant_id: str, quantity: int) -> None:
    """Change the quantity of a cart line."""
    cfg = settings()
    handler = UpdateCartHandler(cart_repo=cart_repository(cfg), pricing=pricing_engine(cfg))

    try:
        dto = handler.set_quantity(session_id, variant_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    show_cart(dto)


@click.command("remove")
@session_option
@click.option("--variant", "variant_id", required=True, help="Variant ID of the cart line.")
def cart_remove(session_id: str, variant_id: str) -> None:
    """Remove a line from the cart."""
    cfg = settings()
    handler = UpdateCartHandler(cart_repo=cart_repository(cfg), pricing=pricing_engine(cfg))

    try:
        dto = handler.remove(session_id, variant_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    show_cart(dto)


@click.command("show")
@session_option
def cart_show(session_id: str) -> None:
    """Show the cart with its current price summary."""
    cfg = settings()
    handler = ShowCartHandler(
        cart_repo=cart_repository(cfg),
        coupons=coupon_engine(cfg),
        pricing=pricing_engine(cfg),
    )

    try:
        dto = handler.handle(session_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    show_cart(dto)


@click.command("clear")
@session_option
def cart_clear(session_id: str) -> None:
    """Empty the cart."""
    cfg = settings()
    handler = UpdateCartHandler(cart_repo=cart_repository(cfg), pricing=pricing_engine(cfg))

    try:
        handler.clear(session_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Cart '{session_id}' cleared.")
