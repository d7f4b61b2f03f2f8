"""Shared table formatting for cart and order output."""

from __future__ import annotations

import click

from storefront.application.dto import CartDTO, OrderDTO


def show_cart(dto: CartDTO) -> None:
    if not dto.lines:
        click.echo("Cart is empty.")
        return

    click.echo(f"  {'Variant':<12} {'Product':<24} {'Qty':>4} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*68}")
    for line in dto.lines:
        click.echo(
            f"  {line.variant_id:<12} {line.product_name:<24} {line.quantity:>4} "
            f"{line.unit_price:>12} {line.line_total:>12}"
        )
        if line.options:
            click.echo(f"  {'':<12} {line.options}")
    click.echo(f"  {'-'*68}")
    _summary_row("Subtotal", dto.summary.subtotal)
    if dto.coupon_code:
        _summary_row(f"Discount ({dto.coupon_code})", f"-{dto.summary.discount}")
    _summary_row("Shipping", dto.summary.shipping)
    if not dto.summary.tax.endswith(" 0.00"):
        _summary_row("Tax", dto.summary.tax)
    _summary_row("Total", dto.summary.total)
    click.echo(f"  Items: {dto.total_items}")


def show_order(dto: OrderDTO) -> None:
    click.echo(f"Order {dto.order_number}  (status={dto.status_label})")
    click.echo(f"Customer: {dto.customer_name}  {dto.customer_email}")
    if dto.customer_phone:
        click.echo(f"Phone:    {dto.customer_phone}")
    if dto.customer_address:
        click.echo(f"Address:  {dto.customer_address}")
    click.echo(f"Payment:  {dto.payment_method}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()
    click.echo(f"  {'Product':<24} {'Qty':>5} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*56}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<24} {item.quantity:>5} {item.unit_price:>12} {item.line_total:>12}"
        )
        if item.options:
            click.echo(f"  {item.options}")
    click.echo(f"  {'-'*56}")
    _summary_row("Subtotal", dto.subtotal, width=42)
    if not dto.discount.endswith(" 0.00"):
        _summary_row("Discount", f"-{dto.discount}", width=42)
    _summary_row("Shipping", dto.shipping, width=42)
    if not dto.tax.endswith(" 0.00"):
        _summary_row("Tax", dto.tax, width=42)
    _summary_row("Order Total", dto.total, width=42)
    if dto.notes:
        click.echo()
        click.echo(f"Notes: {dto.notes}")


def _summary_row(label: str, value: str, width: int = 54) -> None:
    click.echo(f"  {label:<{width}} {value:>14}")
