"""CLI commands for stock levels."""

from __future__ import annotations

import click

from storefront.application.manage_stock import SetStockHandler, ShowStockHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import inventory_repository


@click.command("set")
@click.option("--sku", required=True, help="Variant ID, or product ID for products without variants.")
@click.option("--quantity", required=True, type=int, help="Units in stock.")
def stock_set(sku: str, quantity: int) -> None:
    """Set the stock level for a product or variant."""
    handler = SetStockHandler(inventory_repo=inventory_repository())

    try:
        handler.handle(sku=sku, stock=quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock for '{sku}' set to {quantity}")


@click.command("show")
def stock_show() -> None:
    """Show current stock levels."""
    try:
        lines = ShowStockHandler(inventory_repo=inventory_repository()).handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No stock records found.")
        return

    click.echo(f"{'SKU':<20} {'Stock':>8}")
    click.echo("-" * 29)
    for line in lines:
        click.echo(f"{line.sku:<20} {line.stock:>8}")
