"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from storefront.application.manage_catalog import AddProductHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import product_repository, settings


def _parse_variant(raw: str) -> tuple[str, list[tuple[str, str]]]:
    """Parse 'blue-xl:Color=Blue;Size=XL' into ('blue-xl', [(Color, Blue), (Size, XL)])."""
    if ":" not in raw:
        raise click.BadParameter(f"Invalid variant '{raw}'. Expected 'ID:Name=Value;Name=Value'.")
    variant_id, spec = raw.split(":", 1)
    options: list[tuple[str, str]] = []
    for pair in spec.split(";"):
        pair = pair.strip()
        if not pair:
            continue
        if "=" not in pair:
            raise click.BadParameter(f"Invalid option '{pair}' in variant '{variant_id}'.")
        name, value = pair.split("=", 1)
        options.append((name.strip(), value.strip()))
    return variant_id.strip(), options


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--image", default=None, help="Image URL.")
@click.option("--variant", "variants", multiple=True, help="Variant as 'ID:Color=Red;Size=XL'.")
def product_add(name: str, price: str, image: str | None, variants: tuple[str, ...]) -> None:
    """Add a new product to the catalog."""
    cfg = settings()
    handler = AddProductHandler(product_repo=product_repository(cfg), currency=cfg.currency)

    parsed = dict(_parse_variant(v) for v in variants)
    try:
        product = handler.handle(name=name, price=price, image=image, variants=parsed or None)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' added at {product.price}")
    for v in product.variants:
        click.echo(f"  variant {v.id}: {', '.join(f'{o.name}: {o.value}' for o in v.options)}")


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    try:
        products = product_repository().list_all()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<24} {'Price':>12}  Variants")
    click.echo("-" * 56)
    for p in products:
        variants = ", ".join(v.id for v in p.variants) or "-"
        click.echo(f"{p.id:<6} {p.name:<24} {str(p.price):>12}  {variants}")
