import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import settings
from storefront.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_remove,
    cart_show,
    cart_update,
)
from storefront.infrastructure.cli.checkout_commands import checkout
from storefront.infrastructure.cli.coupon_commands import (
    coupon_add,
    coupon_apply,
    coupon_list,
    coupon_remove,
)
from storefront.infrastructure.cli.order_commands import (
    order_list,
    order_show,
    order_status,
    order_track,
)
from storefront.infrastructure.cli.product_commands import product_add, product_list
from storefront.infrastructure.cli.stock_commands import stock_set, stock_show
from storefront.infrastructure.logging import configure_logging


@click.group()
@click.option("--log-level", default=None, help="Override the configured log level.")
def cli(log_level: str | None) -> None:
    """Storefront — cart, checkout and order tracking"""
    try:
        cfg = settings()
    except DomainException as exc:
        raise click.ClickException(str(exc))
    configure_logging(log_level or cfg.log_level, json=cfg.json_logs)


@cli.group()
def cart() -> None:
    """Manage a shopping cart."""


@cli.group()
def coupon() -> None:
    """Apply and administer coupons."""


@cli.group()
def order() -> None:
    """Look up and manage orders."""


@cli.group()
def product() -> None:
    """Manage the catalog."""


@cli.group()
def stock() -> None:
    """Manage stock levels."""


# Register subcommands
cart.add_command(cart_add)
cart.add_command(cart_update)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_clear)
coupon.add_command(coupon_apply)
coupon.add_command(coupon_remove)
coupon.add_command(coupon_add)
coupon.add_command(coupon_list)
order.add_command(order_show)
order.add_command(order_track)
order.add_command(order_status)
order.add_command(order_list)
product.add_command(product_add)
product.add_command(product_list)
stock.add_command(stock_set)
stock.add_command(stock_show)
cli.add_command(checkout)
