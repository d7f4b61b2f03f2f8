"""CLI command for checkout."""

from __future__ import annotations

import click

from storefront.domain.exceptions import DomainException
from storefront.domain.model.customer import CustomerInfo, PaymentMethod
from storefront.infrastructure.bootstrap import (
    cart_repository,
    coupon_engine,
    settings,
    submit_order_handler,
)
from storefront.infrastructure.cli.cart_commands import session_option


@click.command("checkout")
@session_option
@click.option("--name", required=True, help="Customer name.")
@click.option("--phone", required=True, help="Phone number with country code, e.g. +971501234567.")
@click.option("--email", default="", help="Customer e-mail.")
@click.option("--address", default="", help="Delivery address (required for home delivery).")
@click.option("--city", default="", help="City.")
@click.option("--notes", default="", help="Order notes.")
@click.option(
    "--payment",
    "payment",
    default=PaymentMethod.HOME_DELIVERY.value,
    show_default=True,
    type=click.Choice([m.value for m in PaymentMethod]),
    help="Payment / fulfillment channel.",
)
@click.option("--user", "user_id", default=None, help="Account id to attach the order to.")
def checkout(session_id, name, phone, email, address, city, notes, payment, user_id) -> None:
    """Submit the cart as an order."""
    cfg = settings()
    carts = cart_repository(cfg)
    handler = submit_order_handler(cfg)

    customer = CustomerInfo(
        name=name.strip(),
        phone=phone.strip(),
        email=email.strip(),
        address=address.strip(),
        city=city.strip(),
        notes=notes,
    )

    try:
        cart = carts.get(session_id)
        # Submission re-validates the code and reports why it no longer applies.
        discount = coupon_engine(cfg).lookup(cart.coupon_code) if cart.coupon_code else None
        result = handler.handle(cart, customer, PaymentMethod(payment), discount, user_id=user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if result.order_number:
        click.echo(f"Order {result.order_number} placed  (total={result.total})")
        click.echo(f"Next: {result.redirect_to}")
        email = result.confirmation
        if email is not None:
            click.echo(f"Confirmation e-mail for {email.to}: {email.subject}")
    else:
        click.echo(f"Send this order to the store to confirm it  (total={result.total}):")
        click.echo(result.handoff_url)
