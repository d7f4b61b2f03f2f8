"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from storefront.application.change_order_status import ChangeOrderStatusHandler, parse_status
from storefront.application.show_order import ListCustomerOrdersHandler, ShowOrderHandler
from storefront.application.track_order import TrackOrderHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import order_repository, settings
from storefront.infrastructure.cli.display import show_order


@click.command("show")
@click.option("--number", "order_number", required=True, help="Order number, e.g. ORD-LZ2K1X9Q.")
@click.option("--invoice", is_flag=True, default=False, help="Print the invoice instead.")
def order_show(order_number: str, invoice: bool) -> None:
    """Show an order (the thank-you page view)."""
    cfg = settings()
    handler = ShowOrderHandler(order_repo=order_repository(cfg), store_name=cfg.store_name)

    try:
        if invoice:
            click.echo(handler.invoice(order_number))
            return
        dto = handler.handle(order_number)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    show_order(dto)


@click.command("track")
@click.option("--number", "order_number", required=True, help="Order number.")
@click.option("--email", default=None, help="E-mail used for the order.")
def order_track(order_number: str, email: str | None) -> None:
    """Look up an order's status by number and e-mail."""
    handler = TrackOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_number, email)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    show_order(dto)


@click.command("status")
@click.option("--number", "order_number", required=True, help="Order number.")
@click.option("--status", "new_status", required=True, help="Target status, e.g. shipped.")
@click.option("--note", default=None, help="Note to append to the order.")
@click.option("--show-email", is_flag=True, default=False, help="Print the customer e-mail.")
def order_status(order_number: str, new_status: str, note: str | None, show_email: bool) -> None:
    """Move an order to a new status."""
    cfg = settings()
    handler = ChangeOrderStatusHandler(order_repo=order_repository(cfg), store_name=cfg.store_name)

    try:
        email = handler.handle(order_number, parse_status(new_status), note)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {order_number.strip().upper()} is now {parse_status(new_status).label}.")
    if show_email:
        click.echo()
        click.echo(f"To: {email.to}")
        click.echo(f"Subject: {email.subject}")
        click.echo()
        click.echo(email.body)


@click.command("list")
@click.option("--user", "user_id", required=True, help="Account id.")
def order_list(user_id: str) -> None:
    """List an account's orders, newest first."""
    try:
        orders = ListCustomerOrdersHandler(order_repo=order_repository()).handle(user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'Order':<16} {'Date':<20} {'Status':<18} {'Total':>14}")
    click.echo("-" * 71)
    for o in orders:
        click.echo(f"{o.order_number:<16} {o.created_at:<20} {o.status_label:<18} {o.total:>14}")
