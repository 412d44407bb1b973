"""CLI commands for distance and shipping quotes."""

from __future__ import annotations

import click

from fairbag.application.quote_checkout import QuoteCheckoutHandler
from fairbag.domain.exceptions import DomainException
from fairbag.domain.service.geo import (
    EARTH_RADIUS_MILES,
    LEGACY_EARTH_RADIUS_MILES,
    distance_between_zips,
    format_distance,
)
from fairbag.infrastructure.cli.state import CliState, pass_state


@click.command("distance")
@click.argument("zip_a")
@click.argument("zip_b")
@click.option("--legacy-radius", is_flag=True, default=False, help="Use a 3959 mi Earth radius.")
def shipping_distance(zip_a: str, zip_b: str, legacy_radius: bool) -> None:
    """Approximate distance between two ZIP codes."""
    radius = LEGACY_EARTH_RADIUS_MILES if legacy_radius else EARTH_RADIUS_MILES
    miles = distance_between_zips(zip_a, zip_b, radius)
    if miles is None:
        raise click.ClickException(f"No location data for {zip_a} or {zip_b}.")
    click.echo(f"{miles:.1f} mi ({format_distance(miles)})")


@click.command("quote")
@click.option("--vendor", "vendor_id", required=True, help="Vendor whose cart items to quote.")
@click.option("--zip", "customer_zip", default=None, help="Your ZIP code.")
@click.option("--pickup", is_flag=True, default=False, help="Quote for local pickup.")
@pass_state
def shipping_quote(state: CliState, vendor_id: str, customer_zip: str | None, pickup: bool) -> None:
    """Shipping and pickup options for one vendor's cart items."""
    cart = state.session.cart
    group = cart.group_for(vendor_id)
    if group is None:
        raise click.ClickException(f"Your cart has no items from vendor {vendor_id}.")

    handler = QuoteCheckoutHandler(default_pickup_radius=state.settings.pickup_radius_miles)
    try:
        if customer_zip:
            cart.set_customer_zip(customer_zip)
        quote = handler.handle(group, state.vendor(vendor_id), cart.customer_zip, pickup)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{quote.vendor_name}: {quote.item_count} item(s)")
    if quote.distance:
        click.echo(f"  Distance:      {quote.distance}")
    click.echo(f"  Local pickup:  {'available' if quote.pickup_available else 'not available'}")
    if quote.free_shipping:
        click.echo("  Free shipping applies.")
    click.echo(f"  {'Subtotal':<14} {quote.subtotal:>10}")
    click.echo(f"  {'Pickup' if quote.pickup_selected else 'Shipping':<14} {quote.shipping:>10}")
    click.echo(f"  {'Total':<14} {quote.total:>10}")
