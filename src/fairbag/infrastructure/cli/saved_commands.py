"""CLI commands for the saved-for-later list."""

from __future__ import annotations

import click

from fairbag.domain.exceptions import DomainException
from fairbag.infrastructure.cli.state import CliState, parse_options, pass_state

_OPTION_HELP = "Customization of the variant, as 'code=value[@delta]'. Repeatable."


@click.command("add")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--vendor", "vendor_id", default=None, help="Vendor ID (defaults to the product's).")
@click.option("--option", "options", multiple=True, help=_OPTION_HELP)
@pass_state
def saved_add(state: CliState, product_id: str, vendor_id: str | None, options: tuple[str, ...]) -> None:
    """Move a cart item to the saved-for-later list."""
    try:
        vendor_id = vendor_id or state.product(product_id).vendor_id
        saved = state.session.saved.save_for_later(product_id, vendor_id or "", parse_options(options))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if saved is None:
        raise click.ClickException(f"'{product_id}' is not in your cart.")
    click.echo(f"Saved {saved.item.product.name} for later (qty={saved.quantity}).")


@click.command("list")
@pass_state
def saved_list(state: CliState) -> None:
    """List saved items, newest first."""
    items = state.session.saved.saved_items
    if not items:
        click.echo("Nothing saved for later.")
        return

    click.echo(f"  {'Product':<24} {'Vendor':<20} {'Qty':>5} {'Saved':>17}")
    click.echo(f"  {'-'*69}")
    for saved in items:
        click.echo(
            f"  {saved.item.product.name:<24} {saved.item.vendor_name:<20} "
            f"{saved.quantity:>5} {saved.saved_at:%Y-%m-%d %H:%M}"
        )


@click.command("move")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--option", "options", multiple=True, help=_OPTION_HELP)
@pass_state
def saved_move(state: CliState, product_id: str, options: tuple[str, ...]) -> None:
    """Move a saved item back into the cart."""
    try:
        product = state.catalog().get_product(product_id)
        vendor = state.vendor(product.vendor_id) if product and product.vendor_id else None
        item = state.session.saved.move_to_cart(product_id, parse_options(options), vendor=vendor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if item is None:
        raise click.ClickException(f"'{product_id}' is not in your saved items.")
    click.echo(f"Moved {item.product.name} back to your cart (qty in cart={item.quantity}).")


@click.command("remove")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--option", "options", multiple=True, help=_OPTION_HELP)
@pass_state
def saved_remove(state: CliState, product_id: str, options: tuple[str, ...]) -> None:
    """Delete a saved item."""
    try:
        removed = state.session.saved.remove_item(product_id, parse_options(options))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not removed:
        raise click.ClickException(f"'{product_id}' is not in your saved items.")
    click.echo(f"Removed {product_id} from saved items.")


@click.command("clear")
@pass_state
def saved_clear(state: CliState) -> None:
    """Delete every saved item."""
    state.session.saved.clear_all()
    click.echo("Saved items cleared.")
