"""CLI commands for the shopper's cart."""

from __future__ import annotations

import click

from fairbag.application.cart_service import CartService
from fairbag.domain.exceptions import DomainException
from fairbag.infrastructure.cli.state import CliState, parse_options, pass_state

_OPTION_HELP = "Customization as 'code=value' or 'code=value@delta'. Repeatable."


def display_cart(cart: CartService) -> None:
    """Shared formatting: one table per vendor, then the cart total."""
    groups = cart.grouped_by_vendor()
    if not groups:
        click.echo("Your FairBag is empty.")
        return

    for group in groups:
        click.echo(f"{group.vendor_name}  (vendor={group.vendor_id})")
        click.echo(f"  {'Product':<24} {'Qty':>5} {'Price':>10} {'Total':>10}")
        click.echo(f"  {'-'*51}")
        for item in group.items:
            click.echo(
                f"  {item.product.name:<24} {item.quantity:>5} "
                f"{str(item.unit_price):>10} {str(item.line_total):>10}"
            )
            for c in item.customizations:
                click.echo(f"    + {c.label}: {c.value}")
        click.echo(f"  {'-'*51}")
        click.echo(f"  {'Vendor Total':<31} {str(group.total.rounded()):>20}")
        click.echo()

    click.echo(f"Items: {cart.get_cart_item_count()}   Cart Total: {cart.get_cart_total().rounded()}")


@click.command("add")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--qty", "quantity", default=1, show_default=True, type=click.IntRange(min=1))
@click.option("--option", "options", multiple=True, help=_OPTION_HELP)
@click.option("--proof", is_flag=True, default=False, help="Vendor sends a proof before making it.")
@pass_state
def cart_add(state: CliState, product_id: str, quantity: int, options: tuple[str, ...], proof: bool) -> None:
    """Add a product to the cart."""
    try:
        product = state.product(product_id)
        vendor = state.vendor_for(product, None)
        item = state.session.cart.add_item(
            product, vendor, quantity, parse_options(options), requires_proof=proof
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Added {product.name} from {vendor.name}  (qty in cart={item.quantity})")


@click.command("show")
@pass_state
def cart_show(state: CliState) -> None:
    """Show the cart grouped by vendor."""
    display_cart(state.session.cart)


@click.command("update")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--vendor", "vendor_id", default=None, help="Vendor ID (defaults to the product's).")
@click.option("--qty", "quantity", required=True, type=int, help="New quantity; 0 removes.")
@click.option("--option", "options", multiple=True, help=_OPTION_HELP)
@pass_state
def cart_update(
    state: CliState, product_id: str, vendor_id: str | None, quantity: int, options: tuple[str, ...]
) -> None:
    """Change the quantity of a cart item (every variant unless --option is given)."""
    try:
        vendor_id = vendor_id or state.product(product_id).vendor_id
        state.session.cart.update_quantity(
            product_id, vendor_id or "", quantity, parse_options(options)
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Updated {product_id} (qty={max(quantity, 0)}).")


@click.command("remove")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--vendor", "vendor_id", default=None, help="Vendor ID (defaults to the product's).")
@click.option("--option", "options", multiple=True, help=_OPTION_HELP)
@pass_state
def cart_remove(state: CliState, product_id: str, vendor_id: str | None, options: tuple[str, ...]) -> None:
    """Remove a product from the cart (every variant unless --option is given)."""
    try:
        vendor_id = vendor_id or state.product(product_id).vendor_id
        removed = state.session.cart.remove_item(product_id, vendor_id or "", parse_options(options))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not removed:
        raise click.ClickException(f"'{product_id}' is not in your cart.")
    click.echo(f"Removed {len(removed)} item(s).")


@click.command("clear")
@click.option("--vendor", "vendor_id", default=None, help="Only clear this vendor's items.")
@pass_state
def cart_clear(state: CliState, vendor_id: str | None) -> None:
    """Empty the cart, or one vendor's part of it."""
    if vendor_id:
        state.session.cart.clear_vendor_cart(vendor_id)
        click.echo(f"Cleared items from vendor {vendor_id}.")
    else:
        state.session.cart.clear_cart()
        click.echo("Cart cleared.")
