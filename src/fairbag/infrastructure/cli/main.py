import click

from fairbag.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_remove,
    cart_show,
    cart_update,
)
from fairbag.infrastructure.cli.order_commands import (
    order_cancel,
    order_confirm,
    order_create,
    order_deliver,
    order_list,
    order_picked_up,
    order_pickup_ready,
    order_ship,
    order_show,
    order_track,
    order_verify_pickup,
)
from fairbag.infrastructure.cli.saved_commands import (
    saved_add,
    saved_clear,
    saved_list,
    saved_move,
    saved_remove,
)
from fairbag.infrastructure.cli.shipping_commands import shipping_distance, shipping_quote
from fairbag.infrastructure.cli.state import CliState
from fairbag.infrastructure.config import Settings
from fairbag.infrastructure.logging import bind_user, configure_logging


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """FairBag — multi-vendor cart and orders"""
    if ctx.obj is None:
        settings = Settings()
        configure_logging(settings.log_level, settings.log_json)
        bind_user(settings.user_id)
        ctx.obj = CliState(settings)
    ctx.call_on_close(ctx.obj.close)


@cli.group()
def cart() -> None:
    """Manage your cart."""


@cli.group()
def saved() -> None:
    """Manage items saved for later."""


@cli.group()
def order() -> None:
    """Place and manage orders."""


@cli.group()
def shipping() -> None:
    """Distance and shipping quotes."""


# Register subcommands
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_update)
saved.add_command(saved_add)
saved.add_command(saved_clear)
saved.add_command(saved_list)
saved.add_command(saved_move)
saved.add_command(saved_remove)
order.add_command(order_cancel)
order.add_command(order_confirm)
order.add_command(order_create)
order.add_command(order_deliver)
order.add_command(order_list)
order.add_command(order_picked_up)
order.add_command(order_pickup_ready)
order.add_command(order_ship)
order.add_command(order_show)
order.add_command(order_track)
order.add_command(order_verify_pickup)
shipping.add_command(shipping_distance)
shipping.add_command(shipping_quote)
