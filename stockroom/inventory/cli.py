# stockroom/inventory/cli.py
"""``flask inventory`` commands for inspecting the remote inventory."""

import click
from flask import current_app
from flask.cli import with_appcontext

from stockroom.query_state import QueryState, SortField, SortOrder


def _new_session():
    return current_app.extensions['inventory'].factory()


@click.group("inventory")
def inventory_cli() -> None:
    """Inventory API commands."""


@inventory_cli.command("list")
@click.option("--search", default="", help="Free text search")
@click.option("--category", default=None, help="Only this category")
@click.option("--sort", type=click.Choice([f.value for f in SortField]), default=SortField.NAME.value)
@click.option("--order", type=click.Choice([o.value for o in SortOrder]), default=SortOrder.ASC.value)
@click.option("--page", type=click.IntRange(min=1), default=1)
@with_appcontext
def list_command(search: str, category, sort: str, order: str, page: int) -> None:
    inv = _new_session()
    view = inv.sync.fetch_page(QueryState.from_args(
        {"search": search, "category": category, "sort": sort, "order": order, "page": page}
    ))
    if view.error:
        click.echo(f"Error: {view.error}", err=True)
        raise SystemExit(1)
    click.echo(f"{'ID':<12} {'NAME':<30} {'QTY':>6} {'PRICE':>10}  CATEGORY")
    for p in view.items:
        click.echo(f"{str(p.id):<12} {p.name[:30]:<30} {p.quantity:>6} {p.price:>10}  {p.category or '-'}")
    click.echo(f"page {view.page}/{view.total_pages} ({view.total_items} products)")


@inventory_cli.command("categories")
@with_appcontext
def categories_command() -> None:
    for name in _new_session().sync.fetch_categories():
        click.echo(name)
