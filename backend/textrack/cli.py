# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/textrack/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: python -m flask --app textrack <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask --app textrack system init-db
#   Create any missing tables (idempotent).
# - python -m flask --app textrack system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Product inspection:
# - python -m flask --app textrack products list [--q rojo]
#   List live products, optionally filtered.
#
# Sales history:
# - python -m flask --app textrack history list --limit 20
#   List the most recent archived orders.
# - python -m flask --app textrack history clear --yes
#   Delete the entire sales history.
#
# Reports:
# - python -m flask --app textrack reports monthly --year 2025 --month 3 [--output report.txt]
#   Print (or write) the monthly text report.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .services import analytics_service, export_service, history_service
from .services.lifecycle_service import InventoryState
from .validation import ValidationError
from .time_utils import today


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables ready.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('products')
def products_group():
    """Live product inspection commands."""


@products_group.command('list')
@click.option('--q', 'term', default=None, help='Case-insensitive search term')
@with_appcontext
def list_products_cli(term):
    """
    List live products, newest first.

    Example:
        flask products list
        flask products list --q rojo
    """
    products = InventoryState.load().filtered(term)
    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Client':<24} {'Product':<16} {'Progress':<10} {'Status':<10} {'Due':<10}")
    click.echo("-" * 80)
    for p in products:
        progress = f"{p['quantity_completed']}/{p['quantity']}"
        click.echo(
            f"{p['id']:<6} {p['client_name'][:24]:<24} {p['product_type'][:16]:<16} "
            f"{progress:<10} {analytics_service.status_label(p['status']):<10} {p['due_date']:<10}"
        )
    click.echo(f"\nTotal: {len(products)} product(s)")


@click.group('history')
def history_group():
    """Sales history commands."""


@history_group.command('list')
@click.option('--limit', type=int, default=None, help='Rows to show (default from config)')
@with_appcontext
def list_history_cli(limit):
    """List the most recent archived orders."""
    rows = history_service.list_sales_history(limit)
    if not rows:
        click.echo("No sales history yet.")
        return

    for r in rows:
        click.echo(
            f"{r['archived_at']}  {r['action']:<9} #{r['original_product_id']:<5} "
            f"{r['client_name']} - {r['product_type']} "
            f"{r['quantity_completed']}/{r['quantity']} "
            f"{export_service.format_money(r['total_value_cents'])}"
        )
    completed = sum(1 for r in rows if r['action'] == 'completed')
    click.echo(f"\n{completed} completed, {len(rows) - completed} deleted")


@history_group.command('clear')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def clear_history_cli(yes):
    """DANGER: Delete the entire sales history. Cannot be undone."""
    if not yes:
        click.confirm("WARN This will DELETE ALL sales history. Are you sure?", abort=True)

    deleted = history_service.clear_all_history()
    click.echo(f"PASS Deleted {deleted} history row(s).")


@click.group('reports')
def reports_group():
    """Report generation commands."""


@reports_group.command('monthly')
@click.option('--year', type=int, default=None, help='Year (default: current)')
@click.option('--month', type=int, default=None, help='Month 1-12 (default: current)')
@click.option('--output', type=click.Path(dir_okay=False, writable=True), default=None, help='Write to file instead of stdout')
@with_appcontext
def monthly_report_cli(year, month, output):
    """Render the monthly text report."""
    now = today()
    year = year or now.year
    month = month or now.month

    try:
        rows = history_service.monthly_report(year, month)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint='--month')

    products = list(InventoryState.load().products)
    report = export_service.monthly_report_text(
        year, month, rows, products, company=current_app.config["COMPANY_NAME"]
    )

    if output:
        with open(output, "w", encoding="utf-8") as fh:
            fh.write(report)
        click.echo(f"PASS Report written to {output}")
    else:
        click.echo(report)


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(products_group)
    app.cli.add_command(history_group)
    app.cli.add_command(reports_group)
