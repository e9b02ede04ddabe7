"""
Management commands for running stock-ledger jobs outside HTTP
"""
import base64
import os
from dataclasses import asdict

import click
from flask.cli import with_appcontext

from .models import Business, Product, User, db
from .services.bulk_inward import BulkInwardService
from .services.errors import InventoryError
from .services.inventory_adjustment import InventorySnapshot


@click.group('inventory')
def inventory_cli():
    """Inventory placement and stock-ledger commands"""


@inventory_cli.command('import-inward')
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--business', 'business_id', required=True, help='Business the rows belong to')
@click.option('--user-email', required=True, help='Member recorded as the actor on every log entry')
@click.option('--dry-run', is_flag=True, help='Validate and classify rows, then roll everything back')
@click.option('--output', type=click.Path(dir_okay=False, writable=True), help='Where to write the result workbook')
@with_appcontext
def import_inward_command(file, business_id, user_email, dry_run, output):
    """Run a bulk inward spreadsheet through the same pipeline as the upload API"""
    business = db.session.get(Business, business_id)
    if business is None:
        raise click.ClickException(f"Business '{business_id}' not found")

    user = User.query.filter_by(email=user_email).first()
    membership = user.membership_for(business.id) if user else None
    if membership is None or not membership.is_active:
        raise click.ClickException(f"{user_email} is not an active member of {business_id}")

    try:
        with open(file, 'rb') as stream:
            summary = BulkInwardService(business.id, user).import_file(os.path.basename(file), stream, dry_run=dry_run)
    except InventoryError as exc:
        details = ''.join(f"\n  - {detail}" for detail in exc.details)
        raise click.ClickException(f"{exc.message}{details}") from exc

    print(f"{'🧪 Dry run' if dry_run else '✅ Import'}: {summary.message}")
    print(
        f"   total={summary.total} success={summary.success} "
        f"skipped={summary.skipped} errors={summary.errors} chunks={summary.committed_chunks}"
    )

    target = output or summary.result_file['name']
    with open(target, 'wb') as handle:
        handle.write(base64.b64decode(summary.result_file['data']))
    print(f"📄 Result workbook written to {target}")

    if summary.aborted:
        raise click.ClickException('Import aborted after a failed commit; see the result workbook')


@inventory_cli.command('stock')
@click.argument('sku')
@click.option('--business', 'business_id', required=True)
@with_appcontext
def stock_command(sku, business_id):
    """Print a product's inventory counters and derived stock"""
    product = Product.for_business(business_id).filter_by(sku=sku).first()
    if product is None:
        raise click.ClickException(f"Product '{sku}' not found in business '{business_id}'")

    snapshot = InventorySnapshot.from_row(product)
    print(f"📦 {product.sku} - {product.name}")
    for name, value in asdict(snapshot).items():
        print(f"   {name:<16} {value}")
    print(f"   {'physical_stock':<16} {snapshot.physical_stock}")
    print(f"   {'available_stock':<16} {snapshot.available_stock}")


def register_commands(app):
    """Register CLI commands"""
    app.cli.add_command(inventory_cli)
