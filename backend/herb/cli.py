# Overview: Flask CLI command group for bootstrapping and inspecting the data document.

# backend/herb/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask data <command> [options]
#
# - python -m flask data init [--force]
#   Create the data document with empty collections (--force resets an existing one).
# - python -m flask data seed
#   Create the default admin and sales-rep users if they are missing.
# - python -m flask data stats
#   Count entities per collection.
# - python -m flask data audit
#   Check order totals, duplicate ids and negative stock. Exit code 1 on findings.
# - python -m flask data permissions [--role ROLE_ID]
#   List permission codes by category (optionally only those a role grants by default).

import click
from flask.cli import with_appcontext

from .services.document_store import COLLECTIONS, default_document, get_store
from .services.collection_service import USERS, find_entity, insert_entity
from .services.ledger_service import append_system_log
from .permissions import (
    ADMIN_ROLE_ID,
    DEFAULT_ROLE_PERMISSIONS,
    ROLE_NAMES,
    SALES_REP_ROLE_ID,
    PermissionCategory,
    get_permissions_by_category,
)
from .validation import ValidationError, normalize_order_items, order_total


DEFAULT_USERS = (
    {
        "id": "admin-user-id",
        "username": "admin",
        "email": "admin@herb.com",
        "full_name": "System Administrator",
        "role_id": ADMIN_ROLE_ID,
    },
    {
        "id": "sales-rep-1",
        "username": "sales1",
        "email": "sales1@herb.com",
        "full_name": "Sales Representative 1",
        "role_id": SALES_REP_ROLE_ID,
    },
    {
        "id": "sales-rep-2",
        "username": "sales2",
        "email": "sales2@herb.com",
        "full_name": "Sales Representative 2",
        "role_id": SALES_REP_ROLE_ID,
    },
)


@click.group('data')
def data_group():
    """Data document bootstrap and inspection commands."""


@data_group.command('init')
@click.option('--force', is_flag=True, help='Reset an existing document (deletes all data)')
@with_appcontext
def init_data(force):
    """Create the data document with every collection present."""
    store = get_store()
    document = store.snapshot()
    has_data = any(document.get(name) for name in COLLECTIONS)

    if has_data and not force:
        click.echo("PASS Data document already initialized (use --force to reset)")
        return

    if force:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    with store.transaction() as current:
        current.clear()
        current.update(default_document())
    click.echo(f"PASS Data document initialized: {', '.join(COLLECTIONS)}")


@data_group.command('seed')
@with_appcontext
def seed_data():
    """Create the default admin and sales-rep users (idempotent)."""
    created = 0
    with get_store().transaction() as document:
        for user in DEFAULT_USERS:
            if find_entity(document, USERS, user["id"]) is not None:
                click.echo(f"PASS User exists: {user['username']}")
                continue
            insert_entity(document, USERS, {
                **user,
                "role_name": ROLE_NAMES[user["role_id"]],
                "status": "active",
            })
            created += 1
            click.echo(f"PASS Created user: {user['username']} ({ROLE_NAMES[user['role_id']]})")

        if created:
            append_system_log(
                document,
                action="users.seeded",
                entity_type="user",
                entity_id=None,
                actor_user_id="system",
                details={"created": created},
            )

    click.echo(f"\nDONE {created} user(s) created")


@data_group.command('stats')
@with_appcontext
def data_stats():
    """Count entities per collection."""
    document = get_store().snapshot()

    click.echo(f"\n{'Collection':<20} {'Count':>8}")
    click.echo("-" * 30)
    for name in COLLECTIONS:
        click.echo(f"{name:<20} {len(document[name]):>8}")
    click.echo("")


def audit_document(document: dict) -> list[str]:
    """Consistency findings: duplicate ids, negative stock, totals that disagree with items."""
    findings = []

    for name in COLLECTIONS:
        seen = set()
        for entity in document[name]:
            if not isinstance(entity, dict):
                findings.append(f"{name}: non-object entry")
                continue
            entity_id = entity.get("id")
            if entity_id in seen:
                findings.append(f"{name}: duplicate id {entity_id}")
            seen.add(entity_id)

    for product in document["products"]:
        if not isinstance(product, dict):
            continue
        stock = product.get("stock_quantity")
        if isinstance(stock, (int, float)) and not isinstance(stock, bool) and stock < 0:
            findings.append(f"products: {product.get('id')} has negative stock {stock}")

    for name in ("orders", "customer_orders"):
        for order in document[name]:
            if not isinstance(order, dict) or "items" not in order:
                continue
            try:
                expected = order_total(normalize_order_items(order["items"]))
            except ValidationError as e:
                findings.append(f"{name}: {order.get('id')} has invalid items ({e})")
                continue
            stored = order.get("total_amount")
            if not isinstance(stored, (int, float)) or round(float(stored), 2) != expected:
                findings.append(
                    f"{name}: {order.get('id')} total_amount {stored!r} != sum of items {expected}"
                )

    return findings


@data_group.command('audit')
@with_appcontext
def audit_data():
    """Check the document for inconsistencies. Exit code 1 on findings."""
    findings = audit_document(get_store().snapshot())

    if not findings:
        click.echo("PASS No inconsistencies found")
        return

    for finding in findings:
        click.echo(f"FAIL {finding}")
    click.echo(f"\n Total: {len(findings)} finding(s)")
    raise SystemExit(1)


@data_group.command('permissions')
@click.option('--role', 'role_id', default=None, help='Only codes granted by default to this role id')
def list_permissions(role_id):
    """List permission codes grouped by category."""
    if role_id is not None and role_id not in DEFAULT_ROLE_PERMISSIONS:
        raise click.BadParameter(f"Unknown role id '{role_id}'", param_hint="--role")
    granted = set(DEFAULT_ROLE_PERMISSIONS[role_id]) if role_id else None

    for category in sorted(vars(PermissionCategory)):
        if category.startswith("_"):
            continue
        perms = [
            perm for perm in get_permissions_by_category(getattr(PermissionCategory, category))
            if granted is None or perm[0] in granted
        ]
        if not perms:
            continue
        click.echo(f"\n{category}")
        for code, name, description, _ in perms:
            click.echo(f"  {code:<20} {name:<20} {description}")
    click.echo("")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(data_group)
