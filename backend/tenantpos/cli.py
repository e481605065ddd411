# Overview: Flask CLI command groups for schema bootstrap and tenant provisioning.

# backend/tenantpos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Tenant management:
# - python -m flask tenants list
#   List all tenants with staff counts.
# - python -m flask tenants create --name "Corner Shop" --owner-email owner@corner.test --owner-name "Owner"
#   Create a tenant and its first owner account (prompts for the password).
#
# Accounts:
# - python -m flask accounts create-operator --email ops@tenantpos.local --name "Ops"
#   Create a cross-tenant operator account. Operators cannot be created over HTTP.
#
# Shift inspection:
# - python -m flask shifts list --status open --limit 20
#   List recent shifts with optional filters.

import click
from flask.cli import with_appcontext

from .errors import DomainError
from .extensions import db
from .models import Account, Shift, Tenant
from .money import cents_to_decimal
from .permissions import Role
from .services import auth_service, tenant_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database schema ready.")


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


# =============================================================================
# TENANT MANAGEMENT COMMANDS
# =============================================================================

@click.group('tenants')
def tenants_group():
    """Tenant management commands."""


@tenants_group.command('list')
@with_appcontext
def list_tenants():
    """List all tenants."""
    tenants = db.session.query(Tenant).order_by(Tenant.id).all()

    if not tenants:
        click.echo("No tenants found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Name':<30} {'Slug':<20} {'Tier':<12} {'Active':<8} {'Staff'}")
    click.echo("="*80)

    for tenant in tenants:
        staff_count = db.session.query(Account).filter(
            Account.tenant_id == tenant.id,
            Account.deleted_at.is_(None),
        ).count()
        active_str = "Yes" if tenant.is_active else "No"
        click.echo(f"{tenant.id:<5} {tenant.name:<30} {tenant.slug:<20} {tenant.tier:<12} {active_str:<8} {staff_count}")

    click.echo("="*80 + "\n")


@tenants_group.command('create')
@click.option('--name', required=True, help='Tenant name')
@click.option('--slug', default=None, help='Unique slug (derived from name if omitted)')
@click.option('--tier', default='basic', type=click.Choice(['basic', 'pro', 'enterprise']))
@click.option('--owner-name', required=True, help='Name of the first owner account')
@click.option('--owner-email', required=True, help='Email of the first owner account')
@click.option('--owner-password', prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def create_tenant_cli(name, slug, tier, owner_name, owner_email, owner_password):
    """Create a tenant and its first owner."""
    try:
        tenant, owner = tenant_service.create_tenant(
            name,
            owner_name=owner_name,
            owner_email=owner_email,
            owner_password=owner_password,
            slug=slug,
            tier=tier,
        )
    except DomainError as exc:
        raise click.ClickException(exc.message)

    click.echo(f"PASS Created tenant: {tenant.name} (ID: {tenant.id}, Slug: {tenant.slug})")
    click.echo(f"PASS Owner account: {owner.email} (ID: {owner.id})")


# =============================================================================
# ACCOUNT COMMANDS
# =============================================================================

@click.group('accounts')
def accounts_group():
    """Account bootstrap commands."""


@accounts_group.command('create-operator')
@click.option('--email', required=True)
@click.option('--name', required=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def create_operator_cli(email, name, password):
    """Create a cross-tenant operator account."""
    try:
        account = auth_service.create_operator(email, name, password)
    except DomainError as exc:
        raise click.ClickException(exc.message)

    click.echo(f"PASS Created operator: {account.email} (ID: {account.id}, role: {Role.OPERATOR})")


# =============================================================================
# SHIFT COMMANDS
# =============================================================================

@click.group('shifts')
def shifts_group():
    """Shift inspection commands."""


@shifts_group.command('list')
@click.option('--tenant-id', type=int, default=None, help='Only shifts of this tenant')
@click.option('--status', type=click.Choice(['open', 'closed']), default=None)
@click.option('--limit', type=int, default=20, show_default=True)
@with_appcontext
def list_shifts(tenant_id, status, limit):
    """List recent shifts."""
    query = db.session.query(Shift)
    if tenant_id is not None:
        query = query.filter(Shift.tenant_id == tenant_id)
    if status is not None:
        query = query.filter(Shift.status == status)
    shifts = query.order_by(Shift.opened_at.desc(), Shift.id.desc()).limit(limit).all()

    if not shifts:
        click.echo("No shifts found.")
        return

    click.echo(f"{'ID':<6} {'Tenant':<7} {'Account':<8} {'Status':<8} {'Opening':>10} {'Variance':>10}")
    for shift in shifts:
        variance = cents_to_decimal(shift.variance_cents)
        click.echo(
            f"{shift.id:<6} {shift.tenant_id:<7} {shift.account_id:<8} {shift.status:<8} "
            f"{cents_to_decimal(shift.opening_cash_cents):>10} {variance if variance is not None else '-':>10}"
        )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(tenants_group)
    app.cli.add_command(accounts_group)
    app.cli.add_command(shifts_group)
