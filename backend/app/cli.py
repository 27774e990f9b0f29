# Overview: Flask CLI command groups for bootstrap, inspection, and the yearly billing job.

# backend/app/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables that do not exist yet.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Company management (MULTI-TENANT):
# - python -m flask companies list
#   List all companies with their signup timestamps.
# - python -m flask companies create --title "Green Tech" [--registered-at 2023-01-15]
#   Create a new company (tenant).
#
# Billing:
# - python -m flask payments generate
#   Create the current year's twelve monthly subscription payments for every
#   company except the platform owner. Schedule once a year, at 00:00 on
#   January 1st (cron: "0 0 1 1 *"). NOT idempotent.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .services import payment_service, tenant_service
from .time_utils import parse_iso_datetime, to_utc_z


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables."""
    db.create_all()
    click.echo("Database tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.confirm("This deletes ALL data. Continue?", abort=True)
    db.drop_all()
    db.create_all()
    click.echo("Database reset.")


@click.group('companies')
def companies_group():
    """Company (tenant) management."""


@companies_group.command('list')
@with_appcontext
def list_companies_cli():
    """List all companies."""
    companies = tenant_service.list_companies()
    if not companies:
        click.echo("No companies found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Title':<40} {'Active':<8} {'Registered'}")
    click.echo("="*80)
    for company in companies:
        click.echo(f"{company.id:<5} {company.title:<40} {str(company.is_active):<8} {to_utc_z(company.registered_at)}")
    click.echo("="*80 + "\n")


@companies_group.command('create')
@click.option('--title', required=True, help='Company title (unique)')
@click.option('--registered-at', help='Signup timestamp (ISO-8601), defaults to now')
@with_appcontext
def create_company_cli(title, registered_at):
    """Create a new company."""
    try:
        company = tenant_service.create_company(
            title=title,
            registered_at=parse_iso_datetime(registered_at) if registered_at else None,
        )
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"Created company {company.title!r} (id={company.id}).")


@click.group('payments')
def payments_group():
    """Subscription billing commands."""


@payments_group.command('generate')
@with_appcontext
def generate_payments_cli():
    """Generate this year's monthly subscription payments."""
    try:
        created = payment_service.generate_monthly_payments()
    except Exception:
        current_app.logger.exception("Monthly payment generation failed")
        db.session.rollback()
        raise
    click.echo(f"Created {len(created)} payments.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(companies_group)  # Multi-tenant company management
    app.cli.add_command(payments_group)
