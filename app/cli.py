"""
Custom Flask CLI commands.

These commands are registered with the app by the application factory.
Run them with ``flask <command_name>``.

Usage::

    flask db-check                         # Verify connectivity and tables
    flask init-db                          # Create tables from the models
    flask init-db --drop                   # Drop and recreate (destroys data)
    flask purge-exports --older-than 3600  # Remove leftover export files
"""

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.models.organization import Department, Employee
from app.services import export_service

# Tables the application expects to find.
_EXPECTED_TABLES = ("departments", "employees")


@click.command("db-check")
@with_appcontext
def db_check_command():
    """
    Verify database connectivity and confirm the expected tables exist.

    Runs a trivial query against the configured database, then lists
    the application tables and their row counts.  Useful for confirming
    DATABASE_URL is correct and ``flask init-db`` has been run.
    """
    click.echo("=" * 60)
    click.echo("  Employee Management: Database Connectivity Check")
    click.echo("=" * 60)

    click.echo(f"\n  Connection string: {db.engine.url.render_as_string(hide_password=True)}\n")

    # -- Step 1: Basic connectivity ----------------------------------------
    click.echo("[1/2] Testing connection...")
    try:
        db.session.execute(db.text("SELECT 1"))
        click.secho("      ✓ Connected successfully.", fg="green")
    except SQLAlchemyError as exc:
        click.secho(f"      ✗ Connection failed: {exc}", fg="red")
        click.echo("\n  Troubleshooting tips:")
        click.echo("    - Is the database server running?")
        click.echo("    - Does your DATABASE_URL match your server config?")
        return

    # -- Step 2: Tables and row counts -------------------------------------
    click.echo("[2/2] Checking tables...\n")
    existing = set(inspect(db.engine).get_table_names())
    missing = [name for name in _EXPECTED_TABLES if name not in existing]
    if missing:
        click.secho(f"      ✗ Missing tables: {', '.join(missing)}", fg="red")
        click.echo("        Have you run `flask init-db`?")
        return

    click.echo(f"      {'departments':>12} : {Department.query.count()} row(s)")
    click.echo(f"      {'employees':>12} : {Employee.query.count()} row(s)")

    click.echo("\n" + "=" * 60)
    click.secho("  All checks passed. Database is ready.", fg="green", bold=True)
    click.echo("=" * 60)


@click.command("init-db")
@click.option("--drop", is_flag=True, help="Drop existing tables first.")
@with_appcontext
def init_db_command(drop: bool):
    """Create all tables defined by the models."""
    if drop:
        click.confirm("This will delete ALL data. Continue?", abort=True)
        db.drop_all()
        click.echo("Dropped existing tables.")
    db.create_all()
    click.secho("Database tables created.", fg="green")


@click.command("purge-exports")
@click.option(
    "--older-than",
    "older_than",
    default=3600,
    show_default=True,
    type=float,
    help="Delete export files older than this many seconds.",
)
@with_appcontext
def purge_exports_command(older_than: float):
    """Remove export files whose download cleanup never ran."""
    export_dir = current_app.config["EXPORT_DIR"]
    removed = export_service.purge_stale_exports(export_dir, older_than)
    click.echo(f"Removed {removed} export file(s) from {export_dir}")


def register_commands(app):
    """Register all custom CLI commands with the Flask application."""
    app.cli.add_command(db_check_command)
    app.cli.add_command(init_db_command)
    app.cli.add_command(purge_exports_command)
