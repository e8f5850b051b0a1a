"""
Seed script: load demo departments and employees for local testing.

Registers a ``flask seed-demo-data`` CLI command.  The command is
idempotent: departments are matched by name and employees by email,
so running it twice does not create duplicates.

Usage::

    flask init-db
    flask seed-demo-data

Prerequisites:
    - The tables must exist (``flask init-db`` or ``flask db upgrade``).
"""

from decimal import Decimal

import click
from flask.cli import with_appcontext

from app.extensions import db
from app.models.organization import Department, Employee

# -- Demo data -------------------------------------------------------------
_DEPARTMENTS = [
    "Engineering",
    "Human Resources",
    "Marketing",
    "Finance",
    "Sales",
    "Operations",
]

# (name, email, department name, salary)
_EMPLOYEES = [
    ("John Doe", "john.doe@company.com", "Engineering", "75000.00"),
    ("Jane Smith", "jane.smith@company.com", "Engineering", "80000.00"),
    ("Mike Johnson", "mike.johnson@company.com", "Human Resources", "60000.00"),
    ("Sarah Wilson", "sarah.wilson@company.com", "Marketing", "65000.00"),
    ("David Brown", "david.brown@company.com", "Finance", "70000.00"),
    ("Lisa Davis", "lisa.davis@company.com", "Sales", "55000.00"),
    ("Tom Anderson", "tom.anderson@company.com", "Operations", "62000.00"),
    ("Emily Taylor", "emily.taylor@company.com", "Engineering", "85000.00"),
    ("Robert Miller", "robert.miller@company.com", "Human Resources", "58000.00"),
    ("Amanda Garcia", "amanda.garcia@company.com", "Marketing", "68000.00"),
]


@click.command("seed-demo-data")
@with_appcontext
def seed_demo_data_command():
    """Insert the demo departments and employees if they are missing."""
    click.echo("=" * 60)
    click.echo("  Employee Management: Seed Demo Data")
    click.echo("=" * 60)

    # -- Step 1: Departments -----------------------------------------------
    click.echo("\n[1/2] Seeding departments...")
    departments: dict[str, Department] = {}
    created = 0
    for name in _DEPARTMENTS:
        department = Department.query.filter_by(name=name).first()
        if department is None:
            department = Department(name=name)
            db.session.add(department)
            created += 1
        departments[name] = department
    # Flush to get ids before employees reference them.
    db.session.flush()
    click.secho(
        f"      ✓ {created} created, {len(_DEPARTMENTS) - created} already present.",
        fg="green",
    )

    # -- Step 2: Employees -------------------------------------------------
    click.echo("\n[2/2] Seeding employees...")
    created = 0
    for name, email, department_name, salary in _EMPLOYEES:
        if Employee.query.filter_by(email=email).first() is not None:
            continue
        db.session.add(
            Employee(
                name=name,
                email=email,
                department_id=departments[department_name].id,
                salary=Decimal(salary),
            )
        )
        created += 1
    db.session.commit()
    click.secho(
        f"      ✓ {created} created, {len(_EMPLOYEES) - created} already present.",
        fg="green",
    )

    click.echo("\n" + "=" * 60)
    click.secho("  Demo data is ready.", fg="green", bold=True)
    click.echo("=" * 60)


def register_seed_commands(app):
    """Register seed-related CLI commands with the Flask application."""
    app.cli.add_command(seed_demo_data_command)
