# Overview: Flask CLI command groups for bootstrap, staff and stock maintenance.

# backend/zlagoda/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init
#   Create tables and seed a manager (E001) and a cashier (E002). Idempotent.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Employees:
# - python -m flask employees list [--role cashier]
# - python -m flask employees create --id E003 --surname Shevchenko --name Olena --role cashier ...
#   Prompts for anything omitted.
#
# Inventory:
# - python -m flask inventory restock 000000000001 50 [--price 12.50]
#   Receive a batch; --price moves the whole stock to the new batch price.

from datetime import date

import click
from flask.cli import with_appcontext

from .errors import AppError
from .extensions import db
from .models import Employee
from .services import employee_service, store_product_service
from .validation import coerce_decimal, enforce_rules_employee

DEFAULT_PASSWORD = "Password123!"

DEFAULT_EMPLOYEES = [
    {
        "id_employee": "E001", "surname": "Koval", "name": "Iryna", "patronymic": None,
        "role": "manager", "salary": coerce_decimal("salary", "30000"),
        "date_of_birth": date(1985, 4, 12), "date_of_start": date(2020, 1, 15),
        "phone_number": "+380501112233", "city": "Kyiv", "street": "Khreshchatyk 1", "zip_code": "01001",
        "email": "manager@zlagoda.local", "password": DEFAULT_PASSWORD,
    },
    {
        "id_employee": "E002", "surname": "Bondar", "name": "Taras", "patronymic": None,
        "role": "cashier", "salary": coerce_decimal("salary", "18000"),
        "date_of_birth": date(1998, 9, 3), "date_of_start": date(2022, 6, 1),
        "phone_number": "+380671234567", "city": "Kyiv", "street": "Sahaidachnoho 10", "zip_code": "04070",
        "email": "cashier@zlagoda.local", "password": DEFAULT_PASSWORD,
    },
]


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create tables and seed default staff accounts."""
    click.echo("START Initializing Zlagoda...")
    db.create_all()

    for data in DEFAULT_EMPLOYEES:
        if db.session.get(Employee, data["id_employee"]) is not None:
            click.echo(f"WARN  Employee {data['id_employee']} already exists, skipping...")
            continue
        employee_service.create_employee(patch=dict(data))
        click.echo(f"PASS Created {data['role']} {data['id_employee']} ({data['email']})")

    click.echo("\nDefault Credentials (CHANGE IN PRODUCTION!):")
    for data in DEFAULT_EMPLOYEES:
        click.echo(f"   {data['role']:<8} -> {data['email']} / {DEFAULT_PASSWORD}")


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
    click.echo("PASS Database reset complete. Run 'flask system init' to seed staff.")


@click.group('employees')
def employees_group():
    """Staff inspection and bootstrap."""


@employees_group.command('list')
@click.option('--role', type=click.Choice(['manager', 'cashier']), help='Filter by role')
@with_appcontext
def list_employees(role):
    """List employees sorted by surname."""
    employees = employee_service.list_employees(role=role)["items"]
    if not employees:
        click.echo("No employees found.")
        return

    click.echo("\n" + "=" * 90)
    click.echo(f"{'ID':<6} {'Surname':<20} {'Name':<15} {'Role':<9} {'Email':<30} {'Active'}")
    click.echo("=" * 90)
    for e in employees:
        click.echo(
            f"{e['id_employee']:<6} {e['surname']:<20} {e['name']:<15} {e['role']:<9} "
            f"{(e['email'] or '-'):<30} {'Yes' if e['is_active'] else 'No'}"
        )


@employees_group.command('create')
@click.option('--id', 'id_employee', prompt=True, help='Employee ID, e.g. E003')
@click.option('--surname', prompt=True)
@click.option('--name', prompt=True)
@click.option('--role', prompt=True, type=click.Choice(['manager', 'cashier']))
@click.option('--salary', prompt=True)
@click.option('--date-of-birth', prompt=True, type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option('--date-of-start', prompt=True, type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option('--phone', 'phone_number', prompt=True, help='+380XXXXXXXXX')
@click.option('--city', prompt=True)
@click.option('--street', prompt=True)
@click.option('--zip-code', prompt=True)
@click.option('--email', default=None, help='Login email (omit to create without credentials)')
@click.option('--password', default=None, help='Login password (requires --email)')
@with_appcontext
def create_employee(id_employee, surname, name, role, salary, date_of_birth, date_of_start,
                    phone_number, city, street, zip_code, email, password):
    """Create an employee, optionally with login credentials."""
    try:
        patch = {
            "id_employee": id_employee, "surname": surname, "name": name, "role": role,
            "salary": coerce_decimal("salary", salary),
            "date_of_birth": date_of_birth.date(), "date_of_start": date_of_start.date(),
            "phone_number": phone_number, "city": city, "street": street, "zip_code": zip_code,
            "email": email, "password": password,
        }
        enforce_rules_employee(patch, partial=False)
        employee = employee_service.create_employee(patch=patch)
    except AppError as e:
        db.session.rollback()
        raise click.ClickException(e.message)

    click.echo(f"PASS Created {employee.role} {employee.id_employee} ({employee.surname} {employee.name})")


@click.group('inventory')
def inventory_group():
    """Stock maintenance."""


@inventory_group.command('restock')
@click.argument('upc')
@click.argument('quantity', type=int)
@click.option('--price', default=None, help='New batch price for the whole stock')
@with_appcontext
def restock(upc, quantity, price):
    """Receive QUANTITY units of UPC."""
    try:
        record = store_product_service.restock(
            upc=upc,
            quantity=quantity,
            price=coerce_decimal("price", price) if price is not None else None,
        )
    except AppError as e:
        db.session.rollback()
        raise click.ClickException(e.message)

    click.echo(f"PASS {record.upc}: quantity={record.quantity} price={record.selling_price}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(employees_group)
    app.cli.add_command(inventory_group)
