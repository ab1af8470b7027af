"""
Pytest fixtures for Zlagoda backend tests.

The database is a temporary SQLite *file* so that worker threads in the
concurrency tests share it. Tables are emptied before every test.
"""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from zlagoda import create_app
from zlagoda.extensions import db
from zlagoda.models import Category, CustomerCard, Employee, Product, StoreProduct
from zlagoda.services.auth_service import hash_password

PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    db_path = tmp_path_factory.mktemp("db") / "zlagoda-test.sqlite3"
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{db_path}",
        'SQLALCHEMY_ENGINE_OPTIONS': {"connect_args": {"timeout": 5, "check_same_thread": False}},
        'CHECKOUT_LOCK_TIMEOUT_MS': 5000,
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture(scope='function')
def db_session(app):
    """Fresh tables for each test, inside an app context."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        db.session.rollback()
        db.session.remove()


@pytest.fixture(scope='function')
def client(app, db_session):
    return app.test_client()


def make_employee(session, id_employee: str, role: str, *, email: str | None = None, **overrides) -> Employee:
    data = dict(
        id_employee=id_employee,
        surname=f"Surname{id_employee}",
        name=f"Name{id_employee}",
        role=role,
        salary=Decimal("20000"),
        date_of_birth=date(1990, 1, 1),
        date_of_start=date(2020, 1, 1),
        phone_number="+380501234567",
        city="Kyiv",
        street="Main 1",
        zip_code="01001",
        email=email,
        password_hash=hash_password(PASSWORD) if email else None,
        is_active=True,
    )
    data.update(overrides)
    employee = Employee(**data)
    session.add(employee)
    session.commit()
    return employee


@pytest.fixture(scope='function')
def manager(db_session):
    return make_employee(db_session, "E001", "manager", email="manager@test.local", surname="Koval")


@pytest.fixture(scope='function')
def cashier(db_session):
    return make_employee(db_session, "E002", "cashier", email="cashier@test.local", surname="Bondar")


@pytest.fixture(scope='function')
def other_cashier(db_session):
    return make_employee(db_session, "E003", "cashier", email="cashier2@test.local", surname="Melnyk")


@pytest.fixture(scope='function')
def seed(db_session, manager, cashier):
    """
    Catalog, stock and one loyalty card.

    milk: 5 units at 10.00; kefir: 10 at 25.50; juice: 1 at 40.00.
    """
    dairy = Category(category_name="Dairy")
    drinks = Category(category_name="Beverages")
    db_session.add_all([dairy, drinks])
    db_session.flush()

    milk = Product(category_number=dairy.category_number, product_name="Milk", producer="Farm")
    kefir = Product(category_number=dairy.category_number, product_name="Kefir", producer="Farm")
    juice = Product(category_number=drinks.category_number, product_name="Juice", producer="Orchard")
    db_session.add_all([milk, kefir, juice])
    db_session.flush()

    db_session.add_all([
        StoreProduct(upc="000000000001", id_product=milk.id_product, selling_price=Decimal("10.00"),
                     quantity=5, promotional_product=False),
        StoreProduct(upc="000000000002", id_product=kefir.id_product, selling_price=Decimal("25.50"),
                     quantity=10, promotional_product=False),
        StoreProduct(upc="000000000003", id_product=juice.id_product, selling_price=Decimal("40.00"),
                     quantity=1, promotional_product=False),
        CustomerCard(card_number="100000000001", cust_surname="Shevchenko", cust_name="Olena",
                     phone_number="+380671112233", city="Kyiv", percent=10),
    ])
    db_session.commit()

    return SimpleNamespace(
        milk="000000000001",
        kefir="000000000002",
        juice="000000000003",
        card="100000000001",
        dairy=dairy.category_number,
        drinks=drinks.category_number,
        milk_product=milk.id_product,
    )


def get_auth_token(client, email: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for an employee."""
    response = client.post('/api/auth/login', json={'email': email, 'password': password})
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def manager_headers(client, manager):
    return auth_headers(get_auth_token(client, "manager@test.local"))


@pytest.fixture(scope='function')
def cashier_headers(client, cashier):
    return auth_headers(get_auth_token(client, "cashier@test.local"))


@pytest.fixture(scope='function')
def other_cashier_headers(client, other_cashier):
    return auth_headers(get_auth_token(client, "cashier2@test.local"))
