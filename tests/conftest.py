"""
Pytest configuration and fixtures for the laundry POS API.
"""
from decimal import Decimal

import pytest

from laundrydesk import create_app
from laundrydesk.config import TestConfig
from laundrydesk.extensions import db
from laundrydesk.model import Branch, Customer, Order, Service, User

PASSWORD = "Secret123!"


@pytest.fixture
def app():
    """App on an in-memory SQLite database, schema created fresh per test."""
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def branch(app):
    b = Branch(name="Mikocheni", code="MIK", address="Old Bagamoyo Rd")
    db.session.add(b)
    db.session.commit()
    return b


@pytest.fixture
def other_branch(app):
    b = Branch(name="Kariakoo", code="KKO")
    db.session.add(b)
    db.session.commit()
    return b


@pytest.fixture
def users(app, branch):
    """One active user per role; the admin has no branch."""
    created = {}
    for role in ("admin", "manager", "cashier", "processor"):
        u = User(username=role, full_name=f"{role.title()} User", role=role,
                 branch_id=None if role == "admin" else branch.id)
        u.set_password(PASSWORD)
        db.session.add(u)
        created[role] = u
    db.session.commit()
    return created


@pytest.fixture
def customer(app):
    c = Customer(name="Amina Juma", phone="+255700000001")
    db.session.add(c)
    db.session.commit()
    return c


@pytest.fixture
def services(app):
    wash = Service(name="Wash & Fold", base_price=Decimal("1000.00"))
    dry = Service(name="Dry Clean", base_price=Decimal("2000.00"))
    ironing = Service(name="Ironing", base_price=Decimal("500.00"),
                      price_per_item=Decimal("100.00"), price_per_kg=Decimal("1500.00"))
    db.session.add_all([wash, dry, ironing])
    db.session.commit()
    return {"wash": wash, "dry": dry, "ironing": ironing}


@pytest.fixture
def login(client, users):
    """Return a function that logs a role in and gives back auth headers."""
    def _login(role="admin"):
        r = client.post("/auth/login", json={"username": role, "password": PASSWORD})
        assert r.status_code == 200, r.get_json()
        token = r.get_json()["data"]["token"]
        return {"Authorization": f"Bearer {token}"}
    return _login


@pytest.fixture
def make_receipt(app, customer, services):
    """
    Insert line items sharing one receipt number directly.

    ``lines`` is a list of (total, paid, status) tuples.
    """
    def _make(lines, receipt_number="1-01-01 (26)", branch_id=None, **extra):
        items = []
        for total, paid, status in lines:
            o = Order(
                receipt_number=receipt_number, status=status,
                customer_id=customer.id, service_id=services["wash"].id,
                branch_id=branch_id, total_amount=Decimal(str(total)),
                paid_amount=Decimal(str(paid)), payment_status="not_paid",
                **extra,
            )
            db.session.add(o)
            items.append(o)
        db.session.commit()
        return items
    return _make
