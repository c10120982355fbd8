"""
Pytest configuration and fixtures.

The application runs against a shared in-memory SQLite database; tables are
recreated for every test.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FILE"] = os.path.join(os.path.dirname(__file__), "test.log")

import pytest
from fastapi.testclient import TestClient

from app.database import Base, engine, SessionLocal
from app.main import app
from app.companies.models import Company
from app.products.models import Product, ProductCategory
from app.security.passwords import hash_password
from app.users.models import User, UserRole
from app.vendor.models import Vendor, VendorStatus


PASSWORD = "demo123"


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def make_company(db, code, name="Kiosko"):
    company = Company(code=code, name=name, location="Reñaca")
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


def make_user(db, company, username, role=UserRole.OPERATOR, is_active=True):
    user = User(
        company_id=company.id,
        username=username,
        hashed_password=hash_password(PASSWORD),
        full_name=username.title(),
        role=role,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_product(db, company, name, price, category, is_active=True):
    product = Product(
        company_id=company.id,
        name=name,
        price=price,
        category=category,
        is_active=is_active,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def make_vendor(db, company, name="Carlos"):
    vendor = Vendor(
        company_id=company.id,
        name=name,
        status=VendorStatus.INACTIVE,
        total_sales_today=0,
    )
    db.add(vendor)
    db.commit()
    db.refresh(vendor)
    return vendor


def login(client, company_code, username, password=PASSWORD):
    response = client.post("/auth/login", json={
        "company_id": company_code,
        "username": username,
        "password": password,
    })
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def company(db):
    return make_company(db, "BK-001", "Kiosko Playa Reñaca")


@pytest.fixture
def other_company(db):
    return make_company(db, "BK-002", "Kiosko Con Con")


@pytest.fixture
def admin(db, company):
    return make_user(db, company, "admin", UserRole.ADMIN)


@pytest.fixture
def operator(db, company):
    return make_user(db, company, "operator", UserRole.OPERATOR)


@pytest.fixture
def admin_headers(client, company, admin):
    return login(client, company.code, "admin")


@pytest.fixture
def operator_headers(client, company, operator):
    return login(client, company.code, "operator")


@pytest.fixture
def other_headers(client, db, other_company):
    make_user(db, other_company, "admin", UserRole.ADMIN)
    return login(client, other_company.code, "admin")


@pytest.fixture
def chair(db, company):
    return make_product(db, company, "Silla de Playa", 5000, ProductCategory.RENTAL)


@pytest.fixture
def umbrella(db, company):
    return make_product(db, company, "Quitasol Grande", 10000, ProductCategory.RENTAL)


@pytest.fixture
def ice_cream(db, company):
    return make_product(db, company, "Helado de Vainilla", 100, ProductCategory.VENDOR)


@pytest.fixture
def soda(db, company):
    return make_product(db, company, "Bebida Coca-Cola", 1500, ProductCategory.VENDOR)


@pytest.fixture
def vendor(db, company):
    return make_vendor(db, company)
