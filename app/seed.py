#!/usr/bin/env python3
"""
Load demo data: one company, an admin and an operator, the rental and vendor
catalog, three inactive vendors and a couple of sample rentals.

    python -m app.seed            # wipe and reload
    python -m app.seed --no-reset # only add missing demo data
"""
import argparse

from loguru import logger
from sqlalchemy.orm import Session

from app.database import Base, SessionLocal, engine
from app.companies.models import Company
from app.products.models import Product, ProductCategory
from app.rentals.models import Rental, RentalItem, RentalStatus
from app.security.passwords import hash_password
from app.users.models import User, UserRole
from app.vendor.models import Vendor, VendorStatus
from app.clock import utcnow


DEMO_COMPANY = {
    "code": "BK-001",
    "name": "Kiosko Playa Reñaca",
    "location": "Reñaca, Viña del Mar, Chile",
}

DEMO_PASSWORD = "demo123"

DEMO_USERS = [
    ("admin", "Juan Pérez (Admin)", UserRole.ADMIN),
    ("operator", "María González (Operador)", UserRole.OPERATOR),
]

RENTAL_PRODUCTS = [
    ("Silla de Playa", "Silla cómoda para disfrutar el día", 5000),
    ("Quitasol Grande", "Quitasol grande para 4-6 personas", 10000),
    ("Reposera", "Reposera reclinable", 7000),
    ("Carpa Familiar", "Carpa espaciosa para toda la familia", 15000),
]

VENDOR_PRODUCTS = [
    ("Helado de Vainilla", "Helado artesanal sabor vainilla", 2500),
    ("Helado de Chocolate", "Helado artesanal sabor chocolate", 2500),
    ("Helado de Frutilla", "Helado artesanal sabor frutilla", 2500),
    ("Bebida Coca-Cola", "Coca-Cola 500ml fría", 1500),
    ("Bebida Sprite", "Sprite 500ml fría", 1500),
    ("Agua Mineral", "Agua mineral 500ml", 1000),
    ("Papas Fritas", "Papas fritas tamaño grande", 2000),
    ("Paleta de Frutas", "Paleta helada de frutas naturales", 1500),
]

DEMO_VENDORS = [
    ("Carlos Ramírez", "+56912345678"),
    ("Sofía Torres", "+56987654321"),
    ("Diego Muñoz", None),
]


def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def seed(db: Session) -> Company:
    company = db.query(Company).filter(Company.code == DEMO_COMPANY["code"]).first()
    if not company:
        company = Company(**DEMO_COMPANY)
        db.add(company)
        db.flush()
    logger.info(f"Company ready: {company.code}")

    hashed = hash_password(DEMO_PASSWORD)
    users = {}
    for username, full_name, role in DEMO_USERS:
        user = (
            db.query(User)
            .filter(User.company_id == company.id, User.username == username)
            .first()
        )
        if not user:
            user = User(
                company_id=company.id,
                username=username,
                hashed_password=hashed,
                full_name=full_name,
                role=role,
            )
            db.add(user)
        users[username] = user
    db.flush()
    logger.info(f"Users ready: {', '.join(users)}")

    existing = {
        name for (name,) in db.query(Product.name).filter(Product.company_id == company.id)
    }
    for category, catalog in (
        (ProductCategory.RENTAL, RENTAL_PRODUCTS),
        (ProductCategory.VENDOR, VENDOR_PRODUCTS),
    ):
        for name, description, price in catalog:
            if name in existing:
                continue
            db.add(Product(
                company_id=company.id,
                name=name,
                description=description,
                price=price,
                category=category,
                is_active=True,
            ))
    db.flush()
    logger.info("Catalog ready")

    if not db.query(Vendor).filter(Vendor.company_id == company.id).first():
        for name, phone in DEMO_VENDORS:
            db.add(Vendor(
                company_id=company.id,
                name=name,
                phone=phone,
                status=VendorStatus.INACTIVE,
                total_sales_today=0,
            ))
        logger.info(f"Vendors created: {len(DEMO_VENDORS)}")

    if not db.query(Rental).filter(Rental.company_id == company.id).first():
        rental_products = (
            db.query(Product)
            .filter(Product.company_id == company.id, Product.category == ProductCategory.RENTAL)
            .order_by(Product.id)
            .all()
        )
        samples = [
            ("Familia Rojas", [(rental_products[0], 2), (rental_products[1], 1)], RentalStatus.ACTIVE),
            ("Pedro Soto", [(rental_products[2], 1)], RentalStatus.CLOSED),
        ]
        for customer_name, lines, status in samples:
            items = [
                RentalItem(
                    product_id=product.id,
                    quantity=quantity,
                    unit_price=product.price,
                    subtotal=quantity * product.price,
                )
                for product, quantity in lines
            ]
            db.add(Rental(
                company_id=company.id,
                user_id=users["operator"].id,
                customer_name=customer_name,
                status=status,
                total_amount=sum(i.subtotal for i in items),
                end_time=utcnow() if status == RentalStatus.CLOSED else None,
                items=items,
            ))
        logger.info(f"Sample rentals created: {len(samples)}")

    db.commit()
    return company


def main():
    parser = argparse.ArgumentParser(description="Load PlayaManager demo data.")
    parser.add_argument(
        "--no-reset", action="store_true",
        help="Keep existing tables and rows; only add missing demo data"
    )
    args = parser.parse_args()

    if args.no_reset:
        Base.metadata.create_all(bind=engine)
    else:
        logger.warning("Dropping and recreating all tables")
        reset_database()

    db = SessionLocal()
    try:
        company_code = seed(db).code
    finally:
        db.close()

    logger.info(f"Seed completed. Login with company {company_code}, user admin / {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
