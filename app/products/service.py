import re
from typing import Optional

import pandas as pd
from fastapi import HTTPException, UploadFile
from loguru import logger
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.products import models, schemas
from app.products.models import Product, ProductCategory


def get_product(db: Session, company_id: int, product_id: int):
    return (
        db.query(Product)
        .filter(Product.company_id == company_id, Product.id == product_id)
        .first()
    )


def get_product_or_404(db: Session, company_id: int, product_id: int) -> Product:
    product = get_product(db, company_id, product_id)
    if not product:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return product


def get_sellable_product(
    db: Session,
    company_id: int,
    product_id: int,
    category: ProductCategory
) -> Product:
    """
    Product lookup used by the rental and vendor flows.
    The product must belong to the tenant, be active and match the flow's category.
    """
    product = get_product_or_404(db, company_id, product_id)

    if not product.is_active:
        raise HTTPException(
            status_code=400,
            detail=f"Product '{product.name}' is not active"
        )

    if product.category != category:
        raise HTTPException(
            status_code=400,
            detail=f"Product '{product.name}' is not a {category.value} product"
        )

    return product


def get_products(
    db: Session,
    company_id: int,
    category: Optional[ProductCategory] = None,
    is_active: Optional[bool] = None,
    name: Optional[str] = None,
):
    query = db.query(Product).filter(Product.company_id == company_id)

    if category:
        query = query.filter(Product.category == category)

    if is_active is not None:
        query = query.filter(Product.is_active.is_(is_active))

    if name:
        query = query.filter(
            func.lower(Product.name).contains(name.lower().strip())
        )

    return query.order_by(Product.name.asc()).all()


def _name_taken(db: Session, company_id: int, name: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Product).filter(
        Product.company_id == company_id,
        func.lower(Product.name) == name.lower().strip()
    )
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    return query.first() is not None


def create_product(db: Session, company_id: int, product: schemas.ProductCreate):
    if _name_taken(db, company_id, product.name):
        raise HTTPException(
            status_code=400,
            detail=f"Product '{product.name}' already exists."
        )

    db_product = models.Product(
        company_id=company_id,
        name=product.name.strip(),
        description=product.description,
        price=product.price,
        category=product.category,
        is_active=product.is_active,
    )

    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    logger.info(f"Product created: {db_product.name} ({db_product.category.value})")
    return db_product


def update_product(
    db: Session,
    company_id: int,
    product_id: int,
    product: schemas.ProductUpdate
):
    db_product = get_product_or_404(db, company_id, product_id)

    update_data = product.model_dump(exclude_unset=True)

    if "name" in update_data and update_data["name"] is not None:
        if _name_taken(db, company_id, update_data["name"], exclude_id=product_id):
            raise HTTPException(
                status_code=400,
                detail="Product with same name already exists."
            )
        update_data["name"] = update_data["name"].strip()

    for field, value in update_data.items():
        if value is None and field not in ("description",):
            continue
        setattr(db_product, field, value)

    db.commit()
    db.refresh(db_product)
    return db_product


def delete_product(db: Session, company_id: int, product_id: int):
    """Soft delete: the product stays referenced by past rentals and sales."""
    db_product = get_product_or_404(db, company_id, product_id)
    db_product.is_active = False
    db.commit()
    logger.info(f"Product deactivated: {db_product.name}")
    return {"message": "Product deleted successfully"}


# --------------------------------------------------
# Helper: Clean price values from spreadsheets
# --------------------------------------------------
def clean_price(value):
    """
    Accepts: int, float, str ($1,500 / $1.500 / -500), or NaN
    Returns: float

    A dot followed by groups of exactly three digits ("1.500", "12.000.000")
    is read as a thousands separator.
    """
    if value is None or pd.isna(value):
        return 0.0

    if isinstance(value, (int, float)):
        return float(value)

    value = str(value).strip()
    if re.fullmatch(r"-?\$?\s*\d{1,3}(\.\d{3})+", value):
        value = value.replace(".", "")

    # keep the sign so negative prices are rejected, not flipped
    value = re.sub(r"[^\d.\-]", "", value)

    try:
        return float(value)
    except ValueError:
        return 0.0


REQUIRED_IMPORT_COLUMNS = {"name", "price", "category"}


def import_products(db: Session, company_id: int, file: UploadFile):
    """
    Bulk load products from a .csv/.xlsx sheet with columns
    name, price, category (RENTAL | VENDOR) and optional description.
    Rows with a missing name, unknown category, non-positive price or an
    already existing name are skipped.
    """
    filename = (file.filename or "").lower()

    try:
        if filename.endswith(".csv"):
            df = pd.read_csv(file.file)
        elif filename.endswith((".xlsx", ".xls")):
            df = pd.read_excel(file.file)
        else:
            raise HTTPException(
                status_code=400,
                detail="Invalid file type. Upload .csv, .xlsx or .xls"
            )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Could not read file: {str(e)}")

    # Normalize column names
    df.columns = [str(c).strip().lower() for c in df.columns]

    if not REQUIRED_IMPORT_COLUMNS.issubset(df.columns):
        raise HTTPException(
            status_code=400,
            detail=f"File must contain columns: {sorted(REQUIRED_IMPORT_COLUMNS)}"
        )

    existing_names = {
        name.lower().strip()
        for (name,) in db.query(Product.name).filter(Product.company_id == company_id).all()
    }

    products_to_add = []
    skipped = 0
    errors = []

    for index, row in df.iterrows():
        line = index + 2  # header is line 1

        if pd.isna(row["name"]) or pd.isna(row["category"]):
            skipped += 1
            errors.append(f"Line {line}: name and category are required")
            continue

        name = str(row["name"]).strip()
        category_key = str(row["category"]).strip().upper()

        if category_key not in ProductCategory.__members__:
            skipped += 1
            errors.append(f"Line {line}: unknown category '{row['category']}'")
            continue

        price = clean_price(row["price"])
        if price <= 0:
            skipped += 1
            errors.append(f"Line {line}: price must be positive")
            continue

        if name.lower() in existing_names:
            skipped += 1
            continue

        description = None
        if "description" in df.columns and not pd.isna(row["description"]):
            description = str(row["description"]).strip()

        products_to_add.append(
            Product(
                company_id=company_id,
                name=name,
                description=description,
                price=price,
                category=ProductCategory[category_key],
                is_active=True,
            )
        )
        existing_names.add(name.lower())

    try:
        db.add_all(products_to_add)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Product import: {len(products_to_add)} created, {skipped} skipped")
    return {
        "created": len(products_to_add),
        "skipped": skipped,
        "errors": errors,
    }
