from typing import List, Optional

from fastapi import APIRouter, Depends, status, UploadFile, File
from sqlalchemy.orm import Session

from app.database import get_db
from app.products import schemas, service
from app.products.models import ProductCategory
from app.users.auth import get_current_user
from app.users.models import User
from app.users.permissions import admin_required


router = APIRouter()


@router.get("/", response_model=List[schemas.ProductOut])
def list_products(
    category: Optional[ProductCategory] = None,
    is_active: Optional[bool] = None,
    name: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return service.get_products(
        db,
        current_user.company_id,
        category=category,
        is_active=is_active,
        name=name,
    )


@router.post(
    "/import",
    response_model=schemas.ProductImportResult
)
def import_products(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    return service.import_products(db, current_user.company_id, file)


@router.get("/{product_id}", response_model=schemas.ProductOut)
def read_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return service.get_product_or_404(db, current_user.company_id, product_id)


@router.post(
    "/",
    response_model=schemas.ProductOut,
    status_code=status.HTTP_201_CREATED
)
def create_product(
    product: schemas.ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    return service.create_product(db, current_user.company_id, product)


@router.put("/{product_id}", response_model=schemas.ProductOut)
def update_product(
    product_id: int,
    product: schemas.ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    return service.update_product(db, current_user.company_id, product_id, product)


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    return service.delete_product(db, current_user.company_id, product_id)
