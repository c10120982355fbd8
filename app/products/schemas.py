from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from app.products.models import ProductCategory


# -------------------------------
# Base
# -------------------------------
class ProductBase(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., gt=0)
    category: ProductCategory


# -------------------------------
# Create
# -------------------------------
class ProductCreate(ProductBase):
    is_active: bool = True


# -------------------------------
# Update
# -------------------------------
class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    category: Optional[ProductCategory] = None
    is_active: Optional[bool] = None


# -------------------------------
# Output
# -------------------------------
class ProductOut(ProductBase):
    id: int
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductImportResult(BaseModel):
    created: int
    skipped: int
    errors: List[str] = []
