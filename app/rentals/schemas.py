from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.rentals.models import RentalStatus


# -------------------------------
# Items
# -------------------------------
class RentalItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    unit_price: float = Field(..., gt=0)


class RentalItemOut(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    unit_price: float
    subtotal: float

    model_config = ConfigDict(from_attributes=True)


# -------------------------------
# Rental requests
# -------------------------------
class RentalCreate(BaseModel):
    customer_name: str = Field(..., min_length=1)
    customer_id_photo: Optional[str] = None
    items: List[RentalItemCreate] = Field(..., min_length=1)


class RentalUpdate(BaseModel):
    customer_name: Optional[str] = Field(None, min_length=1)
    items: Optional[List[RentalItemCreate]] = Field(None, min_length=1)


class RentalAddItems(BaseModel):
    items: List[RentalItemCreate] = Field(..., min_length=1)


class RentalModify(BaseModel):
    items_to_add: List[RentalItemCreate] = []
    items_to_remove: List[int] = []


# -------------------------------
# Output
# -------------------------------
class RentalOut(BaseModel):
    id: int
    customer_name: str
    customer_id_photo: Optional[str] = None
    status: RentalStatus
    total_amount: float
    start_time: datetime
    end_time: Optional[datetime] = None
    created_at: datetime
    user_id: Optional[int] = None
    operator_username: Optional[str] = None
    items: List[RentalItemOut] = []

    model_config = ConfigDict(from_attributes=True)


class RentalListResponse(BaseModel):
    count: int
    rentals: List[RentalOut]


class RentalModificationOut(BaseModel):
    id: int
    rental_id: int
    user_id: Optional[int] = None
    username: Optional[str] = None
    items_added: int
    items_removed: int
    previous_total: float
    new_total: float
    modified_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RentalStats(BaseModel):
    active_rentals: int
    today_rentals: int
    today_revenue: float
