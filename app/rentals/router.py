from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.rentals import schemas, service
from app.rentals.models import Rental, RentalStatus
from app.users.auth import get_current_user
from app.users.models import User


router = APIRouter()


def to_rental_out(rental: Rental) -> schemas.RentalOut:
    return schemas.RentalOut(
        id=rental.id,
        customer_name=rental.customer_name,
        customer_id_photo=rental.customer_id_photo,
        status=rental.status,
        total_amount=rental.total_amount,
        start_time=rental.start_time,
        end_time=rental.end_time,
        created_at=rental.created_at,
        user_id=rental.user_id,
        operator_username=rental.user.username if rental.user else None,
        items=[
            schemas.RentalItemOut(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product.name if item.product else None,
                quantity=item.quantity,
                unit_price=item.unit_price,
                subtotal=item.subtotal,
            )
            for item in (rental.items or [])
        ],
    )


@router.get("/stats", response_model=schemas.RentalStats)
def rental_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return service.rental_stats(db, current_user.company_id)


@router.get("/", response_model=schemas.RentalListResponse)
def list_rentals(
    status: Optional[RentalStatus] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rentals = service.list_rentals(db, current_user.company_id, status, skip, limit)
    return {
        "count": len(rentals),
        "rentals": [to_rental_out(r) for r in rentals],
    }


@router.get("/{rental_id}", response_model=schemas.RentalOut)
def read_rental(
    rental_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return to_rental_out(service.get_rental_or_404(db, current_user.company_id, rental_id))


@router.post("/", response_model=schemas.RentalOut, status_code=status.HTTP_201_CREATED)
def create_rental(
    rental: schemas.RentalCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create a rental + all items in a single transaction.
    """
    created = service.create_rental(db, current_user.company_id, current_user.id, rental)
    return to_rental_out(created)


@router.put("/{rental_id}", response_model=schemas.RentalOut)
def update_rental(
    rental_id: int,
    rental_update: schemas.RentalUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rental = service.update_rental(
        db, current_user.company_id, current_user.id, rental_id, rental_update
    )
    return to_rental_out(rental)


@router.put("/{rental_id}/add-items", response_model=schemas.RentalOut)
def add_items_to_rental(
    rental_id: int,
    payload: schemas.RentalAddItems,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rental = service.add_items(
        db, current_user.company_id, current_user.id, rental_id, payload.items
    )
    return to_rental_out(rental)


@router.put("/{rental_id}/modify", response_model=schemas.RentalOut)
def modify_rental(
    rental_id: int,
    payload: schemas.RentalModify,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rental = service.modify_rental_items(
        db,
        current_user.company_id,
        current_user.id,
        rental_id,
        payload.items_to_add,
        payload.items_to_remove,
    )
    return to_rental_out(rental)


@router.get(
    "/{rental_id}/modifications",
    response_model=List[schemas.RentalModificationOut]
)
def rental_modifications(
    rental_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    modifications = service.list_modifications(db, current_user.company_id, rental_id)
    return [
        schemas.RentalModificationOut(
            id=m.id,
            rental_id=m.rental_id,
            user_id=m.user_id,
            username=m.user.username if m.user else None,
            items_added=m.items_added,
            items_removed=m.items_removed,
            previous_total=m.previous_total,
            new_total=m.new_total,
            modified_at=m.modified_at,
        )
        for m in modifications
    ]


@router.post("/{rental_id}/close", response_model=schemas.RentalOut)
def close_rental(
    rental_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rental = service.close_rental(db, current_user.company_id, rental_id)
    return to_rental_out(rental)


@router.delete("/{rental_id}", response_model=schemas.RentalOut)
def void_rental(
    rental_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rental = service.void_rental(db, current_user.company_id, rental_id)
    return to_rental_out(rental)
