from typing import List, Optional

from fastapi import HTTPException
from loguru import logger
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.clock import utcnow, local_day_start_utc
from app.products.models import ProductCategory
from app.products import service as product_service
from . import schemas
from .models import Rental, RentalItem, RentalModification, RentalStatus


def _rental_query(db: Session, company_id: int):
    return (
        db.query(Rental)
        .options(
            joinedload(Rental.items).joinedload(RentalItem.product),
            joinedload(Rental.user),
        )
        .filter(Rental.company_id == company_id)
    )


def get_rental_or_404(db: Session, company_id: int, rental_id: int) -> Rental:
    rental = _rental_query(db, company_id).filter(Rental.id == rental_id).first()
    if not rental:
        raise HTTPException(status_code=404, detail="Rental not found")
    return rental


def get_active_rental_or_400(db: Session, company_id: int, rental_id: int) -> Rental:
    rental = get_rental_or_404(db, company_id, rental_id)
    if rental.status != RentalStatus.ACTIVE:
        raise HTTPException(
            status_code=400,
            detail=f"Rental is {rental.status.value.lower()} and cannot be modified"
        )
    return rental


def _build_items(
    db: Session,
    company_id: int,
    items: List[schemas.RentalItemCreate]
) -> List[RentalItem]:
    built = []
    for item in items:
        product_service.get_sellable_product(
            db, company_id, item.product_id, ProductCategory.RENTAL
        )
        built.append(
            RentalItem(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                subtotal=item.quantity * item.unit_price,
            )
        )
    return built


def _recalculate_total(db: Session, rental: Rental) -> float:
    """Full re-sum of the current item rows, never an incremental delta."""
    db.flush()
    total = (
        db.query(func.coalesce(func.sum(RentalItem.subtotal), 0))
        .filter(RentalItem.rental_id == rental.id)
        .scalar()
    )
    rental.total_amount = float(total)
    return rental.total_amount


def list_rentals(
    db: Session,
    company_id: int,
    status: Optional[RentalStatus] = None,
    skip: int = 0,
    limit: int = 100,
):
    query = _rental_query(db, company_id)
    if status:
        query = query.filter(Rental.status == status)

    return (
        query
        .order_by(Rental.created_at.desc(), Rental.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def create_rental(
    db: Session,
    company_id: int,
    user_id: int,
    rental_data: schemas.RentalCreate
) -> Rental:
    """
    Create a rental with all its items in one transaction.
    Each subtotal is quantity x unit_price; the header total is their sum.
    """
    try:
        items = _build_items(db, company_id, rental_data.items)

        rental = Rental(
            company_id=company_id,
            user_id=user_id,
            customer_name=rental_data.customer_name.strip(),
            customer_id_photo=rental_data.customer_id_photo,
            status=RentalStatus.ACTIVE,
            total_amount=sum(item.subtotal for item in items),
            start_time=utcnow(),
        )
        rental.items = items
        db.add(rental)

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Rental {rental.id} created for {rental.customer_name}: {rental.total_amount}")
    return get_rental_or_404(db, company_id, rental.id)


def update_rental(
    db: Session,
    company_id: int,
    user_id: int,
    rental_id: int,
    rental_update: schemas.RentalUpdate
) -> Rental:
    """Rename the customer and/or replace the whole item list of an active rental."""
    rental = get_active_rental_or_400(db, company_id, rental_id)

    try:
        if rental_update.customer_name:
            rental.customer_name = rental_update.customer_name.strip()

        if rental_update.items:
            previous_total = rental.total_amount
            removed = len(rental.items)
            new_items = _build_items(db, company_id, rental_update.items)

            rental.items.clear()
            rental.items.extend(new_items)
            _recalculate_total(db, rental)

            db.add(RentalModification(
                rental_id=rental.id,
                user_id=user_id,
                items_added=len(new_items),
                items_removed=removed,
                previous_total=previous_total,
                new_total=rental.total_amount,
            ))

        db.commit()
    except Exception:
        db.rollback()
        raise

    return get_rental_or_404(db, company_id, rental_id)


def modify_rental_items(
    db: Session,
    company_id: int,
    user_id: int,
    rental_id: int,
    items_to_add: List[schemas.RentalItemCreate],
    items_to_remove: List[int],
) -> Rental:
    """
    Add and/or remove items of an active rental, recompute the total and
    record the change in the modification history.
    """
    rental = get_active_rental_or_400(db, company_id, rental_id)

    if not items_to_add and not items_to_remove:
        raise HTTPException(status_code=400, detail="No items to add or remove")

    current_ids = {item.id for item in rental.items}
    remove_ids = set(items_to_remove)

    unknown = remove_ids - current_ids
    if unknown:
        raise HTTPException(
            status_code=400,
            detail=f"Items {sorted(unknown)} do not belong to this rental"
        )

    if remove_ids == current_ids and not items_to_add:
        raise HTTPException(
            status_code=400,
            detail="A rental must keep at least one item; void it instead"
        )

    previous_total = rental.total_amount

    try:
        new_items = _build_items(db, company_id, items_to_add)

        for item in [i for i in rental.items if i.id in remove_ids]:
            rental.items.remove(item)
        rental.items.extend(new_items)

        _recalculate_total(db, rental)

        db.add(RentalModification(
            rental_id=rental.id,
            user_id=user_id,
            items_added=len(new_items),
            items_removed=len(remove_ids),
            previous_total=previous_total,
            new_total=rental.total_amount,
        ))

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Rental {rental_id} modified: +{len(items_to_add)} -{len(remove_ids)} "
        f"total {previous_total} -> {rental.total_amount}"
    )
    return get_rental_or_404(db, company_id, rental_id)


def add_items(
    db: Session,
    company_id: int,
    user_id: int,
    rental_id: int,
    items: List[schemas.RentalItemCreate],
) -> Rental:
    return modify_rental_items(db, company_id, user_id, rental_id, items, [])


def close_rental(db: Session, company_id: int, rental_id: int) -> Rental:
    rental = get_rental_or_404(db, company_id, rental_id)

    if rental.status != RentalStatus.ACTIVE:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot close a {rental.status.value.lower()} rental"
        )

    rental.status = RentalStatus.CLOSED
    rental.end_time = utcnow()
    db.commit()
    db.refresh(rental)

    logger.info(f"Rental {rental.id} closed: {rental.total_amount}")
    return rental


def void_rental(db: Session, company_id: int, rental_id: int) -> Rental:
    rental = get_rental_or_404(db, company_id, rental_id)

    if rental.status != RentalStatus.ACTIVE:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot void a {rental.status.value.lower()} rental"
        )

    rental.status = RentalStatus.VOIDED
    db.commit()
    db.refresh(rental)

    logger.info(f"Rental {rental.id} voided")
    return rental


def list_modifications(db: Session, company_id: int, rental_id: int):
    get_rental_or_404(db, company_id, rental_id)

    return (
        db.query(RentalModification)
        .options(joinedload(RentalModification.user))
        .filter(RentalModification.rental_id == rental_id)
        .order_by(RentalModification.modified_at.desc(), RentalModification.id.desc())
        .all()
    )


def rental_stats(db: Session, company_id: int):
    today_start = local_day_start_utc()

    active_rentals = (
        db.query(func.count(Rental.id))
        .filter(Rental.company_id == company_id, Rental.status == RentalStatus.ACTIVE)
        .scalar()
    )

    today_rentals = (
        db.query(func.count(Rental.id))
        .filter(Rental.company_id == company_id, Rental.created_at >= today_start)
        .scalar()
    )

    today_revenue = (
        db.query(func.coalesce(func.sum(Rental.total_amount), 0))
        .filter(
            Rental.company_id == company_id,
            Rental.status == RentalStatus.CLOSED,
            Rental.created_at >= today_start,
        )
        .scalar()
    )

    return {
        "active_rentals": active_rentals or 0,
        "today_rentals": today_rentals or 0,
        "today_revenue": float(today_revenue or 0),
    }
