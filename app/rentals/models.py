import enum

from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum
from sqlalchemy.orm import relationship

from app.clock import utcnow
from app.database import Base


class RentalStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"
    VOIDED = "VOIDED"


class Rental(Base):
    __tablename__ = "rentals"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(
        Integer,
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    customer_name = Column(String, nullable=False)
    customer_id_photo = Column(String, nullable=True)
    status = Column(
        Enum(RentalStatus, name="rental_status"),
        nullable=False,
        default=RentalStatus.ACTIVE,
        index=True
    )
    total_amount = Column(Float, nullable=False, default=0)

    start_time = Column(DateTime, default=utcnow, nullable=False)
    end_time = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    items = relationship(
        "RentalItem",
        back_populates="rental",
        cascade="all, delete-orphan",
        order_by="RentalItem.id"
    )
    modifications = relationship(
        "RentalModification",
        back_populates="rental",
        cascade="all, delete-orphan"
    )
    user = relationship("User")


class RentalItem(Base):
    __tablename__ = "rental_items"

    id = Column(Integer, primary_key=True, index=True)
    rental_id = Column(
        Integer,
        ForeignKey("rentals.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    subtotal = Column(Float, nullable=False)

    rental = relationship("Rental", back_populates="items")
    product = relationship("Product")


class RentalModification(Base):
    __tablename__ = "rental_modifications"

    id = Column(Integer, primary_key=True, index=True)
    rental_id = Column(
        Integer,
        ForeignKey("rentals.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    items_added = Column(Integer, nullable=False, default=0)
    items_removed = Column(Integer, nullable=False, default=0)
    previous_total = Column(Float, nullable=False)
    new_total = Column(Float, nullable=False)
    modified_at = Column(DateTime, default=utcnow, nullable=False)

    rental = relationship("Rental", back_populates="modifications")
    user = relationship("User")
