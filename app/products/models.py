import enum

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Boolean, Enum

from app.clock import utcnow
from app.database import Base


class ProductCategory(str, enum.Enum):
    RENTAL = "RENTAL"
    VENDOR = "VENDOR"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(
        Integer,
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    price = Column(Float, nullable=False)
    category = Column(Enum(ProductCategory, name="product_category"), nullable=False, index=True)

    # soft delete flag
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=utcnow)
