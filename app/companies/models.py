from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from app.clock import utcnow
from app.database import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)  # e.g. BK-001
    name = Column(String, nullable=False)
    location = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    users = relationship("User", back_populates="company", cascade="all, delete-orphan")
