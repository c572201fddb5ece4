"""Business and persona models."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from twin.persistence.database import Base

if TYPE_CHECKING:
    from twin.persistence.models.catalog import Offer, Product


class Business(Base):
    """A merchant listed in the directory."""

    __tablename__ = "businesses"

    id = Column(Integer, primary_key=True, index=True)
    merchant_code = Column(String(64), unique=True, nullable=False, index=True)  # internal, never shown
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    phone = Column(String(50), nullable=True)
    website = Column(Text, nullable=True)
    hours = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, active, suspended
    rating = Column(Float, nullable=True, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    persona = relationship(
        "BusinessPersona", back_populates="business", uselist=False, cascade="all, delete-orphan"
    )
    products = relationship("Product", back_populates="business", cascade="all, delete-orphan")
    offers = relationship("Offer", back_populates="business", cascade="all, delete-orphan")

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def __repr__(self) -> str:
        return f"<Business(id={self.id}, name={self.name}, status={self.status})>"


class BusinessPersona(Base):
    """Digital Twin persona configuration for a business."""

    __tablename__ = "business_personas"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), unique=True, nullable=False, index=True)

    display_name = Column(String(255), nullable=True)
    tone = Column(String(255), nullable=True)
    greeting = Column(Text, nullable=True)
    instructions = Column(Text, nullable=True)
    appointments_enabled = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    business = relationship("Business", back_populates="persona")

    def __repr__(self) -> str:
        return f"<BusinessPersona(id={self.id}, business_id={self.business_id}, display_name={self.display_name})>"
