"""Contractor SQLAlchemy model"""

from sqlalchemy import Column, Text, Index, CheckConstraint, TIMESTAMP, Uuid, func
from sqlalchemy.orm import relationship

from .base import Base, new_uuid, utcnow
from ..domain.contractors import ContactMethod


class Contractor(Base):
    """Contractor performing the permitted work.

    The insurance expiration dates are tracked so intake can flag a
    contractor whose workers' comp or liability cover has lapsed.
    """
    __tablename__ = "contractor"
    __table_args__ = (
        Index("ix_contractor_company_name", "company_name"),
        Index("ix_contractor_license_number", "license_number"),
        CheckConstraint(
            "preferred_contact_method IS NULL OR preferred_contact_method IN ("
            + ", ".join(f"'{m.value}'" for m in ContactMethod) + ")",
            name="ck_contractor_preferred_contact_method",
        ),
    )

    id = Column(Uuid, primary_key=True, default=new_uuid)
    company_name = Column(Text, nullable=False)
    license_number = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    preferred_contact_method = Column(Text, nullable=True)
    specialties = Column(Text, nullable=True)
    workers_comp_expiration_date = Column(TIMESTAMP(timezone=True), nullable=True)
    liability_expiration_date = Column(TIMESTAMP(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    # Relationships
    permit_packages = relationship("PermitPackage", back_populates="contractor", cascade="all, delete-orphan")
