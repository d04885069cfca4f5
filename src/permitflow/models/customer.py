"""Customer SQLAlchemy model"""

from sqlalchemy import Column, Text, Index, TIMESTAMP, Uuid, func
from sqlalchemy.orm import relationship

from .base import Base, new_uuid, utcnow


class Customer(Base):
    """Customer model representing the property owner a permit is filed for.

    Customers own permit packages. CustomerService refuses to delete a
    customer that still has permits; the ORM cascade only matters for
    direct deletes.
    """
    __tablename__ = "customer"
    __table_args__ = (
        Index("ix_customer_name", "name"),
        Index("ix_customer_email", "email"),
    )

    id = Column(Uuid, primary_key=True, default=new_uuid)
    name = Column(Text, nullable=False)
    contact_name = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    main_address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    # Relationships
    permit_packages = relationship("PermitPackage", back_populates="customer", cascade="all, delete-orphan")
