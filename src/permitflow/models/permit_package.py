"""PermitPackage SQLAlchemy model

One permit case tracked through its lifecycle. Status, internal stage and
billing status are three independent closed-enum fields stored as text and
mutated only through permits.lifecycle.PermitLifecycleManager.
"""

from sqlalchemy import Column, Text, ForeignKey, Index, CheckConstraint, TIMESTAMP, Uuid, func
from sqlalchemy.orm import relationship

from .base import Base, new_uuid, utcnow
from ..domain.permits import PermitStatus, InternalStage, BillingStatus, PermitType


def _in_list(column: str, enum_cls) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


class PermitPackage(Base):
    """PermitPackage model.

    Owns its tasks, documents and activity log entries; deleting a permit
    cascades to all three. customer_id and contractor_id are fixed at intake.
    """
    __tablename__ = "permit_package"
    __table_args__ = (
        Index("ix_permit_package_customer_id", "customer_id"),
        Index("ix_permit_package_contractor_id", "contractor_id"),
        Index("ix_permit_package_status", "status"),
        Index("ix_permit_package_billing_status", "billing_status"),
        Index("ix_permit_package_permit_number", "permit_number"),
        Index("ix_permit_package_county", "county"),
        CheckConstraint(_in_list("status", PermitStatus), name="ck_permit_package_status"),
        CheckConstraint(_in_list("internal_stage", InternalStage), name="ck_permit_package_internal_stage"),
        CheckConstraint(_in_list("billing_status", BillingStatus), name="ck_permit_package_billing_status"),
        CheckConstraint(_in_list("permit_type", PermitType), name="ck_permit_package_permit_type"),
    )

    id = Column(Uuid, primary_key=True, default=new_uuid)
    customer_id = Column(Uuid, ForeignKey("customer.id", ondelete="CASCADE"), nullable=False)
    contractor_id = Column(Uuid, ForeignKey("contractor.id", ondelete="CASCADE"), nullable=False)
    project_name = Column(Text, nullable=False)
    project_address = Column(Text, nullable=False)
    county = Column(Text, nullable=True)
    jurisdiction_notes = Column(Text, nullable=True)
    permit_type = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default=PermitStatus.NEW.value, server_default=PermitStatus.NEW.value)
    internal_stage = Column(Text, nullable=True, default=InternalStage.IN_PROGRESS.value)
    permit_number = Column(Text, nullable=True)
    opened_date = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    target_issue_date = Column(TIMESTAMP(timezone=True), nullable=True)
    closed_date = Column(TIMESTAMP(timezone=True), nullable=True)
    billing_status = Column(Text, nullable=False, default=BillingStatus.NOT_SENT.value, server_default=BillingStatus.NOT_SENT.value)
    sent_to_billing_at = Column(TIMESTAMP(timezone=True), nullable=True)
    billing_notes = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    # Relationships
    customer = relationship("Customer", back_populates="permit_packages")
    contractor = relationship("Contractor", back_populates="permit_packages")
    tasks = relationship("Task", back_populates="permit_package", cascade="all, delete-orphan")
    documents = relationship("PermitDocument", back_populates="permit_package", cascade="all, delete-orphan")
    activity_logs = relationship("ActivityLogEntry", back_populates="permit_package", cascade="all, delete-orphan")
