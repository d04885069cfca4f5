"""ActivityLogEntry SQLAlchemy model"""

from sqlalchemy import Column, Text, ForeignKey, Index, TIMESTAMP, Uuid, func
from sqlalchemy.orm import relationship

from .base import Base, PortableJSONB, new_uuid, utcnow


class ActivityLogEntry(Base):
    """Immutable audit record describing a single state change of a permit.

    Entries are append-only and are never updated or deleted, except when
    the owning permit package is deleted (cascade). user_id is the acting
    user supplied by the identity layer; it is not a foreign key because
    user accounts live outside this service.
    """
    __tablename__ = "activity_log"
    __table_args__ = (
        Index("ix_activity_log_permit_package_id", "permit_package_id"),
        Index("ix_activity_log_activity_type", "activity_type"),
        Index("ix_activity_log_permit_created_at", "permit_package_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=new_uuid)
    permit_package_id = Column(Uuid, ForeignKey("permit_package.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, nullable=True)
    activity_type = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    metadata_json = Column(PortableJSONB, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    # Relationships
    permit_package = relationship("PermitPackage", back_populates="activity_logs")
