"""Task SQLAlchemy model"""

from sqlalchemy import Column, Text, ForeignKey, Index, UniqueConstraint, TIMESTAMP, Uuid, func
from sqlalchemy.orm import relationship

from .base import Base, new_uuid, utcnow
from ..domain.tasks import TaskStatus


class Task(Base):
    """A unit of work tied to one permit package.

    Tasks are created manually or by the automation engine. Auto-created
    tasks carry the key of the rule that produced them; the unique
    constraint on (permit_package_id, automation_key) keeps concurrent
    evaluations of the same rule from inserting duplicates. Manual tasks
    leave automation_key NULL and are unconstrained.
    """
    __tablename__ = "task"
    __table_args__ = (
        Index("ix_task_permit_package_id", "permit_package_id"),
        Index("ix_task_status", "status"),
        Index("ix_task_assigned_to", "assigned_to"),
        Index("ix_task_due_date", "due_date"),
        UniqueConstraint("permit_package_id", "automation_key", name="uq_task_permit_automation_key"),
    )

    id = Column(Uuid, primary_key=True, default=new_uuid)
    permit_package_id = Column(Uuid, ForeignKey("permit_package.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default=TaskStatus.NOT_STARTED.value, server_default=TaskStatus.NOT_STARTED.value)
    assigned_to = Column(Text, nullable=True)
    due_date = Column(TIMESTAMP(timezone=True), nullable=True)
    completed_at = Column(TIMESTAMP(timezone=True), nullable=True)
    priority = Column(Text, nullable=True)
    automation_key = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    # Relationships
    permit_package = relationship("PermitPackage", back_populates="tasks")
