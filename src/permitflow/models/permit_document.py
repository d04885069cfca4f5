"""PermitDocument SQLAlchemy model

Metadata for one uploaded file; the bytes live in object storage at
storage_path. Revisions of one logical document share version_group_id and
point at their predecessor through parent_document_id.
"""

from sqlalchemy import (
    Column,
    Text,
    ForeignKey,
    BigInteger,
    Boolean,
    Integer,
    Index,
    UniqueConstraint,
    PrimaryKeyConstraint,
    TIMESTAMP,
    Uuid,
    func,
)
from sqlalchemy.orm import relationship

from .base import Base, new_uuid, utcnow
from ..domain.documents import DocumentReviewStatus


class PermitDocument(Base):
    """PermitDocument model.

    version_tag is unique per (permit_package_id, file_name, category).
    The parent/version-group graph is a forest: a document has at most one
    parent, and a parent always exists before its children are created.
    """
    __tablename__ = "permit_document"
    __table_args__ = (
        Index("ix_permit_document_permit_package_id", "permit_package_id"),
        Index("ix_permit_document_category", "category"),
        Index("ix_permit_document_status", "status"),
        Index("ix_permit_document_version_group_id", "version_group_id"),
        Index("ix_permit_document_parent_document_id", "parent_document_id"),
        UniqueConstraint(
            "permit_package_id", "file_name", "category", "version_tag",
            name="uq_permit_document_version_tag",
        ),
    )

    id = Column(Uuid, primary_key=True, default=new_uuid)
    permit_package_id = Column(Uuid, ForeignKey("permit_package.id", ondelete="CASCADE"), nullable=False)
    file_name = Column(Text, nullable=False)
    file_type = Column(Text, nullable=False)
    category = Column(Text, nullable=False)
    uploaded_by = Column(Uuid, nullable=True)
    uploaded_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    version_tag = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)
    is_required = Column(Boolean, nullable=False, default=False, server_default="false")
    is_verified = Column(Boolean, nullable=False, default=False, server_default="false")
    status = Column(Text, nullable=False, default=DocumentReviewStatus.PENDING.value, server_default=DocumentReviewStatus.PENDING.value)
    file_size = Column(BigInteger, nullable=False)
    storage_path = Column(Text, nullable=False)
    checksum = Column(Text, nullable=True)  # SHA256 hex
    parent_document_id = Column(Uuid, ForeignKey("permit_document.id", ondelete="SET NULL"), nullable=True)
    version_group_id = Column(Uuid, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    # Relationships
    permit_package = relationship("PermitPackage", back_populates="documents")
    parent_document = relationship("PermitDocument", remote_side=[id], back_populates="child_documents")
    child_documents = relationship("PermitDocument", back_populates="parent_document")

    @property
    def lineage_key(self):
        """Key shared by every revision of this document (group id or own id)."""
        return self.version_group_id or self.id


class DocumentVersionSequence(Base):
    """Per-bucket allocator for document version numbers.

    One row per (permit_package_id, file_name, category). last_version only
    ever increases, so a tag freed by deleting a document is never handed
    out again.
    """
    __tablename__ = "document_version_sequence"
    __table_args__ = (
        PrimaryKeyConstraint("permit_package_id", "file_name", "category", name="pk_document_version_sequence"),
    )

    permit_package_id = Column(Uuid, ForeignKey("permit_package.id", ondelete="CASCADE"), nullable=False)
    file_name = Column(Text, nullable=False)
    category = Column(Text, nullable=False)
    last_version = Column(Integer, nullable=False)
