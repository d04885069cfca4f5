"""Document version ledger.

Tracks the metadata of uploaded permit documents and the lineage between
revisions of the same logical document. Bytes are handed to an
ObjectStoragePort; the ledger only keeps the opaque storage path.

Version tags ("v1", "v2", ...) are allocated per (permit, file name,
category) bucket from document_version_sequence, so a tag is never handed
out twice even after deletions. Concurrent allocations in one bucket collide
on the sequence row or on the unique tag constraint; the losing insert is
rolled back to its SAVEPOINT and retried once.

Version groups:
- is_new_version with a parent: the parent's group id, or the parent's own
  id when the parent is a group root
- is_new_version without a parent: a freshly minted group id
- otherwise: no group
"""

import hashlib
import logging
import uuid
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Tuple, Union
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..audit.service import ActivityAuditLog
from ..database import unit_of_work
from ..domain.activity import ActivityType
from ..domain.documents import (
    DocumentCategory,
    DocumentReviewStatus,
    UpdateDocumentCommand,
    format_version_tag,
    parse_version_tag,
    get_mime_type,
    validate_filename,
)
from ..domain.documents.ports.object_storage_port import ObjectStoragePort
from ..domain.permits import parse_enum
from ..errors import ConflictError, NotFoundError, StorageError, ValidationError
from ..models.permit_document import DocumentVersionSequence, PermitDocument
from ..models.permit_package import PermitPackage
from ..observability.metrics import documents_uploaded_total

logger = logging.getLogger(__name__)

MAX_INSERT_ATTEMPTS = 2


class DocumentVersionLedger:
    """Upload, verify, trace and delete permit documents.

    Example:
        ledger = DocumentVersionLedger(db, audit, storage)
        v1 = ledger.add_document(permit_id, "plans.pdf", "Plans", pdf_bytes)
        v2 = ledger.add_document(
            permit_id, "plans.pdf", "Plans", revised_bytes,
            is_new_version=True, parent_document_id=v1.id,
        )
        assert [d.version_tag for d in ledger.get_lineage(v2.id)] == ["v1", "v2"]
    """

    def __init__(self, db: Session, audit: ActivityAuditLog, storage: ObjectStoragePort):
        self.db = db
        self.audit = audit
        self.storage = storage

    def add_document(
        self,
        permit_id: UUID,
        file_name: str,
        category: Union[DocumentCategory, str],
        content: bytes,
        is_required: bool = False,
        notes: Optional[str] = None,
        is_new_version: bool = False,
        parent_document_id: Optional[UUID] = None,
    ) -> PermitDocument:
        """Store bytes and record a new document version.

        Args:
            permit_id: Owning permit package
            file_name: Original file name (part of the version bucket)
            category: Document category (part of the version bucket)
            content: File bytes
            is_required: Whether the document is required for the permit
            notes: Free-form notes
            is_new_version: Link the document into a version group
            parent_document_id: Predecessor revision (only used with
                is_new_version)

        Returns:
            PermitDocument: The committed document record

        Raises:
            ValidationError: Unknown category, unsafe file name, empty
                content, or parent from another permit
            NotFoundError: Permit or parent document does not exist
            StorageError: Storage backend refused or failed the write
            ConflictError: Version allocation still conflicts after retry
        """
        bucket_category = parse_enum(DocumentCategory, category, "category")
        is_valid, error = validate_filename(file_name)
        if not is_valid:
            raise ValidationError(error)
        if not content:
            raise ValidationError("File is empty (0 bytes)")

        self._require_permit(permit_id)
        parent_id, version_group_id = self._resolve_lineage(
            permit_id, is_new_version, parent_document_id
        )

        # Metadata is only written once the bytes are safely stored
        storage_path = self.storage.save(content, file_name, str(permit_id))

        try:
            with unit_of_work(self.db):
                document = self._insert_version(
                    PermitDocument(
                        permit_package_id=permit_id,
                        file_name=file_name,
                        file_type=get_mime_type(file_name),
                        category=bucket_category.value,
                        uploaded_by=self.audit.actor_id,
                        notes=notes,
                        is_required=is_required,
                        is_verified=False,
                        status=DocumentReviewStatus.PENDING.value,
                        file_size=len(content),
                        storage_path=storage_path,
                        checksum=hashlib.sha256(content).hexdigest(),
                        parent_document_id=parent_id,
                        version_group_id=version_group_id,
                    )
                )

                self.audit.record(
                    permit_id=permit_id,
                    activity_type=ActivityType.DOCUMENT_UPLOADED,
                    description=f'Document "{file_name}" uploaded ({bucket_category.value})',
                    new_value=document.version_tag,
                    metadata={
                        "documentId": str(document.id),
                        "versionTag": document.version_tag,
                        "versionGroupId": str(version_group_id) if version_group_id else None,
                    },
                )
        except Exception:
            self._discard_bytes(storage_path, permit_id)
            raise

        documents_uploaded_total.labels(category=bucket_category.value).inc()
        logger.info(
            f"Document uploaded: file={file_name}, category={bucket_category.value}, "
            f"version={document.version_tag}",
            extra={"permit_id": permit_id, "document_id": document.id},
        )
        return document

    def verify(
        self,
        document_id: UUID,
        is_verified: bool,
        notes: Optional[str] = None,
    ) -> PermitDocument:
        """Set the verification flag and matching review status.

        Writes a DocumentVerified entry only when the flag actually changes.

        Raises:
            NotFoundError: Document does not exist
        """
        fields = {"is_verified": is_verified}
        if notes:
            fields["notes"] = notes
        return self.update_document(document_id, UpdateDocumentCommand(**fields))

    def update_document(
        self,
        document_id: UUID,
        command: UpdateDocumentCommand,
    ) -> PermitDocument:
        """Apply a partial metadata update.

        Review changes follow verify(): a changed is_verified writes one
        DocumentVerified entry with the flags; a status change that leaves
        the flag alone (Pending <-> Rejected) writes one with the statuses.
        Nothing is recorded when the review state is unchanged. Moving a
        document to another category keeps its version tag and writes a
        FieldUpdated entry.

        Raises:
            ValidationError: Unknown category/status, or is_verified and
                status that disagree
            NotFoundError: Document does not exist
            ConflictError: The target category already holds the same
                file name and version tag
        """
        changes = {
            field: value
            for field, value in command.model_dump(exclude_unset=True).items()
            if value is not None or field == "notes"
        }
        category = (
            parse_enum(DocumentCategory, changes["category"], "category")
            if "category" in changes
            else None
        )
        requested_status = (
            parse_enum(DocumentReviewStatus, changes["status"], "status")
            if "status" in changes
            else None
        )
        if (
            requested_status is not None
            and "is_verified" in changes
            and changes["is_verified"] != (requested_status == DocumentReviewStatus.VERIFIED)
        ):
            raise ValidationError(
                f"isVerified={changes['is_verified']} contradicts status {requested_status.value}"
            )

        with unit_of_work(self.db):
            document = self.get_document(document_id)

            if "notes" in changes:
                document.notes = changes["notes"]
            if "is_required" in changes:
                document.is_required = changes["is_required"]
            if category is not None and category.value != document.category:
                self._move_to_category(document, category)

            self._apply_review(
                document,
                changes.get("is_verified"),
                requested_status,
                changes.get("notes"),
            )

        return document

    def get_document(self, document_id: UUID) -> PermitDocument:
        document = self.db.get(PermitDocument, document_id)
        if document is None:
            raise NotFoundError("Document", document_id)
        return document

    def get_lineage(self, document_id: UUID) -> List[PermitDocument]:
        """All revisions in the document's version group, oldest first.

        A document outside any group is its own one-element lineage.

        Raises:
            NotFoundError: Document does not exist
        """
        document = self.get_document(document_id)
        key = document.lineage_key
        return (
            self.db.query(PermitDocument)
            .filter(
                PermitDocument.permit_package_id == document.permit_package_id,
                or_(PermitDocument.version_group_id == key, PermitDocument.id == key),
            )
            .order_by(PermitDocument.uploaded_at.asc(), PermitDocument.created_at.asc())
            .all()
        )

    def list_documents(self, permit_id: UUID) -> List[PermitDocument]:
        """Documents of a permit by category, newest upload first within each.

        Raises:
            NotFoundError: Permit does not exist
        """
        self._require_permit(permit_id)
        return (
            self.db.query(PermitDocument)
            .filter(PermitDocument.permit_package_id == permit_id)
            .order_by(PermitDocument.category.asc(), PermitDocument.uploaded_at.desc())
            .all()
        )

    @staticmethod
    def group_by_version(
        documents: Iterable[PermitDocument],
    ) -> Dict[str, List[PermitDocument]]:
        """Group documents by version group id, falling back to their own id."""
        groups: Dict[str, List[PermitDocument]] = OrderedDict()
        for document in documents:
            groups.setdefault(str(document.lineage_key), []).append(document)
        return groups

    def open_document(self, document_id: UUID) -> Tuple[PermitDocument, bytes]:
        """Document metadata together with its stored bytes.

        Raises:
            NotFoundError: Document does not exist
            StorageError: Bytes could not be read
        """
        document = self.get_document(document_id)
        return document, self.storage.get(document.storage_path)

    def delete_document(self, document_id: UUID) -> None:
        """Delete a document record and, best-effort, its stored bytes.

        Later revisions keep their version group; their parent link is
        cleared.

        Raises:
            NotFoundError: Document does not exist
        """
        with unit_of_work(self.db):
            document = self.get_document(document_id)
            permit_id = document.permit_package_id
            storage_path = document.storage_path
            file_name = document.file_name

            self.audit.record(
                permit_id=permit_id,
                activity_type=ActivityType.FIELD_UPDATED,
                description=f'Document "{file_name}" deleted',
                old_value=file_name,
                metadata={
                    "documentId": str(document.id),
                    "versionTag": document.version_tag,
                },
            )
            self.db.delete(document)

        logger.info(
            f"Document deleted: file={file_name}",
            extra={"permit_id": permit_id, "document_id": document_id},
        )
        self._discard_bytes(storage_path, permit_id)

    def _require_permit(self, permit_id: UUID) -> None:
        if self.db.get(PermitPackage, permit_id) is None:
            raise NotFoundError("Permit", permit_id)

    def _apply_review(
        self,
        document: PermitDocument,
        is_verified: Optional[bool],
        status: Optional[DocumentReviewStatus],
        notes: Optional[str],
    ) -> None:
        previous_flag = bool(document.is_verified)
        previous_status = DocumentReviewStatus(document.status)

        if status is None:
            if is_verified is None or is_verified == previous_flag:
                return
            status = DocumentReviewStatus.VERIFIED if is_verified else DocumentReviewStatus.PENDING
        new_flag = status == DocumentReviewStatus.VERIFIED

        if new_flag == previous_flag and status == previous_status:
            logger.debug(
                f"Review state unchanged ({status.value}), nothing to record",
                extra={"document_id": document.id},
            )
            return

        document.is_verified = new_flag
        document.status = status.value

        if new_flag != previous_flag:
            action = "verified" if new_flag else "unverified"
            description = (
                f'Document "{document.file_name}" {action} '
                f"(isVerified: {_flag(previous_flag)} → {_flag(new_flag)})"
            )
            old_value, new_value = _flag(previous_flag), _flag(new_flag)
        else:
            action = f"marked {status.value}"
            description = (
                f'Document "{document.file_name}" {action} '
                f"(status: {previous_status.value} → {status.value})"
            )
            old_value, new_value = previous_status.value, status.value
        if notes:
            description += f": {notes}"

        self.audit.record(
            permit_id=document.permit_package_id,
            activity_type=ActivityType.DOCUMENT_VERIFIED,
            description=description,
            old_value=old_value,
            new_value=new_value,
            metadata={"documentId": str(document.id), "status": status.value},
        )
        logger.info(
            f"Document {action}",
            extra={"permit_id": document.permit_package_id, "document_id": document.id},
        )

    def _move_to_category(self, document: PermitDocument, category: DocumentCategory) -> None:
        # The tag travels with the document, so it must be free in the target
        # bucket and that bucket's sequence must never hand it out again.
        old_category = document.category
        number = parse_version_tag(document.version_tag)

        with self.db.no_autoflush:
            taken = (
                self.db.query(PermitDocument.id)
                .filter(
                    PermitDocument.permit_package_id == document.permit_package_id,
                    PermitDocument.file_name == document.file_name,
                    PermitDocument.category == category.value,
                    PermitDocument.version_tag == document.version_tag,
                )
                .first()
            )
        if taken is not None:
            raise ConflictError(
                f"'{document.file_name}' {document.version_tag} already exists in {category.value}"
            )

        document.category = category.value
        try:
            self._reserve_version_number(
                document.permit_package_id, document.file_name, category.value, number
            )
            self.db.flush()
        except IntegrityError:
            raise ConflictError(
                f"'{document.file_name}' {document.version_tag} already exists in {category.value}"
            )

        self.audit.record(
            permit_id=document.permit_package_id,
            activity_type=ActivityType.FIELD_UPDATED,
            description=f'Document "{document.file_name}" moved from {old_category} to {category.value}',
            old_value=old_category,
            new_value=category.value,
            metadata={"documentId": str(document.id), "field": "category"},
        )

    def _reserve_version_number(
        self, permit_id: UUID, file_name: str, category: str, number: int
    ) -> None:
        sequence = self.db.get(
            DocumentVersionSequence,
            (permit_id, file_name, category),
            with_for_update=True,
            populate_existing=True,
        )
        if sequence is None:
            self.db.add(DocumentVersionSequence(
                permit_package_id=permit_id,
                file_name=file_name,
                category=category,
                last_version=max(number, self._bucket_size(permit_id, file_name, category)),
            ))
        elif sequence.last_version < number:
            sequence.last_version = number

    def _bucket_size(self, permit_id: UUID, file_name: str, category: str) -> int:
        return (
            self.db.query(func.count(PermitDocument.id))
            .filter(
                PermitDocument.permit_package_id == permit_id,
                PermitDocument.file_name == file_name,
                PermitDocument.category == category,
            )
            .scalar()
        )

    def _resolve_lineage(
        self,
        permit_id: UUID,
        is_new_version: bool,
        parent_document_id: Optional[UUID],
    ) -> Tuple[Optional[UUID], Optional[UUID]]:
        """Return (parent_document_id, version_group_id) for a new upload."""
        if not is_new_version:
            return None, None

        if parent_document_id is None:
            return None, uuid.uuid4()

        parent = self.db.get(PermitDocument, parent_document_id)
        if parent is None:
            raise NotFoundError("Document", parent_document_id)
        if parent.permit_package_id != permit_id:
            raise ValidationError(
                f"Parent document {parent_document_id} belongs to another permit"
            )
        return parent.id, parent.version_group_id or parent.id

    def _insert_version(self, document: PermitDocument) -> PermitDocument:
        for attempt in range(1, MAX_INSERT_ATTEMPTS + 1):
            try:
                with self.db.begin_nested():
                    number = self._next_version_number(
                        document.permit_package_id, document.file_name, document.category
                    )
                    document.version_tag = format_version_tag(number)
                    self.db.add(document)
                    self.db.flush()
                return document
            except IntegrityError:
                logger.warning(
                    f"Version tag conflict: file={document.file_name}, "
                    f"category={document.category}, attempt={attempt}",
                    extra={"permit_id": document.permit_package_id},
                )

        raise ConflictError(
            f"Could not allocate a version for '{document.file_name}' "
            f"({document.category}): conflicting upload"
        )

    def _next_version_number(self, permit_id: UUID, file_name: str, category: str) -> int:
        sequence = self.db.get(
            DocumentVersionSequence,
            (permit_id, file_name, category),
            with_for_update=True,
            populate_existing=True,
        )
        if sequence is None:
            sequence = DocumentVersionSequence(
                permit_package_id=permit_id,
                file_name=file_name,
                category=category,
                last_version=self._bucket_size(permit_id, file_name, category) + 1,
            )
            self.db.add(sequence)
        else:
            sequence.last_version = DocumentVersionSequence.last_version + 1

        self.db.flush()
        return sequence.last_version

    def _discard_bytes(self, storage_path: str, permit_id: UUID) -> None:
        try:
            self.storage.delete(storage_path)
        except StorageError as e:
            logger.warning(
                f"Failed to delete stored bytes: path={storage_path}, error={e}",
                extra={"permit_id": permit_id},
                exc_info=True,
            )


def _flag(value: bool) -> str:
    return "true" if value else "false"
