"""Documents API Router - upload, verification, lineage and download.

Thin adapters over DocumentVersionLedger. Storage failures surface as
StorageError and are mapped to 502 (413 for oversize payloads) in main.py.
"""

import logging
from typing import Optional
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from ..dependencies import get_document_ledger
from ..domain.documents import UpdateDocumentCommand, is_previewable
from .ledger import DocumentVersionLedger
from .schemas import (
    DocumentLineageResponse,
    DocumentListResponse,
    DocumentResponse,
    VerifyDocumentRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Documents"])


@router.get(
    "/permits/{permit_id}/documents",
    response_model=DocumentListResponse,
    summary="List documents of a permit",
    description="Ordered by category, newest upload first; also grouped by version group.",
)
def list_documents(
    permit_id: UUID,
    ledger: DocumentVersionLedger = Depends(get_document_ledger),
) -> DocumentListResponse:
    documents = ledger.list_documents(permit_id)
    return DocumentListResponse(
        items=[DocumentResponse.model_validate(d) for d in documents],
        grouped={
            key: [DocumentResponse.model_validate(d) for d in group]
            for key, group in ledger.group_by_version(documents).items()
        },
    )


@router.post(
    "/permits/{permit_id}/documents",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a document",
    description="""
    Multipart upload. The version tag is allocated per (file name, category)
    within the permit. With isNewVersion the document joins the version
    group of parentDocumentId, or starts a new group when no parent is given.
    """
)
def upload_document(
    permit_id: UUID,
    file: UploadFile = File(...),
    category: str = Form(...),
    notes: Optional[str] = Form(None),
    is_required: bool = Form(False, alias="isRequired"),
    is_new_version: bool = Form(False, alias="isNewVersion"),
    parent_document_id: Optional[UUID] = Form(None, alias="parentDocumentId"),
    ledger: DocumentVersionLedger = Depends(get_document_ledger),
) -> DocumentResponse:
    content = file.file.read()
    document = ledger.add_document(
        permit_id,
        file.filename or "",
        category,
        content,
        is_required=is_required,
        notes=notes or None,
        is_new_version=is_new_version,
        parent_document_id=parent_document_id,
    )
    return DocumentResponse.model_validate(document)


@router.get("/documents/{document_id}", response_model=DocumentResponse, summary="Get document metadata")
def get_document(
    document_id: UUID,
    ledger: DocumentVersionLedger = Depends(get_document_ledger),
) -> DocumentResponse:
    return DocumentResponse.model_validate(ledger.get_document(document_id))


@router.patch(
    "/documents/{document_id}",
    response_model=DocumentResponse,
    summary="Update document metadata",
    description="""
    Partial update of category, notes, isRequired, isVerified and status.
    Setting status to Rejected records the review decision; isVerified and
    status must agree when both are given.
    """
)
def update_document(
    document_id: UUID,
    command: UpdateDocumentCommand,
    ledger: DocumentVersionLedger = Depends(get_document_ledger),
) -> DocumentResponse:
    return DocumentResponse.model_validate(ledger.update_document(document_id, command))


@router.get(
    "/documents/{document_id}/lineage",
    response_model=DocumentLineageResponse,
    summary="Version history of a document",
)
def get_lineage(
    document_id: UUID,
    ledger: DocumentVersionLedger = Depends(get_document_ledger),
) -> DocumentLineageResponse:
    return DocumentLineageResponse(
        items=[DocumentResponse.model_validate(d) for d in ledger.get_lineage(document_id)]
    )


@router.get("/documents/{document_id}/download", summary="Download document bytes")
def download_document(
    document_id: UUID,
    ledger: DocumentVersionLedger = Depends(get_document_ledger),
) -> Response:
    """Previewable types (pdf and common images) are served inline."""
    document, content = ledger.open_document(document_id)
    disposition = "inline" if is_previewable(document.file_name) else "attachment"

    logger.info(
        f"Document downloaded: disposition={disposition}",
        extra={"document_id": document_id},
    )
    return Response(
        content=content,
        media_type=document.file_type,
        headers={
            "Content-Disposition": f"{disposition}; filename*=UTF-8''{quote(document.file_name)}"
        },
    )


@router.post(
    "/documents/{document_id}/verify",
    response_model=DocumentResponse,
    summary="Mark a document verified or unverified",
)
def verify_document(
    document_id: UUID,
    request: VerifyDocumentRequest,
    ledger: DocumentVersionLedger = Depends(get_document_ledger),
) -> DocumentResponse:
    return DocumentResponse.model_validate(
        ledger.verify(document_id, request.is_verified, notes=request.notes)
    )


@router.delete(
    "/documents/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a document",
)
def delete_document(
    document_id: UUID,
    ledger: DocumentVersionLedger = Depends(get_document_ledger),
) -> Response:
    ledger.delete_document(document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
