"""Documents domain module - categories, review status, file validation

Version lineage itself lives in documents.ledger.DocumentVersionLedger.
"""

from .categories import DocumentCategory, DocumentReviewStatus, format_version_tag, parse_version_tag
from .commands import UpdateDocumentCommand
from .validation import (
    get_mime_type,
    is_previewable,
    validate_filename,
    sanitize_filename,
    MIME_TYPES,
)

__all__ = [
    "DocumentCategory",
    "DocumentReviewStatus",
    "format_version_tag",
    "parse_version_tag",
    "UpdateDocumentCommand",
    "get_mime_type",
    "is_previewable",
    "validate_filename",
    "sanitize_filename",
    "MIME_TYPES",
]
