"""Document category and review status enums.

Version tags are allocated per (permit, file_name, category) bucket, so the
category is part of a document's identity for versioning purposes.
"""

from enum import Enum


class DocumentCategory(str, Enum):
    APPLICATION = "Application"
    PLANS = "Plans"
    SPECIFICATIONS = "Specifications"
    ENGINEERING = "Engineering"
    PHOTOS = "Photos"
    CORRESPONDENCE = "Correspondence"
    INSPECTION = "Inspection"
    CERTIFICATE = "Certificate"
    OTHER = "Other"


class DocumentReviewStatus(str, Enum):
    """Review state of an uploaded document.

    verify() keeps this in step with is_verified: VERIFIED when true,
    PENDING when false. REJECTED is set only through an explicit status
    in DocumentVersionLedger.update_document and counts as unverified.
    """
    PENDING = "Pending"
    VERIFIED = "Verified"
    REJECTED = "Rejected"


def format_version_tag(number: int) -> str:
    """Render a version number as a tag.

    Example:
        >>> format_version_tag(1)
        'v1'
    """
    return f"v{number}"


def parse_version_tag(tag: str) -> int:
    """Inverse of format_version_tag.

    Raises:
        ValueError: If tag is not of the form "v<positive int>"
    """
    if not tag.startswith("v") or not tag[1:].isdigit() or int(tag[1:]) < 1:
        raise ValueError(f"Malformed version tag: {tag!r}")
    return int(tag[1:])
