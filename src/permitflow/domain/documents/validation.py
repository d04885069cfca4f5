"""File validation utilities for permit document uploads"""

import os
import re
from typing import Optional, Tuple


# Extension → MIME type for the file types permit packages carry
MIME_TYPES = {
    '.pdf': 'application/pdf',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.png': 'image/png',
    '.gif': 'image/gif',
    '.doc': 'application/msword',
    '.docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    '.xls': 'application/vnd.ms-excel',
    '.xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    '.txt': 'text/plain',
}

DEFAULT_MIME_TYPE = 'application/octet-stream'

# Types a browser can render inline
PREVIEWABLE_EXTENSIONS = {'.pdf', '.jpg', '.jpeg', '.png', '.gif'}


def get_mime_type(filename: str) -> str:
    """Infer MIME type from the file extension

    Example:
        >>> get_mime_type('plans.PDF')
        'application/pdf'
        >>> get_mime_type('archive.7z')
        'application/octet-stream'
    """
    ext = os.path.splitext(filename)[1].lower()
    return MIME_TYPES.get(ext, DEFAULT_MIME_TYPE)


def is_previewable(filename: str) -> bool:
    """Check if a file can be previewed in the browser"""
    ext = os.path.splitext(filename)[1].lower()
    return ext in PREVIEWABLE_EXTENSIONS


def validate_filename(filename: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate an uploaded filename

    Args:
        filename: Original filename

    Returns:
        Tuple of (is_valid, error_message)

    Validation rules:
    - Not empty
    - Max 255 characters
    - No path traversal (../, ..\\)
    - No null bytes
    - No control characters

    Example:
        >>> validate_filename('plans.pdf')
        (True, None)
        >>> validate_filename('')
        (False, 'Filename cannot be empty')
    """
    if not filename or len(filename.strip()) == 0:
        return False, "Filename cannot be empty"

    if len(filename) > 255:
        return False, f"Filename exceeds 255 characters (got {len(filename)})"

    # Check for path traversal
    if '..' in filename or '/' in filename or '\\' in filename:
        return False, "Filename contains path traversal or directory separators"

    if '\x00' in filename:
        return False, "Filename contains null bytes"

    if any(ord(c) < 32 for c in filename):
        return False, "Filename contains control characters"

    return True, None


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for use inside a storage path

    The document record keeps the original name; only the stored object
    name is sanitized.

    Example:
        >>> sanitize_filename('site plan (rev).pdf')
        'site_plan_rev_.pdf'
    """
    filename = os.path.basename(filename)

    # Replace problematic characters with underscore
    filename = re.sub(r'[^\w\s.-]', '_', filename)

    # Collapse multiple spaces/underscores
    filename = re.sub(r'[\s_]+', '_', filename)

    if len(filename) > 255:
        name, ext = os.path.splitext(filename)
        filename = name[:255 - len(ext)] + ext

    return filename
