"""Input sanitization utilities."""
import re
from typing import Optional


# Maximum length constraints for security
MAX_EVENT_NAME_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 1000
MAX_DEPARTMENT_LENGTH = 100
MAX_DIVISION_LENGTH = 10
MAX_QR_DATA_LENGTH = 2048  # Signed tokens are ~200 chars; leave room for key rotation


def sanitize_text(text: str, max_length: Optional[int] = None, strip_html: bool = True) -> str:
    """
    Sanitize text input to prevent XSS attacks.

    Note: This function strips HTML tags and normalizes whitespace, but does NOT
    escape HTML entities because the dashboard escapes output when rendering.
    Double-escaping would cause entities to display literally (e.g., "&lt;" instead of "<").

    Args:
        text: The input text to sanitize
        max_length: Optional maximum length to enforce
        strip_html: Whether to strip HTML tags (default True)

    Returns:
        Sanitized text with HTML tags removed and whitespace normalized

    Raises:
        ValueError: If text exceeds max_length or contains dangerous patterns
    """
    if not isinstance(text, str):
        raise ValueError("Input must be a string")

    # Strip leading/trailing whitespace
    sanitized = text.strip()

    # Enforce maximum length before processing to prevent length-based attacks
    if max_length and len(sanitized) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    # Strip HTML tags completely if requested (prevents injection entirely)
    if strip_html:
        sanitized = re.sub(r'<[^>]*>', '', sanitized)

    # Reject inputs that still contain HTML-like patterns after stripping
    # This catches malformed tags or encoded attacks
    if '<' in sanitized or '>' in sanitized:
        raise ValueError("Input contains invalid HTML-like patterns")

    # Normalize internal whitespace (replace multiple spaces with single space)
    sanitized = re.sub(r'\s+', ' ', sanitized)

    return sanitized


def sanitize_filter_value(value: Optional[str], max_length: int) -> Optional[str]:
    """
    Normalize an optional roster filter (division or department).

    Blank values are treated as "no filter" so that ``?division=`` and a
    missing parameter share one cache entry.
    """
    if value is None:
        return None
    sanitized = sanitize_text(value, max_length=max_length)
    return sanitized or None


def validate_qr_data(qr_data: str) -> str:
    """
    Validate the raw string scanned from a QR code.

    Only the shape is checked here; signature and expiry are verified by the
    check-in service.

    Raises:
        ValueError: If the value is empty, too long or contains whitespace
    """
    if not isinstance(qr_data, str):
        raise ValueError("QR data must be a string")

    stripped = qr_data.strip()
    if not stripped:
        raise ValueError("QR data is required")

    if len(stripped) > MAX_QR_DATA_LENGTH:
        raise ValueError(f"QR data exceeds maximum length of {MAX_QR_DATA_LENGTH} characters")

    if re.search(r'\s', stripped):
        raise ValueError("QR data must not contain whitespace")

    return stripped
