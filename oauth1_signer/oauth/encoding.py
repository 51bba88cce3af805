"""Percent-encoding and Base64 helpers for OAuth 1.0a.

OAuth's encoding is stricter than general URL encoding: only the RFC 3986
unreserved characters pass through, and space is always %20.
"""

import base64
from urllib.parse import quote, unquote

# RFC 3986 unreserved set, minus the alphanumerics quote() never touches
UNRESERVED_PUNCTUATION = "-._~"


def percent_encode(value: str) -> str:
    """Percent-encode a string per OAuth 1.0a section 5.1.

    Every octet of the UTF-8 form is encoded except A-Z a-z 0-9 - . _ ~.
    Already-encoded input is encoded again ("%" becomes "%25").

    Args:
        value: The string to encode

    Returns:
        Encoded string using uppercase hex digits
    """
    return quote(str(value).encode("utf-8"), safe=UNRESERVED_PUNCTUATION)


def percent_decode(value: str) -> str:
    """Decode a percent-encoded string to text.

    "+" is not treated as a space.
    """
    return unquote(value, encoding="utf-8", errors="replace")


def base64_encode(data: bytes) -> str:
    """Standard Base64 with padding and no line breaks."""
    return base64.b64encode(data).decode("ascii")
