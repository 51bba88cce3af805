"""Signature base string construction per OAuth 1.0a section 9.1.

The base string is METHOD&URL&PARAMS, each part percent-encoded. Parameter
ordering is the only thing that makes two implementations agree on a
signature, so the pairs are always sorted after encoding.
"""

import logging
from typing import Iterable
from urllib.parse import parse_qsl, urlsplit

import httpx

from .encoding import percent_encode

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def normalize_base_url(url: str | httpx.URL) -> str:
    """Reduce a request URL to the base string URI.

    Lowercases scheme and host, drops default ports, user info, query and
    fragment. An empty path becomes "/".

    Args:
        url: Full request URL

    Returns:
        Normalized URL, e.g. "http://example.com/r%20v/X"
    """
    parts = urlsplit(str(url))
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    if ":" in host:
        host = f"[{host}]"

    port = parts.port
    if port is not None and DEFAULT_PORTS.get(scheme) != port:
        host = f"{host}:{port}"

    path = parts.path or "/"
    return f"{scheme}://{host}{path}"


def normalize_parameters(params: Iterable[tuple[str, str]]) -> str:
    """Encode, sort and join parameters into the normalized string.

    Pairs are sorted by encoded key, then by encoded value, so the result
    does not depend on input order. Duplicate keys are kept.
    """
    encoded = sorted(
        (percent_encode(key), percent_encode(value)) for key, value in params
    )
    return "&".join(f"{key}={value}" for key, value in encoded)


def signature_base_string(
    method: str,
    url: str | httpx.URL,
    params: Iterable[tuple[str, str]],
) -> str:
    """Build the signature base string.

    Args:
        method: HTTP method (uppercased here)
        url: Request URL; query and fragment are ignored
        params: Every parameter to sign, excluding oauth_signature and realm

    Returns:
        The canonical base string
    """
    pairs = [
        (key, value)
        for key, value in params
        if key not in ("oauth_signature", "realm")
    ]
    return "&".join(
        [
            percent_encode(method.upper()),
            percent_encode(normalize_base_url(url)),
            percent_encode(normalize_parameters(pairs)),
        ]
    )


def is_form_encoded(request: httpx.Request) -> bool:
    """Check if the request body is application/x-www-form-urlencoded."""
    content_type = request.headers.get("Content-Type", "")
    return content_type.split(";")[0].strip().lower() == FORM_CONTENT_TYPE


def collect_request_parameters(request: httpx.Request) -> list[tuple[str, str]]:
    """Gather the parameters a request already carries.

    Includes the URL query and, for form-encoded bodies, the body pairs.
    Values are decoded; blank values and duplicate keys are preserved.

    Args:
        request: The outgoing request

    Returns:
        List of (key, value) pairs
    """
    query = request.url.query.decode("ascii")
    params = parse_qsl(query, keep_blank_values=True)

    if is_form_encoded(request):
        body = request.read()
        if body:
            params.extend(parse_qsl(body.decode("utf-8"), keep_blank_values=True))

    logger.debug(
        f"Collected {len(params)} request parameter(s) for {request.url.host}{request.url.path}"
    )
    return params
