"""Parsing of form-encoded token responses.

Providers answer token requests with bodies like
"oauth_token=ab%2Fc&oauth_token_secret=xyz&oauth_callback_confirmed=true".
"""

import logging

from .encoding import percent_decode

logger = logging.getLogger(__name__)


class MalformedResponseError(Exception):
    """Response body contained no key=value pairs."""

    pass


def dictionary_with_response_string(response: str, strict: bool = False) -> dict[str, str]:
    """Parse a form-encoded response body.

    Entries without "=" are skipped. If a key repeats, the later value wins.

    Args:
        response: Response body text
        strict: Raise instead of returning an empty mapping when no pair parses

    Returns:
        Mapping of decoded keys to decoded values

    Raises:
        MalformedResponseError: If strict and no valid pair was found
    """
    result: dict[str, str] = {}
    skipped = 0

    for item in response.strip().split("&"):
        if "=" not in item:
            if item:
                skipped += 1
            continue
        key, value = item.split("=", 1)
        result[percent_decode(key)] = percent_decode(value)

    if skipped:
        logger.debug(f"Skipped {skipped} malformed response entr{'y' if skipped == 1 else 'ies'}")

    if not result:
        logger.debug("Response contained no key/value pairs")
        if strict:
            raise MalformedResponseError("Response contained no key=value pairs")

    return result


def dictionary_with_response_data(data: bytes, strict: bool = False) -> dict[str, str]:
    """Parse a form-encoded response body given as UTF-8 bytes."""
    return dictionary_with_response_string(data.decode("utf-8", errors="replace"), strict=strict)
