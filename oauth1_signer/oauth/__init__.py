"""OAuth 1.0a request signing.

This package implements the client side of OAuth 1.0a: building signature
base strings, signing with HMAC-SHA1 or RSA-SHA1, placing the result in an
Authorization header or URL query, and parsing/persisting the tokens a
provider returns. Sending requests is left to httpx.

Main Components:
    Authentication: Credentials, token state and the four signing phases
    OAuth1Auth: httpx.Auth adapter for signing client requests
    ParameterStore: OAuth and application parameters
    signature_base_string: Canonical base string construction

Quick Start:
    from oauth1_signer.oauth import Authentication

    auth = Authentication.for_installed_app()
    auth.callback = "oob"
    request = httpx.Request("POST", "https://www.google.com/accounts/OAuthGetRequestToken")
    auth.add_request_token_header(request)

    # ...send it, then:
    auth.set_keys_for_response_data(response.content)
"""

from .authentication import (
    Authentication,
    Phase,
    SignedParameters,
    format_authorization_header,
)
from .base_string import (
    collect_request_parameters,
    normalize_base_url,
    normalize_parameters,
    signature_base_string,
)
from .clock import ClockAndNonceSource, FixedClockAndNonce, SystemClockAndNonce
from .encoding import base64_encode, percent_decode, percent_encode
from .httpx_auth import OAuth1Auth
from .params import OAuthParam, ParameterStore
from .persistence import parameters_from_persistence_string, persistence_string
from .response import (
    MalformedResponseError,
    dictionary_with_response_data,
    dictionary_with_response_string,
)
from .signing import (
    SIGNATURE_METHOD_HMAC_SHA1,
    SIGNATURE_METHOD_RSA_SHA1,
    InvalidPrivateKeyError,
    MissingCredentialsError,
    NotAuthorizedError,
    OAuthSigningError,
    UnsupportedSignatureMethodError,
    get_signer,
)

__all__ = [
    # Authentication (main entry point)
    "Authentication",
    "Phase",
    "SignedParameters",
    "format_authorization_header",
    "OAuth1Auth",
    # Parameters
    "OAuthParam",
    "ParameterStore",
    # Base string
    "signature_base_string",
    "normalize_base_url",
    "normalize_parameters",
    "collect_request_parameters",
    # Encoding
    "percent_encode",
    "percent_decode",
    "base64_encode",
    # Signing
    "get_signer",
    "SIGNATURE_METHOD_HMAC_SHA1",
    "SIGNATURE_METHOD_RSA_SHA1",
    "OAuthSigningError",
    "MissingCredentialsError",
    "UnsupportedSignatureMethodError",
    "InvalidPrivateKeyError",
    "NotAuthorizedError",
    # Clock
    "ClockAndNonceSource",
    "SystemClockAndNonce",
    "FixedClockAndNonce",
    # Responses and persistence
    "dictionary_with_response_string",
    "dictionary_with_response_data",
    "MalformedResponseError",
    "persistence_string",
    "parameters_from_persistence_string",
]
