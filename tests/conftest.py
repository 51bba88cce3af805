"""Shared fixtures and utilities for oauth1-signer tests."""

import json
from pathlib import Path
from typing import Any

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from oauth1_signer.oauth import Authentication, FixedClockAndNonce

from .vectors import (
    ACCESS_TOKEN_URL,
    INSTALLED_CALLBACK,
    INSTALLED_NONCE,
    INSTALLED_SCOPE,
    INSTALLED_TIMESTAMP,
    REQUEST_TOKEN_URL,
    RFC_CONSUMER_KEY,
    RFC_CONSUMER_SECRET,
    RFC_NONCE,
    RFC_TIMESTAMP,
    RFC_TOKEN,
    RFC_TOKEN_SECRET,
)


# ============================================================================
# Authentication Fixtures
# ============================================================================


@pytest.fixture
def installed_auth() -> Authentication:
    """Installed-app authentication with a fixed clock and a callback."""
    auth = Authentication.for_installed_app(
        clock=FixedClockAndNonce(INSTALLED_TIMESTAMP, INSTALLED_NONCE)
    )
    auth.callback = INSTALLED_CALLBACK
    auth.scope = INSTALLED_SCOPE
    return auth


@pytest.fixture
def rfc_auth() -> Authentication:
    """Authentication holding the OAuth 1.0a Appendix A access token."""
    auth = Authentication(
        "HMAC-SHA1",
        RFC_CONSUMER_KEY,
        RFC_CONSUMER_SECRET,
        clock=FixedClockAndNonce(RFC_TIMESTAMP, RFC_NONCE),
    )
    auth.access_token = RFC_TOKEN
    auth.token_secret = RFC_TOKEN_SECRET
    return auth


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    """A freshly generated RSA key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_private_pem(rsa_key: rsa.RSAPrivateKey) -> str:
    """The RSA key as unencrypted PKCS#8 PEM text."""
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


# ============================================================================
# Config Fixtures
# ============================================================================


@pytest.fixture
def sample_provider_data() -> dict[str, Any]:
    """Provider entries as they appear in an oauth.json file."""
    return {
        "google": {
            "consumerKey": "anonymous",
            "privateKey": "${GOOGLE_CONSUMER_SECRET}",
            "scope": INSTALLED_SCOPE,
            "callback": INSTALLED_CALLBACK,
            "requestTokenUrl": REQUEST_TOKEN_URL,
            "authorizeTokenUrl": "https://www.google.com/accounts/OAuthAuthorizeToken",
            "accessTokenUrl": ACCESS_TOKEN_URL,
        },
        "photos": {
            "consumerKey": RFC_CONSUMER_KEY,
            "privateKey": RFC_CONSUMER_SECRET,
            "signatureMethod": "HMAC-SHA1",
            "realm": "Photos",
        },
    }


@pytest.fixture
def config_file(tmp_path: Path, sample_provider_data: dict[str, Any]) -> Path:
    """Write a provider config file and return its path."""
    path = tmp_path / "oauth.json"
    path.write_text(json.dumps({"oauthProviders": sample_provider_data}))
    return path
