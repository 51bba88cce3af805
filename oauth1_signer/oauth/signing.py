"""Signature methods for OAuth 1.0a.

HMAC-SHA1 keys with the consumer secret and token secret; RSA-SHA1 signs
with the consumer's RSA private key (PKCS#1 v1.5). Both produce Base64.
"""

import hashlib
import hmac
import logging
import os
from abc import ABC, abstractmethod

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .encoding import base64_encode, percent_encode

logger = logging.getLogger(__name__)

SIGNATURE_METHOD_HMAC_SHA1 = "HMAC-SHA1"
SIGNATURE_METHOD_RSA_SHA1 = "RSA-SHA1"

# Set OAUTH1_SIGNER_DISABLE_RSA_SHA1 to any value to build without RSA-SHA1
RSA_SHA1_ENABLED = not os.environ.get("OAUTH1_SIGNER_DISABLE_RSA_SHA1")


class OAuthSigningError(Exception):
    """Error while building or signing an OAuth request."""

    pass


class MissingCredentialsError(OAuthSigningError):
    """Consumer key or signature method is unset."""

    pass


class UnsupportedSignatureMethodError(OAuthSigningError):
    """Signature method is unknown or disabled."""

    pass


class InvalidPrivateKeyError(OAuthSigningError):
    """The RSA private key could not be loaded."""

    pass


class NotAuthorizedError(OAuthSigningError):
    """Resource access attempted without an access token."""

    pass


class Signer(ABC):
    """Produces a Base64 signature for a signature base string."""

    method: str

    @abstractmethod
    def sign(self, base_string: str, private_key: str, token_secret: str | None = None) -> str:
        """Sign a base string.

        Args:
            base_string: The canonical signature base string
            private_key: Consumer secret (HMAC) or PEM private key (RSA)
            token_secret: Token secret, if a token is in use

        Returns:
            Base64-encoded signature (not yet percent-encoded)
        """


class HmacSha1Signer(Signer):
    """HMAC-SHA1 per OAuth 1.0a section 9.2."""

    method = SIGNATURE_METHOD_HMAC_SHA1

    def sign(self, base_string: str, private_key: str, token_secret: str | None = None) -> str:
        key = f"{percent_encode(private_key or '')}&{percent_encode(token_secret or '')}"
        digest = hmac.new(
            key.encode("utf-8"), base_string.encode("utf-8"), hashlib.sha1
        ).digest()
        return base64_encode(digest)


class RsaSha1Signer(Signer):
    """RSA-SHA1 per OAuth 1.0a section 9.3.

    The token secret plays no part in the signature.
    """

    method = SIGNATURE_METHOD_RSA_SHA1

    def sign(self, base_string: str, private_key: str, token_secret: str | None = None) -> str:
        key = load_rsa_private_key(private_key)
        try:
            signature = key.sign(base_string.encode("utf-8"), padding.PKCS1v15(), hashes.SHA1())
        except UnsupportedAlgorithm as e:
            raise UnsupportedSignatureMethodError(
                "RSA-SHA1 is not permitted by the installed crypto backend"
            ) from e
        return base64_encode(signature)


def load_rsa_private_key(pem: str) -> rsa.RSAPrivateKey:
    """Load an unencrypted PEM RSA private key.

    Raises:
        InvalidPrivateKeyError: If the text is not a usable RSA private key
    """
    if not pem:
        raise InvalidPrivateKeyError("No private key set for RSA-SHA1 signing")

    try:
        key = serialization.load_pem_private_key(pem.encode("utf-8"), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise InvalidPrivateKeyError(f"Could not load RSA private key: {type(e).__name__}") from e

    if not isinstance(key, rsa.RSAPrivateKey):
        raise InvalidPrivateKeyError(
            f"RSA-SHA1 requires an RSA key, got {type(key).__name__}"
        )
    return key


def get_signer(method: str | None) -> Signer:
    """Resolve a signature method name to a signer.

    Raises:
        MissingCredentialsError: If no method is given
        UnsupportedSignatureMethodError: If the method is unknown or disabled
    """
    if not method:
        raise MissingCredentialsError("Signature method is not set")

    if method == SIGNATURE_METHOD_HMAC_SHA1:
        return HmacSha1Signer()

    if method == SIGNATURE_METHOD_RSA_SHA1:
        if not RSA_SHA1_ENABLED:
            raise UnsupportedSignatureMethodError("RSA-SHA1 signing is disabled")
        return RsaSha1Signer()

    raise UnsupportedSignatureMethodError(f"Unsupported signature method: {method}")
