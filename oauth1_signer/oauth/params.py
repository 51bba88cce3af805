"""OAuth parameter names and the parameter store.

The store holds every OAuth protocol parameter plus the pass-through
application parameters (scope, hosted domain, ...) that providers accept
alongside them. A key that is not present is unset; it is never rendered
as an empty string.
"""

from enum import Enum
from typing import Iterator


class OAuthParam(str, Enum):
    """Known parameter names."""

    CONSUMER_KEY = "oauth_consumer_key"
    TOKEN = "oauth_token"
    CALLBACK = "oauth_callback"
    VERIFIER = "oauth_verifier"
    TOKEN_SECRET = "oauth_token_secret"
    CALLBACK_CONFIRMED = "oauth_callback_confirmed"
    SIGNATURE_METHOD = "oauth_signature_method"
    SIGNATURE = "oauth_signature"
    TIMESTAMP = "oauth_timestamp"
    NONCE = "oauth_nonce"
    VERSION = "oauth_version"

    # Application parameters, signed but not OAuth protocol fields
    SCOPE = "scope"
    DISPLAY_NAME = "xoauth_displayname"
    HOSTED_DOMAIN = "hd"
    LANGUAGE = "hl"
    MOBILE = "btmpl"

    def __str__(self) -> str:
        return self.value


# Prefix that marks a protocol parameter (header-eligible)
OAUTH_PREFIX = "oauth_"


def is_protocol_parameter(key: str) -> bool:
    """Check if a parameter belongs in the Authorization header."""
    return str(key).startswith(OAUTH_PREFIX)


def _key(key: "OAuthParam | str") -> str:
    return key.value if isinstance(key, OAuthParam) else key


class ParameterStore:
    """Mutable mapping of parameter name to string value.

    Keys may be given as OAuthParam members or as plain strings for
    parameters the enum does not know about. Setting a value of None
    removes the key.
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = {}
        if initial:
            for key, value in initial.items():
                self.set(key, value)

    def get(self, key: OAuthParam | str) -> str | None:
        """Get a parameter value, or None if unset."""
        return self._values.get(_key(key))

    def set(self, key: OAuthParam | str, value: str | None) -> None:
        """Set a parameter value; None unsets it."""
        name = _key(key)
        if value is None:
            self._values.pop(name, None)
        else:
            self._values[name] = str(value)

    def remove(self, key: OAuthParam | str) -> None:
        self._values.pop(_key(key), None)

    def subset(self, keys: "list[OAuthParam] | tuple[OAuthParam, ...]") -> dict[str, str]:
        """Return the set values for the given keys, in key order."""
        result: dict[str, str] = {}
        for key in keys:
            value = self.get(key)
            if value is not None:
                result[_key(key)] = value
        return result

    def copy(self) -> "ParameterStore":
        return ParameterStore(dict(self._values))

    def to_dict(self) -> dict[str, str]:
        return dict(self._values)

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._values.items()))

    def __contains__(self, key: object) -> bool:
        if isinstance(key, (OAuthParam, str)):
            return _key(key) in self._values
        return False

    def __getitem__(self, key: OAuthParam | str) -> str:
        return self._values[_key(key)]

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ParameterStore):
            return self._values == other._values
        return NotImplemented

    def __repr__(self) -> str:
        # Never show secrets in reprs
        shown = {
            k: ("***" if k == OAuthParam.TOKEN_SECRET.value else v)
            for k, v in self._values.items()
        }
        return f"ParameterStore({shown!r})"
