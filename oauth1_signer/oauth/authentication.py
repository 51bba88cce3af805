"""OAuth 1.0a request authorization.

Authentication holds the consumer credentials and the token state of one
OAuth session and signs requests for each step of the token exchange:

1. Request token: POST to the provider with consumer key and callback
2. Authorize token: redirect the user with the request token (unsigned)
3. Access token: exchange request token + verifier for an access token
4. Resource access: sign API requests with the access token

Each step can place its parameters in an "Authorization: OAuth ..." header
or in the URL query. Non-OAuth parameters such as scope are signed but
always travel in the URL.

Signing never mutates the parameter store: timestamp, nonce and signature
live only in the per-call snapshot, so concurrent signing of different
requests against one instance is safe. Token exchange (set_keys_*) still
mutates the store and must be serialized by the caller.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

import httpx

from .base_string import collect_request_parameters, signature_base_string
from .clock import ClockAndNonceSource, SystemClockAndNonce
from .encoding import percent_decode, percent_encode
from .params import OAuthParam, ParameterStore, is_protocol_parameter
from .persistence import parameters_from_persistence_string, persistence_string
from .response import dictionary_with_response_data, dictionary_with_response_string
from .signing import (
    SIGNATURE_METHOD_HMAC_SHA1,
    MissingCredentialsError,
    NotAuthorizedError,
    OAuthSigningError,
    get_signer,
)

logger = logging.getLogger(__name__)

SERVICE_PROVIDER_GOOGLE = "Google"
OAUTH_VERSION = "1.0"
INSTALLED_APP_CONSUMER_KEY = "anonymous"


class Phase(str, Enum):
    """Steps of the three-legged token exchange."""

    REQUEST_TOKEN = "request"
    AUTHORIZE_TOKEN = "authorize"
    ACCESS_TOKEN = "access"
    RESOURCE = "resource"


# Parameters sent in each phase. timestamp and nonce come from the clock.
PHASE_KEYS: dict[Phase, tuple[OAuthParam, ...]] = {
    Phase.REQUEST_TOKEN: (
        OAuthParam.CONSUMER_KEY,
        OAuthParam.SIGNATURE_METHOD,
        OAuthParam.CALLBACK,
        OAuthParam.VERSION,
        OAuthParam.SCOPE,
        OAuthParam.DISPLAY_NAME,
    ),
    Phase.AUTHORIZE_TOKEN: (
        OAuthParam.TOKEN,
        OAuthParam.HOSTED_DOMAIN,
        OAuthParam.LANGUAGE,
        OAuthParam.MOBILE,
        OAuthParam.SCOPE,
    ),
    Phase.ACCESS_TOKEN: (
        OAuthParam.CONSUMER_KEY,
        OAuthParam.SIGNATURE_METHOD,
        OAuthParam.TOKEN,
        OAuthParam.VERIFIER,
        OAuthParam.VERSION,
    ),
    Phase.RESOURCE: (
        OAuthParam.CONSUMER_KEY,
        OAuthParam.SIGNATURE_METHOD,
        OAuthParam.TOKEN,
        OAuthParam.VERSION,
    ),
}

# Parameters that must be set before a phase can run
PHASE_REQUIRED: dict[Phase, tuple[OAuthParam, ...]] = {
    Phase.REQUEST_TOKEN: (OAuthParam.CONSUMER_KEY, OAuthParam.SIGNATURE_METHOD, OAuthParam.CALLBACK),
    Phase.AUTHORIZE_TOKEN: (OAuthParam.TOKEN,),
    Phase.ACCESS_TOKEN: (
        OAuthParam.CONSUMER_KEY,
        OAuthParam.SIGNATURE_METHOD,
        OAuthParam.TOKEN,
        OAuthParam.VERIFIER,
    ),
    Phase.RESOURCE: (
        OAuthParam.CONSUMER_KEY,
        OAuthParam.SIGNATURE_METHOD,
        OAuthParam.TOKEN,
        OAuthParam.TOKEN_SECRET,
    ),
}

# Keys copied from provider responses and callback redirects
RESPONSE_KEYS = (
    OAuthParam.TOKEN,
    OAuthParam.TOKEN_SECRET,
    OAuthParam.CALLBACK_CONFIRMED,
    OAuthParam.VERIFIER,
)


@dataclass
class SignedParameters:
    """Result of signing one request.

    Attributes:
        base_string: The signature base string that was signed
        params: Phase parameters plus oauth_timestamp, oauth_nonce and
            oauth_signature, with raw (unencoded) values
    """

    base_string: str
    params: dict[str, str]

    def protocol_params(self) -> dict[str, str]:
        """Parameters that belong in the Authorization header."""
        return {k: v for k, v in self.params.items() if is_protocol_parameter(k)}

    def application_params(self) -> dict[str, str]:
        """Signed parameters that must travel in the URL."""
        return {k: v for k, v in self.params.items() if not is_protocol_parameter(k)}


def format_authorization_header(params: dict[str, str], realm: str | None = None) -> str:
    """Build an "OAuth ..." Authorization header value.

    realm comes first when set; the remaining parameters are sorted by name.
    Every value is percent-encoded and quoted.
    """
    parts = []
    if realm is not None:
        parts.append(f'realm="{percent_encode(realm)}"')
    for key in sorted(params):
        parts.append(f'{percent_encode(key)}="{percent_encode(params[key])}"')
    return "OAuth " + ", ".join(parts)


def _append_query_params(request: httpx.Request, params: dict[str, str]) -> None:
    """Append percent-encoded pairs to the request URL query."""
    if not params:
        return
    extra = "&".join(f"{percent_encode(k)}={percent_encode(v)}" for k, v in params.items())
    query = request.url.query.decode("ascii")
    new_query = f"{query}&{extra}" if query else extra
    request.url = request.url.copy_with(query=new_query.encode("ascii"))


def _strip_protocol_query_params(request: httpx.Request) -> None:
    """Remove every oauth_* pair from the request URL query.

    Protocol parameters may appear in one place only.
    """
    query = request.url.query.decode("ascii")
    if not query:
        return
    items = [item for item in query.split("&") if item]
    kept = [
        item for item in items if not is_protocol_parameter(percent_decode(item.split("=", 1)[0]))
    ]
    if len(kept) == len(items):
        return
    new_query = "&".join(kept)
    request.url = request.url.copy_with(query=new_query.encode("ascii") if new_query else None)


def _param_property(key: OAuthParam, doc: str) -> property:
    def getter(self: "Authentication") -> str | None:
        return self.parameters.get(key)

    def setter(self: "Authentication", value: str | None) -> None:
        self.parameters.set(key, value)

    return property(getter, setter, doc=doc)


class Authentication:
    """Consumer credentials and token state for one OAuth 1.0a session.

    Usage:
        auth = Authentication.for_installed_app()
        auth.callback = "http://localhost:8080/callback"
        auth.scope = "https://www.google.com/calendar/feeds/"
        auth.add_request_token_header(request)
        ...
        auth.set_keys_for_response_data(response.content)
        auth.has_access_token = True
        auth.authorize_request(api_request)
    """

    consumer_key = _param_property(OAuthParam.CONSUMER_KEY, "Consumer key")
    signature_method = _param_property(OAuthParam.SIGNATURE_METHOD, "HMAC-SHA1 or RSA-SHA1")
    version = _param_property(OAuthParam.VERSION, "Protocol version, normally 1.0")
    token = _param_property(OAuthParam.TOKEN, "Request token or access token")
    token_secret = _param_property(OAuthParam.TOKEN_SECRET, "Secret of the current token")
    callback = _param_property(OAuthParam.CALLBACK, "Callback URL, or 'oob'")
    verifier = _param_property(OAuthParam.VERIFIER, "Verifier returned by the authorize step")
    callback_confirmed = _param_property(
        OAuthParam.CALLBACK_CONFIRMED, "Provider's oauth_callback_confirmed value"
    )
    scope = _param_property(OAuthParam.SCOPE, "Space-separated scope URLs")
    display_name = _param_property(OAuthParam.DISPLAY_NAME, "Application name shown to the user")
    hosted_domain = _param_property(OAuthParam.HOSTED_DOMAIN, "Hosted domain (hd)")
    language = _param_property(OAuthParam.LANGUAGE, "Language of the authorize page (hl)")
    mobile = _param_property(OAuthParam.MOBILE, "Mobile template of the authorize page (btmpl)")

    def __init__(
        self,
        signature_method: str | None,
        consumer_key: str | None,
        private_key: str | None,
        *,
        realm: str | None = None,
        service_provider: str | None = None,
        clock: ClockAndNonceSource | None = None,
        user_data: Any = None,
    ):
        """Initialize an authentication.

        Args:
            signature_method: "HMAC-SHA1" or "RSA-SHA1"
            consumer_key: Consumer key issued by the provider
            private_key: Consumer secret for HMAC-SHA1, PEM private key for RSA-SHA1
            realm: Optional realm for the Authorization header
            service_provider: Label such as "Google"; not used for signing
            clock: Timestamp/nonce source; defaults to the system clock
            user_data: Caller-owned value, never inspected
        """
        self.parameters = ParameterStore()
        self.signature_method = signature_method
        self.consumer_key = consumer_key
        self.version = OAUTH_VERSION

        self.private_key = private_key
        self.realm = realm
        self.service_provider = service_provider
        self.clock: ClockAndNonceSource = clock or SystemClockAndNonce()
        self.user_data = user_data
        self.has_access_token = False

    @classmethod
    def for_installed_app(cls, clock: ClockAndNonceSource | None = None) -> "Authentication":
        """Authentication for installed applications.

        Uses HMAC-SHA1 with "anonymous" as both consumer key and secret.
        """
        return cls(
            SIGNATURE_METHOD_HMAC_SHA1,
            INSTALLED_APP_CONSUMER_KEY,
            INSTALLED_APP_CONSUMER_KEY,
            service_provider=SERVICE_PROVIDER_GOOGLE,
            clock=clock,
        )

    def __repr__(self) -> str:
        return (
            f"Authentication(consumer_key={self.consumer_key!r}, "
            f"signature_method={self.signature_method!r}, "
            f"service_provider={self.service_provider!r}, "
            f"has_access_token={self.has_access_token})"
        )

    @property
    def access_token(self) -> str | None:
        """The token, if it is an access token."""
        return self.token if self.has_access_token else None

    @access_token.setter
    def access_token(self, value: str | None) -> None:
        self.token = value
        self.has_access_token = value is not None

    def can_authorize(self) -> bool:
        """Check if consumer key and signature method are both set."""
        return bool(self.consumer_key) and bool(self.signature_method)

    # Signing

    def _check_phase(self, phase: Phase) -> None:
        missing = [key.value for key in PHASE_REQUIRED[phase] if self.parameters.get(key) is None]
        if missing:
            raise MissingCredentialsError(
                f"Cannot sign {phase.value} step, missing: {', '.join(missing)}"
            )

    def sign_parameters(
        self,
        method: str,
        url: str | httpx.URL,
        phase: Phase = Phase.RESOURCE,
        request_params: Iterable[tuple[str, str]] = (),
    ) -> SignedParameters:
        """Assemble and sign the parameters for one request.

        Args:
            method: HTTP method
            url: Request URL
            phase: Which step of the exchange this request belongs to
            request_params: Parameters the request already carries (query/body);
                oauth_* pairs among them are ignored

        Returns:
            SignedParameters for the request

        Raises:
            MissingCredentialsError: If a required parameter is unset
            UnsupportedSignatureMethodError: If the method is unknown or disabled
            InvalidPrivateKeyError: If the RSA key cannot be loaded
        """
        if phase is Phase.AUTHORIZE_TOKEN:
            raise OAuthSigningError("The authorize step is not signed")
        if not self.can_authorize():
            raise MissingCredentialsError("Consumer key and signature method must be set")
        self._check_phase(phase)
        signer = get_signer(self.signature_method)

        # Protocol parameters come from the store only
        request_pairs = [(k, v) for k, v in request_params if not is_protocol_parameter(k)]
        present = {key for key, _ in request_pairs}

        params = {
            key: value
            for key, value in self.parameters.subset(PHASE_KEYS[phase]).items()
            if is_protocol_parameter(key) or key not in present
        }
        params[OAuthParam.TIMESTAMP.value] = self.clock.timestamp()
        params[OAuthParam.NONCE.value] = self.clock.nonce()

        base_string = signature_base_string(method, url, request_pairs + list(params.items()))
        logger.debug(f"Signature base string for {phase.value} step: {base_string}")

        params[OAuthParam.SIGNATURE.value] = signer.sign(
            base_string, self.private_key or "", self.token_secret
        )
        return SignedParameters(base_string=base_string, params=params)

    def authorization_header(
        self,
        method: str,
        url: str | httpx.URL,
        phase: Phase = Phase.RESOURCE,
        request_params: Iterable[tuple[str, str]] = (),
    ) -> str:
        """Sign and return the Authorization header value.

        Application parameters (scope, ...) are signed but not included;
        callers that build requests themselves must add them to the URL.

        Raises:
            OAuthSigningError: If the request cannot be signed
        """
        signed = self.sign_parameters(method, url, phase, request_params)
        return format_authorization_header(signed.protocol_params(), self.realm)

    def sign_request(
        self,
        request: httpx.Request,
        phase: Phase = Phase.RESOURCE,
        use_header: bool = True,
    ) -> SignedParameters | None:
        """Sign a request for a phase and write the result onto it.

        Any oauth_* parameters already in the URL query are replaced. The
        authorize step is unsigned; its parameters are appended to the URL and
        None is returned.

        Raises:
            OAuthSigningError: If the request cannot be signed; the request
                is left untouched
        """
        if phase is Phase.AUTHORIZE_TOKEN:
            self._check_phase(phase)
            _strip_protocol_query_params(request)
            _append_query_params(request, self.parameters.subset(PHASE_KEYS[phase]))
            return None

        request_params = collect_request_parameters(request)
        signed = self.sign_parameters(request.method, request.url, phase, request_params)

        _strip_protocol_query_params(request)

        if use_header:
            request.headers["Authorization"] = format_authorization_header(
                signed.protocol_params(), self.realm
            )
            _append_query_params(request, signed.application_params())
        else:
            _append_query_params(request, signed.params)

        logger.debug(
            f"Added {phase.value} {'header' if use_header else 'params'} to "
            f"{request.method} {request.url.host}{request.url.path}"
        )
        return signed

    def _apply(self, request: httpx.Request, phase: Phase, use_header: bool) -> bool:
        try:
            self.sign_request(request, phase, use_header)
        except OAuthSigningError as e:
            logger.warning(f"Could not authorize request to {request.url.host}: {e}")
            return False
        return True

    def add_request_token_header(self, request: httpx.Request) -> bool:
        return self._apply(request, Phase.REQUEST_TOKEN, use_header=True)

    def add_request_token_params(self, request: httpx.Request) -> bool:
        return self._apply(request, Phase.REQUEST_TOKEN, use_header=False)

    def add_authorize_token_header(self, request: httpx.Request) -> bool:
        """The authorize step is a browser redirect, so this adds params."""
        return self._apply(request, Phase.AUTHORIZE_TOKEN, use_header=False)

    def add_authorize_token_params(self, request: httpx.Request) -> bool:
        return self._apply(request, Phase.AUTHORIZE_TOKEN, use_header=False)

    def add_access_token_header(self, request: httpx.Request) -> bool:
        return self._apply(request, Phase.ACCESS_TOKEN, use_header=True)

    def add_access_token_params(self, request: httpx.Request) -> bool:
        return self._apply(request, Phase.ACCESS_TOKEN, use_header=False)

    def add_resource_token_header(self, request: httpx.Request) -> bool:
        return self._apply(request, Phase.RESOURCE, use_header=True)

    def add_resource_token_params(self, request: httpx.Request) -> bool:
        return self._apply(request, Phase.RESOURCE, use_header=False)

    def authorize_request(self, request: httpx.Request) -> bool:
        """Add the resource Authorization header to an API request.

        Returns:
            False if credentials are incomplete or no access token is held yet
        """
        try:
            self.ensure_access_token()
        except OAuthSigningError as e:
            logger.warning(f"Could not authorize request to {request.url.host}: {e}")
            return False
        return self.add_resource_token_header(request)

    def ensure_access_token(self) -> None:
        """Raise unless resource requests can be signed.

        Raises:
            MissingCredentialsError: If consumer key or signature method is unset
            NotAuthorizedError: If the token exchange has not completed
        """
        if not self.can_authorize():
            raise MissingCredentialsError("Consumer key and signature method must be set")
        if not self.has_access_token:
            raise NotAuthorizedError("No access token; complete the token exchange first")

    # Provider responses

    def set_keys_for_response_dictionary(self, response: dict[str, str]) -> None:
        """Copy token, token secret, callback confirmation and verifier."""
        for key in RESPONSE_KEYS:
            value = response.get(key.value)
            if value is not None:
                self.parameters.set(key, value)

    def set_keys_for_response_string(self, response: str) -> None:
        self.set_keys_for_response_dictionary(dictionary_with_response_string(response))

    def set_keys_for_response_data(self, data: bytes) -> None:
        self.set_keys_for_response_dictionary(dictionary_with_response_data(data))

    # Persistence

    def persistence_response_string(self) -> str:
        """Token and secret as "oauth_token=...&oauth_token_secret=..."."""
        return persistence_string(self.parameters)

    def set_keys_for_persistence_response_string(self, text: str) -> None:
        """Restore a persisted access token and secret."""
        restored = parameters_from_persistence_string(text)
        self.token = restored.get(OAuthParam.TOKEN)
        self.token_secret = restored.get(OAuthParam.TOKEN_SECRET)
        self.has_access_token = self.token is not None
