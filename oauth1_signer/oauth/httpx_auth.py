"""httpx integration.

OAuth1Auth plugs an Authentication into an httpx client so every request
it sends is signed:

    auth = Authentication.for_installed_app()
    auth.set_keys_for_persistence_response_string(stored)
    with httpx.Client(auth=OAuth1Auth(auth)) as client:
        client.get("https://www.google.com/m8/feeds/contacts/default/full")
"""

from typing import Generator

import httpx

from .authentication import Authentication, Phase
from .signing import NotAuthorizedError


class OAuth1Auth(httpx.Auth):
    """Sign outgoing httpx requests with OAuth 1.0a.

    The body is read before signing so form-encoded parameters are part of
    the signature. Signing errors propagate as their own OAuthSigningError
    subclass.
    """

    requires_request_body = True

    def __init__(
        self,
        authentication: Authentication,
        phase: Phase | str = Phase.RESOURCE,
        use_header: bool = True,
    ):
        """Initialize the auth adapter.

        Args:
            authentication: Credentials and token state to sign with
            phase: Exchange step the requests belong to (default resource access)
            use_header: Authorization header if True, URL query params if False
        """
        self.authentication = authentication
        self.phase = Phase(phase)
        self.use_header = use_header

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if self.phase is Phase.RESOURCE and not self.authentication.has_access_token:
            raise NotAuthorizedError(
                f"Cannot sign request to {request.url.host}: no access token"
            )

        self.authentication.sign_request(request, self.phase, self.use_header)
        yield request
