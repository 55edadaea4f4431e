"""
Carrier OAuth 2.0 Token Acquisition

Client-credentials grants expressed as an ordered list of strategies,
tried in sequence until one succeeds:
- BasicHeaderStrategy: id/secret in an HTTP Basic Authorization header
- FormBodyStrategy: id/secret in the form-encoded request body

Tokens are never cached. Every rate call acquires its own token.
"""
import base64
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

import httpx

from shipping_quotes.core.exceptions import AuthError, truncate_body
from shipping_quotes.models.carrier import CarrierCredentials

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class AccessToken:
    """OAuth bearer token, valid for a single rate call."""
    value: str = field(repr=False)
    token_type: str = "Bearer"
    expires_in: Optional[int] = None  # informational, never used for reuse

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.value}"


def basic_auth_header(credentials: CarrierCredentials) -> str:
    auth_string = f"{credentials.client_id}:{credentials.client_secret}"
    return "Basic " + base64.b64encode(auth_string.encode()).decode()


class AuthStrategy(ABC):
    """How client credentials are transmitted to the token endpoint."""

    name: str = "strategy"

    @abstractmethod
    def build_request(self, credentials: CarrierCredentials) -> Tuple[Dict[str, str], Dict[str, str]]:
        """Return (headers, form data) for the token request."""
        pass


class BasicHeaderStrategy(AuthStrategy):
    name = "basic_header"

    def build_request(self, credentials):
        headers = {
            "Authorization": basic_auth_header(credentials),
            "Content-Type": FORM_CONTENT_TYPE,
        }
        return headers, {"grant_type": "client_credentials"}


class FormBodyStrategy(AuthStrategy):
    name = "form_body"

    def build_request(self, credentials):
        headers = {"Content-Type": FORM_CONTENT_TYPE}
        data = {
            "grant_type": "client_credentials",
            "client_id": credentials.client_id,
            "client_secret": credentials.client_secret,
        }
        return headers, data


class TokenProvider:
    """
    Acquires a fresh access token for one carrier.

    Strategies are attempted in order; a non-success response moves on to
    the next strategy. Transport errors abort immediately.
    """

    def __init__(
        self,
        carrier_name: str,
        token_url: str,
        http_client: httpx.AsyncClient,
        strategies: Sequence[AuthStrategy],
    ):
        if not strategies:
            raise ValueError("TokenProvider needs at least one auth strategy")
        self.carrier_name = carrier_name
        self.token_url = token_url
        self.strategies = list(strategies)
        self._http = http_client

    async def request_token(
        self,
        strategy: AuthStrategy,
        credentials: CarrierCredentials,
    ) -> httpx.Response:
        """Send one token request; network failures become AuthError."""
        headers, data = strategy.build_request(credentials)
        try:
            return await self._http.post(self.token_url, headers=headers, data=data)
        except httpx.RequestError as e:
            logger.error(f"{self.carrier_name} OAuth request failed: {e!r}")
            raise AuthError(
                f"{self.carrier_name} auth request failed: {type(e).__name__} {e}".rstrip(),
                carrier=self.carrier_name,
            )

    async def acquire_token(self, credentials: CarrierCredentials) -> AccessToken:
        """
        Exchange client credentials for a bearer token.

        Raises:
            AuthError: credentials missing, or every strategy was rejected
        """
        if not credentials.is_configured:
            raise AuthError(f"{self.carrier_name} credentials missing", carrier=self.carrier_name)

        response = None
        for index, strategy in enumerate(self.strategies):
            response = await self.request_token(strategy, credentials)
            if response.is_success:
                return self._parse_token(response, strategy)

            remaining = self.strategies[index + 1:]
            if remaining:
                logger.warning(
                    f"{self.carrier_name} OAuth {strategy.name} rejected "
                    f"({response.status_code}), retrying with {remaining[0].name}"
                )

        body = truncate_body(response.text)
        logger.error(f"{self.carrier_name} OAuth failed: {response.status_code} - {body}")
        raise AuthError(
            f"{self.carrier_name} auth failed {response.status_code} {body}".rstrip(),
            carrier=self.carrier_name,
            status=response.status_code,
            body=response.text,
        )

    def _parse_token(self, response: httpx.Response, strategy: AuthStrategy) -> AccessToken:
        try:
            data = response.json()
        except ValueError:
            raise AuthError(
                f"{self.carrier_name} auth response was not valid JSON",
                carrier=self.carrier_name,
                status=response.status_code,
            )

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise AuthError(
                f"{self.carrier_name} auth response missing access_token",
                carrier=self.carrier_name,
                status=response.status_code,
            )

        expires_in = data.get("expires_in")
        try:
            expires_in = int(expires_in) if expires_in is not None else None
        except (TypeError, ValueError):
            expires_in = None

        logger.info(f"{self.carrier_name} OAuth token obtained via {strategy.name}")
        return AccessToken(
            value=str(access_token),
            token_type=str(data.get("token_type") or "Bearer"),
            expires_in=expires_in,
        )
