"""Microsoft account, Xbox Live and Halo authentication chain."""

from typing import Any
from urllib.parse import urlencode

import httpx
import structlog

from ..models import OAuthToken, SpartanToken, XboxTicket
from .errors import AuthenticationError
from .http_client import HttpClientService

log = structlog.stdlib.get_logger()

OAUTH_AUTHORIZE_URL = "https://login.live.com/oauth20_authorize.srf"
OAUTH_TOKEN_URL = "https://login.live.com/oauth20_token.srf"
OAUTH_SCOPE = "Xboxlive.signin Xboxlive.offline_access"
USER_AUTH_URL = "https://user.auth.xboxlive.com/user/authenticate"
XSTS_AUTH_URL = "https://xsts.auth.xboxlive.com/xsts/authorize"
XBOX_LIVE_RELYING_PARTY = "http://xboxlive.com"
HALO_RELYING_PARTY = "https://prod.xsts.halowaypoint.com/"
SPARTAN_TOKEN_URL = "https://settings.svc.halowaypoint.com/spartan-token"
SPARTAN_AUDIENCE = "urn:343:s3:services"

_JSON_HEADERS = {
    "x-xbl-contract-version": "1",
    "Accept": "application/json",
}


async def _post_for_json(
    http_client: HttpClientService,
    stage: str,
    url: str,
    **kwargs: Any,
) -> dict[str, Any]:
    """POST to one stage of the chain and return its JSON object body."""
    try:
        response = await http_client.post(url, **kwargs)
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        raise AuthenticationError(f"Authentication failed at stage '{stage}'", stage=stage, original_error=e) from e

    if not isinstance(data, dict):
        raise AuthenticationError(f"Unexpected response at stage '{stage}'", stage=stage)
    return data


class XboxAuthenticationService:
    """OAuth token exchange and Xbox Live user/XSTS ticket requests."""

    def __init__(self, http_client: HttpClientService) -> None:
        self.http_client = http_client

    def generate_auth_url(self, client_id: str, redirect_url: str) -> str:
        """Build the URL where the user signs in to produce an authorization code."""
        query = urlencode({
            "client_id": client_id,
            "response_type": "code",
            "approval_prompt": "auto",
            "scope": OAUTH_SCOPE,
            "redirect_uri": redirect_url,
        })
        return f"{OAUTH_AUTHORIZE_URL}?{query}"

    async def request_oauth_token(
        self,
        client_id: str,
        code: str,
        redirect_url: str,
        client_secret: str,
    ) -> OAuthToken:
        """Exchange an authorization code for an OAuth token pair."""
        log.info("Requesting OAuth token", client_id=client_id)
        return await self._request_token("oauth", {
            "grant_type": "authorization_code",
            "code": code,
            "approval_prompt": "auto",
            "scope": OAUTH_SCOPE,
            "redirect_uri": redirect_url,
            "client_id": client_id,
            "client_secret": client_secret,
        })

    async def refresh_oauth_token(
        self,
        client_id: str,
        refresh_token: str,
        redirect_url: str,
        client_secret: str,
    ) -> OAuthToken:
        """Exchange a refresh token for a new OAuth token pair."""
        log.info("Refreshing OAuth token", client_id=client_id)
        return await self._request_token("oauth_refresh", {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "scope": OAUTH_SCOPE,
            "redirect_uri": redirect_url,
            "client_id": client_id,
            "client_secret": client_secret,
        })

    async def _request_token(self, stage: str, form: dict[str, str]) -> OAuthToken:
        data = await _post_for_json(self.http_client, stage, OAUTH_TOKEN_URL, data=form)
        if not data.get("access_token"):
            raise AuthenticationError("The token endpoint returned no access token", stage=stage)
        return OAuthToken.from_api(data)

    async def request_user_token(self, access_token: str) -> XboxTicket:
        """Trade an OAuth access token for an Xbox Live user token."""
        log.info("Requesting Xbox Live user token")
        body = {
            "Properties": {
                "AuthMethod": "RPS",
                "SiteName": "user.auth.xboxlive.com",
                "RpsTicket": f"d={access_token}",
            },
            "RelyingParty": "http://auth.xboxlive.com",
            "TokenType": "JWT",
        }
        data = await _post_for_json(self.http_client, "user_token", USER_AUTH_URL, json=body, headers=_JSON_HEADERS)
        return self._ticket(data, "user_token")

    async def request_xsts_token(self, user_token: str, halo: bool = True) -> XboxTicket:
        """Request an XSTS ticket for the Halo services or for Xbox Live.

        The Xbox Live ticket (``halo=False``) is the one whose claims carry
        the player's xuid.
        """
        relying_party = HALO_RELYING_PARTY if halo else XBOX_LIVE_RELYING_PARTY
        stage = "xsts_halo" if halo else "xsts_xbox"
        log.info("Requesting XSTS token", relying_party=relying_party)
        body = {
            "Properties": {
                "SandboxId": "RETAIL",
                "UserTokens": [user_token],
            },
            "RelyingParty": relying_party,
            "TokenType": "JWT",
        }
        data = await _post_for_json(self.http_client, stage, XSTS_AUTH_URL, json=body, headers=_JSON_HEADERS)
        return self._ticket(data, stage)

    @staticmethod
    def get_xbox_live_v3_token(user_hash: str | None, token: str) -> str:
        """Format the ``XBL3.0`` authorization header value."""
        return f"XBL3.0 x={user_hash};{token}"

    @staticmethod
    def _ticket(data: dict[str, Any], stage: str) -> XboxTicket:
        if not data.get("Token"):
            raise AuthenticationError("The ticket response carried no token", stage=stage)
        return XboxTicket.from_api(data)


class HaloAuthenticationService:
    """Spartan token requests against the Halo settings service."""

    def __init__(self, http_client: HttpClientService) -> None:
        self.http_client = http_client

    async def get_spartan_token(self, xsts_token: str) -> SpartanToken:
        """Trade a Halo XSTS ticket for a Spartan token."""
        log.info("Requesting Spartan token")
        body = {
            "Audience": SPARTAN_AUDIENCE,
            "MinVersion": "4",
            "Proof": [{"Token": xsts_token, "TokenType": "Xbox_XSTSv3"}],
        }
        data = await _post_for_json(
            self.http_client,
            "spartan_token",
            SPARTAN_TOKEN_URL,
            json=body,
            headers={"Accept": "application/json"},
        )
        if not data.get("SpartanToken"):
            raise AuthenticationError("The Spartan token response carried no token", stage="spartan_token")
        return SpartanToken.from_api(data)
