"""Tests for the authentication chain against a mocked transport."""

import json
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from statlink.services import (
    AuthenticationError,
    HaloAuthenticationService,
    HttpClientService,
    XboxAuthenticationService,
)
from statlink.services.auth import (
    HALO_RELYING_PARTY,
    OAUTH_TOKEN_URL,
    SPARTAN_TOKEN_URL,
    USER_AUTH_URL,
    XBOX_LIVE_RELYING_PARTY,
    XSTS_AUTH_URL,
)


class Recorder:
    """Mock transport handler that records requests and replays canned responses."""

    def __init__(self, responses: dict[str, httpx.Response]) -> None:
        self.responses = responses
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url).split("?")[0]
        return self.responses.get(url, httpx.Response(404))


def make_client(recorder: Recorder) -> HttpClientService:
    return HttpClientService(timeout=5.0, transport=httpx.MockTransport(recorder))


def ticket_body(token: str, **claims: str) -> dict:
    return {"Token": token, "NotAfter": "2030-01-01T00:00:00Z", "DisplayClaims": {"xui": [claims]}}


def test_generate_auth_url() -> None:
    service = XboxAuthenticationService(MagicMock(spec=HttpClientService))

    url = service.generate_auth_url("client-1", "https://localhost/cb")

    parsed = urlparse(url)
    query = parse_qs(parsed.query)
    assert parsed.netloc == "login.live.com"
    assert query["client_id"] == ["client-1"]
    assert query["response_type"] == ["code"]
    assert query["redirect_uri"] == ["https://localhost/cb"]
    assert query["scope"] == ["Xboxlive.signin Xboxlive.offline_access"]


@pytest.mark.asyncio
async def test_request_oauth_token_posts_authorization_code() -> None:
    recorder = Recorder({
        OAUTH_TOKEN_URL: httpx.Response(200, json={
            "token_type": "bearer",
            "expires_in": 3600,
            "scope": "Xboxlive.signin Xboxlive.offline_access",
            "access_token": "access",
            "refresh_token": "refresh",
            "user_id": "u1",
        }),
    })
    async with make_client(recorder) as client:
        token = await XboxAuthenticationService(client).request_oauth_token("cid", "the-code", "https://localhost", "secret")

    assert token.access_token == "access"
    assert token.refresh_token == "refresh"
    assert token.expires_in == 3600
    form = parse_qs(recorder.requests[0].content.decode())
    assert form["grant_type"] == ["authorization_code"]
    assert form["code"] == ["the-code"]
    assert form["client_secret"] == ["secret"]


@pytest.mark.asyncio
async def test_refresh_oauth_token_posts_refresh_grant() -> None:
    recorder = Recorder({OAUTH_TOKEN_URL: httpx.Response(200, json={"access_token": "new", "refresh_token": "r2"})})
    async with make_client(recorder) as client:
        token = await XboxAuthenticationService(client).refresh_oauth_token("cid", "r1", "https://localhost", "secret")

    assert token.to_dict()["access_token"] == "new"
    form = parse_qs(recorder.requests[0].content.decode())
    assert form["grant_type"] == ["refresh_token"]
    assert form["refresh_token"] == ["r1"]


@pytest.mark.asyncio
async def test_oauth_error_raises_authentication_error() -> None:
    recorder = Recorder({OAUTH_TOKEN_URL: httpx.Response(400, json={"error": "invalid_grant"})})
    async with make_client(recorder) as client:
        with pytest.raises(AuthenticationError) as exc_info:
            await XboxAuthenticationService(client).request_oauth_token("cid", "bad", "https://localhost", "secret")

    assert exc_info.value.stage == "oauth"
    assert isinstance(exc_info.value.original_error, httpx.HTTPStatusError)


@pytest.mark.asyncio
async def test_missing_access_token_raises_authentication_error() -> None:
    recorder = Recorder({OAUTH_TOKEN_URL: httpx.Response(200, json={"token_type": "bearer"})})
    async with make_client(recorder) as client:
        with pytest.raises(AuthenticationError):
            await XboxAuthenticationService(client).request_oauth_token("cid", "code", "https://localhost", "secret")


@pytest.mark.asyncio
async def test_user_token_uses_rps_ticket() -> None:
    recorder = Recorder({USER_AUTH_URL: httpx.Response(200, json=ticket_body("user-token", uhs="hash"))})
    async with make_client(recorder) as client:
        ticket = await XboxAuthenticationService(client).request_user_token("access")

    assert ticket.token == "user-token"
    assert ticket.user_hash == "hash"
    body = json.loads(recorder.requests[0].content)
    assert body["Properties"]["RpsTicket"] == "d=access"
    assert body["RelyingParty"] == "http://auth.xboxlive.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("halo,relying_party", [(True, HALO_RELYING_PARTY), (False, XBOX_LIVE_RELYING_PARTY)])
async def test_xsts_token_relying_party(halo: bool, relying_party: str) -> None:
    recorder = Recorder({XSTS_AUTH_URL: httpx.Response(200, json=ticket_body("xsts", uhs="hash", xid="2533274"))})
    async with make_client(recorder) as client:
        ticket = await XboxAuthenticationService(client).request_xsts_token("user-token", halo=halo)

    body = json.loads(recorder.requests[0].content)
    assert body["RelyingParty"] == relying_party
    assert body["Properties"]["UserTokens"] == ["user-token"]
    assert ticket.xuid == "2533274"


@pytest.mark.asyncio
async def test_xsts_without_token_raises() -> None:
    recorder = Recorder({XSTS_AUTH_URL: httpx.Response(200, json={"DisplayClaims": {}})})
    async with make_client(recorder) as client:
        with pytest.raises(AuthenticationError) as exc_info:
            await XboxAuthenticationService(client).request_xsts_token("user-token")

    assert exc_info.value.stage == "xsts_halo"


def test_xbox_live_v3_token_format() -> None:
    assert XboxAuthenticationService.get_xbox_live_v3_token("uhs", "tok") == "XBL3.0 x=uhs;tok"


@pytest.mark.asyncio
async def test_spartan_token_request() -> None:
    recorder = Recorder({
        SPARTAN_TOKEN_URL: httpx.Response(200, json={
            "SpartanToken": "spartan",
            "ExpiresUtc": {"ISO8601Date": "2030-01-01T00:00:00Z"},
            "TokenDuration": "PT4H",
        }),
    })
    async with make_client(recorder) as client:
        token = await HaloAuthenticationService(client).get_spartan_token("halo-xsts")

    assert token.token == "spartan"
    assert token.expires_utc == "2030-01-01T00:00:00Z"
    body = json.loads(recorder.requests[0].content)
    assert body["Proof"] == [{"Token": "halo-xsts", "TokenType": "Xbox_XSTSv3"}]


@pytest.mark.asyncio
async def test_spartan_token_non_json_raises() -> None:
    recorder = Recorder({SPARTAN_TOKEN_URL: httpx.Response(200, text="<html>")})
    async with make_client(recorder) as client:
        with pytest.raises(AuthenticationError):
            await HaloAuthenticationService(client).get_spartan_token("halo-xsts")
