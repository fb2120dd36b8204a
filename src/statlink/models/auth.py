"""Authentication token models."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class OAuthToken:
    """Microsoft account OAuth token pair."""
    access_token: str
    refresh_token: str | None = None
    token_type: str | None = None
    expires_in: int | None = None
    scope: str | None = None
    user_id: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "OAuthToken":
        expires_in = data.get("expires_in")
        return cls(
            access_token=str(data["access_token"]),
            refresh_token=data.get("refresh_token"),
            token_type=data.get("token_type"),
            expires_in=int(expires_in) if expires_in is not None else None,
            scope=data.get("scope"),
            user_id=data.get("user_id"),
        )

    def to_dict(self) -> dict[str, str | int | None]:
        return {
            "token_type": self.token_type,
            "expires_in": self.expires_in,
            "scope": self.scope,
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "user_id": self.user_id,
        }


@dataclass(frozen=True)
class XboxTicket:
    """Xbox Live user or XSTS ticket."""
    token: str
    user_hash: str | None = None
    xuid: str | None = None
    not_after: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "XboxTicket":
        xui = (data.get("DisplayClaims") or {}).get("xui") or [{}]
        claims = xui[0] if xui else {}
        return cls(
            token=str(data["Token"]),
            user_hash=claims.get("uhs"),
            xuid=claims.get("xid"),
            not_after=data.get("NotAfter"),
        )


@dataclass(frozen=True)
class SpartanToken:
    """Halo services token obtained from an XSTS ticket."""
    token: str
    expires_utc: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "SpartanToken":
        expires = data.get("ExpiresUtc")
        if isinstance(expires, dict):
            expires = expires.get("ISO8601Date")
        return cls(token=str(data["SpartanToken"]), expires_utc=expires)


@dataclass(frozen=True)
class Clearance:
    """Active flight configuration for a player."""
    flight_configuration_id: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Clearance":
        return cls(flight_configuration_id=str(data["FlightConfigurationId"]))
