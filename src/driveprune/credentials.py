"""
Local persistence of the OAuth client descriptor and the cached token.

credentials.json is the client secrets file downloaded from the Google Cloud
console. token.json uses the googleapis client token layout, so caches
written by earlier versions of this tool keep working:

    {"access_token": ..., "refresh_token": ..., "scope": ...,
     "token_type": "Bearer", "expiry_date": <ms since epoch>}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from google.oauth2.credentials import Credentials

from driveprune.errors import CredentialLoadError, TokenPersistError

LOG = logging.getLogger(__name__)

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


@dataclass(frozen=True)
class ClientIdentity:
    client_id: str
    client_secret: str
    redirect_uri: str
    auth_uri: str = GOOGLE_AUTH_URI
    token_uri: str = GOOGLE_TOKEN_URI

    def client_config(self) -> Dict:
        """Client config in the shape google_auth_oauthlib expects."""
        return {
            "installed": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": self.auth_uri,
                "token_uri": self.token_uri,
                "redirect_uris": [self.redirect_uri],
            }
        }


def _to_utc_naive(dt: datetime) -> datetime:
    # google-auth compares expiry against a naive UTC "now"
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


@dataclass
class AuthToken:
    access_token: Optional[str]
    refresh_token: Optional[str] = None
    expiry: Optional[datetime] = None
    scope: Optional[str] = None
    token_type: str = "Bearer"

    @classmethod
    def from_dict(cls, data: Dict) -> "AuthToken":
        """
        Accepts the legacy token.json layout as well as google-auth's
        authorized-user layout (token / expiry / scopes).
        """
        if not isinstance(data, dict):
            raise ValueError("token document is not a JSON object")

        access_token = data.get("access_token") or data.get("token")
        refresh_token = data.get("refresh_token")
        if not access_token and not refresh_token:
            raise ValueError("token document has neither access nor refresh token")

        expiry = None
        if data.get("expiry_date") is not None:
            expiry = datetime.fromtimestamp(int(data["expiry_date"]) / 1000, tz=timezone.utc)
        elif data.get("expiry"):
            expiry = datetime.fromisoformat(str(data["expiry"]).replace("Z", "+00:00"))

        scope = data.get("scope")
        if scope is None and data.get("scopes"):
            scope = " ".join(data["scopes"])

        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            expiry=_to_utc_naive(expiry) if expiry else None,
            scope=scope,
            token_type=data.get("token_type") or "Bearer",
        )

    @classmethod
    def from_credentials(cls, creds: Credentials) -> "AuthToken":
        return cls(
            access_token=creds.token,
            refresh_token=creds.refresh_token,
            expiry=creds.expiry,
            scope=" ".join(creds.scopes) if creds.scopes else None,
        )

    def to_dict(self) -> Dict:
        doc = {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "scope": self.scope,
            "token_type": self.token_type,
        }
        if self.expiry is not None:
            expiry = self.expiry.replace(tzinfo=timezone.utc) if self.expiry.tzinfo is None else self.expiry
            doc["expiry_date"] = int(expiry.timestamp() * 1000)
        return {k: v for k, v in doc.items() if v is not None}

    def to_credentials(self, identity: ClientIdentity, scopes: List[str]) -> Credentials:
        return Credentials(
            token=self.access_token,
            refresh_token=self.refresh_token,
            token_uri=identity.token_uri,
            client_id=identity.client_id,
            client_secret=identity.client_secret,
            scopes=self.scope.split() if self.scope else scopes,
            expiry=self.expiry,
        )


class CredentialStore:
    def __init__(self, credentials_path: Path, token_path: Path):
        self.credentials_path = Path(credentials_path)
        self.token_path = Path(token_path)

    def load_identity(self) -> ClientIdentity:
        try:
            doc = json.loads(self.credentials_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise CredentialLoadError(f"Missing {self.credentials_path}") from exc
        except (OSError, ValueError) as exc:
            raise CredentialLoadError(f"Cannot read {self.credentials_path}: {exc}") from exc

        section = None
        if isinstance(doc, dict):
            section = doc.get("installed") or doc.get("web")
        if not isinstance(section, dict):
            raise CredentialLoadError(
                f"{self.credentials_path} has no 'installed' or 'web' client section"
            )

        redirect_uris = section.get("redirect_uris") or []
        if not section.get("client_id") or not section.get("client_secret") or not redirect_uris:
            raise CredentialLoadError(
                f"{self.credentials_path} needs client_id, client_secret and redirect_uris"
            )

        return ClientIdentity(
            client_id=section["client_id"],
            client_secret=section["client_secret"],
            redirect_uri=redirect_uris[0],
            auth_uri=section.get("auth_uri", GOOGLE_AUTH_URI),
            token_uri=section.get("token_uri", GOOGLE_TOKEN_URI),
        )

    def load_cached_token(self) -> Optional[AuthToken]:
        if not self.token_path.exists():
            return None
        try:
            return AuthToken.from_dict(json.loads(self.token_path.read_text(encoding="utf-8")))
        except (OSError, ValueError, TypeError) as exc:
            LOG.warning("Ignoring unreadable token cache %s: %s", self.token_path, exc)
            return None

    def save_token(self, token: AuthToken) -> None:
        try:
            self.token_path.parent.mkdir(parents=True, exist_ok=True)
            self.token_path.write_text(json.dumps(token.to_dict()), encoding="utf-8")
        except OSError as exc:
            raise TokenPersistError(f"Cannot write {self.token_path}: {exc}") from exc
