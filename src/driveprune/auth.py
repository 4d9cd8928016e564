"""
OAuth 2.0 authorization for the Drive API.

Two ways to a session: a token already cached in token.json is used as-is,
otherwise the operator walks through the authorization-code grant in a
browser and pastes the code back into the terminal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Union

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build

from driveprune.credentials import AuthToken, ClientIdentity, CredentialStore
from driveprune.errors import TokenExchangeError, TokenPersistError

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cached:
    token: AuthToken


@dataclass(frozen=True)
class NeedsInteractive:
    pass


AuthState = Union[Cached, NeedsInteractive]


@dataclass(frozen=True)
class AuthorizedSession:
    identity: ClientIdentity
    credentials: Credentials
    service: Any


def resolve_state(store: CredentialStore) -> AuthState:
    token = store.load_cached_token()
    if token is None:
        return NeedsInteractive()
    return Cached(token)


def default_flow_factory(identity: ClientIdentity, scopes: List[str]) -> Flow:
    return Flow.from_client_config(
        identity.client_config(),
        scopes=scopes,
        redirect_uri=identity.redirect_uri,
    )


def default_service_factory(creds: Credentials):
    return build("drive", "v3", credentials=creds, cache_discovery=False)


class Authenticator:
    def __init__(
        self,
        store: CredentialStore,
        scopes: List[str],
        prompt: Callable[[str], str] = input,
        flow_factory: Callable[[ClientIdentity, List[str]], Any] = default_flow_factory,
        service_factory: Callable[[Credentials], Any] = default_service_factory,
    ):
        self.store = store
        self.scopes = list(scopes)
        self.prompt = prompt
        self.flow_factory = flow_factory
        self.service_factory = service_factory

    def authorize(self, identity: ClientIdentity) -> AuthorizedSession:
        """
        Return a session for the identity.

        Raises TokenExchangeError when no token is cached and the interactive
        exchange fails.
        """
        state = resolve_state(self.store)
        if isinstance(state, Cached):
            LOG.debug("Using cached token from %s", self.store.token_path)
            return self.session_from_token(identity, state.token)
        return self.authorize_interactive(identity)

    def session_from_token(self, identity: ClientIdentity, token: AuthToken) -> AuthorizedSession:
        # no expiry check, a stale token fails later at the API
        creds = token.to_credentials(identity, self.scopes)
        return AuthorizedSession(identity, creds, self.service_factory(creds))

    def authorize_interactive(self, identity: ClientIdentity) -> AuthorizedSession:
        flow = self.flow_factory(identity, self.scopes)
        auth_url, _ = flow.authorization_url(access_type="offline")

        print(f"Authorize this app by visiting this url: {auth_url}")
        try:
            code = self.prompt("Enter the code from that page here: ").strip()
        except EOFError as exc:
            raise TokenExchangeError("No authorization code entered") from exc
        if not code:
            raise TokenExchangeError("No authorization code entered")

        try:
            flow.fetch_token(code=code)
        except Exception as exc:
            raise TokenExchangeError(f"Error retrieving access token: {exc}") from exc

        token = AuthToken.from_credentials(flow.credentials)
        try:
            self.store.save_token(token)
            LOG.info("Token stored to %s", self.store.token_path)
        except TokenPersistError as exc:
            LOG.error("%s (token is only valid for this run)", exc)

        return self.session_from_token(identity, token)
