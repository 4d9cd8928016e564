from __future__ import annotations

import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError


class DrivePruneError(RuntimeError):
    pass


class CredentialLoadError(DrivePruneError):
    """Client secrets file is missing, unreadable or malformed."""


class TokenExchangeError(DrivePruneError):
    """The authorization code could not be exchanged for a token."""


class TokenPersistError(DrivePruneError):
    """The token cache could not be written."""


class ListPageError(DrivePruneError):
    """A files.list page could not be fetched."""


class RevisionDeleteError(DrivePruneError):
    """A revision delete request failed."""


class RevisionNotFoundError(RevisionDeleteError):
    """The revision is already gone (HTTP 404)."""


# Anything a Drive call can raise: API status, token refresh, transport.
API_ERRORS = (HttpError, GoogleAuthError, httplib2.HttpLib2Error, OSError)
