"""Pytest configuration and fixtures."""

import json
from datetime import datetime

import httplib2
import pytest
from google.oauth2.credentials import Credentials
from googleapiclient.errors import HttpError

from driveprune.config import SCOPES


def make_http_error(status: int, message: str = "error") -> HttpError:
    resp = httplib2.Response({"status": status})
    content = json.dumps({"error": {"code": status, "message": message}}).encode("utf-8")
    return HttpError(resp, content, uri="https://www.googleapis.com/drive/v3")


class FakeRequest:
    def __init__(self, drive, kind, kwargs, result):
        self.drive = drive
        self.kind = kind
        self.kwargs = kwargs
        self._result = result

    def execute(self):
        self.drive.executed.append((self.kind, self.kwargs))
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


class FakeFiles:
    def __init__(self, drive):
        self.drive = drive

    def list(self, **kwargs):
        self.drive.calls.append(("files.list", kwargs))
        return FakeRequest(self.drive, "files.list", kwargs, self.drive.pages[kwargs.get("pageToken")])


class FakeRevisions:
    def __init__(self, drive):
        self.drive = drive

    def list(self, **kwargs):
        self.drive.calls.append(("revisions.list", kwargs))
        pages = self.drive.revision_pages[kwargs["fileId"]]
        if isinstance(pages, Exception):
            result = pages
        elif isinstance(pages, dict):
            result = pages[kwargs.get("pageToken")]
        else:
            result = {"revisions": pages}
        return FakeRequest(self.drive, "revisions.list", kwargs, result)

    def delete(self, **kwargs):
        self.drive.calls.append(("revisions.delete", kwargs))
        key = (kwargs["fileId"], kwargs["revisionId"])
        result = self.drive.delete_errors.get(key, "")
        return FakeRequest(self.drive, "revisions.delete", kwargs, result)


class FakeBatch:
    """Runs its requests in reverse order to mimic out-of-order completion."""

    def __init__(self, drive):
        self.drive = drive
        self.requests = []

    def add(self, request, callback=None, request_id=None):
        self.requests.append((request, callback, request_id))

    def execute(self):
        self.drive.batches.append([r.kwargs for r, _, _ in self.requests])
        if self.drive.batch_error is not None:
            raise self.drive.batch_error
        for request, callback, request_id in reversed(self.requests):
            try:
                response, exception = request.execute(), None
            except HttpError as exc:
                response, exception = None, exc
            callback(request_id, response, exception)


class FakeDrive:
    """
    In-memory stand-in for the Drive v3 resource.

    pages maps a files.list pageToken to a response dict or an exception.
    revision_pages maps a file id to a list of revision dicts, a dict of
    pageToken -> response, or an exception.
    """

    def __init__(self):
        self.pages = {}
        self.revision_pages = {}
        self.delete_errors = {}
        self.batch_error = None
        self.calls = []
        self.executed = []
        self.batches = []

    def files(self):
        return FakeFiles(self)

    def revisions(self):
        return FakeRevisions(self)

    def new_batch_http_request(self, callback=None):
        return FakeBatch(self)

    def deleted(self):
        return [
            (kw["fileId"], kw["revisionId"])
            for kind, kw in self.executed
            if kind == "revisions.delete"
        ]


class FakeFlow:
    def __init__(self, events, fail=False):
        self.events = events
        self.fail = fail
        self.auth_kwargs = None
        self.codes = []
        self.credentials = None

    def authorization_url(self, **kwargs):
        self.auth_kwargs = kwargs
        self.events.append("authorization_url")
        return "https://accounts.google.com/o/oauth2/auth?scope=" + "+".join(SCOPES), "state"

    def fetch_token(self, code=None, **kwargs):
        self.events.append("fetch_token")
        self.codes.append(code)
        if self.fail:
            raise ValueError("invalid_grant: Bad Request")
        self.credentials = Credentials(
            token="new-access",
            refresh_token="new-refresh",
            scopes=SCOPES,
            expiry=datetime(2030, 1, 1, 12, 0, 0),
        )


CLIENT_SECRETS = {
    "installed": {
        "client_id": "123.apps.googleusercontent.com",
        "client_secret": "s3cret",
        "auth_uri": "https://accounts.google.com/o/oauth2/auth",
        "token_uri": "https://oauth2.googleapis.com/token",
        "redirect_uris": ["urn:ietf:wg:oauth:2.0:oob", "http://localhost"],
    }
}

CACHED_TOKEN = {
    "access_token": "cached-access",
    "refresh_token": "cached-refresh",
    "scope": "https://www.googleapis.com/auth/drive",
    "token_type": "Bearer",
    "expiry_date": 1664539200000,
}


@pytest.fixture
def drive():
    return FakeDrive()


@pytest.fixture
def http_error():
    return make_http_error


@pytest.fixture
def credentials_file(tmp_path):
    path = tmp_path / "credentials.json"
    path.write_text(json.dumps(CLIENT_SECRETS), encoding="utf-8")
    return path


@pytest.fixture
def token_file(tmp_path):
    path = tmp_path / "token.json"
    path.write_text(json.dumps(CACHED_TOKEN), encoding="utf-8")
    return path


@pytest.fixture
def events():
    return []


@pytest.fixture
def prompt(events):
    def _prompt(message):
        events.append("prompt")
        return "4/auth-code\n"
    return _prompt


@pytest.fixture
def fake_flow(events):
    return FakeFlow(events)


@pytest.fixture
def failing_flow(events):
    return FakeFlow(events, fail=True)
