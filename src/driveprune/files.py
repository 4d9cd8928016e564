from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from driveprune.config import PAGE_SIZE
from driveprune.errors import API_ERRORS, ListPageError

LOG = logging.getLogger(__name__)

LIST_FIELDS = "nextPageToken, files(*)"


@dataclass(frozen=True)
class RemoteFile:
    id: str
    name: str
    metadata: Dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, item: Dict) -> "RemoteFile":
        return cls(id=item["id"], name=item.get("name") or item["id"], metadata=item)


@dataclass
class FilePage:
    files: List[RemoteFile]
    next_page_token: Optional[str] = None


def name_query(name_filter: str) -> str:
    escaped = name_filter.replace("\\", "\\\\").replace("'", "\\'")
    return f"name contains '{escaped}'"


class FileEnumerator:
    """
    Lists the user's own files whose name contains a substring.

    A failing page ends the listing early; whatever was collected before it
    is returned.
    """

    def __init__(self, service, page_size: int = PAGE_SIZE):
        self.service = service
        self.page_size = page_size

    def fetch_page(self, name_filter: str, page_token: Optional[str]) -> FilePage:
        try:
            resp = self.service.files().list(
                corpora="user",
                pageSize=self.page_size,
                q=name_query(name_filter),
                pageToken=page_token or None,
                fields=LIST_FIELDS,
            ).execute()
        except API_ERRORS as exc:
            raise ListPageError(str(exc)) from exc

        files = [RemoteFile.from_api(f) for f in resp.get("files", [])]
        return FilePage(files, resp.get("nextPageToken") or None)

    def list_page(self, name_filter: str, page_token: Optional[str]) -> FilePage:
        try:
            return self.fetch_page(name_filter, page_token)
        except ListPageError as exc:
            LOG.error("The API returned an error: %s", exc)
            return FilePage([], None)

    def list_all(self, name_filter: str) -> List[RemoteFile]:
        found: List[RemoteFile] = []
        page_token: Optional[str] = None

        while True:
            page = self.list_page(name_filter, page_token)
            found.extend(page.files)
            page_token = page.next_page_token
            if not page_token:
                break

        LOG.info("Found %d file(s) matching %r", len(found), name_filter)
        return found
