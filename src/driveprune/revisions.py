from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from driveprune.errors import API_ERRORS, RevisionDeleteError, RevisionNotFoundError
from driveprune.files import RemoteFile

LOG = logging.getLogger(__name__)

REVISION_FIELDS = "nextPageToken, revisions(id, modifiedTime)"

# Drive rejects batches with more than 100 parts
MAX_BATCH = 100


@dataclass(frozen=True)
class Revision:
    id: str
    modified_time: str

    @classmethod
    def from_api(cls, item: Dict) -> "Revision":
        return cls(id=item["id"], modified_time=item.get("modifiedTime", ""))


@dataclass
class DeletionOutcome:
    file: RemoteFile
    revision: Revision
    error: Optional[RevisionDeleteError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PruneReport:
    file: RemoteFile
    matched: List[Revision] = field(default_factory=list)
    outcomes: List[DeletionOutcome] = field(default_factory=list)

    @property
    def removed(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.ok)


def _extract_status(error: Exception) -> Optional[int]:
    status = getattr(error, "status_code", None)
    if status is not None:
        return status
    response = getattr(error, "resp", None)
    return getattr(response, "status", None) if response is not None else None


def classify_delete_error(error: Exception) -> RevisionDeleteError:
    if _extract_status(error) == 404:
        return RevisionNotFoundError(str(error))
    return RevisionDeleteError(str(error))


class RevisionPruner:
    """
    Deletes the revisions of a file whose modifiedTime contains target_date.

    Matching is textual: "2022-09-30" hits any ISO-8601 timestamp on that
    date, in UTC as Drive reports it.
    """

    def __init__(self, service, target_date: str, dry_run: bool = False, batch_size: int = MAX_BATCH):
        self.service = service
        self.target_date = target_date
        self.dry_run = dry_run
        self.batch_size = max(1, min(batch_size, MAX_BATCH))

    def matches(self, revision: Revision) -> bool:
        return self.target_date in revision.modified_time

    def list_revisions(self, file: RemoteFile) -> List[Revision]:
        revisions: List[Revision] = []
        page_token = None

        while True:
            resp = self.service.revisions().list(
                fileId=file.id,
                pageToken=page_token,
                fields=REVISION_FIELDS,
            ).execute()
            revisions.extend(Revision.from_api(r) for r in resp.get("revisions", []))
            page_token = resp.get("nextPageToken")
            if not page_token:
                break

        return revisions

    def prune_file(self, file: RemoteFile) -> PruneReport:
        report = PruneReport(file)
        report.matched = [r for r in self.list_revisions(file) if self.matches(r)]

        if self.dry_run:
            for revision in report.matched:
                LOG.info("Would remove revision %s of %s (%s)", revision.id, file.name, revision.modified_time)
            return report

        for start in range(0, len(report.matched), self.batch_size):
            chunk = report.matched[start:start + self.batch_size]
            report.outcomes.extend(self._delete_batch(file, chunk))

        return report

    def _delete_batch(self, file: RemoteFile, chunk: List[Revision]) -> List[DeletionOutcome]:
        outcomes: Dict[str, DeletionOutcome] = {}
        batch = self.service.new_batch_http_request()

        def make_callback(revision: Revision):
            def callback(request_id, response, exception):
                outcome = DeletionOutcome(file, revision)
                if exception is not None:
                    outcome.error = classify_delete_error(exception)
                    LOG.warning(
                        "Execute error: %s, File name: %s, Revision time: %s",
                        outcome.error, file.name, revision.modified_time,
                    )
                else:
                    LOG.info("Revision removed: %s", file.name)
                outcomes[revision.id] = outcome
            return callback

        for revision in chunk:
            request = self.service.revisions().delete(fileId=file.id, revisionId=revision.id)
            batch.add(request, callback=make_callback(revision), request_id=revision.id)

        try:
            batch.execute()
        except API_ERRORS as exc:
            LOG.error("Batch delete failed for %s: %s", file.name, exc)
            for revision in chunk:
                outcomes.setdefault(
                    revision.id, DeletionOutcome(file, revision, RevisionDeleteError(str(exc)))
                )

        # callbacks fire in completion order, report in listing order
        return [outcomes[r.id] for r in chunk if r.id in outcomes]
