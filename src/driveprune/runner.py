"""
Load credentials, authorize, list matching files and prune their revisions.

Failures before a session exists abort the run without touching the API.
After that every error is contained: a bad listing page truncates the file
list, a bad file or revision is logged and skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from driveprune.auth import Authenticator, default_flow_factory, default_service_factory
from driveprune.config import PruneConfig
from driveprune.credentials import CredentialStore
from driveprune.errors import API_ERRORS, CredentialLoadError, TokenExchangeError
from driveprune.files import FileEnumerator, RemoteFile
from driveprune.revisions import PruneReport, RevisionPruner

LOG = logging.getLogger(__name__)


@dataclass
class RunSummary:
    files: List[RemoteFile] = field(default_factory=list)
    reports: List[PruneReport] = field(default_factory=list)
    aborted: bool = False

    @property
    def matched(self) -> int:
        return sum(len(r.matched) for r in self.reports)

    @property
    def removed(self) -> int:
        return sum(r.removed for r in self.reports)

    @property
    def failed(self) -> int:
        return sum(r.failed for r in self.reports)


def run(
    config: PruneConfig,
    prompt=input,
    flow_factory=default_flow_factory,
    service_factory=default_service_factory,
) -> RunSummary:
    summary = RunSummary()
    store = CredentialStore(config.credentials_path, config.token_path)

    try:
        identity = store.load_identity()
    except CredentialLoadError as exc:
        LOG.error("Error loading client secret file: %s", exc)
        summary.aborted = True
        return summary

    authenticator = Authenticator(
        store,
        config.scopes,
        prompt=prompt,
        flow_factory=flow_factory,
        service_factory=service_factory,
    )
    try:
        session = authenticator.authorize(identity)
    except TokenExchangeError as exc:
        LOG.error("%s", exc)
        summary.aborted = True
        return summary

    summary.files = FileEnumerator(session.service, config.page_size).list_all(config.name_filter)

    pruner = RevisionPruner(session.service, config.target_date, dry_run=config.dry_run)
    for file in summary.files:
        try:
            summary.reports.append(pruner.prune_file(file))
        except API_ERRORS as exc:
            LOG.error("Could not list revisions of %s: %s", file.name, exc)

    LOG.info(
        "Done. files=%d matched=%d removed=%d failed=%d%s",
        len(summary.files),
        summary.matched,
        summary.removed,
        summary.failed,
        " (dry run)" if config.dry_run else "",
    )
    return summary
