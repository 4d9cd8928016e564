# scripts/authorize.py
from __future__ import annotations

from driveprune import log
from driveprune.auth import Authenticator
from driveprune.config import PruneConfig
from driveprune.credentials import CredentialStore
from driveprune.errors import CredentialLoadError, TokenExchangeError
from driveprune.files import FileEnumerator


def main() -> None:
    log.setup()
    config = PruneConfig.from_env()
    store = CredentialStore(config.credentials_path, config.token_path)

    try:
        identity = store.load_identity()
    except CredentialLoadError as exc:
        raise SystemExit(f"{exc}. Put your downloaded OAuth JSON there.")

    try:
        session = Authenticator(store, config.scopes).authorize(identity)
    except TokenExchangeError as exc:
        raise SystemExit(str(exc))

    # quick sanity check: list a few matching files
    page = FileEnumerator(session.service, page_size=5).list_page(config.name_filter, None)
    print(f"Sample files matching {config.name_filter!r}:")
    for f in page.files:
        print(f"- {f.name} ({f.id})")


if __name__ == "__main__":
    main()
