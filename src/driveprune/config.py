from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

# --------------------
# Configuration
# --------------------

SCOPES = ["https://www.googleapis.com/auth/drive"]

CLIENT_JSON = Path("credentials.json")
TOKEN_JSON = Path("token.json")

PAGE_SIZE = 10
NAME_FILTER = ".royal"
REMOVAL_MODIFIED_TIME = "2022-09-30"


def _read_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class PruneConfig:
    credentials_path: Path = CLIENT_JSON
    token_path: Path = TOKEN_JSON
    scopes: List[str] = field(default_factory=lambda: list(SCOPES))
    name_filter: str = NAME_FILTER
    target_date: str = REMOVAL_MODIFIED_TIME
    page_size: int = PAGE_SIZE
    dry_run: bool = False

    @classmethod
    def from_env(cls) -> "PruneConfig":
        """Defaults overridden by DRIVEPRUNE_* environment variables."""
        return cls(
            credentials_path=Path(os.getenv("DRIVEPRUNE_CREDENTIALS", str(CLIENT_JSON))),
            token_path=Path(os.getenv("DRIVEPRUNE_TOKEN", str(TOKEN_JSON))),
            name_filter=os.getenv("DRIVEPRUNE_NAME_FILTER", NAME_FILTER),
            target_date=os.getenv("DRIVEPRUNE_TARGET_DATE", REMOVAL_MODIFIED_TIME),
            page_size=max(_read_int("DRIVEPRUNE_PAGE_SIZE", PAGE_SIZE), 1),
        )
