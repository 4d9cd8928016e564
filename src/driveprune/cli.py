from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from driveprune import log, runner
from driveprune.config import PruneConfig


def build_parser(defaults: PruneConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drive-prune",
        description="Delete Google Drive file revisions modified on a given date.",
    )
    parser.add_argument("--credentials", type=Path, default=defaults.credentials_path,
                        help="OAuth client secrets JSON")
    parser.add_argument("--token", type=Path, default=defaults.token_path,
                        help="Token cache, created on first authorization")
    parser.add_argument("--name-filter", default=defaults.name_filter,
                        help="Only files whose name contains this text")
    parser.add_argument("--date", dest="target_date", default=defaults.target_date,
                        help="Remove revisions whose modifiedTime contains this, e.g. 2022-09-30")
    parser.add_argument("--page-size", type=int, default=defaults.page_size)
    parser.add_argument("--dry-run", action="store_true", help="List matching revisions without deleting")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None) -> None:
    defaults = PruneConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    log.setup(logging.DEBUG if args.verbose else logging.INFO)

    config = replace(
        defaults,
        credentials_path=args.credentials,
        token_path=args.token,
        name_filter=args.name_filter,
        target_date=args.target_date,
        page_size=max(args.page_size, 1),
        dry_run=args.dry_run,
    )
    summary = runner.run(config)

    raise SystemExit(1 if summary.aborted else 0)


if __name__ == "__main__":
    main()
