from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from draftmerge.adapters.json_payload import (
    MergeReport,
    parse_draft_json,
    parse_locks_json,
)
from draftmerge.config import ConfigurationError, configure_logging, get_merge_config
from draftmerge.domain.draft import merge_into_draft_with_locks

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from draftmerge.domain.draft import DraftMergeResult

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile document drafts")
    subparsers = parser.add_subparsers(dest="command", required=True)

    merge = subparsers.add_parser(
        "merge",
        help="Merge an incoming draft into the current one, honouring locks",
    )
    merge.add_argument("current", type=Path, help="JSON file holding the current draft")
    merge.add_argument("incoming", type=Path, help="JSON file holding the incoming update")
    merge.add_argument(
        "--locks",
        type=Path,
        help="JSON file with locked paths (object of path to flag, or array of paths)",
    )
    merge.add_argument(
        "--source",
        type=str,
        default=None,
        help="Source recorded for written fields (defaults to config)",
    )
    merge.add_argument(
        "--output",
        type=Path,
        help="Write the merge report here instead of stdout",
    )

    return parser.parse_args(list(argv))


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read {path}: {exc.strerror}") from exc


def run_merge(args: argparse.Namespace, *, default_source: str) -> DraftMergeResult:
    current = parse_draft_json(_read_text(args.current))
    incoming = parse_draft_json(_read_text(args.incoming))
    locks = parse_locks_json(_read_text(args.locks)) if args.locks else None
    return merge_into_draft_with_locks(
        current,
        incoming,
        locks,
        source=args.source or default_source,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    try:
        config = get_merge_config()
    except ConfigurationError:
        log.exception("Invalid configuration")
        sys.exit(2)
    logging.getLogger().setLevel(config.log_level)

    try:
        if parsed_args.command != "merge":
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
        result = run_merge(parsed_args, default_source=config.default_source)
    except ValueError:
        log.exception("Invalid merge input")
        sys.exit(2)

    try:
        report = MergeReport.from_result(result).model_dump_json(indent=2)
        if parsed_args.output:
            parsed_args.output.write_text(report + "\n", encoding="utf-8")
            log.info("Wrote merge report to %s", parsed_args.output)
        else:
            sys.stdout.write(report + "\n")
    except Exception:
        log.exception("Fatal error while writing merge report")
        sys.exit(1)

    log.info(
        "Merge finished: touched=%s, updated=%s",
        len(result.touched_paths),
        len(result.updated_paths),
    )


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
