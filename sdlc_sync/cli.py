#!/usr/bin/env python3
"""Command-line entry points for the workflow board.

Usage:
    sdlc-sync merge [--target sdlc-workflow.json] [--source sdlc-workflow-date.json]
    sdlc-sync serve [--host 0.0.0.0] [--port 3001]

`merge` folds a document exported from the browser (localStorage auto-save)
into the canonical file once. `serve` runs the HTTP API.
"""

import argparse
import logging
import sys
from typing import Optional

from sdlc_sync.workflow.errors import WorkflowSyncError
from sdlc_sync.workflow.sync import merge_files

logger = logging.getLogger(__name__)

DEFAULT_TARGET = "sdlc-workflow.json"
DEFAULT_SOURCE = "sdlc-workflow-date.json"


def run_merge(args: argparse.Namespace) -> int:
    logger.info("Starting data merge process...")
    try:
        outcome = merge_files(args.target, args.source)
    except WorkflowSyncError as e:
        logger.error(f"Error during merge: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not outcome.changed:
        print(f"No phases found in {args.source}, {args.target} left unchanged")
        return 0

    totals = outcome.totals
    print("Data successfully merged!")
    print(
        f"Updated totals: {totals.phases} phases, "
        f"{totals.categories} categories, {totals.items} items"
    )
    return 0


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("sdlc_sync.api.main:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sdlc-sync",
        description="Sync the SDLC workflow board document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    merge_p = sub.add_parser("merge", help="Merge an exported document into the canonical file")
    merge_p.add_argument("--target", default=DEFAULT_TARGET, help="Canonical document to update")
    merge_p.add_argument("--source", default=DEFAULT_SOURCE, help="Exported document to merge in")
    merge_p.set_defaults(func=run_merge)

    serve_p = sub.add_parser("serve", help="Run the HTTP API")
    serve_p.add_argument("--host", default="0.0.0.0")
    serve_p.add_argument("--port", type=int, default=3001)
    serve_p.set_defaults(func=run_serve)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
