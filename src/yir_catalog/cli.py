from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import requests

from .catalog import CatalogStore
from .errors import CatalogFormatError, InputError, StoreError
from .http_client import DEFAULT_USER_AGENT, HttpClient
from .merge import MergeConfig, run_merge
from .url_list import load_url_list, write_url_list

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )
    # urllib3 is chatty at DEBUG; keep our own lines readable.
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--catalog", type=Path, default=Path("catalog.json"))
    p.add_argument("--urls", type=Path, default=Path("urls.txt"))
    p.add_argument("-v", "--verbose", action="store_true")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="yir-catalog")
    sub = parser.add_subparsers(dest="cmd", required=True)

    merge_p = sub.add_parser(
        "merge",
        help=(
            "Fetch every URL in --urls, add new posts to --catalog and fill "
            "missing preview/wordCount fields of existing ones"
        ),
    )
    _add_common_args(merge_p)
    merge_p.add_argument("--timeout", type=float, default=30)
    merge_p.add_argument("--max-redirects", type=int, default=5)
    merge_p.add_argument("--user-agent", default=DEFAULT_USER_AGENT)
    merge_p.add_argument(
        "--journal",
        type=Path,
        default=None,
        help="Append per-URL outcomes as JSON lines to this file",
    )
    merge_p.add_argument(
        "--dry-run",
        action="store_true",
        help="Only log what would be fetched, without network or writes",
    )

    export_p = sub.add_parser(
        "export-urls",
        help="Rewrite --urls from the catalog, one URL per line",
    )
    _add_common_args(export_p)

    return parser


def _cmd_merge(args: argparse.Namespace) -> int:
    cfg = MergeConfig(
        urls_path=args.urls,
        catalog_path=args.catalog,
        timeout_s=float(args.timeout),
        max_redirects=int(args.max_redirects),
        user_agent=str(args.user_agent),
        journal_path=args.journal,
        dry_run=bool(args.dry_run),
    )

    try:
        urls = load_url_list(cfg.urls_path)
    except (InputError, OSError) as e:
        print(str(e), file=sys.stderr)
        return 2

    with requests.Session() as session:
        http = HttpClient(
            session,
            timeout_s=cfg.timeout_s,
            max_redirects=cfg.max_redirects,
            user_agent=cfg.user_agent,
        )
        try:
            report = run_merge(cfg, http=http, urls=urls)
        except CatalogFormatError as e:
            print(f"{cfg.catalog_path}: {e}", file=sys.stderr)
            return 2
        except StoreError as e:
            print(f"catalog bookkeeping error: {e}", file=sys.stderr)
            return 3

    print(f"merge: {report.summary_line()} written={report.written}")
    return 0


def _cmd_export_urls(args: argparse.Namespace) -> int:
    try:
        store = CatalogStore.load(args.catalog)
    except CatalogFormatError as e:
        print(f"{args.catalog}: {e}", file=sys.stderr)
        return 2

    urls = store.urls()
    if not urls:
        print(f"No URLs found in {args.catalog}", file=sys.stderr)
        return 2

    try:
        write_url_list(args.urls, urls)
    except OSError as e:
        print(str(e), file=sys.stderr)
        return 2
    print(f"export-urls: extracted {len(urls)} URLs to {args.urls}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(bool(args.verbose))

    if args.cmd == "merge":
        return _cmd_merge(args)
    if args.cmd == "export-urls":
        return _cmd_export_urls(args)
    return 2


if __name__ == "__main__":
    sys.exit(main())
