#!/usr/bin/env python3
"""
PMIS admin client — run the mock API or browse a remote list from the shell.

Usage:
    python main.py serve                            # mock API on http://127.0.0.1:8000
    python main.py serve --port 9000 --reload
    python main.py browse complaints                # first page of complaints
    python main.py browse journals --page 3 --page-size 5
    python main.py browse complaints --search smith --sort complaint_date --desc
    python main.py browse staff-deployments --region 1 --district 10

``browse`` talks to PMIS_API_BASE_URL (default http://127.0.0.1:8000)
through the same RemoteCollectionController the admin screens use.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from collection import RemoteCollectionController, SortDirection, ViewState
from services import station
from utils.config import ClientConfig
from utils.formatting import DEFAULT_COLUMNS, TableFormatter, format_page_summary
from utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _serve(args: argparse.Namespace, cfg: ClientConfig) -> int:
    import uvicorn

    host = args.host or cfg.api_host
    port = args.port or cfg.api_port
    logger.info("Starting PMIS mock API at http://%s:%d", host, port)
    uvicorn.run(
        "api.app:app",
        host=host,
        port=port,
        reload=args.reload,
        log_level=cfg.log_level.lower(),
    )
    return 0


async def _browse(args: argparse.Namespace, cfg: ClientConfig) -> int:
    filters = {"region": args.region, "district": args.district, "station": args.station}
    state = ViewState(
        page=args.page,
        page_size=args.page_size if args.page_size is not None else cfg.page_size,
        sort_field=args.sort,
        sort_direction=SortDirection.DESCENDING if args.desc else SortDirection.ASCENDING,
        search_text=args.search or "",
        filters=filters,
    )
    resource = station.resource(args.resource, base_url=args.base_url, config=cfg)
    controller = RemoteCollectionController(resource, initial_state=state, name=args.resource)
    try:
        controller.load()
        await controller.wait_idle()
        snap = controller.snapshot()
    finally:
        controller.close()
        resource.close()

    if snap.error:
        print(f"Error: {snap.error}", file=sys.stderr)
        return 1

    table = TableFormatter(args.columns.split(",") if args.columns else DEFAULT_COLUMNS[args.resource])
    table.add_records(snap.items)
    print(table.to_string())
    print()
    print(format_page_summary(snap.page, snap.page_count, snap.total))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PMIS admin client tools.")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the mock PMIS API")
    serve.add_argument("--host", default=None, help="Bind address (default: PMIS_API_HOST or 127.0.0.1)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: PMIS_API_PORT or 8000)")
    serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes")

    browse = sub.add_parser("browse", help="Print one page of a station resource")
    browse.add_argument("resource", choices=sorted(station.RESOURCE_PATHS), help="Resource to list")
    browse.add_argument("--base-url", default=None, help="API base URL (default: PMIS_API_BASE_URL)")
    browse.add_argument("--page", type=int, default=1, help="1-based page number")
    browse.add_argument("--page-size", type=int, default=None, help="Rows per page (default: PMIS_PAGE_SIZE)")
    browse.add_argument("--sort", default=None, help="Field to order by")
    browse.add_argument("--desc", action="store_true", help="Sort descending")
    browse.add_argument("--search", default=None, help="Free-text search")
    browse.add_argument("--region", default=None, help="Region id filter")
    browse.add_argument("--district", default=None, help="District id filter")
    browse.add_argument("--station", default=None, help="Station id filter")
    browse.add_argument("--columns", default=None, help="Comma-separated fields to show")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = ClientConfig.from_env()
    configure_logging(cfg)

    if args.command == "serve":
        return _serve(args, cfg)
    try:
        return asyncio.run(_browse(args, cfg))
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
