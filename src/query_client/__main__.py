"""
Page through a smart search from the command line.

Example:
    python -m query_client series \
        --filter '{"groups": [{"and": [{"series": {"name": {"contains": "Bat"}}}]}]}' \
        --order-by name:desc --page-size 10 --pages 2
"""
import argparse
import asyncio
import json
import logging
import sys

from core.config import get_settings
from schemas.filters import SmartFilter
from schemas.ordering import QueryOrder
from schemas.pagination import CursorPagination, OffsetPagination
from services.list_view import ListViewSession

from .api_client import SmartSearchClient, create_http_client

logger = logging.getLogger("query_client")

ENTITIES = ("media", "media_metadata", "series", "series_metadata", "library")


def parse_order(value: str) -> QueryOrder:
    """Parse ``field`` or ``field:direction``."""
    field, _, direction = value.partition(":")
    if direction and direction not in ("asc", "desc"):
        raise argparse.ArgumentTypeError(f"Invalid sort direction: {direction}")
    return QueryOrder(order_by=field, direction=direction or "asc")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="query_client",
        description="Run a smart search and print each page as JSON.",
    )
    parser.add_argument("entity", choices=ENTITIES)
    parser.add_argument("--filter", dest="filter_json", help="Smart filter as JSON")
    parser.add_argument(
        "--order-by", action="append", type=parse_order, default=[],
        help="Sort field, optionally suffixed with :asc or :desc (repeatable)",
    )
    parser.add_argument("--page-size", type=int, help="Offset page size")
    parser.add_argument("--cursor-mode", action="store_true", help="Use cursor pagination")
    parser.add_argument("--limit", type=int, help="Cursor page size")
    parser.add_argument("--pages", type=int, default=1, help="Number of pages to fetch")
    parser.add_argument("--token", help="API token (defaults to QUERY_API_TOKEN)")
    return parser


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    smart_filter = SmartFilter.from_wire(json.loads(args.filter_json)) if args.filter_json else None
    if args.cursor_mode:
        pagination = CursorPagination(limit=args.limit)
    else:
        pagination = OffsetPagination(page=1, page_size=args.page_size or settings.default_page_size)

    async with create_http_client() as client:
        transport = SmartSearchClient(client, token=args.token or settings.api_token)
        async with ListViewSession(
            args.entity,
            transport,
            mode="body",
            pagination=pagination,
            on_dropped_order=lambda o: logger.warning(
                "Ignoring sort field '%s': not sortable for %s", o.order_by, args.entity,
            ),
        ) as view:
            view.store.patch_body(
                filters=list(smart_filter.groups) if smart_filter else None,
                ordering=args.order_by or None,
            )
            response = await view.refresh()
            fetched = 0
            while response is not None:
                fetched += 1
                logger.info("Page %d: %d %s", fetched, len(response.nodes), args.entity)
                print(json.dumps(response.nodes, indent=2, default=str))
                if fetched >= args.pages or not view.status().has_next:
                    break
                response = await view.load_next()
    return 0


def main() -> None:
    """Entry point for the query client CLI."""
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    sys.exit(asyncio.run(run(build_parser().parse_args())))


if __name__ == "__main__":
    main()
