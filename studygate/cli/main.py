#!/usr/bin/env python3
"""StudyGate CLI - run the API server, search data sources and ingest archives."""

import argparse
import asyncio
import json
import sys

from studygate.exceptions.domain import NoDataSourceFoundError
from studygate.models import NavigationContext
from studygate.settings import settings
from studygate.utils.bootstrap import create_services
from studygate.utils.logger import logger


def run_server(host: str | None = None, port: int | None = None) -> None:
    """Run the StudyGate API server."""
    import uvicorn

    host = host or settings.host or "127.0.0.1"
    port = port or settings.port or 8000

    logger.info(f"Starting StudyGate server at http://{host}:{port}")

    uvicorn.run(
        "studygate.api.app:app",
        host=host,
        port=port,
        reload=settings.debug,
        log_level="info" if settings.debug else "warning",
    )


async def search(query: str) -> int:
    """Search the resolved data source with a navigation query string and print the page."""
    services = create_services(settings)
    try:
        context = NavigationContext.from_url(f"/?{query.lstrip('?')}" if query else "/")
        page = await services.study_list.get_page(context)
    except NoDataSourceFoundError as e:
        logger.error(str(e))
        return 1
    finally:
        await services.aclose()

    print(json.dumps(page.model_dump(mode="json"), indent=2))
    return 0


async def ingest(url: str, mode_path: str | None = None) -> int:
    """Ingest an archive by URL and print the redirect target."""
    services = create_services(settings)
    try:
        result = await services.ingestion.ingest(
            f"?url={url}", mode_path or settings.default_mode_path
        )
    finally:
        await services.aclose()

    print(json.dumps(result.model_dump(mode="json"), indent=2))
    return 0 if result.succeeded else 1


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="studygate", description="StudyGate CLI - study search and local archive ingestion"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run command
    run_parser = subparsers.add_parser("run", help="Run the API server")
    run_parser.add_argument(
        "--host", type=str, default=None, help="Host to bind to (default: 127.0.0.1)"
    )
    run_parser.add_argument(
        "--port", type=int, default=None, help="Port to bind to (default: 8000)"
    )

    # search command
    search_parser = subparsers.add_parser("search", help="Search studies")
    search_parser.add_argument(
        "query",
        nargs="?",
        default="",
        help="Navigation query string, e.g. 'datasources=pacs&mrn=123&pageNumber=2'",
    )

    # ingest command
    ingest_parser = subparsers.add_parser("ingest", help="Ingest a (nested) ZIP archive by URL")
    ingest_parser.add_argument("url", help="URL of the archive")
    ingest_parser.add_argument(
        "--mode", type=str, default=None, help="Mode path to open (default: from settings)"
    )

    args = parser.parse_args()

    if args.command == "run":
        run_server(args.host, args.port)
    elif args.command == "search":
        sys.exit(asyncio.run(search(args.query)))
    elif args.command == "ingest":
        sys.exit(asyncio.run(ingest(args.url, args.mode)))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
