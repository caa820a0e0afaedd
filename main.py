import sys
import asyncio
import argparse

# --- Settings/Logging ---
from rp_roster.logging.setup import setup_logging
from rp_roster.config.settings import settings

setup_logging()

from loguru import logger

import uvicorn
from rich import print
from rich.table import Table

from rp_roster.api.app import create_app
from rp_roster.clients.base_client import RosterError
from rp_roster.pipeline import RosterPipeline
from rp_roster.storage.cache_gateway import CacheGateway
from rp_roster.storage.supabase_client import build_cache_store


def render_roster(roster: list) -> Table:
    """Formats roster records as a rich table."""
    table = Table(title=f"Roster for board {settings.trello_board_id}")
    table.add_column("Display name", style="cyan")
    table.add_column("Username", style="green")
    table.add_column("User id", justify="right")
    table.add_column("Extra properties")
    for record in roster:
        extra = record.get("extraProperties") or {}
        table.add_row(
            record["displayName"],
            record["canonicalUsername"],
            str(record["externalId"]),
            ", ".join(f"{key}: {value}" for key, value in extra.items()),
        )
    return table


async def run_once() -> int:
    """Builds (or reads the cached) roster once and prints it."""
    store = await build_cache_store(settings)
    gateway = CacheGateway(store, coalesce=settings.coalesce_cache_misses)
    pipeline = RosterPipeline.from_settings(gateway, settings)
    try:
        roster = await pipeline.get_roster()
    except RosterError as e:
        logger.error(f"Roster build failed: {e}")
        return 1
    finally:
        await pipeline.close()
        await store.close()

    logger.success(f"Roster contains {len(roster)} members.")
    print(render_roster(roster))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Roleplay roster service")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Build the roster once, print it, and exit instead of serving HTTP.",
    )
    args = parser.parse_args()

    if args.once:
        sys.exit(asyncio.run(run_once()))

    logger.info(f"Starting roster service on {settings.host}:{settings.port}")
    uvicorn.run(create_app(), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
