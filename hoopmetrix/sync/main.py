import asyncio

from hoopmetrix.core.logging_config import setup_logging
from hoopmetrix.sync.teams_players import run_sync


async def main():
    logger = setup_logging("sync")

    # Teams first, then every roster, league by league
    summary = await run_sync()

    logger.info(f"[SYNC] Finished at {summary['timestamp']}: {summary['total']}")


if __name__ == "__main__":
    asyncio.run(main())
