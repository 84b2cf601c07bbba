"""Seed script: reset the database and load the tea-auction batch files.

Run as:
    python -m seed [--data-dir DIR]

Requires the DATABASE_URL environment variable (or a .env file).  Batch files
are read from SEED_DATA_DIR (default ``seed/data``) unless --data-dir is given.
"""

import argparse
import asyncio
import logging
import sys

from src.config import settings
from src.database import build_engine
from src.services.orchestrator import run_seed

logger = logging.getLogger("seed")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="python -m seed", description=__doc__.splitlines()[0])
    parser.add_argument(
        "--data-dir",
        default=settings.seed_data_dir,
        help="directory holding admin.json, user.json, ... (default: %(default)s)",
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Prefer the direct (non-pooled) URL for the bulk TRUNCATE + load.
    engine = build_engine(settings.database_url_direct or settings.database_url)
    try:
        run = await run_seed(engine, args.data_dir)
    except Exception:
        logger.exception("Seeding failed")
        raise
    finally:
        await engine.dispose()

    print(run.format_summary())
    if run.total_errors:
        print(f"\n{run.total_errors} record(s) rejected", file=sys.stderr)


if __name__ == "__main__":
    asyncio.run(main())
