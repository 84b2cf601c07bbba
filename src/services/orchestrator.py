"""Batch orchestrator: reset the store and load every batch file in order.

Each batch file is loaded in its own transaction, so a crash part way through
leaves the earlier kinds committed and reports which ones completed.
"""

import json
import logging
from pathlib import Path
from typing import Any

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from src.database import session_factory
from src.errors import InfrastructureError
from src.schemas.records import EntityKind
from src.schemas.seed import SeedRun
from src.services.loader import ENTITY_MODELS, load_batch
from src.services.verification import count_rows

logger = logging.getLogger(__name__)

# Dependency order: every kind only references kinds listed before it.
LOAD_ORDER: list[tuple[EntityKind, str]] = [
    (EntityKind.ADMIN, "admin.json"),
    (EntityKind.USER, "user.json"),
    (EntityKind.GRADE_CATEGORY_MAPPING, "gradeCategoryMapping.json"),
    (EntityKind.CATALOG, "catalog.json"),
    (EntityKind.SELLING_PRICE, "sellingPrice.json"),
    (EntityKind.OUT_LOTS, "outLots.json"),
    (EntityKind.STOCKS, "stocks.json"),
    (EntityKind.STOCK_ASSIGNMENT, "stockAssignment.json"),
    (EntityKind.SHIPMENT, "shipment.json"),
    (EntityKind.SHIPMENT_ITEM, "shipmentItem.json"),
    (EntityKind.STOCK_HISTORY, "stockHistory.json"),
    (EntityKind.SHIPMENT_HISTORY, "shipmentHistory.json"),
    (EntityKind.ADMIN_NOTIFICATION, "adminNotification.json"),
    (EntityKind.CONTACT, "contact.json"),
    (EntityKind.FAVORITE, "favorite.json"),
    (EntityKind.REPORT, "report.json"),
]

EXCLUDED_TABLES = frozenset({"alembic_version"})


async def check_connection(engine: AsyncEngine) -> None:
    """Run ``SELECT 1``; raise ``InfrastructureError`` if the store is unreachable."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        raise InfrastructureError(f"Database connection failed: {exc}") from exc
    logger.info("Database connection successful")


def deletion_order(table_names: list[str]) -> list[str]:
    """Order *table_names* dependents-first.

    Known entity tables follow the reverse load order; tables the loader does
    not know about are appended in the order they were discovered.
    """
    present = set(table_names)
    known = [
        ENTITY_MODELS[kind].__tablename__
        for kind, _ in reversed(LOAD_ORDER)
        if ENTITY_MODELS[kind].__tablename__ in present
    ]
    return known + [name for name in table_names if name not in known]


async def _discover_tables(conn: AsyncConnection) -> list[str]:
    names = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    return [name for name in names if name not in EXCLUDED_TABLES]


async def reset_database(engine: AsyncEngine) -> list[str]:
    """Remove every row from every application table.

    Returns the tables that were cleared.  A table that cannot be cleared is
    logged as a warning and the reset carries on with the rest.
    """
    cleared: list[str] = []
    async with engine.begin() as conn:
        tables = deletion_order(await _discover_tables(conn))
        postgres = conn.dialect.name == "postgresql"
        quote = conn.dialect.identifier_preparer.quote

        if postgres:
            await conn.execute(text("SET CONSTRAINTS ALL DEFERRED"))

        for table in tables:
            statement = (
                f"TRUNCATE TABLE {quote(table)} CASCADE" if postgres else f"DELETE FROM {quote(table)}"
            )
            try:
                async with conn.begin_nested():
                    await conn.execute(text(statement))
            except SQLAlchemyError as exc:
                logger.warning("Error clearing table %s: %s", table, exc)
            else:
                cleared.append(table)
                logger.info("Cleared table %s", table)

        if postgres:
            await conn.execute(text("SET CONSTRAINTS ALL IMMEDIATE"))
    return cleared


def read_batch(path: Path) -> list[Any]:
    """Read one batch file; it must hold a JSON array of records."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise InfrastructureError(f"Cannot read seed file {path.name}: {exc}") from exc
    if not isinstance(data, list):
        raise InfrastructureError(f"Seed file {path.name} must contain a JSON array")
    return data


async def run_seed(engine: AsyncEngine, data_dir: str | Path) -> SeedRun:
    """Reset the store and load every batch file found in *data_dir*.

    Missing files are skipped with a warning.  Any unexpected exception is
    logged together with the kinds already committed, then re-raised.
    Disposing *engine* is left to the caller.
    """
    data_dir = Path(data_dir)
    run = SeedRun()

    logger.info("Starting seeding process from %s", data_dir)
    await check_connection(engine)
    await reset_database(engine)

    sessions = session_factory(engine)
    try:
        for kind, file_name in LOAD_ORDER:
            path = data_dir / file_name
            if not path.exists():
                logger.warning("Skipping missing seed file %s", file_name)
                continue

            records = read_batch(path)
            logger.info("Seeding %s with %d records", file_name, len(records))
            async with sessions() as session, session.begin():
                report = await load_batch(session, kind, records)
            run.record(report)
            run.completed.append(kind.value)
    except Exception:
        logger.error("Seeding failed after seeding: %s", ", ".join(run.completed) or "nothing")
        raise

    run.counts = await count_rows(engine)
    return run
