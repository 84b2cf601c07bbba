"""Read-only row counts per entity, taken after a seed run."""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from src.schemas.records import EntityKind
from src.services.loader import ENTITY_MODELS

logger = logging.getLogger(__name__)


async def count_rows(engine: AsyncEngine) -> dict[str, int | None]:
    """Return the row count of every entity table, keyed by entity kind.

    A table that cannot be counted is logged and reported as ``None``; the
    remaining tables are still counted.
    """
    counts: dict[str, int | None] = {}
    for kind in EntityKind:
        model = ENTITY_MODELS[kind]
        try:
            async with engine.connect() as conn:
                result = await conn.execute(select(func.count()).select_from(model))
                counts[kind.value] = result.scalar_one()
        except SQLAlchemyError as exc:
            logger.error("Error verifying %s: %s", kind, exc)
            counts[kind.value] = None
        else:
            logger.info("%s: %d records", kind, counts[kind.value])
    return counts
