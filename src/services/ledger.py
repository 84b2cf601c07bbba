"""Stock ledger: the only code path that changes ``Stock.weight``.

Every applied delta writes exactly one ``StockHistory`` row in the caller's
transaction.  Rows carry a content-addressed ``operation_key`` so replaying
the same operation is a no-op instead of a second deduction.
"""

import hashlib
import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.errors import NegativeBalanceError, NotFoundError
from src.models.history import StockHistory
from src.models.stock import Stock

logger = logging.getLogger(__name__)


def operation_key(stock_id: uuid.UUID, reason: str, operation_id: str) -> str:
    """Return the idempotency key for one ledger operation on one stock."""
    return hashlib.sha256(f"{stock_id}|{reason}|{operation_id}".encode()).hexdigest()


def _next_balance(stock: Stock, weight_change: float) -> float:
    new_weight = stock.weight + weight_change
    if new_weight < 0:
        raise NegativeBalanceError(stock.lot_no, stock.weight, weight_change)
    return new_weight


async def adjust_stock(
    session: AsyncSession,
    *,
    lot_no: str,
    weight_change: float,
    reason: str,
    admin_cognito_id: str | None,
    operation_id: str,
    shipment_id: uuid.UUID | None = None,
    user_cognito_id: str | None = None,
) -> StockHistory | None:
    """Apply *weight_change* to the stock identified by *lot_no* and log it.

    Locks the stock row (``SELECT ... FOR UPDATE``) for the rest of the
    transaction.  Returns the ``StockHistory`` row describing the adjustment,
    the existing row when *operation_id* was already applied, or ``None`` when
    the change would make the balance negative (nothing is written then).

    Raises ``NotFoundError`` if no stock has *lot_no*.
    """
    logger.info(
        "Adjusting stock for lotNo %s: weightChange=%s, reason=%s, admin=%s",
        lot_no,
        weight_change,
        reason,
        admin_cognito_id,
    )
    result = await session.execute(select(Stock).where(Stock.lot_no == lot_no).with_for_update())
    stock = result.scalar_one_or_none()
    if stock is None:
        raise NotFoundError(f"Stock with lotNo {lot_no} not found")

    key = operation_key(stock.id, reason, operation_id)
    existing_result = await session.execute(
        select(StockHistory).where(StockHistory.operation_key == key)
    )
    existing = existing_result.scalar_one_or_none()
    if existing is not None:
        logger.info("Ledger operation %s already applied to lotNo %s", operation_id, lot_no)
        return existing

    try:
        new_weight = _next_balance(stock, weight_change)
    except NegativeBalanceError as exc:
        logger.warning("Skipping stock adjustment for lotNo %s: %s", lot_no, exc)
        return None

    previous_weight = stock.weight
    now = datetime.now(UTC)
    stock.weight = new_weight
    stock.updated_at = now

    entry = StockHistory(
        stock_id=stock.id,
        action=reason,
        weight_change=weight_change,
        timestamp=now,
        admin_cognito_id=admin_cognito_id,
        user_cognito_id=user_cognito_id,
        shipment_id=shipment_id,
        details={
            "previousWeight": previous_weight,
            "newWeight": new_weight,
            "weightChange": weight_change,
        },
        operation_key=key,
    )
    session.add(entry)
    await session.flush()
    return entry


async def stock_ledger_balance(session: AsyncSession, lot_no: str) -> tuple[float, float]:
    """Return ``(current weight, sum of recorded deltas)`` for *lot_no*.

    Raises ``NotFoundError`` if no stock has *lot_no*.
    """
    stock_result = await session.execute(select(Stock).where(Stock.lot_no == lot_no))
    stock = stock_result.scalar_one_or_none()
    if stock is None:
        raise NotFoundError(f"Stock with lotNo {lot_no} not found")

    delta_result = await session.execute(
        select(func.coalesce(func.sum(StockHistory.weight_change), 0.0)).where(
            StockHistory.stock_id == stock.id
        )
    )
    return stock.weight, float(delta_result.scalar_one())
