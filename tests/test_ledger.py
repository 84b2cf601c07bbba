"""Tests for src/services/ledger.py against an in-memory SQLite database."""

import logging

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.errors import NotFoundError
from src.models import StockHistory
from src.services.ledger import adjust_stock, operation_key, stock_ledger_balance


async def _history_count(session: AsyncSession) -> int:
    return (await session.execute(select(func.count()).select_from(StockHistory))).scalar_one()


def _adjust(session: AsyncSession, change: float, operation_id: str = "op-1", lot_no: str = "L100"):
    return adjust_stock(
        session,
        lot_no=lot_no,
        weight_change=change,
        reason="Manual correction",
        admin_cognito_id="A1",
        operation_id=operation_id,
    )


def test_operation_key_is_stable_and_distinct() -> None:
    import uuid

    stock_id = uuid.uuid4()
    key = operation_key(stock_id, "Shipment SHIP-1", "shipment-item:1")
    assert key == operation_key(stock_id, "Shipment SHIP-1", "shipment-item:1")
    assert key != operation_key(stock_id, "Shipment SHIP-1", "shipment-item:2")
    assert len(key) == 64


@pytest.mark.asyncio
async def test_deduction_updates_weight_and_writes_history(seeded_stock: AsyncSession) -> None:
    session = seeded_stock
    async with session.begin():
        entry = await _adjust(session, -300)
        assert entry is not None
        assert entry.weight_change == -300
        assert entry.action == "Manual correction"
        assert entry.details == {"previousWeight": 1000, "newWeight": 700, "weightChange": -300}

    async with session.begin():
        weight, deltas = await stock_ledger_balance(session, "L100")
        assert weight == 700
        assert deltas == -300
        assert await _history_count(session) == 1


@pytest.mark.asyncio
async def test_replayed_operation_is_a_no_op(seeded_stock: AsyncSession) -> None:
    session = seeded_stock
    async with session.begin():
        first = await _adjust(session, -100, operation_id="stock-assignment:7")
        second = await _adjust(session, -100, operation_id="stock-assignment:7")
        assert second is not None
        assert second.id == first.id
        weight, _ = await stock_ledger_balance(session, "L100")
        assert weight == 900
        assert await _history_count(session) == 1


@pytest.mark.asyncio
async def test_negative_result_is_rejected_without_changes(
    seeded_stock: AsyncSession, caplog: pytest.LogCaptureFixture
) -> None:
    session = seeded_stock
    async with session.begin():
        with caplog.at_level(logging.WARNING, logger="src.services.ledger"):
            assert await _adjust(session, -600, lot_no="L200") is None
        weight, deltas = await stock_ledger_balance(session, "L200")
        assert weight == 500
        assert deltas == 0
        assert await _history_count(session) == 0
    assert any("Skipping stock adjustment for lotNo L200" in r.message for r in caplog.records)


@pytest.mark.asyncio
async def test_exact_balance_can_reach_zero(seeded_stock: AsyncSession) -> None:
    session = seeded_stock
    async with session.begin():
        assert await _adjust(session, -500, lot_no="L200") is not None
        weight, deltas = await stock_ledger_balance(session, "L200")
        assert weight == 0
        assert deltas == -500


@pytest.mark.asyncio
async def test_unknown_lot_raises_not_found(seeded_stock: AsyncSession) -> None:
    session = seeded_stock
    async with session.begin():
        with pytest.raises(NotFoundError, match="L999"):
            await _adjust(session, -1, lot_no="L999")


@pytest.mark.asyncio
async def test_balance_invariant_over_many_operations(seeded_stock: AsyncSession) -> None:
    session = seeded_stock
    async with session.begin():
        for i, change in enumerate([-100, -50.5, 25, -200, -1000, -74.5]):
            await _adjust(session, change, operation_id=f"op-{i}")
        weight, deltas = await stock_ledger_balance(session, "L100")
        # -1000 would overdraw and is rejected; the rest apply.
        assert weight == 1000 + deltas
        assert weight == pytest.approx(600)
        assert weight >= 0
        assert await _history_count(session) == 5
