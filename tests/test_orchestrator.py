"""Tests for src/services/orchestrator.py and src/services/verification.py."""

import logging
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine

from src.errors import InfrastructureError
from src.schemas.records import EntityKind
from src.schemas.seed import BatchReport, SeedRun
from src.services.orchestrator import (
    LOAD_ORDER,
    check_connection,
    deletion_order,
    read_batch,
    reset_database,
    run_seed,
)
from src.services.verification import count_rows
from tests.conftest import ADMINS, USERS, catalog_record, stock_record

SEED_DATA = Path(__file__).resolve().parent.parent / "seed" / "data"


def _write_core(write_batch) -> None:
    write_batch("admin.json", ADMINS)
    write_batch("user.json", USERS)
    write_batch("stocks.json", [stock_record("L100", 1000), stock_record("L200", 500)])
    write_batch(
        "stockAssignment.json",
        [
            {"lotNo": "L100", "userCognitoId": "U1", "adminCognitoId": "A1", "assignedWeight": 300},
            {"lotNo": "L100", "userCognitoId": "U2", "adminCognitoId": "A1", "assignedWeight": 800},
        ],
    )


# ---------------------------------------------------------------------------
# Load order
# ---------------------------------------------------------------------------


class TestLoadOrder:
    def test_every_kind_loaded_once(self) -> None:
        kinds = [kind for kind, _ in LOAD_ORDER]
        assert kinds == list(EntityKind)

    def test_file_names(self) -> None:
        files = dict(LOAD_ORDER)
        assert files[EntityKind.ADMIN] == "admin.json"
        assert files[EntityKind.STOCKS] == "stocks.json"
        assert files[EntityKind.STOCK_ASSIGNMENT] == "stockAssignment.json"

    def test_deletion_order_is_dependents_first(self) -> None:
        order = deletion_order(["admins", "custom_table", "stocks", "stock_history", "users"])
        assert order == ["stock_history", "stocks", "users", "admins", "custom_table"]


# ---------------------------------------------------------------------------
# Connection check and reset
# ---------------------------------------------------------------------------


class TestCheckConnection:
    @pytest.mark.asyncio
    async def test_passes_on_live_engine(self, engine: AsyncEngine) -> None:
        await check_connection(engine)

    @pytest.mark.asyncio
    async def test_unreachable_raises_infrastructure_error(self) -> None:
        broken = MagicMock()
        broken.connect.return_value.__aenter__ = AsyncMock(
            side_effect=OperationalError("SELECT 1", {}, Exception("refused"))
        )
        broken.connect.return_value.__aexit__ = AsyncMock(return_value=False)
        with pytest.raises(InfrastructureError, match="Database connection failed"):
            await check_connection(broken)


class TestResetDatabase:
    @pytest.mark.asyncio
    async def test_clears_all_tables(self, engine: AsyncEngine, data_dir) -> None:
        directory, write_batch = data_dir
        _write_core(write_batch)
        await run_seed(engine, directory)

        cleared = await reset_database(engine)
        assert "stock_history" in cleared
        assert cleared.index("stock_history") < cleared.index("stocks")
        counts = await count_rows(engine)
        assert all(count == 0 for count in counts.values())

    @pytest.mark.asyncio
    async def test_alembic_version_is_kept(self, engine: AsyncEngine) -> None:
        async with engine.begin() as conn:
            await conn.execute(text("CREATE TABLE alembic_version (version_num VARCHAR(32))"))
            await conn.execute(text("INSERT INTO alembic_version VALUES ('0001')"))

        cleared = await reset_database(engine)
        assert "alembic_version" not in cleared
        async with engine.connect() as conn:
            remaining = await conn.execute(text("SELECT count(*) FROM alembic_version"))
            assert remaining.scalar_one() == 1


# ---------------------------------------------------------------------------
# Batch files
# ---------------------------------------------------------------------------


class TestReadBatch:
    def test_reads_array(self, data_dir) -> None:
        directory, write_batch = data_dir
        write_batch("admin.json", ADMINS)
        assert read_batch(directory / "admin.json") == ADMINS

    def test_non_array_rejected(self, data_dir) -> None:
        directory, write_batch = data_dir
        write_batch("admin.json", {"adminCognitoId": "A1"})
        with pytest.raises(InfrastructureError, match="JSON array"):
            read_batch(directory / "admin.json")

    def test_malformed_json_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "admin.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(InfrastructureError, match="admin.json"):
            read_batch(path)


# ---------------------------------------------------------------------------
# Full runs
# ---------------------------------------------------------------------------


class TestRunSeed:
    @pytest.mark.asyncio
    async def test_missing_files_are_skipped(
        self, engine: AsyncEngine, data_dir, caplog: pytest.LogCaptureFixture
    ) -> None:
        directory, write_batch = data_dir
        write_batch("admin.json", ADMINS)
        with caplog.at_level(logging.WARNING, logger="src.services.orchestrator"):
            run = await run_seed(engine, directory)
        assert run.completed == ["Admin"]
        assert run.counts["Admin"] == 2
        assert run.counts["Stocks"] == 0
        assert any("Skipping missing seed file user.json" in r.message for r in caplog.records)

    @pytest.mark.asyncio
    async def test_reports_and_counts(self, engine: AsyncEngine, data_dir) -> None:
        directory, write_batch = data_dir
        _write_core(write_batch)
        run = await run_seed(engine, directory)

        assignment = run.reports["StockAssignment"]
        assert (assignment.success, assignment.skipped) == (1, 1)
        assert assignment.errors == [
            "StockAssignment entry: Assigned weight 800 exceeds stock weight 700"
        ]
        assert run.counts["StockHistory"] == 1
        assert run.counts["AdminNotification"] == 1
        assert run.total_errors == 1

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, engine: AsyncEngine, data_dir) -> None:
        directory, write_batch = data_dir
        _write_core(write_batch)
        first = await run_seed(engine, directory)
        second = await run_seed(engine, directory)
        assert first.counts == second.counts
        assert first.reports == second.reports

    @pytest.mark.asyncio
    async def test_failed_admin_batch_does_not_stop_run(self, engine: AsyncEngine, data_dir) -> None:
        directory, write_batch = data_dir
        write_batch("admin.json", [*ADMINS, {**ADMINS[0], "adminCognitoId": "A3"}])
        write_batch("user.json", USERS)
        write_batch("catalog.json", [catalog_record()])
        run = await run_seed(engine, directory)
        assert run.reports["Admin"].failed is True
        assert run.counts["Admin"] == 0
        assert run.counts["User"] == 2
        # Catalog rows need an admin.
        assert run.reports["Catalog"].errors == ["Catalog entry: Unknown adminCognitoId 'A1'"]

    @pytest.mark.asyncio
    async def test_crash_logs_completed_kinds_and_reraises(
        self, engine: AsyncEngine, data_dir, caplog: pytest.LogCaptureFixture
    ) -> None:
        directory, write_batch = data_dir
        write_batch("admin.json", ADMINS)
        write_batch("user.json", {"not": "an array"})
        with (
            caplog.at_level(logging.ERROR, logger="src.services.orchestrator"),
            pytest.raises(InfrastructureError),
        ):
            await run_seed(engine, directory)
        assert any("Seeding failed after seeding: Admin" in r.message for r in caplog.records)
        counts = await count_rows(engine)
        assert counts["Admin"] == 2

    @pytest.mark.asyncio
    async def test_bundled_sample_data_loads(self, engine: AsyncEngine) -> None:
        run = await run_seed(engine, SEED_DATA)
        assert run.completed == [kind.value for kind, _ in LOAD_ORDER]
        assert run.counts["Admin"] == 2
        assert run.counts["Shipment"] == 1
        assert run.counts["Favorite"] == 1
        assert run.reports["StockAssignment"].errors == [
            "StockAssignment entry: Assigned weight 800 exceeds stock weight 700"
        ]


# ---------------------------------------------------------------------------
# Verification and summary
# ---------------------------------------------------------------------------


class TestVerification:
    @pytest.mark.asyncio
    async def test_counts_every_kind(self, engine: AsyncEngine) -> None:
        counts = await count_rows(engine)
        assert set(counts) == {kind.value for kind in EntityKind}
        assert all(count == 0 for count in counts.values())

    @pytest.mark.asyncio
    async def test_failure_isolated_per_table(self, engine: AsyncEngine) -> None:
        async with engine.begin() as conn:
            await conn.execute(text("DROP TABLE reports"))
        counts = await count_rows(engine)
        assert counts["Report"] is None
        assert counts["Admin"] == 0


class TestSummary:
    def test_format_summary(self) -> None:
        run = SeedRun()
        run.record(BatchReport(kind="Admin", success=2))
        run.record(BatchReport(kind="Catalog", success=1, skipped=1, errors=["Catalog entry: Invalid broker 'XXXX'"]))
        run.counts = {"Admin": 2, "Catalog": None}
        summary = run.format_summary()
        assert "Admin: 2 seeded, 0 skipped" in summary
        assert "  Errors (1):" in summary
        assert "    1. Catalog entry: Invalid broker 'XXXX'" in summary
        assert "Catalog: unavailable" in summary

    def test_record_merges_same_kind(self) -> None:
        run = SeedRun()
        run.record(BatchReport(kind="Stocks", success=2, errors=["a"]))
        run.record(BatchReport(kind="Stocks", success=1, skipped=1, errors=["b"]))
        merged = run.reports["Stocks"]
        assert (merged.success, merged.skipped, merged.errors) == (3, 1, ["a", "b"])

    @pytest.mark.asyncio
    async def test_cli_prints_summary(self, capsys: pytest.CaptureFixture[str]) -> None:
        from seed.seed import main

        run = SeedRun(reports={"Admin": BatchReport(kind="Admin", success=2)})
        engine = MagicMock()
        engine.dispose = AsyncMock()
        with (
            patch("seed.seed.build_engine", return_value=engine),
            patch("seed.seed.run_seed", AsyncMock(return_value=run)) as fake_run,
        ):
            await main(["--data-dir", "/tmp/batches"])
        fake_run.assert_awaited_once_with(engine, "/tmp/batches")
        engine.dispose.assert_awaited_once()
        assert "Admin: 2 seeded, 0 skipped" in capsys.readouterr().out
