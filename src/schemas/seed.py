from pydantic import BaseModel, ConfigDict, Field


class BatchReport(BaseModel):
    """Outcome of loading one batch file.

    ``skipped`` counts every record that was not written, soft skips included;
    ``errors`` only holds messages for hard failures.  ``failed`` is set when a
    batch-level precondition rejected the whole batch before any row was written.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "kind": "StockAssignment",
                "success": 12,
                "skipped": 2,
                "errors": ["StockAssignment entry: Assigned weight 800 exceeds stock weight 700"],
                "failed": False,
            }
        }
    )

    kind: str
    success: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)
    failed: bool = False

    def merge(self, other: "BatchReport") -> "BatchReport":
        return BatchReport(
            kind=self.kind,
            success=self.success + other.success,
            skipped=self.skipped + other.skipped,
            errors=[*self.errors, *other.errors],
            failed=self.failed or other.failed,
        )


class VerificationResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {"counts": {"Admin": 2, "Stocks": 40, "StockHistory": 57}},
        }
    )

    # None marks an entity whose count could not be read.
    counts: dict[str, int | None]


class SeedRun(BaseModel):
    """Everything a seed run produced: per-kind reports, progress and final counts."""

    reports: dict[str, BatchReport] = Field(default_factory=dict)
    completed: list[str] = Field(default_factory=list)
    counts: dict[str, int | None] = Field(default_factory=dict)

    def record(self, report: BatchReport) -> None:
        previous = self.reports.get(report.kind)
        self.reports[report.kind] = previous.merge(report) if previous else report

    @property
    def total_errors(self) -> int:
        return sum(len(report.errors) for report in self.reports.values())

    def format_summary(self) -> str:
        lines = ["Seeding completed. Summary:"]
        for kind, report in self.reports.items():
            status = " (batch failed)" if report.failed else ""
            lines.append(f"{kind}: {report.success} seeded, {report.skipped} skipped{status}")
            if report.errors:
                lines.append(f"  Errors ({len(report.errors)}):")
                lines.extend(f"    {i}. {error}" for i, error in enumerate(report.errors, 1))
        if self.counts:
            lines.append("")
            lines.append("Verifying seeded data:")
            for kind, count in self.counts.items():
                shown = "unavailable" if count is None else f"{count} records"
                lines.append(f"{kind}: {shown}")
        return "\n".join(lines)
