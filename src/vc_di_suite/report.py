"""
Interop matrix reporting.

Rows are test cases in declared order, columns are matching implementations
in discovery order. Implementations that do not match the tag filter are
listed separately as not implemented.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Protocol, Sequence

from rich.console import Console
from rich.table import Table

from vc_di_suite.cases import TestCase
from vc_di_suite.registry import TagFilterResult
from vc_di_suite.runner import CellStatus, ResultCell


logger = logging.getLogger(__name__)


@dataclass
class InteropMatrix:
    """Aggregated results ready for rendering."""

    title: str
    row_label: str
    column_label: str
    rows: list[str]
    columns: list[str]
    cells: dict[tuple[str, str], ResultCell]
    implemented: list[str]
    not_implemented: list[str]
    matrix: bool = True
    row_ids: list[str] = field(default_factory=list)

    def cell(self, row_id: str, column: str) -> ResultCell | None:
        return self.cells.get((column, row_id))

    @property
    def summary(self) -> dict[str, int]:
        counts = {status.value: 0 for status in CellStatus}
        for cell in self.cells.values():
            counts[cell.status.value] += 1
        counts["total"] = len(self.cells)
        return counts

    @property
    def all_passed(self) -> bool:
        return all(cell.passed for cell in self.cells.values())

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation."""
        return {
            "title": self.title,
            "matrix": self.matrix,
            "rowLabel": self.row_label,
            "columnLabel": self.column_label,
            "rows": self.rows,
            "columns": self.columns,
            "implemented": self.implemented,
            "notImplemented": self.not_implemented,
            "summary": self.summary,
            "results": [
                {
                    "rowId": row_id,
                    "row": title,
                    "columnId": column,
                    **_cell_dict(self.cell(row_id, column)),
                }
                for row_id, title in zip(self.row_ids, self.rows)
                for column in self.columns
            ],
        }


def _cell_dict(cell: ResultCell | None) -> dict[str, Any]:
    if cell is None:
        return {"status": CellStatus.FAILED.value, "reason": "No result recorded"}
    return {
        "status": cell.status.value,
        "reason": cell.reason,
        "failure": cell.failure.value if cell.failure else None,
        "durationMs": cell.duration_ms,
        "subResults": [
            {
                "label": sub.label,
                "passed": sub.passed,
                "reason": sub.reason,
                "statusCode": sub.status_code,
                "responseBody": sub.data,
            }
            for sub in cell.sub_results
        ],
    }


def build_matrix(
    cells: Iterable[ResultCell],
    partition: TagFilterResult,
    cases: Sequence[TestCase],
    title: str = "Verify Credential - Data Integrity",
    row_label: str = "Test Name",
    column_label: str = "Verifier",
) -> InteropMatrix:
    """Aggregate result cells into an interop matrix.

    A matching implementation without a recorded cell for a case gets a
    failed placeholder cell, so a gap is never read as a pass.
    """
    columns = list(partition.match.keys())
    recorded = {cell.key: cell for cell in cells if cell.implementation in partition.match}

    matrix_cells: dict[tuple[str, str], ResultCell] = {}
    for case in cases:
        for column in columns:
            key = (column, case.case_id)
            cell = recorded.get(key)
            if cell is None:
                logger.warning("No result recorded for %s / %s", column, case.case_id)
                cell = ResultCell(
                    implementation=column,
                    case_id=case.case_id,
                    title=case.title,
                    status=CellStatus.FAILED,
                    reason="No result recorded",
                )
            matrix_cells[key] = cell

    return InteropMatrix(
        title=title,
        row_label=row_label,
        column_label=column_label,
        rows=[case.title for case in cases],
        row_ids=[case.case_id for case in cases],
        columns=columns,
        cells=matrix_cells,
        implemented=columns,
        not_implemented=list(partition.non_match.keys()),
    )


class ReportSink(Protocol):
    """Receives a finished matrix."""

    def write(self, matrix: InteropMatrix) -> None: ...


_STATUS_MARKUP = {
    CellStatus.PASSED: "[green]PASS[/]",
    CellStatus.FAILED: "[red]FAIL[/]",
    CellStatus.SKIPPED: "[yellow]SKIP[/]",
}


class ConsoleReportSink:
    """Renders the matrix as a rich table."""

    def __init__(self, console: Console | None = None, show_reasons: bool = True) -> None:
        self.console = console or Console()
        self.show_reasons = show_reasons

    def write(self, matrix: InteropMatrix) -> None:
        table = Table(title=matrix.title, show_lines=False)
        table.add_column(matrix.row_label, style="bold")
        for column in matrix.columns:
            table.add_column(column, justify="center")

        for row_id, title in zip(matrix.row_ids, matrix.rows):
            table.add_row(
                title,
                *(
                    _STATUS_MARKUP[matrix.cell(row_id, column).status]
                    for column in matrix.columns
                ),
            )

        self.console.print(table)

        if matrix.not_implemented:
            self.console.print("\n[bold]Not implemented:[/]")
            for name in matrix.not_implemented:
                self.console.print(f"  [dim]-[/] {name}")

        if self.show_reasons:
            failures = [cell for cell in matrix.cells.values() if not cell.passed]
            if failures:
                self.console.print("\n[bold red]Failures:[/]")
                for cell in failures:
                    self.console.print(
                        f"  [red]x[/] {cell.implementation}: {cell.title} - {cell.reason}"
                    )

        summary = matrix.summary
        self.console.print(
            f"\n{summary['passed']} passed, {summary['failed']} failed, "
            f"{summary['skipped']} skipped ({summary['total']} total)"
        )


class JsonReportSink:
    """Writes the matrix as a JSON document."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def write(self, matrix: InteropMatrix) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w") as f:
            json.dump(matrix.to_dict(), f, indent=2)
        logger.info("Wrote JSON report to %s", self.path)
