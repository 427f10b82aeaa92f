from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from physobj.domain.models import RowRef


@dataclass
class ReportMeta:
    """
    Назначение:
        Метаданные запуска команды.
    """

    run_id: str
    command: str
    started_at: str
    finished_at: str | None = None
    duration_ms: int | None = None
    csv_path: str | None = None
    csv_header: list[str] | None = None
    index_on_load: bool = False
    dry_run: bool = False
    items_limit: int | None = None
    items_truncated: bool = False


@dataclass
class ReportSummary:
    rows_total: int = 0
    rows_processed: int = 0
    rows_skipped: int = 0
    rows_failed: int = 0
    rows_with_warnings: int = 0
    errors_total: int = 0
    warnings_total: int = 0
    by_code: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ReportDiagnostic:
    severity: str
    code: str
    message: str


@dataclass
class ReportItem:
    """
    Назначение:
        Единица отчёта, привязанная к конкретной строке CSV.
    """

    status: str
    row_ref: RowRef | None = None
    payload: Mapping[str, Any] | None = None
    diagnostics: list[ReportDiagnostic] = field(default_factory=list)


@dataclass
class ReportEnvelope:
    status: str
    meta: ReportMeta
    summary: ReportSummary
    items: list[ReportItem]
    context: dict[str, Any] = field(default_factory=dict)
