from __future__ import annotations

from dataclasses import asdict
from typing import Any, Iterable, Mapping

from physobj.common.time import getNowIso
from physobj.domain.exceptions import RowValidationError
from physobj.domain.models import RowRef
from physobj.domain.reporting.models import (
    ReportDiagnostic,
    ReportEnvelope,
    ReportItem,
    ReportMeta,
    ReportSummary,
)

STATUS_OK = "OK"
STATUS_SKIPPED = "SKIPPED"
STATUS_FAILED = "FAILED"


class ReportCollector:
    """
    Назначение/ответственность:
        Единый сборщик отчёта запуска: счётчики, строки с проблемами, контекст.
    """

    def __init__(
        self,
        run_id: str,
        command: str,
        started_at: str | None = None,
        include_ok_items: bool = False,
    ) -> None:
        self.meta = ReportMeta(run_id=run_id, command=command, started_at=started_at or getNowIso())
        self.summary = ReportSummary()
        self.items: list[ReportItem] = []
        self.context: dict[str, Any] = {}
        self.include_ok_items = include_ok_items

    def set_context(self, name: str, value: dict[str, Any]) -> None:
        self.context[name] = value

    def add_item(
        self,
        *,
        status: str,
        row_ref: RowRef | None = None,
        payload: Mapping[str, Any] | None = None,
        errors: Iterable[RowValidationError] | None = None,
        warnings: Iterable[RowValidationError] | None = None,
    ) -> None:
        error_list = list(errors or [])
        warning_list = list(warnings or [])

        self.summary.rows_total += 1
        if status == STATUS_OK:
            self.summary.rows_processed += 1
            if warning_list:
                self.summary.rows_with_warnings += 1
        elif status == STATUS_SKIPPED:
            self.summary.rows_skipped += 1
        elif status == STATUS_FAILED:
            self.summary.rows_failed += 1

        self.summary.errors_total += len(error_list)
        self.summary.warnings_total += len(warning_list)
        for item in [*error_list, *warning_list]:
            code = item.kind.value
            self.summary.by_code[code] = self.summary.by_code.get(code, 0) + 1

        if status == STATUS_OK and not warning_list and not self.include_ok_items:
            return
        if self.meta.items_limit is not None and len(self.items) >= self.meta.items_limit:
            self.meta.items_truncated = True
            return
        self.items.append(
            ReportItem(
                status=status,
                row_ref=row_ref,
                payload=payload,
                diagnostics=[_diagnostic(e) for e in [*error_list, *warning_list]],
            )
        )

    def finish(self, finished_at: str | None = None, duration_ms: int | None = None) -> None:
        self.meta.finished_at = finished_at or getNowIso()
        self.meta.duration_ms = duration_ms

    def status(self) -> str:
        if self.summary.rows_skipped == 0 and self.summary.rows_failed == 0:
            return "SUCCESS"
        if self.summary.rows_processed > 0:
            return "PARTIAL"
        return "FAILED"

    def build(self) -> ReportEnvelope:
        return ReportEnvelope(
            status=self.status(),
            meta=self.meta,
            summary=self.summary,
            items=self.items,
            context=self.context,
        )


def _diagnostic(item: RowValidationError) -> ReportDiagnostic:
    return ReportDiagnostic(severity=item.severity.value, code=item.kind.value, message=item.message)


def asdict_report(envelope: ReportEnvelope) -> dict[str, Any]:
    """
    Назначение:
        Сериализация отчёта в JSON-совместимый dict.
    """
    return {
        "status": envelope.status,
        "meta": asdict(envelope.meta),
        "summary": asdict(envelope.summary),
        "items": [
            {
                "status": item.status,
                "row_ref": asdict(item.row_ref) if item.row_ref else None,
                "payload": dict(item.payload) if item.payload is not None else None,
                "diagnostics": [asdict(diag) for diag in item.diagnostics],
            }
            for item in envelope.items
        ],
        "context": envelope.context,
    }
