from __future__ import annotations

import logging

from physobj.domain.error_codes import ErrorKind
from physobj.domain.exceptions import RowValidationError
from physobj.domain.models import ImportRun, ImportSummary, RowOutcome
from physobj.domain.pipeline import RowImportPipeline
from physobj.domain.ports.sinks import RecordSinkProtocol
from physobj.domain.reporting.collector import STATUS_FAILED, STATUS_OK, STATUS_SKIPPED, ReportCollector
from physobj.infra.logging.setup import logEvent
from physobj.infra.sources.csv_reader import CsvTabularReader


class ImportUseCase:
    """
    Назначение/ответственность:
        Use-case импорта: читает CSV, прогоняет строки через пайплайн,
        передаёт записи в приёмник, логирует и считает результат.

    Поведение:
        - FATAL-ошибка строки: строка пропускается, импорт продолжается.
        - WARNING: запись сохраняется, предупреждение логируется.
        - Отказ приёмника: строка считается неуспешной, импорт продолжается.
        - Ошибки формата CSV прерывают импорт (пробрасываются вызывающему).
    """

    def __init__(self, pipeline: RowImportPipeline, sink: RecordSinkProtocol) -> None:
        self.pipeline = pipeline
        self.sink = sink

    def run(
        self,
        reader: CsvTabularReader,
        logger: logging.Logger,
        run_id: str,
        report: ReportCollector | None = None,
    ) -> ImportSummary:
        run = ImportRun(run_id=run_id, source_path=reader.path, rows_expected=reader.count_rows())
        logEvent(logger, logging.INFO, run_id, "import", f"Importing physical object data from {reader.path}...")

        with reader:
            for outcome in self.pipeline.import_rows(reader):
                if run.header is None:
                    run.header = reader.header
                self._handle(outcome, run, logger, report)

        if report is not None:
            report.meta.csv_path = reader.path
            report.meta.csv_header = run.header

        summary = run.summary
        logEvent(
            logger,
            logging.INFO,
            run_id,
            "import",
            "Import complete! "
            f"rows_total={summary.rows_total} processed={summary.rows_processed} "
            f"skipped={summary.rows_skipped} failed={summary.rows_failed} "
            f"warnings={summary.rows_with_warnings}",
        )
        return summary

    def _handle(
        self,
        outcome: RowOutcome,
        run: ImportRun,
        logger: logging.Logger,
        report: ReportCollector | None,
    ) -> None:
        summary = run.summary
        summary.rows_total += 1
        progress = f"[{outcome.row_index}/{run.rows_expected}]"

        if outcome.error is not None:
            summary.rows_skipped += 1
            summary.skipped_rows.append(outcome.row_index)
            logEvent(logger, logging.ERROR, run.run_id, "import", f"Skipping row {progress}: {outcome.error.message}")
            if report is not None:
                report.add_item(
                    status=STATUS_SKIPPED,
                    row_ref=outcome.row_ref,
                    payload=dict(outcome.values),
                    errors=[outcome.error],
                )
            return

        record = outcome.record
        for warning in outcome.warnings:
            logEvent(logger, logging.WARNING, run.run_id, "import", f"Warning on row {progress}: {warning.message}")

        if not self.sink.write(record):
            summary.rows_failed += 1
            logEvent(logger, logging.ERROR, run.run_id, "import", f"Failed to save row {progress}: name \"{record.name}\"")
            if report is not None:
                report.add_item(
                    status=STATUS_FAILED,
                    row_ref=outcome.row_ref,
                    payload=record.to_dict(),
                    errors=[
                        RowValidationError(
                            kind=ErrorKind.SINK_ERROR,
                            message=f"Failed to save physical object \"{record.name}\"",
                            row_index=outcome.row_index,
                        )
                    ],
                    warnings=outcome.warnings,
                )
            return

        summary.rows_processed += 1
        if outcome.warnings:
            summary.rows_with_warnings += 1
        logEvent(logger, logging.INFO, run.run_id, "import", f"Imported row {progress}: name \"{record.name}\"")
        if report is not None:
            report.add_item(
                status=STATUS_OK,
                row_ref=outcome.row_ref,
                payload=record.to_dict(),
                warnings=outcome.warnings,
            )
