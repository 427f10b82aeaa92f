from __future__ import annotations

import logging
import sqlite3
import sys
import time
from dataclasses import replace
from pathlib import Path

import typer

from physobj.common.run_id import generate_run_id
from physobj.common.sanitize import maskSecret
from physobj.common.time import getDurationMs
from physobj.config import Settings, load_settings
from physobj.domain.exceptions import ConfigurationError, FileError
from physobj.domain.models import ImportSummary
from physobj.domain.pipeline import RowImportPipeline
from physobj.domain.ports.lookups import DescriptionResolverProtocol, TermSourceProtocol
from physobj.domain.transform.type_lookup import build_type_lookup_table
from physobj.infra.artifacts.report_writer import createEmptyReport, finalizeReport, writeReportJson
from physobj.infra.http.atom_client import ApiDescriptionResolver, ApiError, AtomApiClient
from physobj.infra.logging.setup import (
    StdStreamToLogger,
    TeeStream,
    closeCommandLogger,
    createCommandLogger,
    logEvent,
)
from physobj.infra.sources.csv_reader import open_csv
from physobj.infra.sources.csv_utils import CsvFormatError
from physobj.infra.sources.yaml_terms import YamlTermSource
from physobj.infra.store.db import ensureSchema, openDb
from physobj.infra.store.description_resolver import SqliteDescriptionResolver
from physobj.infra.store.physical_object_sink import NullSink, SqlitePhysicalObjectSink
from physobj.infra.store.term_source import SqliteTermSource
from physobj.usecases.import_usecase import ImportUseCase

app = typer.Typer(no_args_is_help=True, add_completion=False)
termsApp = typer.Typer(no_args_is_help=True)

RESOLVERS = ("db", "api")


def ensureDir(path: str) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)


def printRunHeader(runId: str, command: str, settings: Settings, sources: list[str]) -> None:
    """
    Назначение:
        Печатает безопасную сводку параметров запуска (без секретов).
    """
    typer.echo(
        f"run_id={runId} command={command} "
        f"default_culture={settings.default_culture} site_default_culture={settings.site_default_culture} "
        f"multi_value_delimiter={settings.multi_value_delimiter} index_on_load={settings.index_on_load} "
        f"api_base_url={settings.api_base_url} api_key={maskSecret(settings.api_key)} sources={sources}"
    )


def printSummary(summary: ImportSummary) -> None:
    typer.echo(
        f"rows_total={summary.rows_total} processed={summary.rows_processed} "
        f"skipped={summary.rows_skipped} failed={summary.rows_failed} "
        f"warnings={summary.rows_with_warnings}"
    )


def runWithReport(ctx: typer.Context, commandName: str, runner) -> None:
    """
    Назначение:
        Унифицированная обвязка выполнения команд:
        - создаёт логгер + файл лога
        - создаёт report.json skeleton
        - перенаправляет stdout/stderr в лог (tee)
        - гарантирует запись отчёта в finally
    """
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]
    sources = ctx.obj["sources"]

    startMonotonic = time.monotonic()

    logger, logFilePath = createCommandLogger(
        commandName=commandName,
        logDir=settings.log_dir,
        runId=runId,
        logLevel=settings.log_level,
    )

    report = createEmptyReport(runId=runId, command=commandName, configSources=sources)
    report.meta.items_limit = settings.report_items_limit
    report.include_ok_items = settings.report_include_ok_items
    report.meta.index_on_load = settings.index_on_load

    originalStdout = sys.stdout
    originalStderr = sys.stderr
    sys.stdout = TeeStream(originalStdout, StdStreamToLogger(logger, logging.INFO, runId, "stdout"))
    sys.stderr = TeeStream(originalStderr, StdStreamToLogger(logger, logging.ERROR, runId, "stderr"))

    exitCode: int | None = None
    try:
        logEvent(logger, logging.INFO, runId, "core", "Command started")
        printRunHeader(runId, commandName, settings, sources)
        exitCode = runner(logger, report)
    finally:
        durationMs = getDurationMs(startMonotonic, time.monotonic())
        finalizeReport(report=report, durationMs=durationMs, logFile=logFilePath, reportDir=settings.report_dir)
        reportPath = writeReportJson(report, settings.report_dir, f"report_{commandName}_{runId}")
        logEvent(logger, logging.INFO, runId, "report", f"Report written: {reportPath}")

        sys.stdout.flush()
        sys.stderr.flush()
        sys.stdout = originalStdout
        sys.stderr = originalStderr
        closeCommandLogger(logger)

    if exitCode:
        raise typer.Exit(code=exitCode)


def buildTermSource(settings: Settings, conn: sqlite3.Connection) -> TermSourceProtocol:
    if settings.terms_file:
        return YamlTermSource(settings.terms_file)
    return SqliteTermSource(conn)


def buildResolver(settings: Settings, conn: sqlite3.Connection, resolver: str) -> DescriptionResolverProtocol:
    if resolver == "api":
        if not settings.api_base_url:
            raise ConfigurationError("api_base_url is required for --resolver api")
        client = AtomApiClient(
            baseUrl=settings.api_base_url,
            apiKey=settings.api_key,
            timeoutSeconds=settings.timeout_seconds,
            retries=settings.retries,
            retryBackoffSeconds=settings.retry_backoff_seconds,
        )
        return ApiDescriptionResolver(client)
    return SqliteDescriptionResolver(conn)


def runImportCommand(ctx: typer.Context, commandName: str, filename: str, resolver: str, dryRun: bool) -> None:
    settings: Settings = ctx.obj["settings"]
    runId = ctx.obj["runId"]

    def execute(logger, report) -> int:
        report.meta.dry_run = dryRun
        report.meta.csv_path = filename

        if resolver not in RESOLVERS:
            typer.echo(f"ERROR: unknown resolver: {resolver} (expected one of {', '.join(RESOLVERS)})", err=True)
            return 2

        try:
            reader = open_csv(filename, delimiter=settings.csv_delimiter)
        except FileError as exc:
            logEvent(logger, logging.ERROR, runId, "csv", str(exc))
            typer.echo(f"ERROR: {exc}", err=True)
            return 2

        try:
            conn = openDb(settings.db_path)
            ensureSchema(conn)
        except sqlite3.Error as exc:
            logEvent(logger, logging.ERROR, runId, "db", f"Failed to open database: {exc}")
            typer.echo("ERROR: failed to open database (see logs/report)", err=True)
            return 2

        descriptionResolver = None
        try:
            descriptionResolver = buildResolver(settings, conn, resolver)
            pipeline = RowImportPipeline.from_term_source(
                buildTermSource(settings, conn),
                description_resolver=descriptionResolver,
                default_culture=settings.default_culture,
                process_default_culture=settings.site_default_culture,
                multi_value_delimiter=settings.multi_value_delimiter,
            )
            sink = NullSink() if dryRun else SqlitePhysicalObjectSink(conn, logger)
            summary = ImportUseCase(pipeline, sink).run(reader, logger, runId, report)
        except ConfigurationError as exc:
            logEvent(logger, logging.ERROR, runId, "config", str(exc))
            typer.echo(f"ERROR: {exc}", err=True)
            return 2
        except FileError as exc:
            logEvent(logger, logging.ERROR, runId, "csv", str(exc))
            typer.echo(f"ERROR: {exc}", err=True)
            return 2
        except CsvFormatError as exc:
            logEvent(logger, logging.ERROR, runId, "csv", f"CSV format error: {exc}")
            typer.echo(f"ERROR: CSV format error: {exc}", err=True)
            return 2
        except ApiError as exc:
            logEvent(logger, logging.ERROR, runId, "api", f"Description lookup failed: {exc}")
            typer.echo("ERROR: description lookup failed (see logs/report)", err=True)
            return 2
        finally:
            if isinstance(descriptionResolver, ApiDescriptionResolver):
                descriptionResolver.client.close()
            conn.close()

        printSummary(summary)
        return 1 if (summary.rows_skipped or summary.rows_failed) else 0

    runWithReport(ctx=ctx, commandName=commandName, runner=execute)


def runTermsLoadCommand(ctx: typer.Context, termsFile: str) -> None:
    settings: Settings = ctx.obj["settings"]
    runId = ctx.obj["runId"]

    def execute(logger, report) -> int:
        try:
            terms = [
                term
                for term in YamlTermSource(termsFile).list_terms()
                if term.get("id") is not None and term.get("culture") and term.get("name")
            ]
            # проверка согласованности до записи в БД
            build_type_lookup_table(terms)
        except ConfigurationError as exc:
            logEvent(logger, logging.ERROR, runId, "terms", str(exc))
            typer.echo(f"ERROR: {exc}", err=True)
            return 2

        try:
            conn = openDb(settings.db_path)
        except sqlite3.Error as exc:
            logEvent(logger, logging.ERROR, runId, "db", f"Failed to open database: {exc}")
            typer.echo("ERROR: failed to open database (see logs/report)", err=True)
            return 2
        try:
            ensureSchema(conn)
            source = SqliteTermSource(conn)
            with conn:
                for term in terms:
                    source.add_term(int(term["id"]), str(term["culture"]).strip().lower(), str(term["name"]).strip())
        finally:
            conn.close()

        logEvent(logger, logging.INFO, runId, "terms", f"Loaded {len(terms)} terms from {termsFile}")
        typer.echo(f"terms_loaded={len(terms)}")
        return 0

    runWithReport(ctx=ctx, commandName="terms-load", runner=execute)


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", help="Path to config.yml"),
    runId: str | None = typer.Option(None, "--run-id", help="Run identifier. If omitted, generated."),
    logLevel: str | None = typer.Option(None, "--log-level", help="Log level: ERROR|WARN|INFO|DEBUG"),
    logDir: str | None = typer.Option(None, "--log-dir", help="Directory for logs."),
    reportDir: str | None = typer.Option(None, "--report-dir", help="Directory for reports."),
    dbPath: str | None = typer.Option(None, "--db-path", help="SQLite database file."),
    termsFile: str | None = typer.Option(None, "--terms-file", help="YAML file with physical object types."),
    defaultCulture: str | None = typer.Option(None, "--default-culture", help="Culture for rows without one."),
    multiValueDelimiter: str | None = typer.Option(
        None, "--multi-value-delimiter", help="Delimiter for multi-value columns (one character)."
    ),
    apiBaseUrl: str | None = typer.Option(None, "--api-base-url", help="REST API base URL for slug lookups."),
    apiKey: str | None = typer.Option(None, "--api-key", help="REST API key (avoid; use env)."),
):
    """
    Назначение:
        Глобальная инициализация CLI:
        - генерирует/принимает run_id
        - загружает настройки (CLI > ENV > config > defaults)
        - создаёт каталоги log/report
        - сохраняет всё в ctx.obj для подкоманд
    """
    cliOverrides = {
        "log_level": logLevel,
        "log_dir": logDir,
        "report_dir": reportDir,
        "db_path": dbPath,
        "terms_file": termsFile,
        "default_culture": defaultCulture,
        "multi_value_delimiter": multiValueDelimiter,
        "api_base_url": apiBaseUrl,
        "api_key": apiKey,
    }
    try:
        loaded = load_settings(config_path=config, cli_overrides=cliOverrides)
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=2)

    ensureDir(loaded.settings.log_dir)
    ensureDir(loaded.settings.report_dir)

    ctx.obj = {
        "runId": runId or generate_run_id(),
        "settings": loaded.settings,
        "sources": loaded.sources_used,
        "configPath": config,
    }


@app.command("import")
def importCommand(
    ctx: typer.Context,
    filename: str = typer.Argument(..., help="The input file name (csv format)."),
    index: bool | None = typer.Option(None, "--index/--no-index", help="Index for search during import."),
    resolver: str = typer.Option("db", "--resolver", help="Description slug lookup: db|api"),
):
    """Import physical object CSV data."""
    if index is not None:
        settings: Settings = ctx.obj["settings"]
        ctx.obj["settings"] = replace(settings, index_on_load=index)
    runImportCommand(ctx, "import", filename, resolver.lower(), dryRun=False)


@app.command("validate")
def validateCommand(
    ctx: typer.Context,
    filename: str = typer.Argument(..., help="The input file name (csv format)."),
    resolver: str = typer.Option("db", "--resolver", help="Description slug lookup: db|api"),
):
    """Check physical object CSV data without saving anything."""
    runImportCommand(ctx, "validate", filename, resolver.lower(), dryRun=True)


@termsApp.command("load")
def termsLoad(
    ctx: typer.Context,
    termsFile: str = typer.Argument(..., help="YAML file with physical object type terms."),
):
    """Load physical object type terms into the database."""
    runTermsLoadCommand(ctx, termsFile)


app.add_typer(termsApp, name="terms")


if __name__ == "__main__":
    app()
