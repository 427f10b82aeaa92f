import logging
from pathlib import Path

import pytest

from physobj.domain.pipeline import RowImportPipeline
from physobj.domain.reporting.collector import ReportCollector
from physobj.domain.transform.type_lookup import TypeLookupTable
from physobj.infra.sources.csv_reader import open_csv
from physobj.infra.sources.csv_utils import CsvFormatError
from physobj.infra.store.physical_object_sink import NullSink
from physobj.usecases.import_usecase import ImportUseCase

TYPE_TABLE = {"en": {"folder": 2}, "fr": {"chemise": 2, "boîte hollinger": 1}}


class _RejectingSink:
    def __init__(self, reject_names: set[str]):
        self.reject_names = reject_names
        self.written = []

    def write(self, record) -> bool:
        if record.name in self.reject_names:
            return False
        self.written.append(record)
        return True


class _Resolver:
    def resolve(self, slug):
        return {"fonds-a": 10}.get(slug)


def make_usecase(sink=None) -> ImportUseCase:
    pipeline = RowImportPipeline(
        TypeLookupTable(TYPE_TABLE),
        description_resolver=_Resolver(),
        default_culture="en",
    )
    return ImportUseCase(pipeline, sink or NullSink())


def write_csv(tmp_path: Path, text: str) -> str:
    path = tmp_path / "objects.csv"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_three_rows_with_empty_second_row(tmp_path, caplog):
    path = write_csv(
        tmp_path,
        "name,type,location,culture\n"
        '" DJ001", "Folder", "Aisle 25, Shelf D", "en"\n'
        '"", "Chemise", "", "fr"\n'
        '"DJ002", "Boîte Hollinger", "Voûte, étagère 0074", "fr"\n',
    )
    sink = NullSink()
    logger = logging.getLogger("test.import")

    with caplog.at_level(logging.INFO, logger="test.import"):
        summary = make_usecase(sink).run(open_csv(path), logger, "run-1")

    assert summary.rows_total == 3
    assert summary.rows_processed == 2
    assert summary.rows_skipped == 1
    assert summary.skipped_rows == [2]
    assert [r.name for r in sink.records] == ["DJ001", "DJ002"]
    assert "Skipping row [2/3]: No name or location defined" in caplog.text
    assert 'Imported row [3/3]: name "DJ002"' in caplog.text


def test_warning_rows_are_still_saved(tmp_path, caplog):
    path = write_csv(tmp_path, "name,descriptionSlugs\nDJ001,fonds-a|missing\nDJ002,\n")
    sink = NullSink()
    report = ReportCollector(run_id="run-2", command="import")
    logger = logging.getLogger("test.import.warn")

    with caplog.at_level(logging.WARNING, logger="test.import.warn"):
        summary = make_usecase(sink).run(open_csv(path), logger, "run-2", report)

    assert summary.rows_processed == 2
    assert summary.rows_with_warnings == 1
    assert sink.records[0].information_object_ids == (10,)
    assert 'Warning on row [1/2]: Couldn\'t find a description with slug "missing".' in caplog.text
    assert report.summary.rows_with_warnings == 1
    assert report.summary.by_code == {"UNKNOWN_DESCRIPTION": 1}
    assert len(report.items) == 1
    assert report.items[0].diagnostics[0].severity == "warning"
    assert report.meta.csv_header == ["name", "descriptionSlugs"]


def test_sink_rejection_counts_as_failed(tmp_path):
    path = write_csv(tmp_path, "name\nA\nB\n")
    sink = _RejectingSink({"A"})
    report = ReportCollector(run_id="run-3", command="import")

    summary = make_usecase(sink).run(open_csv(path), logging.getLogger("test.import.sink"), "run-3", report)

    assert summary.rows_failed == 1
    assert summary.rows_processed == 1
    assert [r.name for r in sink.written] == ["B"]
    assert report.summary.by_code == {"SINK_ERROR": 1}
    assert report.build().status == "PARTIAL"


def test_format_error_aborts_run(tmp_path):
    path = write_csv(tmp_path, "name,location\nA,1\nB,2,3\n")

    with pytest.raises(CsvFormatError):
        make_usecase().run(open_csv(path), logging.getLogger("test.import.fmt"), "run-4")
