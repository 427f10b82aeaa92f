from pathlib import Path

import pytest

from physobj.domain.exceptions import FileError
from physobj.domain.pipeline import RowImportPipeline
from physobj.domain.transform.type_lookup import TypeLookupTable
from physobj.infra.sources.csv_reader import open_csv
from physobj.infra.sources.csv_utils import CsvFormatError

HEADER = "name,type,location,culture"
ROWS = [
    '" DJ001", "Folder", "Aisle 25, Shelf D", "en"',
    '"", "Chemise", "", "fr"',
    '"DJ002", "Boîte Hollinger", "Voûte, étagère 0074", "fr"',
]


def write(path: Path, text: str) -> Path:
    path.write_bytes(text.encode("utf-8"))
    return path


def test_open_missing_file_raises_file_error(tmp_path: Path):
    with pytest.raises(FileError) as exc:
        open_csv(str(tmp_path / "bad_name.csv"))

    assert exc.value.code == "FILE_NOT_FOUND"


def test_open_directory_raises_file_error(tmp_path: Path):
    with pytest.raises(FileError):
        open_csv(str(tmp_path))


@pytest.mark.parametrize("newline", ["\n", "\r\n"])
def test_reads_rows_with_header(tmp_path: Path, newline: str):
    path = write(tmp_path / "rows.csv", HEADER + newline + newline.join(ROWS) + newline)
    reader = open_csv(str(path))

    assert reader.header is None
    records = list(reader)

    assert reader.header == ["name", "type", "location", "culture"]
    assert [r.row_index for r in records] == [1, 2, 3]
    assert [r.line_no for r in records] == [2, 3, 4]
    assert records[0].values == {"name": " DJ001", "type": "Folder", "location": "Aisle 25, Shelf D", "culture": "en"}
    assert records[2].values["location"] == "Voûte, étagère 0074"


def test_quoted_newline_inside_value(tmp_path: Path):
    path = write(tmp_path / "multiline.csv", 'name,location\n"Box 1","Shelf A\nBay 2"\n"Box 2",Shelf B\n')

    records = list(open_csv(str(path)))

    assert records[0].values["location"] == "Shelf A\nBay 2"
    assert records[1].line_no == 4


def test_blank_lines_are_skipped(tmp_path: Path):
    path = write(tmp_path / "blank.csv", "name,location\nA,1\n\nB,2\n")
    reader = open_csv(str(path))

    assert [r.values["name"] for r in reader] == ["A", "B"]
    assert reader.count_rows() == 2


def test_short_rows_are_padded(tmp_path: Path):
    path = write(tmp_path / "short.csv", "name,type,location\nA\n")

    (record,) = list(open_csv(str(path)))

    assert record.values == {"name": "A", "type": "", "location": ""}


def test_long_row_is_format_error(tmp_path: Path):
    path = write(tmp_path / "long.csv", "name,location\nA,1,extra\n")

    with pytest.raises(CsvFormatError) as exc:
        list(open_csv(str(path)))

    assert "line 2" in str(exc.value)


def test_empty_file_is_format_error(tmp_path: Path):
    path = write(tmp_path / "empty.csv", "")

    with pytest.raises(CsvFormatError):
        list(open_csv(str(path)))


def test_header_without_name_or_location_is_format_error(tmp_path: Path):
    path = write(tmp_path / "invalid.csv", "containerName,\n" + "\n".join(ROWS))

    with pytest.raises(CsvFormatError):
        list(open_csv(str(path)))


def test_duplicate_header_is_format_error(tmp_path: Path):
    path = write(tmp_path / "dup.csv", "name,name\nA,B\n")

    with pytest.raises(CsvFormatError):
        list(open_csv(str(path)))


def test_bom_is_stripped(tmp_path: Path):
    path = tmp_path / "bom.csv"
    path.write_bytes("\ufeffname,location\nA,1\n".encode("utf-8"))

    reader = open_csv(str(path))
    list(reader)

    assert reader.header == ["name", "location"]


def test_custom_delimiter(tmp_path: Path):
    path = write(tmp_path / "semi.csv", "name;location\nA;Shelf, 1\n")

    (record,) = list(open_csv(str(path), delimiter=";"))

    assert record.values["location"] == "Shelf, 1"


def test_early_termination_releases_file(tmp_path: Path):
    path = write(tmp_path / "rows.csv", HEADER + "\n" + "\n".join(ROWS))
    reader = open_csv(str(path))

    with reader:
        iterator = iter(reader)
        first = next(iterator)

    assert first.row_index == 1
    assert reader._active is None
    with pytest.raises(StopIteration):
        next(iterator)


def test_each_pass_reopens_file(tmp_path: Path):
    path = write(tmp_path / "rows.csv", HEADER + "\n" + "\n".join(ROWS))
    reader = open_csv(str(path))

    assert len(list(reader)) == 3
    assert len(list(reader)) == 3


def test_abandoned_import_rows_releases_file(tmp_path: Path):
    path = write(tmp_path / "rows.csv", HEADER + "\n" + "\n".join(ROWS))
    reader = open_csv(str(path))
    pipeline = RowImportPipeline(TypeLookupTable({"en": {"folder": 2}}), default_culture="en")

    outcomes = pipeline.import_rows(reader)
    first = next(outcomes)
    inner = reader._active
    outcomes.close()

    assert first.ok
    assert reader._active is None
    assert inner.gi_frame is None


def test_exhausted_import_rows_releases_file(tmp_path: Path):
    path = write(tmp_path / "rows.csv", HEADER + "\n" + "\n".join(ROWS))
    reader = open_csv(str(path))
    pipeline = RowImportPipeline(
        TypeLookupTable({"en": {"folder": 2}, "fr": {"chemise": 2, "boîte hollinger": 1}}),
        default_culture="en",
    )

    outcomes = list(pipeline.import_rows(reader))

    assert [o.ok for o in outcomes] == [True, False, True]
    assert reader._active is None
    assert reader.header == ["name", "type", "location", "culture"]


def test_invalid_utf8_is_file_error(tmp_path: Path):
    path = tmp_path / "bad.csv"
    path.write_bytes(b"name,location\n\xff\xfe bad,Shelf\n")
    reader = open_csv(str(path))

    with pytest.raises(FileError) as exc:
        list(reader)
    assert exc.value.code == "FILE_NOT_READABLE"

    with pytest.raises(FileError) as exc:
        reader.count_rows()
    assert exc.value.code == "FILE_NOT_READABLE"
