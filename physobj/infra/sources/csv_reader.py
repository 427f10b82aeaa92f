from __future__ import annotations

import csv
from typing import Iterator

from physobj.domain.error_codes import ErrorKind
from physobj.domain.exceptions import FileError
from physobj.domain.transform.source_record import SourceRecord
from physobj.infra.sources.csv_utils import CsvFormatError, validate_filename, validate_header

# Заголовок без name и location отклоняется целиком (CsvFormatError),
# а не каждой строкой по отдельности как MISSING_REQUIRED_FIELD.
REQUIRED_ANY_COLUMNS = ("name", "location")


class CsvTabularReader:
    """
    Назначение/ответственность:
        CSV-источник с обязательным заголовком: отдаёт SourceRecord по одной строке.

    Инварианты/гарантии:
        - header равен None до первого чтения.
        - Каждый проход открывает файл заново; проход однократный и ленивый.
        - Файл закрывается при исчерпании, close() и досрочном выходе из цикла.
    """

    def __init__(
        self,
        path: str,
        delimiter: str = ",",
        required_any: tuple[str, ...] = REQUIRED_ANY_COLUMNS,
    ) -> None:
        self.path = validate_filename(path)
        self.delimiter = delimiter
        self.required_any = required_any
        self.header: list[str] | None = None
        self._active: Iterator[SourceRecord] | None = None

    def __enter__(self) -> "CsvTabularReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[SourceRecord]:
        self._active = self._read()
        return self._active

    def close(self) -> None:
        if self._active is not None:
            self._active.close()
            self._active = None

    def count_rows(self) -> int:
        """
        Назначение:
            Количество строк данных (отдельный проход по файлу, пустые строки не считаются).
        """
        total = 0
        try:
            with open(self.path, "r", encoding="utf-8-sig", newline="") as f:
                reader = csv.reader(f, delimiter=self.delimiter, skipinitialspace=True)
                if next(reader, None) is None:
                    return 0
                for row in reader:
                    if _is_blank(row):
                        continue
                    total += 1
        except UnicodeDecodeError as exc:
            raise _decode_error(self.path, exc) from exc
        return total

    def _read(self) -> Iterator[SourceRecord]:
        try:
            yield from self._read_rows()
        except UnicodeDecodeError as exc:
            raise _decode_error(self.path, exc) from exc

    def _read_rows(self) -> Iterator[SourceRecord]:
        with open(self.path, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.reader(f, delimiter=self.delimiter, skipinitialspace=True)
            header = validate_header(next(reader, None), self.required_any)
            self.header = header
            width = len(header)

            row_index = 0
            start_line = reader.line_num + 1
            for row in reader:
                line_no = start_line
                start_line = reader.line_num + 1
                if _is_blank(row):
                    continue
                if len(row) > width:
                    raise CsvFormatError(
                        f"Invalid column count at line {line_no}: expected {width}, got {len(row)}"
                    )
                row_index += 1
                padded = row + [""] * (width - len(row))
                yield SourceRecord(
                    row_index=row_index,
                    line_no=line_no,
                    values=dict(zip(header, padded)),
                )


def _decode_error(path: str, exc: UnicodeDecodeError) -> FileError:
    return FileError(
        f"Can not read {path}: not valid UTF-8 (byte offset {exc.start})",
        path=path,
        code=ErrorKind.FILE_NOT_READABLE,
    )


def _is_blank(row: list[str]) -> bool:
    return len(row) == 0 or (len(row) == 1 and row[0].strip() == "")


def open_csv(path: str, delimiter: str = ",") -> CsvTabularReader:
    """
    Назначение:
        Открывает CSV для импорта. FileError, если файла нет или он не читается.
    """
    return CsvTabularReader(path, delimiter=delimiter)
