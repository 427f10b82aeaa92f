from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Iterator, Mapping

from physobj.domain.error_codes import ErrorKind, Severity
from physobj.domain.exceptions import RowValidationError
from physobj.domain.models import PhysicalObjectRecord, RowOutcome, RowRef
from physobj.domain.ports.lookups import DescriptionResolverProtocol, TermSourceProtocol
from physobj.domain.transform.culture import resolve_culture
from physobj.domain.transform.multi_value import (
    DEFAULT_MULTI_VALUE_DELIMITER,
    split_multi_value,
    validate_delimiter,
)
from physobj.domain.transform.source_record import SourceRecord
from physobj.domain.transform.type_lookup import TypeLookupTable, build_type_lookup_table

NAME_COLUMN = "name"
LOCATION_COLUMN = "location"
TYPE_COLUMN = "type"
CULTURE_COLUMN = "culture"
DESCRIPTION_SLUGS_COLUMN = "descriptionSlugs"


class RowImportPipeline:
    """
    Назначение/ответственность:
        Валидирует и нормализует строки CSV физических объектов.

    Взаимодействия:
        - TypeLookupTable строится заранее и только читается.
        - DescriptionResolver разрешает slug'и описаний из мультиколонки.
        - Сохранение записей не выполняет: результат отдаётся вызывающему.

    Порядок правил (определяет приоритет ошибок):
        1. trim всех значений
        2. пустые name и location -> MISSING_REQUIRED_FIELD
        3. culture -> UNDETERMINED_CULTURE
        4. type -> UNKNOWN_TYPE
        5. descriptionSlugs -> UNKNOWN_DESCRIPTION (предупреждение)
    """

    def __init__(
        self,
        type_lookup: TypeLookupTable,
        description_resolver: DescriptionResolverProtocol | None = None,
        default_culture: str | None = None,
        process_default_culture: str | None = None,
        multi_value_delimiter: str = DEFAULT_MULTI_VALUE_DELIMITER,
    ) -> None:
        self.type_lookup = type_lookup
        self.description_resolver = description_resolver
        self.default_culture = default_culture
        self.process_default_culture = process_default_culture
        self.multi_value_delimiter = validate_delimiter(multi_value_delimiter)

    @classmethod
    def from_term_source(
        cls,
        term_source: TermSourceProtocol,
        description_resolver: DescriptionResolverProtocol | None = None,
        default_culture: str | None = None,
        process_default_culture: str | None = None,
        multi_value_delimiter: str = DEFAULT_MULTI_VALUE_DELIMITER,
    ) -> "RowImportPipeline":
        """
        Назначение:
            Собирает пайплайн, заранее построив TypeLookupTable из источника терминов.
            Ошибки словаря (ConfigurationError) выбрасываются до чтения строк.
        """
        table = build_type_lookup_table(term_source.list_terms())
        return cls(
            type_lookup=table,
            description_resolver=description_resolver,
            default_culture=default_culture,
            process_default_culture=process_default_culture,
            multi_value_delimiter=multi_value_delimiter,
        )

    def process_row(self, values: Mapping[str, str | None]) -> PhysicalObjectRecord:
        """
        Назначение:
            Преобразует сырую строку в PhysicalObjectRecord.

        Контракт:
            - Фатальные ошибки выбрасываются как RowValidationError.
            - Предупреждения прикрепляются к записи (record.warnings).
            - Побочных эффектов нет, кроме чтения справочников.
        """
        row = {key: (value or "").strip() for key, value in values.items() if key is not None}

        name = row.get(NAME_COLUMN, "")
        location = row.get(LOCATION_COLUMN, "")
        if name == "" and location == "":
            raise RowValidationError(
                kind=ErrorKind.MISSING_REQUIRED_FIELD,
                message="No name or location defined",
            )

        culture = resolve_culture(
            row.get(CULTURE_COLUMN),
            self.default_culture,
            self.process_default_culture,
        )
        type_id = self.type_lookup.lookup(culture, row.get(TYPE_COLUMN))

        warnings: list[RowValidationError] = []
        information_object_ids = self._resolve_description_slugs(row.get(DESCRIPTION_SLUGS_COLUMN), warnings)

        return PhysicalObjectRecord(
            name=name,
            location=location or None,
            culture=culture,
            type_id=type_id,
            information_object_ids=tuple(information_object_ids),
            warnings=tuple(warnings),
        )

    def import_rows(self, source: Iterable[SourceRecord]) -> Iterator[RowOutcome]:
        """
        Назначение:
            Ленивая обработка источника: один RowOutcome на строку данных, в порядке файла.

        Контракт:
            - Ошибки строк не прерывают итерацию.
            - Исчерпание или досрочное закрытие генератора закрывает источник,
              если у него есть close().
        """
        try:
            for record in source:
                row_ref = RowRef(row_index=record.row_index, line_no=record.line_no, row_id=record.record_id)
                try:
                    processed = self.process_row(record.values)
                except RowValidationError as exc:
                    yield RowOutcome(row_ref=row_ref, values=record.values, error=exc.at_row(record.row_index))
                    continue
                if processed.warnings:
                    processed = replace(
                        processed,
                        warnings=tuple(w.at_row(record.row_index) for w in processed.warnings),
                    )
                yield RowOutcome(row_ref=row_ref, values=record.values, record=processed)
        finally:
            close = getattr(source, "close", None)
            if close is not None:
                close()

    def _resolve_description_slugs(self, raw: str | None, warnings: list[RowValidationError]) -> list[int]:
        ids: list[int] = []
        for slug in split_multi_value(raw, self.multi_value_delimiter):
            resolved = self.description_resolver.resolve(slug) if self.description_resolver else None
            if resolved is None:
                warnings.append(
                    RowValidationError(
                        kind=ErrorKind.UNKNOWN_DESCRIPTION,
                        message=f'Couldn\'t find a description with slug "{slug}".',
                        severity=Severity.WARNING,
                    )
                )
                continue
            ids.append(resolved)
        return ids
