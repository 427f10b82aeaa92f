from __future__ import annotations

from typing import Any, Iterable, Mapping

from physobj.domain.error_codes import ErrorKind
from physobj.domain.exceptions import ConfigurationError, RowValidationError
from physobj.domain.models import Term


class TypeLookupTable:
    """
    Назначение/ответственность:
        Отображение (culture, lower(name)) -> id термина типа физического объекта.

    Инварианты:
        - Строится один раз на запуск, дальше только чтение.
        - Каждой паре (culture, name) соответствует не более одного id.
        - Промах при поиске: ошибка валидации строки, импорт продолжается.
    """

    def __init__(self, table: Mapping[str, Mapping[str, int]]) -> None:
        self._table: dict[str, dict[str, int]] = {
            culture.strip().lower(): {name.strip().lower(): int(term_id) for name, term_id in names.items()}
            for culture, names in table.items()
        }

    def __contains__(self, culture: object) -> bool:
        return isinstance(culture, str) and culture.strip().lower() in self._table

    def __len__(self) -> int:
        return sum(len(names) for names in self._table.values())

    def cultures(self) -> list[str]:
        return sorted(self._table)

    def get(self, culture: str, name: str) -> int | None:
        names = self._table.get(culture.strip().lower())
        if names is None:
            return None
        return names.get(name.strip().lower())

    def lookup(self, culture: str, name: str | None) -> int | None:
        """
        Назначение:
            Ищет id типа по имени в заданной культуре.

        Контракт:
            - Пустое имя -> None ("тип не задан" допустим).
            - Неизвестное имя -> RowValidationError(UNKNOWN_TYPE).
        """
        if name is None or name.strip() == "":
            return None
        type_id = self.get(culture, name)
        if type_id is None:
            normalized_name = name.strip().lower()
            normalized_culture = culture.strip().lower()
            raise RowValidationError(
                kind=ErrorKind.UNKNOWN_TYPE,
                message=f'Couldn\'t find physical object type "{normalized_name}" for culture "{normalized_culture}"',
            )
        return type_id

    def as_dict(self) -> dict[str, dict[str, int]]:
        return {culture: dict(names) for culture, names in self._table.items()}


def _term_field(term: Term | Mapping[str, Any], name: str) -> Any:
    if isinstance(term, Mapping):
        return term.get(name)
    return getattr(term, name, None)


def build_type_lookup_table(terms: Iterable[Term | Mapping[str, Any]] | None) -> TypeLookupTable:
    """
    Назначение:
        Строит TypeLookupTable из списка терминов {id, culture, name}.

    Контракт:
        - None или пустой список -> ConfigurationError (импорт невозможен).
        - Одна пара (culture, name) с разными id -> ConfigurationError.
        - Термины без имени или культуры пропускаются.
    """
    if terms is None:
        raise ConfigurationError("Couldn't load physical object type terms")

    table: dict[str, dict[str, int]] = {}
    seen = 0
    for term in terms:
        seen += 1
        culture = _term_field(term, "culture")
        name = _term_field(term, "name")
        raw_id = _term_field(term, "id")
        if not culture or not name or raw_id is None:
            continue
        culture_key = str(culture).strip().lower()
        name_key = str(name).strip().lower()
        try:
            term_id = int(raw_id)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"Invalid term id {raw_id!r} for type \"{name_key}\"",
                details={"culture": culture_key, "name": name_key},
            ) from exc

        names = table.setdefault(culture_key, {})
        existing = names.get(name_key)
        if existing is not None and existing != term_id:
            raise ConfigurationError(
                f'Physical object type "{name_key}" maps to several ids in culture "{culture_key}"',
                code=ErrorKind.VOCABULARY_CONFLICT,
                details={"culture": culture_key, "name": name_key, "ids": [existing, term_id]},
            )
        names[name_key] = term_id

    if seen == 0 or not table:
        raise ConfigurationError("Couldn't load physical object type terms: vocabulary is empty")

    return TypeLookupTable(table)
