from __future__ import annotations

from typing import Any, Iterable, Mapping, Protocol, runtime_checkable

from physobj.domain.models import Term


@runtime_checkable
class TermSourceProtocol(Protocol):
    """
    Назначение:
        Источник терминов контролируемого словаря типов физических объектов.

    Контракт:
        - list_terms() -> итерируемое {id, culture, name} или Term.
        - None означает, что словарь недоступен.
    """

    def list_terms(self) -> Iterable[Term | Mapping[str, Any]] | None: ...


@runtime_checkable
class DescriptionResolverProtocol(Protocol):
    """
    Назначение:
        Поиск архивного описания по slug.

    Контракт:
        - resolve(slug) -> int | None
            Внутренний id описания или None, если не найдено.
    """

    def resolve(self, slug: str) -> int | None: ...


__all__ = ["TermSourceProtocol", "DescriptionResolverProtocol"]
