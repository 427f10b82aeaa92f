import pytest

from physobj.domain.error_codes import ErrorKind
from physobj.domain.exceptions import ConfigurationError, RowValidationError
from physobj.domain.models import Term
from physobj.domain.transform.type_lookup import build_type_lookup_table

TERMS = [
    {"id": "1", "culture": "en", "name": "Hollinger box"},
    {"id": "1", "culture": "fr", "name": "Boîte Hollinger"},
    {"id": "2", "culture": "en", "name": "Folder"},
    {"id": "2", "culture": "fr", "name": "Chemise"},
]


def test_build_nested_table_from_terms():
    table = build_type_lookup_table(TERMS)

    assert table.as_dict() == {
        "en": {"hollinger box": 1, "folder": 2},
        "fr": {"boîte hollinger": 1, "chemise": 2},
    }
    assert table.cultures() == ["en", "fr"]
    assert len(table) == 4


def test_build_accepts_term_objects():
    table = build_type_lookup_table([Term(id=7, culture="EN", name="Map case")])

    assert table.lookup("en", "map case") == 7


def test_lookup_ignores_case_and_whitespace():
    table = build_type_lookup_table(TERMS)

    assert table.lookup("FR", "  boîte HOLLINGER ") == 1
    assert table.lookup("en", "FOLDER") == 2


def test_lookup_empty_name_is_unset_type():
    table = build_type_lookup_table(TERMS)

    assert table.lookup("en", "") is None
    assert table.lookup("en", "   ") is None


def test_lookup_unknown_type_raises_validation_error():
    table = build_type_lookup_table(TERMS)

    with pytest.raises(RowValidationError) as exc:
        table.lookup("en", "Spam")

    assert exc.value.kind is ErrorKind.UNKNOWN_TYPE
    assert 'type "spam" for culture "en"' in exc.value.message


def test_lookup_unknown_culture_raises_validation_error():
    table = build_type_lookup_table(TERMS)

    with pytest.raises(RowValidationError) as exc:
        table.lookup("de", "Folder")

    assert exc.value.kind is ErrorKind.UNKNOWN_TYPE


@pytest.mark.parametrize("terms", [None, []])
def test_empty_vocabulary_is_configuration_error(terms):
    with pytest.raises(ConfigurationError):
        build_type_lookup_table(terms)


def test_conflicting_ids_are_configuration_error():
    terms = [
        {"id": 1, "culture": "en", "name": "Folder"},
        {"id": 2, "culture": "en", "name": "folder "},
    ]

    with pytest.raises(ConfigurationError) as exc:
        build_type_lookup_table(terms)

    assert exc.value.code == ErrorKind.VOCABULARY_CONFLICT.value


def test_duplicate_identical_terms_are_allowed():
    terms = [
        {"id": 1, "culture": "en", "name": "Folder"},
        {"id": 1, "culture": "EN", "name": "folder"},
    ]

    assert build_type_lookup_table(terms).as_dict() == {"en": {"folder": 1}}
