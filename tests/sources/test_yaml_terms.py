from pathlib import Path

import pytest

from physobj.domain.exceptions import ConfigurationError
from physobj.domain.transform.type_lookup import build_type_lookup_table
from physobj.infra.sources.yaml_terms import YamlTermSource


def test_reads_terms_mapping(tmp_path: Path):
    path = tmp_path / "terms.yml"
    path.write_text(
        "terms:\n"
        "  - {id: 1, culture: en, name: Hollinger box}\n"
        "  - {id: 1, culture: fr, name: Boîte Hollinger}\n",
        encoding="utf-8",
    )

    terms = YamlTermSource(str(path)).list_terms()

    assert build_type_lookup_table(terms).lookup("fr", "boîte hollinger") == 1


def test_reads_top_level_list(tmp_path: Path):
    path = tmp_path / "terms.yml"
    path.write_text("- {id: 2, culture: en, name: Folder}\n", encoding="utf-8")

    assert YamlTermSource(str(path)).list_terms() == [{"id": 2, "culture": "en", "name": "Folder"}]


def test_missing_file_is_configuration_error(tmp_path: Path):
    with pytest.raises(ConfigurationError):
        YamlTermSource(str(tmp_path / "nope.yml")).list_terms()


def test_empty_file_yields_empty_vocabulary(tmp_path: Path):
    path = tmp_path / "terms.yml"
    path.write_text("", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        build_type_lookup_table(YamlTermSource(str(path)).list_terms())
