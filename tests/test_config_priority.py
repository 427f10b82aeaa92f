import pytest

from physobj.config import load_settings


def test_priority_cli_over_env_over_config(tmp_path, monkeypatch):
    cfg = tmp_path / "config.yml"
    cfg.write_text(
        "\n".join([
            "default_culture: fr",
            "multi_value_delimiter: ';'",
            "index_on_load: true",
            "retries: 5",
            "site_default_culture: de",
        ]),
        encoding="utf-8",
    )

    monkeypatch.setenv("PHYSOBJ_DEFAULT_CULTURE", "es")
    monkeypatch.setenv("PHYSOBJ_INDEX_ON_LOAD", "no")

    loaded = load_settings(str(cfg), {"default_culture": "it", "api_key": None})
    settings = loaded.settings

    assert settings.default_culture == "it"
    assert settings.index_on_load is False
    assert settings.multi_value_delimiter == ";"
    assert settings.retries == 5
    assert settings.site_default_culture == "de"
    assert loaded.sources_used == ["config", "env", "cli"]


def test_defaults_without_sources(monkeypatch):
    for name in ("PHYSOBJ_DEFAULT_CULTURE", "PHYSOBJ_INDEX_ON_LOAD", "PHYSOBJ_REPORT_INCLUDE_OK_ITEMS"):
        monkeypatch.delenv(name, raising=False)

    loaded = load_settings(None, {})

    assert loaded.settings.multi_value_delimiter == "|"
    assert loaded.settings.site_default_culture == "en"
    assert loaded.settings.index_on_load is False
    assert loaded.settings.report_include_ok_items is False


def test_invalid_boolean_env(monkeypatch):
    monkeypatch.setenv("PHYSOBJ_INDEX_ON_LOAD", "maybe")

    with pytest.raises(ValueError):
        load_settings(None, {})


def test_unknown_cli_override_is_rejected():
    with pytest.raises(ValueError):
        load_settings(None, {"nope": "x"})


def test_report_include_ok_items_from_config(tmp_path, monkeypatch):
    monkeypatch.delenv("PHYSOBJ_REPORT_INCLUDE_OK_ITEMS", raising=False)
    cfg = tmp_path / "config.yml"
    cfg.write_text("report_include_ok_items: yes\n", encoding="utf-8")

    loaded = load_settings(str(cfg), {})

    assert loaded.settings.report_include_ok_items is True
