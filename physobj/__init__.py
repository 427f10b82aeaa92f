"""Импорт CSV-данных о физических объектах (места хранения, контейнеры)."""

__version__ = "0.3.0"
