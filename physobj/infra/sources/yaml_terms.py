from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from physobj.domain.exceptions import ConfigurationError


class YamlTermSource:
    """
    Назначение:
        Источник терминов типов из YAML-файла.

    Формат:
        terms:
          - {id: 1, culture: en, name: Hollinger box}
          - {id: 1, culture: fr, name: Boîte Hollinger}
        (допускается и список терминов на верхнем уровне)
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def list_terms(self) -> list[dict[str, Any]]:
        p = Path(self.path)
        if not p.exists() or not p.is_file():
            raise ConfigurationError(f"Terms file not found: {self.path}")
        try:
            with p.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid terms file {self.path}: {exc}") from exc

        if isinstance(data, dict):
            data = data.get("terms")
        if data is None:
            return []
        if not isinstance(data, list):
            raise ConfigurationError(f"Terms file {self.path} must contain a list of terms")
        return [item for item in data if isinstance(item, dict)]
