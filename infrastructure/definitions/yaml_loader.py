# infrastructure/definitions/yaml_loader.py
from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from infrastructure.definitions.base_loader import DefinitionLoadError, DefinitionLoaderBase


class YamlDefinitionLoader(DefinitionLoaderBase):
    def _load_file(self, path: Path) -> Any:
        with path.open("r", encoding="utf-8") as f:
            try:
                return yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise DefinitionLoadError(f"Invalid YAML in {path}: {e}") from e
