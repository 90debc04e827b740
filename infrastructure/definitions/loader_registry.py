# infrastructure/definitions/loader_registry.py
from __future__ import annotations

from pathlib import Path
from typing import Dict

from infrastructure.definitions.base_loader import DefinitionLoadError, DefinitionLoaderBase
from infrastructure.definitions.json_loader import JsonDefinitionLoader
from infrastructure.definitions.yaml_loader import YamlDefinitionLoader


class DefinitionLoaderRegistry:
    def __init__(self) -> None:
        self._loaders: Dict[str, DefinitionLoaderBase] = {
            ".yaml": YamlDefinitionLoader(),
            ".yml": YamlDefinitionLoader(),
            ".json": JsonDefinitionLoader(),
        }

    def get_loader(self, path: Path) -> DefinitionLoaderBase:
        ext = path.suffix.lower()
        loader = self._loaders.get(ext)
        if loader is None:
            raise DefinitionLoadError(f"Unsupported definition format: {ext}")
        return loader
