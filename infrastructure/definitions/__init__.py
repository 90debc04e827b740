# infrastructure/definitions/__init__.py
from infrastructure.definitions.base_loader import DefinitionLoadError, DefinitionLoaderBase, WorkspaceDefinition
from infrastructure.definitions.importer import DefinitionImporter, ImportSummary
from infrastructure.definitions.json_loader import JsonDefinitionLoader
from infrastructure.definitions.loader_registry import DefinitionLoaderRegistry
from infrastructure.definitions.yaml_loader import YamlDefinitionLoader

__all__ = [
    "DefinitionLoadError",
    "DefinitionLoaderBase",
    "DefinitionLoaderRegistry",
    "DefinitionImporter",
    "ImportSummary",
    "JsonDefinitionLoader",
    "WorkspaceDefinition",
    "YamlDefinitionLoader",
]
