#!/usr/bin/env python3
"""
Load a workspace definition file into the configured database

Usage:
  python scripts/import_definitions.py definitions/shop.yaml
"""
from __future__ import annotations

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.exceptions import ReqflowError
from infrastructure.config.settings import load_settings
from infrastructure.definitions import DefinitionImporter, DefinitionLoaderRegistry
from infrastructure.storage.sqlalchemy_storage import SqlAlchemyStorage


def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/import_definitions.py <definition-file>")
        sys.exit(1)

    path = Path(sys.argv[1])
    try:
        settings = load_settings()
        definition = DefinitionLoaderRegistry().get_loader(path).load_from_file(path)
        summary = DefinitionImporter(SqlAlchemyStorage.from_url(settings.db_url)).apply(definition)
    except ReqflowError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print(f"Imported into {settings.db_url}")
    print(f"  projects:  {summary.projects}")
    print(f"  actions:   {summary.actions}")
    print(f"  flows:     {summary.flows}")
    print(f"  suites:    {summary.suites} ({summary.instances} new instances)")
    sys.exit(0)


if __name__ == "__main__":
    main()
