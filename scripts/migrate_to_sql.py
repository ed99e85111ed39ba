#!/usr/bin/env python3
"""
Copy the note repository from the data directory into the SQL document store.

Usage:
  python scripts/migrate_to_sql.py [--data-dir ~/.notekeep] [--overwrite]

DATABASE_URL selects the target database (default: SQLite in the data dir).
"""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

# Make the notekeep package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sqlalchemy.engine import make_url

from notekeep.core.config import get_settings
from notekeep.repositories.file_store import XmlFileStore
from notekeep.repositories.sql_store import SqlDocumentStore


def migrate(data_dir: str, overwrite: bool = False) -> str:
    settings = get_settings()
    file_name = settings.repository_file_name
    source = XmlFileStore(root=data_dir)
    target = SqlDocumentStore()

    if not source.exists(file_name):
        raise SystemExit(f"No repository found: {os.path.join(data_dir, file_name)}")
    success, document = source.try_load(file_name)
    if not success:
        raise SystemExit(f"Repository is not valid XML: {os.path.join(data_dir, file_name)}")
    if target.exists(file_name) and not overwrite:
        raise SystemExit(f"'{file_name}' already exists in the database, use --overwrite")
    if not target.try_serialize_and_save(file_name, document):
        raise SystemExit("Could not write the repository to the database")
    return file_name


def main() -> None:
    ap = argparse.ArgumentParser(description="Copy the note repository into the SQL store")
    ap.add_argument("--data-dir", help="Directory holding the repository file (default: NOTEKEEP_DATA_DIR)")
    ap.add_argument("--overwrite", action="store_true", help="Replace a repository already in the database")
    args = ap.parse_args()

    data_dir = (args.data_dir or "").strip() or get_settings().data_dir
    key = migrate(os.path.expanduser(data_dir), overwrite=args.overwrite)
    print("OK: repository migrated")
    print(f"  Key: {key}")
    print(f"  Database: {make_url(get_settings().database_url).render_as_string(hide_password=True)}")


if __name__ == "__main__":
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
