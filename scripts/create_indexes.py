#!/usr/bin/env python3
"""
Create MongoDB indexes for the applications collection.
Run from project root: python3 scripts/create_indexes.py
"""
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from jobtracker.config import get_config
from jobtracker.db.mongo import ensure_indexes, get_applications_collection


def create_indexes():
    """Create all necessary indexes for the application."""
    config = get_config()
    col = get_applications_collection(config)

    print(f"Creating indexes for collection: {col.database.name}.{col.name}")
    print("-" * 50)

    ensure_indexes(col)

    for idx in col.list_indexes():
        if idx["name"] != "_id_":
            unique = " (unique)" if idx.get("unique") else ""
            print(f"  ✅ {idx['name']}: {dict(idx['key'])}{unique}")

    print("\n" + "=" * 50)
    print(f"✅ Indexes ready, {col.count_documents({})} application(s) stored")
    print("=" * 50)


if __name__ == "__main__":
    create_indexes()
