#!/usr/bin/env python3
"""
Import a legacy businesses.json export into the database.

Run once per export:
    python scripts/migrate_json.py data/businesses.json

The JSON file is copied to <file>.backup before anything is written.
Records that fail validation are reported and skipped.
"""

import sys
import os
import json
import shutil
from datetime import datetime
from typing import Dict, List, Tuple

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pydantic import ValidationError

from bizcalc.api.schemas import ScenarioCreate
from bizcalc.db.database import get_db_context, init_db
from bizcalc.db.store import ScenarioStore


def parse_timestamp(value):
    if not value:
        return None
    return datetime.fromisoformat(str(value).replace(" ", "T"))


def migrate_records(store: ScenarioStore, records: List[Dict]) -> Tuple[int, int]:
    """
    Create a stored scenario for each legacy record.

    Returns:
        (migrated, errors) counts
    """
    migrated = 0
    errors = 0

    for record in records:
        data = dict(record.get("data") or {})
        data.setdefault(
            "business_name", record.get("business_name") or "Untitled Business"
        )

        try:
            scenario = ScenarioCreate(**data)
        except ValidationError as e:
            print(f"  x Skipped record {record.get('id')}: {e.error_count()} invalid field(s)")
            errors += 1
            continue

        new_id = store.create(scenario.model_dump())

        created = parse_timestamp(record.get("created_date"))
        modified = parse_timestamp(record.get("modified_date"))
        if created or modified:
            business = store.get_by_id(new_id)
            business.created_at = created or business.created_at
            business.updated_at = modified or business.updated_at
            store.db.commit()

        print(f"  + Migrated: {scenario.business_name} (ID: {record.get('id')} -> {new_id})")
        migrated += 1

    return migrated, errors


def main():
    if len(sys.argv) != 2:
        print("Usage: python scripts/migrate_json.py <businesses.json>")
        sys.exit(1)

    json_file = sys.argv[1]
    if not os.path.exists(json_file):
        print(f"Error: JSON file not found at: {json_file}")
        sys.exit(1)

    backup_file = json_file + ".backup"
    shutil.copyfile(json_file, backup_file)
    print(f"Backup created: {backup_file}")

    with open(json_file, encoding="utf-8") as f:
        records = json.load(f).get("businesses", [])
    print(f"Found {len(records)} business record(s)\n")

    init_db()
    with get_db_context() as db:
        store = ScenarioStore(db)
        migrated, errors = migrate_records(store, records)
        total = store.stats()["total_scenarios"]

    print("\n=== Migration Summary ===")
    print(f"Successfully migrated: {migrated} record(s)")
    print(f"Errors: {errors}")
    print(f"Database now contains {total} record(s)")


if __name__ == "__main__":
    main()
