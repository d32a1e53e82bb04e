"""
Seed the municipality directory into Firestore (or the mock store).

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to configured DB: python scripts/seed_db.py --apply
  - Validate against the in-memory store: python scripts/seed_db.py --apply --force-mock
  - Other seed file: python scripts/seed_db.py --seed path/to/seed.json

The seed file maps collection -> document id -> fields, the same layout
MOCK_DB_PATH uses. Only collections in SEEDABLE_COLLECTIONS are written;
users are created through /auth/register so they get an identity account.
"""

import argparse
import json
import os
import sys
from typing import Any, Dict

from setshaba.config.firebase import initialize_firestore
from setshaba.core.settings import settings

SEEDABLE_COLLECTIONS = ("municipalities",)


def load_seed(path: str) -> Dict[str, Dict[str, Dict[str, Any]]]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_to_db(db: Any, seed: Dict, apply: bool = False) -> int:
    """Write the seedable collections. Returns the number of failed writes."""
    failures = 0
    for collection, docs in seed.items():
        if collection not in SEEDABLE_COLLECTIONS:
            print(f"Skipping collection: {collection}")
            continue
        for doc_id, data in docs.items():
            print(f"Preparing: {collection}/{doc_id}")
            if not apply:
                continue
            try:
                db.collection(collection).document(doc_id).set(data, merge=True)
                print(f"Wrote: {collection}/{doc_id}")
            except Exception as e:
                failures += 1
                print(f"Failed to write {collection}/{doc_id}: {e}")
    return failures


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--apply", action="store_true", help="Write seed to the DB instead of dry-run")
    parser.add_argument("--force-mock", action="store_true", help="Use the in-memory store regardless of settings")
    parser.add_argument("--seed", default=os.path.join(os.getcwd(), "db_seed.json"), help="Seed file path")
    args = parser.parse_args()

    if not os.path.exists(args.seed):
        print(f"Seed file not found: {args.seed}")
        return 1

    seed = load_seed(args.seed)

    app_settings = settings
    if args.force_mock:
        print("Forcing mock DB usage for this run.")
        app_settings = settings.model_copy(update={"USE_MOCK_DB": True, "MOCK_DB_PATH": None})

    db = initialize_firestore(app_settings)
    failures = write_to_db(db, seed, apply=args.apply)

    if not args.apply:
        print("Dry run complete. Re-run with --apply to write to DB.")
    elif failures:
        print(f"Seeding finished with {failures} failed write(s).")
    else:
        print("Seeding completed.")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
