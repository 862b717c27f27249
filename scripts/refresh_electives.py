"""Recompute elective status for every class, then rebuild the suggestion cache.

Run:
  PYTHONPATH=backend python scripts/refresh_electives.py [--school-type "Ortaokul"] [--skip-suggestions]
"""

from __future__ import annotations

import argparse
import logging

from app.core.config import get_settings
from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.services.elective_tracker import ElectiveTracker
from app.services.school_data import SchoolDataStore
from app.services.suggestion_engine import SuggestionEngine


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--school-type", default=None, help="Only refresh classes of this school type")
    parser.add_argument("--skip-suggestions", action="store_true", help="Do not rebuild the suggestion cache")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    ensure_runtime_schema_compatibility()

    settings = get_settings()
    with SessionLocal() as session:
        store = SchoolDataStore(session, settings)
        summary = ElectiveTracker(store, settings).refresh_all_elective_statuses(args.school_type)
        classes_refreshed = None
        if not args.skip_suggestions:
            classes_refreshed = SuggestionEngine(store, settings).refresh_suggestion_cache()

    print(f"Elective statuses refreshed: {summary.refreshed}")
    print(f"Failed classes: {summary.failed}")
    if summary.failed_class_ids:
        print(f"  Class ids: {', '.join(str(class_id) for class_id in summary.failed_class_ids)}")
    if classes_refreshed is not None:
        print(f"Suggestion cache rebuilt for {classes_refreshed} classes")


if __name__ == "__main__":
    main()
