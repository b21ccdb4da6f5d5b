"""Create the pending attendance rows that are missing for existing events.

Useful after importing players or events directly into the database, where
no cascade ran. Existing rows are left untouched.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for p in (REPO_ROOT, REPO_ROOT / "src"):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from config import get_settings_module

from roster_attendance.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--actor-id", type=int, default=None, help="user id recorded as updated_by")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)
    result = container.provisioner.backfill(actor_id=args.actor_id)

    print(f"OK: created={len(result.created)} skipped={len(result.skipped)} failed={len(result.failed)}")
    for event_id, player_id, error in result.failed:
        print(f"  failed event={event_id} player={player_id}: {error}")
    if result.failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
