from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for p in (REPO_ROOT, REPO_ROOT / "src"):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from config import get_settings_module

from roster_attendance.container import build_container
from roster_attendance.core.exceptions import DomainError


def main() -> None:
    parser = argparse.ArgumentParser(description="Reset an account password.")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", default=None, help="new password; a random one is generated when omitted")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)

    try:
        password = container.user_service.reset_password(email=args.email, password=args.password)
    except DomainError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"OK: password reset for {args.email.lower()}")
    print(f"New password: {password}")


if __name__ == "__main__":
    main()
