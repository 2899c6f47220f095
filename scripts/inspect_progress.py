#!/usr/bin/env python3
"""
Print a learner's dashboard overview as JSON, straight from the database.

Run: python scripts/inspect_progress.py demo@kenbright.com
     python scripts/inspect_progress.py learner@kenbright.com -o overview.json

Uses DATABASE_URL (default sqlite:///./learntrack.db).
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from learntrack.config import build_engine, build_session_factory, get_settings  # noqa: E402
from learntrack.services.progress_service import ProgressService  # noqa: E402
from learntrack.stores.credential_store import SqlCredentialStore  # noqa: E402
from learntrack.stores.progress_store import SqlProgressStore  # noqa: E402
from learntrack.utils.logger import configure_logging, log_operation  # noqa: E402

logger = configure_logging()


def main() -> int:
    parser = argparse.ArgumentParser(description="Show a user's module progress overview.")
    parser.add_argument("email", help="Account email")
    parser.add_argument("--output", "-o", default=None, help="Write result to JSON file")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    args = parser.parse_args()

    settings = get_settings()
    engine = build_engine(args.database_url or settings.database_url)
    db = build_session_factory(engine)()
    try:
        user = SqlCredentialStore(db).find_by_email(args.email)
        if user is None:
            print(f"No user with email {args.email}", file=sys.stderr)
            return 1
        with log_operation(logger, f"inspect progress user_id={user.id}"):
            overview = ProgressService(SqlProgressStore(db)).get_overview(user.id)
    finally:
        db.close()
        engine.dispose()

    out = json.dumps({"user": user.public().model_dump(), **overview.model_dump(mode="json", by_alias=True)}, indent=2)
    if args.output:
        Path(args.output).write_text(out + "\n", encoding="utf-8")
        print(f"Wrote {args.output}")
    else:
        print(out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
