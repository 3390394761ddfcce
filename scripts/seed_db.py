"""Fill the roster with random students (100 unless a count is given).

    python scripts/seed_db.py [count]
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src" / "classroom_ledger"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from config import get_settings_module

from classroom_ledger.container import build_container, build_store
from classroom_ledger.core.constants import DEFAULT_MAX_BATCH_WRITES, DEFAULT_SEED_COUNT
from classroom_ledger.students.seeding import seed_students


def main() -> None:
    count = int(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_SEED_COUNT
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    store = build_store(
        settings.STORAGE_BACKEND,
        db_config=db_config,
        max_batch_writes=getattr(settings, "MAX_BATCH_WRITES", DEFAULT_MAX_BATCH_WRITES),
    )
    container = build_container(store=store)
    created = seed_students(container.students_repo, count, batch_size=store.max_batch_writes)

    print(
        f"OK: Seeded {created} students -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
