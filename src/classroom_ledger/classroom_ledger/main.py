from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .container import build_container, build_store
from .core.constants import DEFAULT_MAX_BATCH_WRITES, DEFAULT_TRANSACTION_ATTEMPTS
from .core.enums import StorageBackend
from .core.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from .database.bootstrap import apply_schema, list_tables
from .database.document_store import DocumentStore
from .students.seeding import seed_students
from .attendance.controller import register as register_attendance
from .imports.controller import register as register_imports
from .leaderboard.controller import register as register_leaderboard
from .quizzes.controller import register as register_quizzes
from .students.controller import register as register_students
from .teams.controller import register as register_teams

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _register_error_handlers(app: Flask) -> None:
    def _error(e: Exception, status: int):
        return jsonify({"success": False, "message": str(e)}), status

    app.register_error_handler(ValidationError, lambda e: _error(e, 400))
    app.register_error_handler(NotFoundError, lambda e: _error(e, 404))
    app.register_error_handler(ConflictError, lambda e: _error(e, 409))
    app.register_error_handler(StorageError, lambda e: _error(e, 503))


def create_app(settings_module: Optional[str] = None, *, store: Optional[DocumentStore] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=logging.DEBUG if app.config["DEBUG"] else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db_config = getattr(settings, "DB_CONFIG", None) or {}
    backend = StorageBackend(str(getattr(settings, "STORAGE_BACKEND", "mysql")).strip().lower())
    max_batch_writes = int(getattr(settings, "MAX_BATCH_WRITES", DEFAULT_MAX_BATCH_WRITES))
    logger.info("settings=%s storage=%s", settings_module, backend.value)

    if store is None:
        if backend is StorageBackend.MYSQL:
            logger.info(
                "db=%s@%s:%s/%s",
                db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
            )
            if bool(getattr(settings, "AUTO_INIT_DB", False)):
                apply_schema(db_config, schema_path=SCHEMA_PATH)
                logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        store = build_store(
            backend,
            db_config=db_config,
            max_batch_writes=max_batch_writes,
            max_attempts=int(getattr(settings, "TRANSACTION_ATTEMPTS", DEFAULT_TRANSACTION_ATTEMPTS)),
        )

    container = build_container(store=store)

    if bool(getattr(settings, "AUTO_SEED_DB", False)) and not container.students_repo.list_all():
        created = seed_students(container.students_repo, batch_size=store.max_batch_writes)
        logger.info("seeded %s random students", created)

    app.extensions["classroom_ledger"] = container
    _register_error_handlers(app)

    register_students(app, container)
    register_attendance(app, container)
    register_quizzes(app, container)
    register_leaderboard(app, container)
    register_imports(app, container)
    register_teams(app, container)

    return app
