from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_JWT_ALGORITHM, DEFAULT_STUDENT_PASSWORD, DEFAULT_TOKEN_MINUTES
from .core.logger import get_logger, set_level
from .courses.controller import register as register_courses
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_accounts, list_tables
from .faculty.controller import register as register_faculty
from .marks.controller import register as register_marks
from .students.controller import register as register_students
from .users.controller import register as register_users

logger = get_logger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]


def create_app(container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    """Application factory.

    Pass a prebuilt ``container`` (e.g. in-memory repositories in tests) to skip
    every database step.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.json.sort_keys = False
    set_level(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = dict(getattr(settings, "DB_CONFIG"))
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
            ensure_demo_accounts(db_config)
            logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            jwt_secret=getattr(settings, "JWT_SECRET", app.secret_key),
            jwt_algorithm=getattr(settings, "JWT_ALGORITHM", DEFAULT_JWT_ALGORITHM),
            jwt_expires_minutes=int(getattr(settings, "JWT_EXPIRES_MINUTES", DEFAULT_TOKEN_MINUTES)),
            allow_privileged_registration=bool(getattr(settings, "ALLOW_PRIVILEGED_REGISTRATION", False)),
            default_student_password=getattr(settings, "DEFAULT_STUDENT_PASSWORD", DEFAULT_STUDENT_PASSWORD),
        )

    app.extensions["academic_records"] = container
    register_error_handlers(app)

    register_users(app, container)
    register_courses(app, container)
    register_students(app, container)
    register_attendance(app, container)
    register_marks(app, container)
    register_faculty(app, container)

    return app
