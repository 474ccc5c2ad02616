from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Connection

import horario_escolar.models  # noqa: F401
from horario_escolar.core.config import get_settings
from horario_escolar.db.base import Base
from horario_escolar.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "email", "name", "role"},
    "lesson_slots": {"id", "group_id", "day", "slot_id", "disciplina", "professor", "turma"},
    "audit_entries": {
        "id",
        "change_type",
        "table_name",
        "group_id",
        "field_changed",
        "previous_value",
        "new_value",
        "user_id",
        "timestamp",
    },
    "timetable_snapshots": {"id", "name", "payload", "user_id", "created_at"},
}


def inspect_schema(connection: Connection) -> tuple[list[str], dict[str, list[str]]]:
    inspector = inspect(connection)
    table_names = set(inspector.get_table_names())
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    for table_name, columns in REQUIRED_COLUMNS.items():
        if table_name not in table_names:
            missing_tables.append(table_name)
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        missing = sorted(columns - existing)
        if missing:
            missing_columns[table_name] = missing
    return missing_tables, missing_columns


def ensure_runtime_schema() -> None:
    """Create missing tables for local SQLite setups. Production databases go through alembic."""
    if not get_settings().auto_create_schema:
        return
    Base.metadata.create_all(bind=engine)
    with engine.connect() as connection:
        missing_tables, missing_columns = inspect_schema(connection)
    if missing_columns:
        logger.warning(
            "Database schema is behind the models, run `alembic upgrade head` | missing_columns=%s",
            missing_columns,
        )
    if missing_tables:
        logger.warning("Tables still missing after create_all | tables=%s", missing_tables)
