from __future__ import annotations

import logging
from pathlib import Path

from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy.engine import Engine

from menu_builder.core.config import DATABASE_URL, IS_PROD

logger = logging.getLogger(__name__)
SCHEMA_PREFIX = "[SCHEMA]"


def uses_sqlite(database_url: str = DATABASE_URL) -> bool:
    return database_url.startswith("sqlite")


def validate_database_environment(database_url: str = DATABASE_URL, *, production: bool = IS_PROD) -> None:
    if production and uses_sqlite(database_url):
        logger.critical("%s SQLite is forbidden in production", SCHEMA_PREFIX)
        raise RuntimeError("SQLite is forbidden in production environment")


def expected_heads(alembic_config_path: Path) -> set[str]:
    if not alembic_config_path.exists():
        logger.critical("%s alembic config not found path=%s", SCHEMA_PREFIX, alembic_config_path)
        raise RuntimeError("alembic config not found")
    return set(ScriptDirectory.from_config(Config(str(alembic_config_path))).get_heads())


def ensure_schema_at_head(*, engine: Engine, alembic_config_path: Path) -> None:
    """Refuse to serve when the database is not at the latest revision.

    Migrations are applied out of band with ``alembic upgrade head``.
    """
    wanted = expected_heads(alembic_config_path)
    with engine.connect() as connection:
        current = set(MigrationContext.configure(connection).get_current_heads())

    if not current:
        logger.critical("%s database has no migration state", SCHEMA_PREFIX)
        raise RuntimeError("Database has no migration state, run alembic upgrade head")
    if current != wanted:
        logger.critical(
            "%s pending migration current=%s expected=%s",
            SCHEMA_PREFIX,
            sorted(current),
            sorted(wanted),
        )
        raise RuntimeError("Pending migrations detected")

    logger.info("%s schema at head %s", SCHEMA_PREFIX, ",".join(sorted(current)))
