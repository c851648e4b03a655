# alembic/env.py
"""
portal_orders 读模型迁移。

连接串与应用同源（AppSettings.DATABASE_URL，即 PORTAL_DATABASE_URL / .env），
迁移统一走同步驱动：psycopg3 / pysqlite。
"""
from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.pool import NullPool

from app.core.config import get_settings
from app.db.base import Base, init_models

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

init_models()
target_metadata = Base.metadata

# async 驱动 → 迁移用的同步驱动
_SYNC_DRIVERS = {
    "sqlite+aiosqlite": "sqlite",
    "postgresql+asyncpg": "postgresql+psycopg",
    "postgresql+psycopg2": "postgresql+psycopg",
    "postgresql": "postgresql+psycopg",
    "postgres": "postgresql+psycopg",
}


def migration_url() -> str:
    raw = (config.get_main_option("sqlalchemy.url") or get_settings().DATABASE_URL).strip().strip("'\"")
    url = make_url(raw)
    driver = _SYNC_DRIVERS.get(url.drivername, url.drivername)
    return url.set(drivername=driver).render_as_string(hide_password=False)


def run_migrations_offline() -> None:
    context.configure(
        url=migration_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(migration_url(), poolclass=NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()
    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
