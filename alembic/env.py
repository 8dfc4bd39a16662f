# alembic/env.py
from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)

# --- URL de conexión ---
# Misma resolución que la app (DATABASE_URL / SQLALCHEMY_DATABASE_URI / .env / SQLite local);
# sqlalchemy.url en alembic.ini sólo gana si la app no define nada.
from gpt_habits.core.config import settings  # noqa: E402
from gpt_habits.db.base import Base  # noqa: E402  (registra todos los modelos)
from gpt_habits.db.session import _mask  # noqa: E402

db_url = settings.db_url
if not (settings.DATABASE_URL or settings.SQLALCHEMY_DATABASE_URI):
    db_url = config.get_main_option("sqlalchemy.url") or db_url

context.config.set_main_option("sqlalchemy.url", db_url.replace("%", "%%"))
target_metadata = Base.metadata

print("alembic sqlalchemy.url =", _mask(db_url))


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    engine = create_engine(db_url, poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
