"""Alembic environment for the huautla schema, configured from huautla settings."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine

from huautla.config import settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Migrations share the PG*/DATABASE_URL settings with the pool but run on
# sqlalchemy's sync psycopg2 driver, which only knows the postgresql:// scheme.
settings.validate()
migration_url = settings.dsn
if migration_url.startswith("postgres://"):
    migration_url = "postgresql://" + migration_url.removeprefix("postgres://")

config.set_main_option("sqlalchemy.url", migration_url)


def run_migrations_offline() -> None:
    """Emit the huautla DDL as SQL without connecting."""
    context.configure(url=config.get_main_option("sqlalchemy.url"), target_metadata=None, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply the huautla DDL over a live connection."""
    engine = create_engine(config.get_main_option("sqlalchemy.url"))
    with engine.connect() as conn:
        context.configure(connection=conn, target_metadata=None)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
