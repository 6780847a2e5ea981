import os
import sys
from logging.config import fileConfig
from urllib.parse import urlparse

from sqlalchemy import engine_from_config, pool

from alembic import context

# Add the project root to sys.path so we can import our modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Custom import to get global config
from common.global_config import global_config  # type: ignore # noqa: E402
from src.db.models import Base  # noqa: E402

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Interpret the config file for Python logging.
# This line sets up loggers basically.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def get_database_url() -> str:
    db_uri: str = str(global_config.database_uri)
    parsed_uri = urlparse(db_uri)
    print(f"✅ Using database: {parsed_uri.scheme}://{parsed_uri.hostname or ''}")
    return db_uri


def compare_type(
    context, inspected_column, metadata_column, inspected_type, metadata_type
):
    """
    Custom type comparison to reduce false positives.

    Return True if types are different and should generate a migration.
    """
    return False


def ignore_empty_migrations(context, revision, directives):
    """Hook to prevent empty migrations from being generated."""
    if not directives:
        return

    script = directives[0]
    if script.upgrade_ops.is_empty():
        print("🔍 No schema changes found, blocking migration")
        directives[:] = []


def run_migrations_offline() -> None:
    url = get_database_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,  # type: ignore
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=compare_type,
        process_revision_directives=ignore_empty_migrations,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode.

    In this scenario we need to create an Engine
    and associate a connection with the context.

    """
    # Override the sqlalchemy.url in config with our custom URL
    alembic_config = config.get_section(config.config_ini_section, {})
    alembic_config["sqlalchemy.url"] = get_database_url()

    connectable = engine_from_config(
        alembic_config,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:  # type: ignore
        context.configure(
            connection=connection,  # type: ignore
            target_metadata=target_metadata,  # type: ignore
            compare_type=compare_type,
            process_revision_directives=ignore_empty_migrations,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


# Add target_metadata
target_metadata = Base.metadata

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
