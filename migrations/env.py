from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool

from speedboard.lib.database import Base, get_database_url, is_database_configured
from speedboard.models.lighthouse_score import LighthouseScore  # noqa: F401  registers the table

# Load environment variables from .env.local
load_dotenv(dotenv_path='.env.local')

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Use the application's connection settings unless alembic.ini sets a URL
if not config.get_main_option('sqlalchemy.url') and is_database_configured():
    # ConfigParser interpolation treats % specially
    config.set_main_option('sqlalchemy.url', get_database_url().replace('%', '%%'))

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Configures the context with just a URL, so no DBAPI is needed;
    context.execute() emits SQL to the script output.
    """
    url = config.get_main_option('sqlalchemy.url')
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={'paramstyle': 'named'},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix='sqlalchemy.',
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
