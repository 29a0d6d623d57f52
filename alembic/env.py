import os
import sys
from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context

# Project root on sys.path so `core` and `models` import when run via the alembic CLI
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

from core.config import settings
from models.base import Base

# Every model module, so autogenerate sees all portal tables
from models import asset, auth_token, delivery, folder, project, upload_session, user  # noqa: F401

config = context.config

# The URL always comes from application settings (DATABASE_URL or DB_*)
config.set_main_option("sqlalchemy.url", settings.SQLALCHEMY_DATABASE_URI.replace("%", "%%"))

if config.config_file_name is not None and config.has_section("loggers"):
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _include_object(object, name, type_, reflected, compare_to):
    # Leave tables the portal does not own alone
    return not (type_ == "table" and reflected and compare_to is None)


def _configure_kwargs(url: str) -> dict:
    return dict(
        target_metadata=target_metadata,
        compare_type=True,
        include_object=_include_object,
        # SQLite cannot ALTER most constraints in place
        render_as_batch=url.startswith("sqlite"),
    )


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(url=url, literal_binds=True, **_configure_kwargs(url))
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_kwargs(str(connectable.url)))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
