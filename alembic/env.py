"""
Alembic environment — runs migrations against DATABASE_URL.
"""
from alembic import context

from dealflow.config import load_settings
from dealflow.database import Base, configure_database
import dealflow.models.deal  # noqa: F401
import dealflow.models.webhook_log  # noqa: F401
import dealflow.models.user_profile  # noqa: F401

target_metadata = Base.metadata


def run_migrations_online() -> None:
    engine = configure_database(load_settings().database_url)
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


run_migrations_online()
