from alembic import context
from sqlalchemy import create_engine, pool

from settlement.settings import settings

# Logging is owned by settlement.logging; the ini carries no logger sections.
url = context.config.get_main_option("sqlalchemy.url") or settings.db_url

if context.is_offline_mode():
    context.configure(url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()
else:
    # SQLite needs batch mode for ALTER TABLE in later revisions.
    with create_engine(url, poolclass=pool.NullPool).connect() as connection:
        context.configure(connection=connection, render_as_batch=True)
        with context.begin_transaction():
            context.run_migrations()
