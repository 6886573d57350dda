# migrations/env.py
import os
import sys
from logging.config import fileConfig

from alembic import context

# repo root on path so "from trusthealth..." works when alembic runs at the root
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from trusthealth.db import Base, engine, DATABASE_URL  # noqa: E402
from trusthealth import models  # noqa: E402,F401  registers the computations table

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# SQLite needs batch mode for ALTER TABLE
render_as_batch = DATABASE_URL.startswith("sqlite")

if context.is_offline_mode():
    context.configure(url=DATABASE_URL, target_metadata=Base.metadata, literal_binds=True, render_as_batch=render_as_batch)
    with context.begin_transaction():
        context.run_migrations()
else:
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=Base.metadata, render_as_batch=render_as_batch)
        with context.begin_transaction():
            context.run_migrations()
