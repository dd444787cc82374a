"""Alembic environment for the health API schema.

The database URL and log settings come from the application settings
(``HEALTH_API_*`` variables or ``.env``), so ``alembic upgrade head`` and
``health-api-cli db upgrade`` always migrate the same database.
"""

from alembic import context
from dotenv import load_dotenv
from loguru import logger
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import make_url
from sqlmodel import SQLModel

load_dotenv()

from health_api.logging import setup_logging, setup_sqlalchemy_logging  # noqa: E402
from health_api.models import db_model  # noqa: F401, E402
from health_api.settings import get_settings  # noqa: E402

config = context.config
settings = get_settings()
target_metadata = SQLModel.metadata

# Only when started from the alembic command line; AlembicManager disables it
if config.attributes.get("configure_logging", True):
    setup_logging(settings.log_level, serialize=settings.log_json)
    setup_sqlalchemy_logging()

if not settings.database_url:
    raise RuntimeError("Database URL missing: set HEALTH_API_DATABASE_URL")

# configparser interpolation treats '%' specially, e.g. in url-encoded passwords
config.set_main_option("sqlalchemy.url", settings.database_url.replace("%", "%%"))

# SQLite cannot ALTER most constraints in place
RENDER_AS_BATCH = make_url(settings.database_url).get_backend_name() == "sqlite"


def run_migrations_offline() -> None:
    """Emit the migration SQL to the script output without connecting."""
    logger.info("Generating migration SQL (offline mode)")
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=RENDER_AS_BATCH,
    )

    with context.begin_transaction():
        context.run_migrations()
    logger.success("Migration SQL generated")


def run_migrations_online() -> None:
    """Connect to the configured database and apply the migrations."""
    engine_config = config.get_section(config.config_ini_section, {})
    engine_config["sqlalchemy.echo"] = str(settings.sql_log).lower()
    connectable = engine_from_config(engine_config, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        logger.info(f"Migrating {make_url(settings.database_url).render_as_string(hide_password=True)}")
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=RENDER_AS_BATCH,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()
    logger.success("Migrations applied")


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
