import logging
import os
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import make_url

from .connection import DATABASE_URL

logger = logging.getLogger(__name__)

# Repository root, where alembic.ini and alembic/ sit beside the package
PROJECT_ROOT = Path(__file__).resolve().parents[2]


def alembic_config_path() -> Path:
    """Locate alembic.ini, honouring ALEMBIC_CONFIG for installed deployments."""
    override = os.getenv("ALEMBIC_CONFIG")
    return Path(override).resolve() if override else PROJECT_ROOT / "alembic.ini"


def build_alembic_config(database_url: str) -> Config:
    """Build an Alembic config that works from any working directory."""
    ini_path = alembic_config_path()
    if not ini_path.is_file():
        raise FileNotFoundError(f"Alembic config not found at {ini_path}")

    alembic_cfg = Config(str(ini_path))
    script_location = Path(alembic_cfg.get_main_option("script_location", "alembic"))
    if not script_location.is_absolute():
        script_location = ini_path.parent / script_location
    alembic_cfg.set_main_option("script_location", str(script_location))
    # Config values go through configparser interpolation
    alembic_cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return alembic_cfg


def ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or not url.database:
        return
    if url.database == ":memory:":
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def run_migrations(database_url: str = DATABASE_URL):
    """Upgrade the database schema to the latest revision."""
    logger.info("Starting database migrations...")

    try:
        ensure_sqlite_directory(database_url)
        alembic_cfg = build_alembic_config(database_url)

        backend = make_url(database_url).get_backend_name()
        logger.info(f"Running alembic migrations ({backend})...")
        command.upgrade(alembic_cfg, "head")

        logger.info("Database migrations completed successfully")

    except Exception as e:
        logger.error(f"Migration failed: {e}")
        raise
