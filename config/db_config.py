# File: config/db_config.py
# This file serves as a centralized controller for connecting to an Ensembl variation database.
# Settings come from a .env file and the environment (optionally overridden by a YAML file);
# engines and session factories are built on request and handed to callers explicitly,
# never stored in module-level globals.

import logging  # For logging messages
import os  # For accessing environment variables
from contextlib import contextmanager  # For context-managed database sessions
from dataclasses import dataclass  # For the settings container
from itertools import chain
from pathlib import Path  # For managing filesystem paths
from typing import Optional

from dotenv import load_dotenv  # For loading environment variables from a .env file
from sqlalchemy import create_engine, event  # For engine creation and session events
from sqlalchemy.engine import URL, Engine, make_url  # For URL construction and type hinting
from sqlalchemy.exc import SQLAlchemyError  # For SQLAlchemy error handling
from sqlalchemy.orm import sessionmaker  # For SQLAlchemy session creation

from config.logger_config import configure_logger
from db.orm_models.variation_record import VariationRecord
from utils.config_utils import ConfigLoaderError, load_config, validate_config
from utils.exceptions import ReadOnlyRecordError

logger = configure_logger(name="VariationDBConfig", log_file="db_config.log", level=logging.INFO)

# Default location of the .env file, next to this module
DEFAULT_ENV_PATH = Path(__file__).resolve().parent / ".env"

# Public Ensembl MySQL server accepting anonymous connections
ENSEMBL_HOST = "ensembldb.ensembl.org"
ENSEMBL_PORT = 3306
ENSEMBL_USER = "anonymous"


@dataclass(frozen=True)
class DatabaseSettings:
    """
    Connection settings for a variation database.

    Attributes:
        url (Optional[str]): Complete SQLAlchemy URL; overrides the individual fields.
        dialect (str): SQLAlchemy dialect and driver (e.g. 'mysql+pymysql').
        user (str): Database user.
        password (Optional[str]): Database password.
        host (str): Database host.
        port (int): Database port.
        database (Optional[str]): Database name.
        pool_size (int): Number of pooled connections.
        max_overflow (int): Connections allowed beyond the pool size.
        pool_timeout (int): Seconds to wait for a pooled connection.
        pool_recycle (int): Seconds after which pooled connections are recycled.
        echo (bool): Log emitted SQL.
    """
    url: Optional[str] = None
    dialect: str = "mysql+pymysql"
    user: str = ENSEMBL_USER
    password: Optional[str] = None
    host: str = ENSEMBL_HOST
    port: int = ENSEMBL_PORT
    database: Optional[str] = None
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800
    echo: bool = False


def ensembl_database_name(species: str, release, assembly: str) -> str:
    """
    Builds the name of an Ensembl variation database,
    e.g. ('homo_sapiens', 50, '36l') -> 'homo_sapiens_variation_50_36l'.
    """
    species = species.strip().lower().replace(" ", "_")
    return f"{species}_variation_{release}_{assembly}"


def load_environment(env_file: Optional[Path] = None) -> bool:
    """
    Loads variables from a .env file into the environment without overriding
    variables that are already set.

    Returns:
        bool: True if a .env file was found and loaded.
    """
    env_path = Path(env_file) if env_file else DEFAULT_ENV_PATH
    loaded = load_dotenv(dotenv_path=env_path)
    if loaded:
        logger.info(f"Loaded environment from {env_path}.")
    return loaded


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).lower() in {"1", "true", "yes", "on"}


NUMERIC_SETTINGS = ("port", "pool_size", "max_overflow", "pool_timeout", "pool_recycle")


def _coerce_settings(values: dict, origin: str) -> dict:
    """
    Converts raw setting values (strings from the environment, anything from YAML)
    to the types DatabaseSettings expects.

    Raises:
        ConfigLoaderError: If a numeric setting is not an integer.
    """
    coerced = dict(values)
    for key in NUMERIC_SETTINGS:
        if key not in coerced:
            continue
        value = coerced[key]
        try:
            if isinstance(value, bool):
                raise ValueError(f"boolean {value!r}")
            coerced[key] = int(value)
        except (TypeError, ValueError) as e:
            raise ConfigLoaderError(f"Invalid numeric database setting '{key}' in {origin}: {value!r}") from e
    if "echo" in coerced:
        coerced["echo"] = _as_bool(coerced["echo"])
    return coerced


def get_database_settings(config_file: Optional[str] = None, env_file: Optional[Path] = None) -> DatabaseSettings:
    """
    Reads the database settings from the environment, optionally overridden by a YAML file.

    Args:
        config_file (Optional[str]): YAML file whose keys are DatabaseSettings field names.
        env_file (Optional[Path]): .env file to load first; defaults to config/.env.

    Returns:
        DatabaseSettings: The resolved settings.

    Raises:
        ConfigLoaderError: If neither a URL nor a database name can be resolved, a numeric
            setting is not an integer, or the YAML file contains unknown keys.
    """
    load_environment(env_file)

    database = os.getenv("VARIATION_DB_NAME")
    species, release = os.getenv("VARIATION_SPECIES"), os.getenv("VARIATION_RELEASE")
    assembly = os.getenv("VARIATION_ASSEMBLY")
    if not database and species and release and assembly:
        database = ensembl_database_name(species, release, assembly)

    values = _coerce_settings(
        {
            "url": os.getenv("VARIATION_DB_URL"),
            "dialect": os.getenv("VARIATION_DB_DIALECT", DatabaseSettings.dialect),
            "user": os.getenv("VARIATION_DB_USER", ENSEMBL_USER),
            "password": os.getenv("VARIATION_DB_PASSWORD"),
            "host": os.getenv("VARIATION_DB_HOST", ENSEMBL_HOST),
            "port": os.getenv("VARIATION_DB_PORT", ENSEMBL_PORT),
            "database": database,
            "pool_size": os.getenv("VARIATION_DB_POOL_SIZE", DatabaseSettings.pool_size),
            "max_overflow": os.getenv("VARIATION_DB_MAX_OVERFLOW", DatabaseSettings.max_overflow),
            "pool_timeout": os.getenv("VARIATION_DB_POOL_TIMEOUT", DatabaseSettings.pool_timeout),
            "pool_recycle": os.getenv("VARIATION_DB_POOL_RECYCLE", DatabaseSettings.pool_recycle),
            "echo": os.getenv("DEBUG", "False"),
        },
        origin="the environment",
    )

    if config_file:
        overrides = load_config(config_file)
        unknown = set(overrides) - set(DatabaseSettings.__dataclass_fields__)
        if unknown:
            raise ConfigLoaderError(f"Unknown database settings in '{config_file}': {sorted(unknown)}")
        values.update(_coerce_settings(overrides, origin=f"'{config_file}'"))

    if not values["url"]:
        try:
            validate_config(values, ["dialect", "host", "database"])
        except ConfigLoaderError as e:
            raise ConfigLoaderError(
                f"{e}. Set VARIATION_DB_URL, VARIATION_DB_NAME, or "
                "VARIATION_SPECIES/VARIATION_RELEASE/VARIATION_ASSEMBLY."
            ) from e
    return DatabaseSettings(**values)


def build_database_url(settings: DatabaseSettings) -> URL:
    """
    Returns the SQLAlchemy URL described by the settings.
    """
    if settings.url:
        return make_url(settings.url)
    return URL.create(
        drivername=settings.dialect,
        username=settings.user,
        password=settings.password or None,
        host=settings.host,
        port=settings.port,
        database=settings.database,
    )


def create_variation_engine(settings: Optional[DatabaseSettings] = None, url=None) -> Engine:
    """
    Creates a SQLAlchemy engine for a variation database.

    Args:
        settings (Optional[DatabaseSettings]): Settings to use; read from the environment when omitted.
        url: Explicit URL (string or URL); pool settings still come from `settings` if given.

    Returns:
        Engine: A new engine. The caller owns it and should dispose() it.

    Raises:
        RuntimeError: If SQLAlchemy cannot create the engine.
    """
    if url is None:
        settings = settings or get_database_settings()
        url = build_database_url(settings)
    else:
        url = make_url(url)
        settings = settings or DatabaseSettings(url=url.render_as_string(hide_password=False))

    engine_options = {"echo": settings.echo}
    # SQLite uses a single-connection pool that rejects sizing options
    if url.get_backend_name() != "sqlite":
        engine_options.update(
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_timeout=settings.pool_timeout,
            pool_recycle=settings.pool_recycle,
            pool_pre_ping=True,
        )

    try:
        engine = create_engine(url, **engine_options)
    except SQLAlchemyError as e:
        logger.error(f"SQLAlchemyError during engine creation: {e}")
        raise RuntimeError(
            "Unexpected SQLAlchemy error occurred during engine creation. Verify the database URL."
        ) from e
    logger.info(f"Engine created for {url.render_as_string(hide_password=True)}.")
    return engine


def reject_record_writes(session, flush_context, instances) -> None:
    """
    before_flush listener refusing to persist changes to variation records.
    """
    pending = [
        obj for obj in chain(session.new, session.dirty, session.deleted)
        if isinstance(obj, VariationRecord)
    ]
    if pending:
        raise ReadOnlyRecordError(
            f"Variation records are read-only; refusing to flush {len(pending)} change(s): {pending[:3]}"
        )


def create_session_factory(engine: Engine, read_only: bool = True) -> sessionmaker:
    """
    Creates a session factory bound to an engine.

    Args:
        engine (Engine): Engine returned by create_variation_engine().
        read_only (bool): Refuse to flush inserts, updates or deletes of variation records.

    Returns:
        sessionmaker: Factory producing sessions for VariationRepository.
    """
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    if read_only:
        event.listen(session_factory, "before_flush", reject_record_writes)
    return session_factory


@contextmanager
def get_session_context(session_factory: sessionmaker):
    """
    Provides a session as a context manager.

    The session is always closed; it is rolled back when a SQLAlchemy error escapes.

    Yields:
        Session: A SQLAlchemy session for ORM operations.
    """
    session = session_factory()
    try:
        yield session
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error during session operation: {e}")
        raise
    finally:
        session.close()
        logger.debug("Session closed.")
