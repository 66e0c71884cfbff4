# File: utils/schema_checker.py
# This script checks that a variation database is reachable (with retry logic and exponential
# backoff) and compares the declared entity schemas with the tables that actually exist upstream.

import logging  # Import the logging module to log connection status
import time  # Import the time module for delays between retry attempts
from dataclasses import dataclass, field
from typing import Dict, List

from sqlalchemy import inspect, text  # Import inspect for reflection and text for raw SQL
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError  # Import OperationalError to handle connection issues

from config.logger_config import configure_logger
from db.schema_registry import SchemaRegistry, variation_registry
from utils.exceptions import DatabaseConnectionError

logger = configure_logger(name="VariationSchemaChecker", log_file="schema_checker.log", level=logging.INFO)


@dataclass
class SchemaReport:
    """
    Result of comparing declared schemas with a live database.

    Attributes:
        missing_tables (List[str]): Declared tables absent from the database.
        missing_columns (Dict[str, List[str]]): Declared columns absent from existing tables.
    """
    missing_tables: List[str] = field(default_factory=list)
    missing_columns: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.missing_tables and not self.missing_columns


class VariationSchemaChecker:
    """
    Checks the connection to a variation database and the presence of declared tables.
    """

    def __init__(self, engine: Engine, schema_registry: SchemaRegistry = variation_registry,
                 retries: int = 3, delay: int = 2) -> None:
        """
        Args:
            engine (Engine): Engine of the database to check.
            schema_registry (SchemaRegistry): Mapped registry whose tables are compared.
            retries (int): Maximum number of connection attempts.
            delay (int): Base delay (in seconds) between attempts, doubled after each failure.
        """
        self.engine = engine
        self.schema_registry = schema_registry
        self.retries = max(retries, 1)  # Ensure retries are at least 1
        self.delay = max(delay, 0)  # Ensure delay is non-negative

    def check_connection(self) -> bool:
        """
        Runs `SELECT 1` against the database, retrying on operational errors.

        Returns:
            bool: True once a connection succeeds.

        Raises:
            DatabaseConnectionError: If every attempt fails.
        """
        for attempt in range(1, self.retries + 1):
            try:
                with self.engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                logger.info("Variation database connection successful.")
                return True
            except OperationalError as e:
                wait = self.delay * (2 ** (attempt - 1))
                logger.warning(f"Attempt {attempt}: connection failed. Error: {e}. Retrying in {wait} seconds...")
                if attempt < self.retries:
                    time.sleep(wait)
        raise DatabaseConnectionError(self.engine.url.render_as_string(hide_password=True))

    def check_declared_schema(self) -> SchemaReport:
        """
        Compares every mapped table and its columns with the live database.

        Returns:
            SchemaReport: Missing tables and columns; `report.ok` when nothing is missing.
        """
        inspector = inspect(self.engine)
        existing_tables = set(inspector.get_table_names())
        report = SchemaReport()

        for schema in self.schema_registry.schemas():
            table = self.schema_registry.table_for(schema.entity)
            if table.name not in existing_tables:
                report.missing_tables.append(table.name)
                continue
            upstream_columns = {column["name"] for column in inspector.get_columns(table.name)}
            missing = [column.name for column in table.columns if column.name not in upstream_columns]
            if missing:
                report.missing_columns[table.name] = missing

        if report.ok:
            logger.info("All declared variation tables and columns are present.")
        else:
            logger.warning(
                f"Schema mismatch: missing tables {report.missing_tables}, missing columns {report.missing_columns}"
            )
        return report

    def describe_incomplete_entities(self) -> Dict[str, List[str]]:
        """
        Reads the upstream columns of every entity declared as incomplete.

        Returns:
            Dict[str, List[str]]: Entity name -> upstream column names (empty if the table is absent).
        """
        inspector = inspect(self.engine)
        existing_tables = set(inspector.get_table_names())
        described = {}
        for schema in self.schema_registry.schemas():
            if not schema.incomplete:
                continue
            if schema.table_name in existing_tables:
                described[schema.entity] = [column["name"] for column in inspector.get_columns(schema.table_name)]
            else:
                described[schema.entity] = []
            logger.info(f"Upstream columns of {schema.entity}: {described[schema.entity]}")
        return described
