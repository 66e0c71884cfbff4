# File: db/variation_repository.py
# Read access to the variation database through an explicitly passed SQLAlchemy session:
# lookup by primary key, column queries, column access and deferred relationship traversal.

import logging
from typing import Any, List, Optional

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, with_parent

from config.logger_config import configure_logger
from db.deferred import Deferred
from db.orm_models.variation_record import VariationRecord
from db.schema.table_schema import Cardinality
from db.schema_registry import EntityRef, SchemaRegistry, variation_registry
from utils.exceptions import (
    RecordNotFoundError,
    UnknownAttributeError,
    VariationQueryError,
)

logger = configure_logger(name="VariationRepository", log_file="variation_repository.log", level=logging.INFO)


class VariationRepository:
    """
    Typed, read-only access to variation records.

    The repository never opens or closes sessions itself; the caller owns the
    session's lifecycle (see config.db_config.get_session_context).
    """

    def __init__(self, session: Session, schema_registry: SchemaRegistry = variation_registry) -> None:
        """
        Args:
            session (Session): Session used for every query issued by this repository.
            schema_registry (SchemaRegistry): Registry holding the mapped entities.
        """
        self.session = session
        self.schema_registry = schema_registry

    def _run(self, operation: str, query_fn):
        try:
            return query_fn()
        except SQLAlchemyError as e:
            logger.error(f"Error during {operation}: {e}")
            raise VariationQueryError(operation, e) from e

    def _check_columns(self, entity_cls: type, names) -> None:
        known = set(entity_cls.column_names())
        for name in names:
            if name not in known:
                raise UnknownAttributeError(entity_cls.__name__, name)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def get(self, entity: EntityRef, key: Any) -> VariationRecord:
        """
        Fetches a record by primary key.

        Args:
            entity: Entity class or entity name.
            key: Primary key value.

        Returns:
            VariationRecord: The matching record.

        Raises:
            RecordNotFoundError: If no row has this primary key.
            VariationQueryError: If the database rejects the query.
        """
        entity_cls = self.schema_registry.entity(entity)
        if key is None:
            raise RecordNotFoundError(entity_cls.__name__, key)

        logger.debug(f"Looking up {entity_cls.__name__} with key {key!r}.")
        record = self._run(f"lookup of {entity_cls.__name__}", lambda: self.session.get(entity_cls, key))
        if record is None:
            raise RecordNotFoundError(entity_cls.__name__, key)
        return record

    def find_by(self, entity: EntityRef, **filters: Any) -> List[VariationRecord]:
        """
        Returns all records whose columns equal the given values, ordered by primary key.

        Raises:
            UnknownAttributeError: If a filter names an undeclared column.
            VariationQueryError: If the database rejects the query.
        """
        entity_cls = self.schema_registry.entity(entity)
        self._check_columns(entity_cls, filters)
        primary_key = getattr(entity_cls, entity_cls.__schema__.primary_key)
        return self._run(
            f"query of {entity_cls.__name__}",
            lambda: self.session.query(entity_cls).filter_by(**filters).order_by(primary_key).all(),
        )

    def find_one_by(self, entity: EntityRef, **filters: Any) -> VariationRecord:
        """
        Returns the first record (by primary key) matching the filters.

        Raises:
            RecordNotFoundError: If nothing matches.
        """
        entity_cls = self.schema_registry.entity(entity)
        self._check_columns(entity_cls, filters)
        primary_key = getattr(entity_cls, entity_cls.__schema__.primary_key)
        record = self._run(
            f"query of {entity_cls.__name__}",
            lambda: self.session.query(entity_cls).filter_by(**filters).order_by(primary_key).first(),
        )
        if record is None:
            raise RecordNotFoundError(entity_cls.__name__, filters)
        return record

    def all(self, entity: EntityRef, limit: Optional[int] = None) -> List[VariationRecord]:
        entity_cls = self.schema_registry.entity(entity)
        primary_key = getattr(entity_cls, entity_cls.__schema__.primary_key)
        query = self.session.query(entity_cls).order_by(primary_key)
        if limit is not None:
            query = query.limit(limit)
        return self._run(f"listing of {entity_cls.__name__}", query.all)

    def count(self, entity: EntityRef) -> int:
        entity_cls = self.schema_registry.entity(entity)
        return self._run(f"count of {entity_cls.__name__}", self.session.query(entity_cls).count)

    # ------------------------------------------------------------------
    # Record access
    # ------------------------------------------------------------------
    def attribute(self, record: VariationRecord, column: str) -> Any:
        """
        Returns a column value of a record by column name.

        Raises:
            UnknownAttributeError: If the column is not mapped for the record's entity.
        """
        self._check_columns(type(record), [column])
        return getattr(record, column)

    def relationship_names(self, entity: EntityRef) -> List[str]:
        return [spec.name for spec in self.schema_registry.schema_for(entity).relationships]

    def related(self, record: VariationRecord, name: str, cache: bool = False) -> Deferred:
        """
        Returns a deferred traversal of one of the record's relationships.

        Nothing is queried until the returned value is forced. MANY_TO_ONE and
        ONE_TO_ONE relationships force to a record or None, ONE_TO_MANY
        relationships force to a list ordered by the related primary key.

        Args:
            record (VariationRecord): Owning record; must be attached to this session.
            name (str): Relationship name declared for the record's entity.
            cache (bool): Keep the first result instead of re-querying on each force().

        Raises:
            UnknownRelationshipError: If the entity declares no such relationship.
            VariationQueryError: From force(), on any SQLAlchemy error during the traversal,
                including a record that is expired and no longer attached to a session.
        """
        owner_schema = self.schema_registry.schema_for(record)
        spec = self.schema_registry.relationship(owner_schema.entity, name)
        target_cls = self.schema_registry.entity(spec.target)
        target_key = getattr(target_cls, target_cls.__schema__.primary_key)
        # Identity is read without touching attributes, which may be expired on a detached record
        identity = sa_inspect(record).identity
        description = f"{owner_schema.entity}({identity[0] if identity else None}).{name}"

        def load():
            if spec.cardinality is Cardinality.MANY_TO_ONE:
                if getattr(record, owner_schema.foreign_key_name(spec)) is None:
                    return None

            logger.debug(f"Loading {description}.")
            query = (
                self.session.query(target_cls)
                .filter(with_parent(record, getattr(type(record), name)))
                .order_by(target_key)
            )
            if spec.cardinality.returns_collection:
                return query.all()
            return query.first()

        return Deferred(
            lambda: self._run(f"traversal of {description}", load), cache=cache, description=description
        )
