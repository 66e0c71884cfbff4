# File: db/schema_registry.py
# Generic mapping engine for the variation database. Plain entity classes are registered
# together with their TableSchema description; map_all() turns the descriptions into
# SQLAlchemy tables and maps every class imperatively onto its table.

import logging
from typing import Dict, List, Optional, Tuple, Type, Union

from sqlalchemy import Column, ForeignKey, Integer, MetaData, Table
from sqlalchemy.orm import registry, relationship

from config.logger_config import configure_logger
from db.schema.table_schema import Cardinality, RelationshipSpec, TableSchema
from utils.exceptions import SchemaDefinitionError, UnknownRelationshipError

logger = configure_logger(name="SchemaRegistry", log_file="schema_registry.log", level=logging.INFO)

EntityRef = Union[str, type, object]


class SchemaRegistry:
    """
    Holds the schema descriptions of all entities and maps them onto SQLAlchemy.

    Attributes:
        metadata (MetaData): Metadata collecting the generated tables.
    """

    def __init__(self, metadata: Optional[MetaData] = None) -> None:
        self.metadata = metadata if metadata is not None else MetaData()
        self._mapper_registry = registry(metadata=self.metadata)
        self._schemas: Dict[str, TableSchema] = {}
        self._entities: Dict[str, type] = {}
        self._mapped = False

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(self, schema: TableSchema):
        """
        Class decorator registering a plain class under its schema description.

        Args:
            schema (TableSchema): Description of the entity's table.

        Raises:
            SchemaDefinitionError: If the entity is registered twice, the class name
                does not match the entity name, or mapping already happened.
        """
        def decorator(cls: type) -> type:
            if self._mapped:
                raise SchemaDefinitionError(
                    f"Cannot register {schema.entity}: the registry has already been mapped."
                )
            if schema.entity in self._schemas:
                raise SchemaDefinitionError(f"Entity {schema.entity} is already registered.")
            if cls.__name__ != schema.entity:
                raise SchemaDefinitionError(
                    f"Class {cls.__name__} cannot be registered as entity {schema.entity}."
                )
            cls.__schema__ = schema
            self._schemas[schema.entity] = schema
            self._entities[schema.entity] = cls
            return cls

        return decorator

    @property
    def is_mapped(self) -> bool:
        return self._mapped

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def entity_name(self, entity: EntityRef) -> str:
        if isinstance(entity, str):
            name = entity
        elif isinstance(entity, type):
            name = entity.__name__
        else:
            name = type(entity).__name__
        if name not in self._schemas:
            raise SchemaDefinitionError(f"Unknown entity: {name}")
        return name

    def schema_for(self, entity: EntityRef) -> TableSchema:
        """Returns the schema of an entity given as a name, a class or an instance."""
        return self._schemas[self.entity_name(entity)]

    def entity(self, entity: EntityRef) -> type:
        return self._entities[self.entity_name(entity)]

    def entities(self) -> List[type]:
        return list(self._entities.values())

    def schemas(self) -> List[TableSchema]:
        return list(self._schemas.values())

    def relationship(self, entity: EntityRef, name: str) -> RelationshipSpec:
        schema = self.schema_for(entity)
        spec = schema.relationship(name)
        if spec is None:
            raise UnknownRelationshipError(schema.entity, name)
        return spec

    def table_for(self, entity: EntityRef) -> Table:
        schema = self.schema_for(entity)
        if schema.table_name not in self.metadata.tables:
            raise SchemaDefinitionError(f"Table for {schema.entity} has not been built yet; call map_all().")
        return self.metadata.tables[schema.table_name]

    def foreign_key_columns(self, schema: TableSchema) -> Dict[str, Tuple[str, str]]:
        """
        Collects the foreign key columns stored on a table.

        Args:
            schema (TableSchema): Table whose foreign keys are collected.

        Returns:
            Dict[str, Tuple[str, str]]: Column name -> (referenced table, referenced column).

        Raises:
            SchemaDefinitionError: If two declarations derive the same column with
                different references.
        """
        columns: Dict[str, Tuple[str, str]] = {}
        for owner in self._schemas.values():
            for spec in owner.relationships:
                target = self._target_schema(owner, spec)
                column_name = owner.foreign_key_name(spec)
                if spec.cardinality.owner_holds_key:
                    if owner.entity != schema.entity:
                        continue
                    reference = (target.table_name, target.primary_key)
                else:
                    if target.entity != schema.entity:
                        continue
                    reference = (owner.table_name, owner.primary_key)
                existing = columns.get(column_name)
                if existing is not None and existing != reference:
                    raise SchemaDefinitionError(
                        f"Column {schema.table_name}.{column_name} references both "
                        f"{existing[0]}.{existing[1]} and {reference[0]}.{reference[1]}."
                    )
                columns[column_name] = reference
        return columns

    # ------------------------------------------------------------------
    # Validation and mapping
    # ------------------------------------------------------------------
    def _target_schema(self, owner: TableSchema, spec: RelationshipSpec) -> TableSchema:
        target = self._schemas.get(spec.target)
        if target is None:
            raise SchemaDefinitionError(
                f"{owner.entity}.{spec.name} targets unregistered entity {spec.target}."
            )
        return target

    def validate(self) -> None:
        """
        Checks the registered descriptions for consistency.

        Raises:
            SchemaDefinitionError: On unknown targets, name collisions, malformed join
                entities or conflicting foreign keys.
        """
        for schema in self._schemas.values():
            names = [schema.primary_key, *schema.column_names]
            if len(set(names)) != len(names):
                raise SchemaDefinitionError(f"{schema.entity} declares a column twice.")

            foreign_keys = self.foreign_key_columns(schema)
            clashing = set(foreign_keys) & set(names)
            if clashing:
                raise SchemaDefinitionError(
                    f"{schema.entity} declares foreign key column(s) {sorted(clashing)} as data columns."
                )

            for spec in schema.relationships:
                self._target_schema(schema, spec)
                if spec.name in names or spec.name in foreign_keys:
                    raise SchemaDefinitionError(
                        f"{schema.entity}.{spec.name} collides with a column of the same name."
                    )

            if schema.is_join:
                links = [spec for spec in schema.relationships if spec.cardinality is Cardinality.MANY_TO_ONE]
                if len(links) < 2 or len(links) != len(schema.relationships):
                    raise SchemaDefinitionError(
                        f"Join entity {schema.entity} must only link two or more entities by foreign key."
                    )
            if schema.incomplete and schema.columns:
                raise SchemaDefinitionError(
                    f"Incomplete entity {schema.entity} must not declare data columns."
                )

    def _build_table(self, schema: TableSchema) -> Table:
        columns = [Column(schema.primary_key, Integer, primary_key=True, autoincrement=True)]
        for spec in schema.columns:
            columns.append(Column(spec.name, spec.type_, nullable=spec.nullable, doc=spec.doc))
        for column_name, (table_name, referenced) in sorted(self.foreign_key_columns(schema).items()):
            columns.append(
                Column(column_name, Integer, ForeignKey(f"{table_name}.{referenced}"), nullable=True, index=True)
            )
        return Table(schema.table_name, self.metadata, *columns)

    def _build_relationship(self, schema: TableSchema, spec: RelationshipSpec):
        owner_table = self.metadata.tables[schema.table_name]
        target_schema = self._schemas[spec.target]
        target_table = self.metadata.tables[target_schema.table_name]
        column_name = schema.foreign_key_name(spec)

        if spec.cardinality.owner_holds_key:
            foreign_key = owner_table.c[column_name]
            join_condition = foreign_key == target_table.c[target_schema.primary_key]
        else:
            foreign_key = target_table.c[column_name]
            join_condition = owner_table.c[schema.primary_key] == foreign_key

        # Traversal is explicit (see VariationRepository.related); attribute access raises
        return relationship(
            self._entities[spec.target],
            primaryjoin=join_condition,
            foreign_keys=[foreign_key],
            uselist=spec.cardinality.returns_collection,
            order_by=target_table.c[target_schema.primary_key],
            viewonly=True,
            lazy="raise",
        )

    def map_all(self) -> MetaData:
        """
        Builds one table per registered schema and maps every registered class.
        Calling it again once mapped does nothing.

        Returns:
            MetaData: Metadata holding the generated tables.
        """
        if self._mapped:
            return self.metadata

        self.validate()

        for schema in self._schemas.values():
            self._build_table(schema)

        for schema in self._schemas.values():
            properties = {spec.name: self._build_relationship(schema, spec) for spec in schema.relationships}
            self._mapper_registry.map_imperatively(
                self._entities[schema.entity],
                self.metadata.tables[schema.table_name],
                properties=properties,
            )

        self._mapped = True
        logger.info(f"Mapped {len(self._schemas)} variation entities onto {len(self.metadata.tables)} tables.")
        return self.metadata


# Registry shared by the entity classes in db/orm_models/variation_objects.py
variation_registry = SchemaRegistry()
