"""
This module defines the data structures used to describe the tables of the
Ensembl variation database.

Overview:
    - `Cardinality`: the three relationship kinds (belongs-to, has-one, has-many).
    - `ColumnSpec`: a plain data column of a table.
    - `RelationshipSpec`: a named association to another entity.
    - `TableSchema`: everything the mapping engine needs to know about one entity.

Conventions:
    - Tables without an explicit primary key use the column `id`.
    - A MANY_TO_ONE relationship named `x` is stored in the owner's column `x_id`.
    - ONE_TO_ONE and ONE_TO_MANY relationships are stored in the target's column
      `<owner table>_id`.
"""

import enum
import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

from sqlalchemy.types import TypeEngine

DEFAULT_PRIMARY_KEY = "id"


class Cardinality(enum.Enum):
    """
    Relationship kinds supported by the mapping engine.
    """
    MANY_TO_ONE = "many_to_one"
    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"

    @property
    def owner_holds_key(self) -> bool:
        # Only belongs-to relationships keep the foreign key on the owning table
        return self is Cardinality.MANY_TO_ONE

    @property
    def returns_collection(self) -> bool:
        return self is Cardinality.ONE_TO_MANY


def table_name_for(entity: str) -> str:
    """
    Converts an entity name to its singular snake_case table name
    (e.g. 'AlleleGroupAllele' -> 'allele_group_allele').
    """
    return re.sub(r"(?<!^)(?=[A-Z])", "_", entity).lower()


@dataclass(frozen=True)
class ColumnSpec:
    """
    A data column of a table. Primary keys and foreign keys are not declared
    here; the mapping engine derives them from the table schema.
    """
    name: str
    type_: TypeEngine
    nullable: bool = True
    doc: Optional[str] = None


@dataclass(frozen=True)
class RelationshipSpec:
    """
    A named association from one entity to another.

    Attributes:
        name (str): Attribute name of the relationship on the owning entity.
        target (str): Entity name of the related type.
        cardinality (Cardinality): Kind of the association.
        foreign_key (Optional[str]): Explicit foreign key column name, when the
            conventional name does not apply.
    """
    name: str
    target: str
    cardinality: Cardinality
    foreign_key: Optional[str] = None


def belongs_to(name: str, target: str, foreign_key: Optional[str] = None) -> RelationshipSpec:
    return RelationshipSpec(name, target, Cardinality.MANY_TO_ONE, foreign_key)


def has_one(name: str, target: str, foreign_key: Optional[str] = None) -> RelationshipSpec:
    return RelationshipSpec(name, target, Cardinality.ONE_TO_ONE, foreign_key)


def has_many(name: str, target: str, foreign_key: Optional[str] = None) -> RelationshipSpec:
    return RelationshipSpec(name, target, Cardinality.ONE_TO_MANY, foreign_key)


@dataclass(frozen=True)
class TableSchema:
    """
    Schema description of one entity of the variation database.

    Attributes:
        entity (str): Name of the entity (and of the class registered for it).
        table_name (str): Table name; derived from the entity name when empty.
        primary_key (str): Primary key column name.
        columns (Tuple[ColumnSpec, ...]): Data columns.
        relationships (Tuple[RelationshipSpec, ...]): Associations to other entities.
        is_join (bool): True for tables that only represent a many-to-many association.
        incomplete (bool): True when the upstream definition of the table is not
            known; such entities declare no data columns.
        description (Optional[str]): Free text shown in schema reports.
    """
    entity: str
    table_name: str = ""
    primary_key: str = DEFAULT_PRIMARY_KEY
    columns: Tuple[ColumnSpec, ...] = field(default_factory=tuple)
    relationships: Tuple[RelationshipSpec, ...] = field(default_factory=tuple)
    is_join: bool = False
    incomplete: bool = False
    description: Optional[str] = None

    def __post_init__(self):
        if not self.table_name:
            # Frozen dataclass: bypass the immutability guard for the derived default
            object.__setattr__(self, "table_name", table_name_for(self.entity))

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def relationship(self, name: str) -> Optional[RelationshipSpec]:
        for relationship in self.relationships:
            if relationship.name == name:
                return relationship
        return None

    def foreign_key_name(self, relationship: RelationshipSpec) -> str:
        """
        Returns the foreign key column used by one of this entity's relationships.
        For MANY_TO_ONE the column lives on this table, otherwise on the target table.
        """
        if relationship.foreign_key:
            return relationship.foreign_key
        if relationship.cardinality.owner_holds_key:
            return f"{relationship.name}_id"
        return f"{self.table_name}_id"
