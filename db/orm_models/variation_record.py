# orm_models/variation_record.py

"""
File: variation_record.py
Plain data-holding base type shared by every entity of the variation database.

Records are read-only projections of rows loaded by upstream pipelines. They carry
column values only: related records are reached through
`VariationRepository.related`, never through attribute access.
"""

from typing import Any, Dict, Optional

import yaml
from sqlalchemy import inspect as sa_inspect

from db.schema.table_schema import TableSchema


class VariationRecord:
    """
    Base class of all mapped variation entities.

    Attributes:
        __schema__ (TableSchema): Schema description attached at registration.
    """

    __schema__: Optional[TableSchema] = None

    def __init__(self, **values: Any) -> None:
        for key, value in values.items():
            if not hasattr(type(self), key):
                raise TypeError(f"{key!r} is an invalid keyword argument for {type(self).__name__}")
            setattr(self, key, value)

    @classmethod
    def column_names(cls):
        """Names of all mapped columns (primary key, data columns and foreign keys)."""
        return [attribute.key for attribute in sa_inspect(cls).column_attrs]

    @property
    def primary_key_value(self) -> Any:
        return getattr(self, self.__schema__.primary_key)

    def to_dict(self) -> Dict[str, Any]:
        """
        Returns the column values of the record, keyed by column name.
        """
        return {name: getattr(self, name) for name in self.column_names()}

    def to_yaml(self) -> str:
        """
        Renders the column values of the record as a YAML document.
        """
        return yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def __repr__(self):
        schema = self.__schema__
        if schema is None:
            return f"<{type(self).__name__}>"
        return f"<{type(self).__name__}({schema.primary_key}={self.primary_key_value})>"
