class VariationDatabaseError(Exception):
    """
    Base class for every error raised by the variation mapping layer.
    """
    pass


class RecordNotFoundError(VariationDatabaseError, LookupError):
    """
    Raised when a lookup by primary key or by query yields no row.
    """
    def __init__(self, entity_name, key):
        self.entity_name = entity_name
        self.key = key
        message = f"No {entity_name} record found for {key!r}"
        super().__init__(message)


class VariationQueryError(VariationDatabaseError, RuntimeError):
    """
    Raised when the underlying database is unreachable or rejects a query.
    The original SQLAlchemy exception is kept as the cause.
    """
    def __init__(self, operation, original):
        self.operation = operation
        self.original = original
        super().__init__(f"Query failed during {operation}: {original}")


class UnknownAttributeError(VariationDatabaseError, ValueError):
    """
    Raised when a column name is not part of an entity's declared schema.
    """
    def __init__(self, entity_name, attribute):
        self.entity_name = entity_name
        self.attribute = attribute
        super().__init__(f"{entity_name} has no column named '{attribute}'")


class UnknownRelationshipError(VariationDatabaseError, ValueError):
    """
    Raised when a relationship name is not declared for an entity.
    """
    def __init__(self, entity_name, relationship):
        self.entity_name = entity_name
        self.relationship = relationship
        super().__init__(f"{entity_name} declares no relationship named '{relationship}'")


class SchemaDefinitionError(VariationDatabaseError):
    """
    Raised when schema descriptions are inconsistent with each other.
    """
    pass


class ReadOnlyRecordError(VariationDatabaseError):
    """
    Raised when a read-only session is asked to persist changes to variation records.
    """
    pass


class DatabaseConnectionError(VariationDatabaseError):
    """
    Custom exception for database connection failures.

    Attributes:
        db_url (str): Rendered database URL (password hidden) that could not be reached.
    """

    def __init__(self, db_url, message="Database connection failed"):
        self.db_url = db_url
        super().__init__(f"{message}: {db_url}")
