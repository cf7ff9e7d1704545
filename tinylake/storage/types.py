"""
Column data type definitions and validation.

The Field class is the single source of truth for column metadata
and type validation, used throughout storage and execution layers.
"""

from typing import Any
from enum import Enum

from ..utils.validators import validate_value_for_type
from ..utils.exceptions import TypeValidationError, ConstraintViolationError


class DataType(Enum):
    """Storable column data types."""
    FLOAT64 = "FLOAT64"
    STRING = "STRING"
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"

    @classmethod
    def from_string(cls, type_str: str) -> 'DataType':
        """Convert string representation to DataType enum."""
        type_str = type_str.upper()
        # Handle aliases
        if type_str in ('FLOAT', 'DOUBLE', 'REAL'):
            return cls.FLOAT64
        elif type_str in ('TEXT', 'VARCHAR', 'UTF8'):
            return cls.STRING
        elif type_str == 'INT':
            return cls.INTEGER
        elif type_str == 'BOOL':
            return cls.BOOLEAN
        else:
            return cls[type_str]


# Types the query engine can read; anything else is rejected at evaluation.
ENGINE_TYPES = frozenset({DataType.FLOAT64, DataType.STRING})


class Field:
    """
    Metadata for one table column: name, type and nullability.

    Field names are not restricted to identifiers (CSV headers such as
    "Market Cap" are valid); only the parser decides what a query can name.
    """

    def __init__(self, name: str, data_type: DataType, nullable: bool = True):
        """
        Initialize a field.

        Args:
            name: Column name
            data_type: Data type enum
            nullable: Whether the column may hold NULL
        """
        if not name:
            raise ValueError("Field name cannot be empty")
        self.name = name
        self.data_type = data_type
        self.nullable = nullable

    def validate(self, value: Any) -> None:
        """
        Validate a value against this field's type and nullability.

        Raises:
            TypeValidationError: If type doesn't match
            ConstraintViolationError: If NULL is given for a non-nullable field
        """
        if value is None:
            if not self.nullable:
                raise ConstraintViolationError(
                    f"Column '{self.name}' cannot be NULL"
                )
            return

        try:
            validate_value_for_type(value, self.data_type.value)
        except TypeValidationError:
            # Re-raise with the column name attached
            raise TypeValidationError(self.name, self.data_type.value, value)

    def with_name(self, name: str) -> 'Field':
        """Copy of this field under another name."""
        return Field(name, self.data_type, self.nullable)

    def to_dict(self) -> dict:
        """
        Serialize field to dictionary.

        Used for schema introspection (REPL .schema, web API).
        """
        return {
            'name': self.name,
            'data_type': self.data_type.value,
            'nullable': self.nullable,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Field':
        """Deserialize field from dictionary."""
        return cls(
            name=data['name'],
            data_type=DataType.from_string(data['data_type']),
            nullable=data.get('nullable', True),
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Field):
            return NotImplemented
        return (
            self.name == other.name
            and self.data_type == other.data_type
            and self.nullable == other.nullable
        )

    def __hash__(self) -> int:
        return hash((self.name, self.data_type, self.nullable))

    def __repr__(self) -> str:
        null_str = "" if self.nullable else ", NOT NULL"
        return f"Field({self.name}, {self.data_type.value}{null_str})"
