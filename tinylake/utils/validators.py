"""
Reusable validation functions used across TinyLake.

These validators provide single sources of truth for validation logic,
preventing duplication across storage, loading, and catalog modules.
"""

import re
from typing import Any
from .exceptions import InvalidIdentifierError, TypeValidationError


# Words the lexer turns into keyword tokens; a table named like one
# could never appear after FROM.
RESERVED_WORDS = frozenset({
    'SELECT', 'FROM', 'WHERE', 'GROUP', 'BY', 'AND', 'OR', 'NOT'
})

_IDENTIFIER_RE = re.compile(r'^[^\W\d]\w*$')


def validate_identifier(name: str) -> bool:
    """
    Validates table names.

    Rules:
    - Must start with a letter or underscore
    - Can contain letters, numbers, and underscores
    - Must be between 1 and 64 characters
    - Cannot be a query keyword

    Args:
        name: The identifier to validate

    Returns:
        True if valid

    Raises:
        InvalidIdentifierError: If the identifier is invalid
    """
    if not name:
        raise InvalidIdentifierError(name, "Identifier cannot be empty")

    if len(name) > 64:
        raise InvalidIdentifierError(name, "Identifier too long (max 64 characters)")

    if name.upper() in RESERVED_WORDS:
        raise InvalidIdentifierError(name, "Cannot use a query keyword")

    if not _IDENTIFIER_RE.match(name):
        raise InvalidIdentifierError(
            name,
            "Must start with letter or underscore, and contain only letters, numbers, and underscores"
        )

    return True


def validate_value_for_type(value: Any, data_type: str) -> bool:
    """
    Validates that a value matches the expected data type.

    Single source of truth for type checking, used by Field.validate()
    when columns are built.

    Args:
        value: The value to validate
        data_type: The expected type ('FLOAT64', 'STRING', 'INTEGER', 'BOOLEAN')

    Returns:
        True if valid

    Raises:
        TypeValidationError: If value doesn't match the expected type
    """
    if value is None:
        # NULL handling is done separately via nullability
        return True

    data_type = data_type.upper()

    if data_type == 'FLOAT64':
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise TypeValidationError('', data_type, value)
        return True

    elif data_type == 'STRING':
        if not isinstance(value, str):
            raise TypeValidationError('', data_type, value)
        return True

    elif data_type == 'INTEGER':
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeValidationError('', data_type, value)
        return True

    elif data_type == 'BOOLEAN':
        if not isinstance(value, bool):
            raise TypeValidationError('', data_type, value)
        return True

    else:
        raise ValueError(f"Unknown data type: {data_type}")


def parse_float(text: str) -> float:
    """
    Parse text as a 64-bit float.

    Stricter than float(): surrounding whitespace and digit-group
    underscores are rejected.

    Raises:
        ValueError: If the text is not a float
    """
    if '_' in text or text != text.strip():
        raise ValueError(f"could not convert string to float: {text!r}")
    return float(text)


def is_float_text(text: str) -> bool:
    """Check whether a string parses as a 64-bit float."""
    try:
        parse_float(text)
    except ValueError:
        return False
    return True


def coerce_value_to_type(value: Any, data_type: str) -> Any:
    """
    Attempts to coerce a raw cell to the specified type.

    Used by the CSV loader to turn text cells into typed values.
    Empty strings become NULL.

    Args:
        value: The value to coerce (typically a string from a CSV cell)
        data_type: Target type

    Returns:
        The coerced value

    Raises:
        TypeValidationError: If coercion fails
    """
    if value is None or value == '':
        return None

    data_type = data_type.upper()

    try:
        if data_type == 'FLOAT64':
            return parse_float(value) if isinstance(value, str) else float(value)
        elif data_type == 'INTEGER':
            return int(value)
        elif data_type == 'BOOLEAN':
            if isinstance(value, bool):
                return value
            if isinstance(value, str):
                value_lower = value.lower()
                if value_lower in ('true', '1', 'yes'):
                    return True
                elif value_lower in ('false', '0', 'no'):
                    return False
            raise ValueError()
        elif data_type == 'STRING':
            return str(value)
        else:
            raise ValueError(f"Unknown data type: {data_type}")
    except (ValueError, TypeError):
        raise TypeValidationError('', data_type, value)
