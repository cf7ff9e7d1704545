"""
Centralized exception hierarchy for TinyLake.

All custom exceptions inherit from TinyLakeError to provide a single base
for catching engine-specific errors. Lexer and parser errors share the
SQLSyntaxError base; everything else is raised while executing a query.
"""


class TinyLakeError(Exception):
    """Base exception for all TinyLake errors."""
    pass


# ----- Catalog -----

class TableNotFoundError(TinyLakeError):
    """Raised when attempting to access a non-existent table."""

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"Table '{table_name}' does not exist")


class TableAlreadyExistsError(TinyLakeError):
    """Raised when attempting to register a table that already exists."""

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"Table '{table_name}' already exists")


class InvalidIdentifierError(TinyLakeError):
    """Raised when a table name is invalid."""

    def __init__(self, identifier: str, reason: str):
        self.identifier = identifier
        self.reason = reason
        super().__init__(f"Invalid identifier '{identifier}': {reason}")


# ----- Storage -----

class ConstraintViolationError(TinyLakeError):
    """Raised when a NULL is stored in a non-nullable column."""

    def __init__(self, message: str):
        super().__init__(message)


class TypeValidationError(TinyLakeError):
    """Raised when a value doesn't match the expected column type."""

    def __init__(self, column_name: str, expected_type: str, actual_value):
        self.column_name = column_name
        self.expected_type = expected_type
        self.actual_value = actual_value
        super().__init__(
            f"Type mismatch for column '{column_name}': "
            f"expected {expected_type}, got {type(actual_value).__name__} ({actual_value})"
        )


# ----- Syntax -----

class SQLSyntaxError(TinyLakeError):
    """Raised when a query string cannot be tokenized or parsed."""

    def __init__(self, message: str, position: int = None):
        self.position = position
        msg = f"SQL syntax error: {message}"
        if position is not None:
            msg += f" at position {position}"
        super().__init__(msg)


class LexError(SQLSyntaxError):
    """Raised when the lexer meets a character it does not recognize."""

    def __init__(self, char: str, position: int):
        self.char = char
        super().__init__(f"unexpected character '{char}'", position)


class ParseError(SQLSyntaxError):
    """Raised when the token stream does not match the grammar."""

    def __init__(self, message: str, token_text: str = None, position: int = None):
        self.token_text = token_text
        super().__init__(message, position)


# ----- Execution -----

class ColumnNotFoundError(TinyLakeError):
    """Raised when referencing a non-existent column."""

    def __init__(self, column_name: str, table_name: str = None):
        self.column_name = column_name
        self.table_name = table_name
        msg = f"Column '{column_name}' does not exist"
        if table_name:
            msg += f" in table '{table_name}'"
        super().__init__(msg)


class UnsupportedColumnTypeError(TinyLakeError):
    """Raised when a query reads a column whose storage type the engine cannot evaluate."""

    def __init__(self, column_name: str, data_type: str):
        self.column_name = column_name
        self.data_type = data_type
        super().__init__(
            f"Column '{column_name}' has unsupported type {data_type}"
        )


class QueryTypeError(TinyLakeError):
    """Raised when a WHERE clause produces a non-boolean value."""

    def __init__(self, row: int, value):
        self.row = row
        self.value = value
        super().__init__(
            f"WHERE clause must evaluate to boolean, got {value!r} at row {row}"
        )


class ArityError(TinyLakeError):
    """Raised when an aggregate is called with the wrong number of arguments."""

    def __init__(self, function_name: str, expected: int, actual: int):
        self.function_name = function_name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{function_name} expects {expected} argument"
            f"{'s' if expected != 1 else ''}, got {actual}"
        )


class UnsupportedFunctionError(TinyLakeError):
    """Raised when a function name is not a known aggregate."""

    def __init__(self, function_name: str):
        self.function_name = function_name
        super().__init__(f"Unsupported aggregate function: {function_name}")


class UnsupportedExpressionError(TinyLakeError):
    """Raised when an expression appears in a position that cannot evaluate it."""

    def __init__(self, expression: str, context: str):
        self.expression = expression
        self.context = context
        super().__init__(f"Unsupported expression {expression} in {context}")
