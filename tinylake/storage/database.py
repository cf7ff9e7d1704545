"""
Database class that manages multiple tables.

The Database is the top-level container for tables, providing:
- Table registration and removal
- Table lookup by the name a query uses after FROM
- Database-wide introspection
"""

from typing import Dict, List, Any
from .table import Table, Column
from .types import Field
from ..utils.exceptions import TableNotFoundError, TableAlreadyExistsError
from ..utils.validators import validate_identifier


class Database:
    """
    Represents a catalog of named tables.

    Responsibilities:
    - Manage table lifecycle (register, drop, lookup)
    - Provide database-wide introspection

    Does NOT:
    - Parse queries
    - Execute queries
    - Format results
    """

    def __init__(self, name: str = "default"):
        """
        Initialize an empty database.

        Args:
            name: Database name
        """
        self.name = name
        self._tables: Dict[str, Table] = {}

    def add_table(self, table: Table, replace: bool = False) -> Table:
        """
        Register an existing table under its own name.

        Args:
            table: Table to register
            replace: Overwrite a table of the same name instead of failing

        Returns:
            The registered table

        Raises:
            TableAlreadyExistsError: If the name is taken and replace is False
            InvalidIdentifierError: If table name is invalid
        """
        validate_identifier(table.name)

        if table.name in self._tables and not replace:
            raise TableAlreadyExistsError(table.name)

        self._tables[table.name] = table
        return table

    def create_table(self, table_name: str, fields: List[Field]) -> Table:
        """
        Create and register an empty table.

        Args:
            table_name: Name for the new table
            fields: Schema of the new table

        Returns:
            The created Table object
        """
        table = Table(table_name, [Column(f, []) for f in fields])
        return self.add_table(table)

    def drop_table(self, table_name: str) -> None:
        """
        Remove a table from the database.

        Raises:
            TableNotFoundError: If table doesn't exist
        """
        if table_name not in self._tables:
            raise TableNotFoundError(table_name)

        del self._tables[table_name]

    def get_table(self, table_name: str) -> Table:
        """
        Get a table by name.

        Raises:
            TableNotFoundError: If table doesn't exist
        """
        if table_name not in self._tables:
            raise TableNotFoundError(table_name)

        return self._tables[table_name]

    def has_table(self, table_name: str) -> bool:
        """Check if a table exists."""
        return table_name in self._tables

    def list_tables(self) -> List[str]:
        """Get list of all table names."""
        return list(self._tables.keys())

    def table_count(self) -> int:
        """Return number of tables in database."""
        return len(self._tables)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get database statistics.

        Returns:
            Dict with database statistics
        """
        return {
            'name': self.name,
            'table_count': len(self._tables),
            'tables': {
                name: {
                    'row_count': table.row_count(),
                    'column_count': table.num_columns,
                    'null_count': sum(col.null_count() for col in table.columns)
                }
                for name, table in self._tables.items()
            }
        }

    def __repr__(self) -> str:
        return f"Database({self.name}, {len(self._tables)} tables)"
