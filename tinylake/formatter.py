"""
Result formatter for displaying query results.

Separates presentation logic from execution logic.
"""

from typing import List
from tabulate import tabulate

from .storage.table import Table
from .utils.row_utils import table_to_records

NULL_TEXT = "NULL"


def _plural(count: int) -> str:
    return 's' if count != 1 else ''


def format_table_result(table: Table) -> str:
    """
    Format a result table as an ASCII grid.

    Args:
        table: Result table

    Returns:
        Formatted string with the grid and a row count footer
    """
    if table.num_rows == 0:
        if not table.columns:
            return "(0 rows)"
        header = tabulate([], headers=table.column_names, tablefmt='grid')
        return header + "\n(0 rows)"

    grid = tabulate(
        table_to_records(table),
        headers=table.column_names,
        tablefmt='grid',
        missingval=NULL_TEXT
    )
    row_count = f"\n({table.num_rows} row{_plural(table.num_rows)})"

    return grid + row_count


def format_schema(table: Table) -> List[str]:
    """One line per column: name, type and nullability."""
    lines = []
    for field in table.fields:
        line = f"  {field.name}: {field.data_type.value}"
        if not field.nullable:
            line += " [NOT NULL]"
        lines.append(line)
    return lines


def format_load_result(table: Table) -> str:
    """
    Format the result of loading a table.

    Args:
        table: Newly loaded table

    Returns:
        Formatted string
    """
    return (
        f"LOAD OK: {table.name} "
        f"({table.num_rows} row{_plural(table.num_rows)}, "
        f"{table.num_columns} column{_plural(table.num_columns)})"
    )
