"""
Row conversion utilities shared by the formatter and the web API.

Tables are columnar; these helpers give the row-oriented views that
presentation code wants.
"""

from typing import Dict, Any, List, Optional

from ..storage.table import Table


def table_to_records(table: Table) -> List[List[Any]]:
    """
    Rows as positional lists, in schema order.

    Duplicate column names (SELECT Close, Close) keep their own cells.

    Example:
        table with columns Region=["A", "B"], Volume=[1.0, None]
        table_to_records(table) -> [['A', 1.0], ['B', None]]
    """
    return [
        [col.value(row) for col in table.columns]
        for row in range(table.num_rows)
    ]


def table_to_rows(table: Table, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Materialize rows as column name -> value dicts.

    Args:
        table: Table to read
        limit: Stop after this many rows

    Example:
        table_to_rows(table) -> [{'Region': 'A', 'Volume': 1.0},
                                 {'Region': 'B', 'Volume': None}]
    """
    count = table.num_rows if limit is None else min(limit, table.num_rows)
    return [table.row(index) for index in range(count)]
