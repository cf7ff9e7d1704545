"""
CSV ingestion into columnar tables.

The first line of the file is the header. Without an explicit schema each
column's type is inferred: FLOAT64 when every non-empty cell parses as a
float, STRING otherwise. Empty cells load as NULL.
"""

import csv
import logging
from pathlib import Path
from typing import List, Optional

from .table import Table, Column
from .types import DataType, Field
from ..utils.validators import coerce_value_to_type, is_float_text
from ..utils.exceptions import TypeValidationError

logger = logging.getLogger(__name__)


def infer_field(name: str, cells: List[str]) -> Field:
    """Pick FLOAT64 or STRING for a column from its raw cells."""
    present = [cell for cell in cells if cell != '']
    if present and all(is_float_text(cell) for cell in present):
        return Field(name, DataType.FLOAT64)
    return Field(name, DataType.STRING)


def load_csv(
    path,
    table_name: Optional[str] = None,
    fields: Optional[List[Field]] = None
) -> Table:
    """
    Load a CSV file into a Table.

    Args:
        path: File to read
        table_name: Name of the resulting table (defaults to the file stem)
        fields: Explicit schema, one Field per header column in order

    Returns:
        New Table holding the file's rows

    Raises:
        ValueError: If the file has no header or a row has the wrong width
        TypeValidationError: If a cell cannot be coerced to its field's type
    """
    path = Path(path)
    name = table_name or path.stem

    with open(path, newline='', encoding='utf-8') as f:
        reader = csv.reader(f)
        try:
            header = next(reader)
        except StopIteration:
            raise ValueError(f"CSV file '{path}' has no header row")

        raw_columns: List[List[str]] = [[] for _ in header]
        for line_no, record in enumerate(reader, start=2):
            if not record:
                continue
            if len(record) != len(header):
                raise ValueError(
                    f"{path}:{line_no}: expected {len(header)} cells, got {len(record)}"
                )
            for cells, cell in zip(raw_columns, record):
                cells.append(cell.strip())

    if fields is None:
        fields = [infer_field(col_name, cells) for col_name, cells in zip(header, raw_columns)]
    elif len(fields) != len(header):
        raise ValueError(
            f"Schema has {len(fields)} fields but '{path}' has {len(header)} columns"
        )

    columns = []
    for field, cells in zip(fields, raw_columns):
        try:
            values = [coerce_value_to_type(cell, field.data_type.value) for cell in cells]
        except TypeValidationError as e:
            raise TypeValidationError(field.name, field.data_type.value, e.actual_value)
        columns.append(Column(field, values))

    table = Table(name, columns)
    logger.info("Loaded %d rows into table '%s' from %s", table.num_rows, name, path)
    return table
