"""
Columnar table implementation.

The Table class is responsible for:
- Holding equal-length typed columns under an ordered schema
- Column lookup by name
- Providing row access methods

It does NOT handle:
- Query parsing
- Query execution logic
- Result formatting

Tables are never modified after construction. The executor always builds
new tables for its results.
"""

from typing import List, Dict, Any, Optional, Sequence, Iterator
from .types import Field


class Column:
    """
    One column of a table: a Field plus a list of values.

    NULL cells are stored as None.
    """

    def __init__(self, field: Field, values: Sequence[Any], validate: bool = True):
        """
        Create a column.

        Args:
            field: Column metadata
            values: Cell values, None for NULL
            validate: Check every value against the field

        Raises:
            TypeValidationError: If a value doesn't match the field type
            ConstraintViolationError: If NULL is stored in a non-nullable field
        """
        self.field = field
        self._values = tuple(values)
        if validate:
            for value in self._values:
                field.validate(value)

    @property
    def name(self) -> str:
        return self.field.name

    @property
    def data_type(self):
        return self.field.data_type

    def is_valid(self, row: int) -> bool:
        """Check that the cell at row is not NULL."""
        return self._values[row] is not None

    def value(self, row: int) -> Any:
        """Raw cell value at row (None for NULL)."""
        return self._values[row]

    def null_count(self) -> int:
        return sum(1 for value in self._values if value is None)

    def take(self, indices: Sequence[int]) -> 'Column':
        """New column holding the cells at the given row indices, in order."""
        return Column(self.field, [self._values[i] for i in indices], validate=False)

    def to_list(self) -> List[Any]:
        return list(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"Column({self.field!r}, {len(self)} values)"


class Table:
    """
    An ordered set of named, typed columns of equal length.

    A row index 0..num_rows identifies one tuple across all columns.
    """

    def __init__(self, name: str, columns: List[Column], num_rows: Optional[int] = None):
        """
        Create a table.

        Args:
            name: Table name
            columns: Columns in schema order
            num_rows: Row count; required only for a table without columns

        Raises:
            ValueError: If columns differ in length
        """
        lengths = {len(col) for col in columns}
        if len(lengths) > 1:
            raise ValueError(
                f"Columns of table '{name}' have different lengths: {sorted(lengths)}"
            )

        self.name = name
        self.columns = list(columns)
        if columns:
            self._num_rows = lengths.pop()
        else:
            self._num_rows = num_rows or 0

    @classmethod
    def from_rows(
        cls,
        name: str,
        fields: List[Field],
        rows: List[Dict[str, Any]]
    ) -> 'Table':
        """
        Build a table from row dicts. Missing keys become NULL.

        Example:
            Table.from_rows("prices", [Field("Region", DataType.STRING)],
                            [{"Region": "A"}, {"Region": "B"}])
        """
        columns = [
            Column(f, [row.get(f.name) for row in rows])
            for f in fields
        ]
        return cls(name, columns, num_rows=len(rows))

    @classmethod
    def from_columns(cls, name: str, data: Dict[Field, Sequence[Any]]) -> 'Table':
        """Build a table from a field -> values mapping (insertion ordered)."""
        return cls(name, [Column(f, values) for f, values in data.items()])

    @property
    def fields(self) -> List[Field]:
        """Schema as an ordered list of fields."""
        return [col.field for col in self.columns]

    @property
    def column_names(self) -> List[str]:
        return [col.name for col in self.columns]

    @property
    def num_rows(self) -> int:
        return self._num_rows

    @property
    def num_columns(self) -> int:
        return len(self.columns)

    def row_count(self) -> int:
        """Return number of rows."""
        return self._num_rows

    def column(self, index: int) -> Column:
        """Column at schema position index."""
        return self.columns[index]

    def column_index(self, column_name: str) -> int:
        """
        Position of the first column with this exact name.

        Linear scan, case-sensitive. Returns -1 if absent.
        """
        for i, col in enumerate(self.columns):
            if col.name == column_name:
                return i
        return -1

    def has_column(self, column_name: str) -> bool:
        return self.column_index(column_name) != -1

    def get_column(self, column_name: str) -> Optional[Column]:
        """Column with this exact name, or None."""
        index = self.column_index(column_name)
        if index == -1:
            return None
        return self.columns[index]

    def row(self, index: int) -> Dict[str, Any]:
        """Row at index as a column name -> value dict."""
        return {col.name: col.value(index) for col in self.columns}

    def scan(self) -> Iterator[Dict[str, Any]]:
        """
        Iterate over all rows as dicts.

        Yields:
            Row dicts in row order
        """
        for index in range(self._num_rows):
            yield self.row(index)

    def __repr__(self) -> str:
        return f"Table({self.name}, {self.num_columns} columns, {self._num_rows} rows)"
