"""
Query executor.

Executes a parsed Query against a columnar Table and builds a new result
Table. The input table is only read; every output column is built inside
the call that returns it.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

from ..parser import ast
from ..storage.database import Database
from ..storage.table import Table, Column
from ..storage.types import DataType, Field, ENGINE_TYPES
from ..utils.exceptions import (
    ColumnNotFoundError,
    UnsupportedColumnTypeError,
    UnsupportedExpressionError,
)
from . import values
from .aggregates import evaluate_aggregate
from .evaluator import ExpressionEvaluator, CoercionPolicy
from .planner import QueryPlanner, QueryShape

logger = logging.getLogger(__name__)

# Separator between the rendered parts of a GROUP BY key.
GROUP_KEY_SEPARATOR = "|"


def _result_name(table: Table) -> str:
    return f"{table.name}_result"


def _aggregate_field(func: ast.FuncCall) -> Field:
    return Field(func.name.upper(), DataType.FLOAT64, nullable=True)


class QueryExecutor:
    """
    Executes queries against tables.

    Uses QueryPlanner for row filtering and shape selection, and
    ExpressionEvaluator for per-row values.
    """

    def __init__(
        self,
        database: Optional[Database] = None,
        policy: CoercionPolicy = CoercionPolicy.LENIENT
    ):
        """
        Initialize executor.

        Args:
            database: Catalog used to resolve FROM clauses in execute()
            policy: How binary operands treat evaluation errors
        """
        self.database = database
        self.evaluator = ExpressionEvaluator(policy)
        self.planner = QueryPlanner(self.evaluator)

    def execute(self, query: ast.Query) -> Table:
        """
        Execute a query against the table it names.

        Raises:
            TableNotFoundError: If the FROM table is not in the database
            TinyLakeError: Any execution error, see execute_on()
        """
        if self.database is None:
            raise ValueError("QueryExecutor has no database; use execute_on()")
        table = self.database.get_table(query.table_name)
        return self.execute_on(query, table)

    def execute_on(self, query: ast.Query, table: Table) -> Table:
        """
        Execute a query against a given table. The FROM name is not checked.

        Returns:
            New result Table

        Raises:
            QueryTypeError: If WHERE yields a non-boolean
            ColumnNotFoundError: If a column is not in the table
            UnsupportedColumnTypeError: If a column has a type the engine cannot read
            ArityError: If an aggregate has the wrong argument count
            UnsupportedFunctionError: If a function is not an aggregate
            UnsupportedExpressionError: If a projection has an invalid shape
        """
        shape = self.planner.classify(query)
        indices = self.planner.filter_rows(table, query.where)
        logger.debug("Executing %s as %s over %d rows", query, shape.value, len(indices))

        if shape == QueryShape.AGGREGATE:
            return self._execute_aggregates(query, table, indices)
        elif shape == QueryShape.GROUPED:
            return self._execute_grouped(query, table, indices)
        else:
            return self._execute_projection(query, table, indices)

    # ----- Projection -----

    def _execute_projection(self, query: ast.Query, table: Table, indices: List[int]) -> Table:
        """
        Build one output column per projection.

        Column references copy the surviving cells of the input column under
        its own field, whatever its storage type. Any other expression
        becomes a nullable FLOAT64 column named expr_<position>.
        """
        columns = []
        for i, expr in enumerate(query.projections):
            if self.planner.is_pass_through(expr):
                source = self._lookup_column(table, expr.name, check_type=False)
                columns.append(source.take(indices))
                continue

            cells = []
            for row in indices:
                value = self.evaluator.evaluate(expr, table, row)
                cells.append(None if values.is_null(value) else values.to_float(value))
            field = Field(f"expr_{i}", DataType.FLOAT64, nullable=True)
            columns.append(Column(field, cells, validate=False))

        return Table(_result_name(table), columns, num_rows=len(indices))

    # ----- Aggregation -----

    def _execute_aggregates(self, query: ast.Query, table: Table, indices: List[int]) -> Table:
        """
        Evaluate every aggregate once over all filtered rows; one output row.

        Columns are named expr_<position>, so SUM(a), SUM(b) stay distinct.
        """
        columns = []
        for i, func in enumerate(query.projections):
            result = evaluate_aggregate(func, table, indices, self.evaluator)
            field = Field(f"expr_{i}", DataType.FLOAT64, nullable=False)
            columns.append(Column(field, [result], validate=False))
        return Table(_result_name(table), columns, num_rows=1)

    # ----- GROUP BY -----

    def _group_key(self, query: ast.Query, table: Table, row: int) -> str:
        parts = [
            values.key_text(self.evaluator.evaluate(expr, table, row))
            for expr in query.group_by
        ]
        return GROUP_KEY_SEPARATOR.join(parts)

    def _execute_grouped(self, query: ast.Query, table: Table, indices: List[int]) -> Table:
        """
        One output row per distinct group key, in lexicographic key order.

        Column references take the value of the group's first row; aggregate
        calls reduce over the group's rows.
        """
        fields = self._grouped_fields(query, table)

        groups: Dict[str, List[int]] = defaultdict(list)
        for row in indices:
            groups[self._group_key(query, table, row)].append(row)
        keys = sorted(groups)
        logger.debug("GROUP BY produced %d groups", len(keys))

        cells: List[List] = [[] for _ in query.projections]
        for key in keys:
            rows = groups[key]
            for i, expr in enumerate(query.projections):
                if isinstance(expr, ast.ColumnRef):
                    value = self.evaluator.evaluate(expr, table, rows[0])
                    cells[i].append(values.to_python(value))
                else:
                    cells[i].append(evaluate_aggregate(expr, table, rows, self.evaluator))

        columns = [
            Column(field, column_cells, validate=False)
            for field, column_cells in zip(fields, cells)
        ]
        return Table(_result_name(table), columns, num_rows=len(keys))

    def _grouped_fields(self, query: ast.Query, table: Table) -> List[Field]:
        fields = []
        for expr in query.projections:
            if isinstance(expr, ast.ColumnRef):
                fields.append(self._lookup_column(table, expr.name).field)
            elif isinstance(expr, ast.FuncCall):
                fields.append(_aggregate_field(expr))
            else:
                raise UnsupportedExpressionError(str(expr), "GROUP BY projection")
        return fields

    def _lookup_column(self, table: Table, name: str, check_type: bool = True) -> Column:
        column = table.get_column(name)
        if column is None:
            raise ColumnNotFoundError(name, table.name)
        if check_type and column.data_type not in ENGINE_TYPES:
            raise UnsupportedColumnTypeError(name, column.data_type.value)
        return column


def execute_query(
    query: ast.Query,
    table: Table,
    policy: CoercionPolicy = CoercionPolicy.LENIENT
) -> Table:
    """
    Convenience function to run a query against one table.

    Args:
        query: Parsed query
        table: Input table (never modified)
        policy: How binary operands treat evaluation errors

    Returns:
        New result Table
    """
    return QueryExecutor(policy=policy).execute_on(query, table)
