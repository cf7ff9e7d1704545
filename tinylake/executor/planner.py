"""
Query planner.

Single source of truth for deciding how a query executes:
- Which rows survive the WHERE clause
- Which shape of output the projections call for (plain projection,
  whole-table aggregation, or GROUP BY)
"""

import logging
from enum import Enum
from typing import List, Optional

from ..parser.ast import Query, Expression, ColumnRef, is_aggregate
from ..storage.table import Table
from ..utils.exceptions import QueryTypeError, UnsupportedExpressionError
from .evaluator import ExpressionEvaluator
from .values import Bool

logger = logging.getLogger(__name__)


class QueryShape(Enum):
    """How the executor builds the output table."""
    PROJECTION = "projection"
    AGGREGATE = "aggregate"
    GROUPED = "grouped"


class QueryPlanner:
    """
    Plans query execution.

    Decides the output shape from the projection list and GROUP BY clause,
    and filters rows through the WHERE clause.
    """

    def __init__(self, evaluator: Optional[ExpressionEvaluator] = None):
        self.evaluator = evaluator or ExpressionEvaluator()

    def filter_rows(self, table: Table, where: Optional[Expression]) -> List[int]:
        """
        Get indices of rows that satisfy the WHERE condition.

        Args:
            table: Table to scan
            where: WHERE expression (None = all rows)

        Returns:
            Strictly increasing list of surviving row indices

        Raises:
            QueryTypeError: If the condition yields a non-boolean at some row
        """
        if where is None:
            return list(range(table.num_rows))

        matching = []
        for row in range(table.num_rows):
            result = self.evaluator.evaluate(where, table, row)
            if not isinstance(result, Bool):
                raise QueryTypeError(row, result)
            if result.value:
                matching.append(row)

        logger.debug(
            "WHERE %s kept %d of %d rows", where, len(matching), table.num_rows
        )
        return matching

    def classify(self, query: Query) -> QueryShape:
        """
        Pick the execution shape for a query.

        An all-aggregate projection list is evaluated over the whole
        filtered row set even when GROUP BY is present.

        Raises:
            UnsupportedExpressionError: If aggregate and non-aggregate
                projections are mixed without GROUP BY
        """
        if query.is_all_aggregate:
            return QueryShape.AGGREGATE

        if query.group_by:
            return QueryShape.GROUPED

        for expr in query.projections:
            if is_aggregate(expr):
                raise UnsupportedExpressionError(
                    str(expr), "projection mixed with non-aggregates (missing GROUP BY)"
                )
        return QueryShape.PROJECTION

    def is_pass_through(self, expr: Expression) -> bool:
        """True if a projection copies an input column unchanged."""
        return isinstance(expr, ColumnRef)
