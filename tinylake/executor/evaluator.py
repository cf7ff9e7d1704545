"""
Per-row expression evaluator.

Single source of truth for evaluating expressions against one row of a
table. Used by the planner to filter rows and by the executor for
projections, grouping keys and aggregate arguments.

Evaluation never mutates the table, so rows can be evaluated in any order.
"""

import math
from enum import Enum

from ..parser.ast import (
    Expression, ColumnRef, Literal, BinaryExpr, FuncCall, StarExpr,
    BinaryOp
)
from ..storage.table import Table
from ..storage.types import ENGINE_TYPES
from ..utils.exceptions import (
    TinyLakeError,
    ColumnNotFoundError,
    UnsupportedColumnTypeError,
    UnsupportedExpressionError,
)
from . import values
from .values import Value, Float, Text, Bool, NULL


class CoercionPolicy(Enum):
    """
    How BinaryExpr treats errors raised while evaluating its operands.

    LENIENT: the failing operand becomes NULL and the operator coerces it
        like any other NULL (so `missing_col > 1` is simply false).
    STRICT: the error propagates and aborts the query.
    """
    LENIENT = "lenient"
    STRICT = "strict"


# Marker value StarExpr evaluates to outside COUNT(*).
STAR_MARKER = Text("*")


class ExpressionEvaluator:
    """
    Evaluates AST expressions against a single table row.

    This is the single implementation used everywhere expressions are
    evaluated row by row.
    """

    def __init__(self, policy: CoercionPolicy = CoercionPolicy.LENIENT):
        self.policy = policy

    def evaluate(self, expr: Expression, table: Table, row: int) -> Value:
        """
        Evaluate an expression at one row.

        Args:
            expr: Expression AST node
            table: Table to read columns from
            row: Row index

        Returns:
            Float, Text, Bool or NULL

        Raises:
            ColumnNotFoundError: If a referenced column doesn't exist
            UnsupportedColumnTypeError: If a column is neither FLOAT64 nor STRING
            UnsupportedExpressionError: If an aggregate call is evaluated per row
        """
        if isinstance(expr, ColumnRef):
            return self._evaluate_column(expr, table, row)
        elif isinstance(expr, Literal):
            return values.parse_literal(expr.text)
        elif isinstance(expr, BinaryExpr):
            return self._evaluate_binary(expr, table, row)
        elif isinstance(expr, StarExpr):
            return STAR_MARKER
        elif isinstance(expr, FuncCall):
            # Aggregates need a row set; nested aggregate calls are not supported.
            raise UnsupportedExpressionError(str(expr), "row-wise evaluation")
        else:
            raise ValueError(f"Unknown expression type: {type(expr)}")

    def _evaluate_column(self, ref: ColumnRef, table: Table, row: int) -> Value:
        column = table.get_column(ref.name)
        if column is None:
            raise ColumnNotFoundError(ref.name, table.name)
        if column.data_type not in ENGINE_TYPES:
            raise UnsupportedColumnTypeError(ref.name, column.data_type.value)
        return values.from_cell(column.data_type, column.value(row))

    def _evaluate_operand(self, expr: Expression, table: Table, row: int) -> Value:
        if self.policy == CoercionPolicy.STRICT:
            return self.evaluate(expr, table, row)
        try:
            return self.evaluate(expr, table, row)
        except TinyLakeError:
            return NULL

    def _evaluate_binary(self, expr: BinaryExpr, table: Table, row: int) -> Value:
        """
        Evaluate a binary operation: left op right.

        AND/OR coerce both sides to boolean, > and < compare as floats,
        = compares exactly, and arithmetic follows IEEE-754 (x/0 gives
        inf or nan rather than an error).
        """
        left = self._evaluate_operand(expr.left, table, row)
        right = self._evaluate_operand(expr.right, table, row)
        op = expr.op

        if op == BinaryOp.AND:
            return Bool(values.to_bool(left) and values.to_bool(right))
        elif op == BinaryOp.OR:
            return Bool(values.to_bool(left) or values.to_bool(right))
        elif op == BinaryOp.GT:
            return Bool(values.to_float(left) > values.to_float(right))
        elif op == BinaryOp.LT:
            return Bool(values.to_float(left) < values.to_float(right))
        elif op == BinaryOp.EQ:
            return Bool(values.values_equal(left, right))
        elif op == BinaryOp.ADD:
            return Float(values.to_float(left) + values.to_float(right))
        elif op == BinaryOp.SUB:
            return Float(values.to_float(left) - values.to_float(right))
        elif op == BinaryOp.MUL:
            return Float(values.to_float(left) * values.to_float(right))
        elif op == BinaryOp.DIV:
            return Float(_divide(values.to_float(left), values.to_float(right)))
        else:
            raise ValueError(f"Unknown binary operator: {op}")


def _divide(numerator: float, denominator: float) -> float:
    if denominator != 0.0:
        return numerator / denominator
    if numerator == 0.0 or math.isnan(numerator):
        return float('nan')
    # Signed zero decides the direction, as in IEEE-754.
    return math.copysign(1.0, numerator) * math.copysign(math.inf, denominator)


# Convenience function for common use case
def evaluate_expression(
    expr: Expression,
    table: Table,
    row: int,
    policy: CoercionPolicy = CoercionPolicy.LENIENT
) -> Value:
    """
    Convenience function to evaluate an expression without creating an evaluator.

    Args:
        expr: Expression AST node
        table: Table to read from
        row: Row index
        policy: Error handling for BinaryExpr operands

    Returns:
        The evaluated Value
    """
    return ExpressionEvaluator(policy).evaluate(expr, table, row)
