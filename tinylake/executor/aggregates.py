"""
Aggregate functions over a set of row indices.

COUNT, SUM, AVG, MAX and MIN each reduce one argument over the given rows
to a single float. Used for all-aggregate queries (the whole filtered row
set) and per group under GROUP BY.
"""

from typing import Callable, Dict, List, Sequence

from ..parser.ast import FuncCall, StarExpr
from ..storage.table import Table
from ..utils.exceptions import ArityError, UnsupportedFunctionError
from . import values
from .evaluator import ExpressionEvaluator


def _sum(nums: List[float]) -> float:
    total = 0.0
    for x in nums:
        total += x
    return total


def _avg(nums: List[float]) -> float:
    if not nums:
        return 0.0
    return _sum(nums) / len(nums)


def _max(nums: List[float]) -> float:
    return max(nums) if nums else 0.0


def _min(nums: List[float]) -> float:
    return min(nums) if nums else 0.0


# Reducers over the non-null, float-coerced argument values.
# An empty input gives 0.0 rather than NULL.
REDUCERS: Dict[str, Callable[[List[float]], float]] = {
    'SUM': _sum,
    'AVG': _avg,
    'MAX': _max,
    'MIN': _min,
}

SUPPORTED_FUNCTIONS = frozenset(REDUCERS) | {'COUNT'}


def evaluate_aggregate(
    func: FuncCall,
    table: Table,
    indices: Sequence[int],
    evaluator: ExpressionEvaluator
) -> float:
    """
    Evaluate an aggregate call over the given rows.

    Args:
        func: Aggregate call node
        table: Table to read from
        indices: Row indices to aggregate over
        evaluator: Row evaluator for the argument expression

    Returns:
        Aggregate result

    Raises:
        UnsupportedFunctionError: If the function is not an aggregate
        ArityError: If the function is not called with exactly one argument
    """
    name = func.name.upper()
    if name not in SUPPORTED_FUNCTIONS:
        raise UnsupportedFunctionError(func.name)
    if len(func.args) != 1:
        raise ArityError(name, 1, len(func.args))

    arg = func.args[0]

    if name == 'COUNT':
        if isinstance(arg, StarExpr):
            return float(len(indices))
        count = 0
        for row in indices:
            if not values.is_null(evaluator.evaluate(arg, table, row)):
                count += 1
        return float(count)

    nums = []
    for row in indices:
        value = evaluator.evaluate(arg, table, row)
        if not values.is_null(value):
            nums.append(values.to_float(value))
    return REDUCERS[name](nums)
