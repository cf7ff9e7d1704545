"""
Abstract Syntax Tree (AST) node definitions.

These dataclasses represent a parsed query in a structured form,
decoupling the parser from the executor. Nodes are frozen: a Query and
every expression inside it are read-only once the parser returns.

str() on any node gives its canonical text, which parses back to an
equal tree.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from enum import Enum


# ----- Enums -----

class BinaryOp(Enum):
    """Binary operators, from tightest to loosest binding group."""
    MUL = "*"
    DIV = "/"
    ADD = "+"
    SUB = "-"
    GT = ">"
    LT = "<"
    EQ = "="
    AND = "AND"
    OR = "OR"

    @classmethod
    def from_token(cls, text: str) -> 'BinaryOp':
        """Map operator lexeme (keywords in any case) to its enum member."""
        return cls(text.upper())


# ----- Expression Nodes -----

@dataclass(frozen=True)
class ColumnRef:
    """Reference to a table column by case-sensitive name."""
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class Literal:
    """Raw literal lexeme; numeric-ness is decided at evaluation time."""
    text: str

    def __str__(self):
        return self.text


@dataclass(frozen=True)
class BinaryExpr:
    """Binary operation: left op right."""
    left: 'Expression'
    op: BinaryOp
    right: 'Expression'

    def __str__(self):
        return f"({self.left} {self.op.value} {self.right})"


@dataclass(frozen=True)
class StarExpr:
    """Bare * inside an argument list, as in COUNT(*)."""

    def __str__(self):
        return "*"


@dataclass(frozen=True)
class FuncCall:
    """Aggregate invocation. Arguments are only validated when evaluated."""
    name: str
    args: List['Expression'] = field(default_factory=list)

    def __str__(self):
        return f"{self.name}({', '.join(str(arg) for arg in self.args)})"


# Type alias for any expression node
Expression = ColumnRef | Literal | BinaryExpr | FuncCall | StarExpr


def is_aggregate(expr: Expression) -> bool:
    """Check whether an expression is an aggregate function call."""
    return isinstance(expr, FuncCall)


# ----- Query Node -----

@dataclass(frozen=True)
class Query:
    """SELECT query."""
    projections: List[Expression]
    table_name: str
    where: Optional[Expression] = None
    group_by: List[Expression] = field(default_factory=list)

    @property
    def is_all_aggregate(self) -> bool:
        """True if every projection is an aggregate call."""
        return all(is_aggregate(expr) for expr in self.projections)

    def __str__(self):
        parts = [
            "SELECT " + ", ".join(str(expr) for expr in self.projections),
            f"FROM {self.table_name}",
        ]
        if self.where is not None:
            parts.append(f"WHERE {self.where}")
        if self.group_by:
            parts.append("GROUP BY " + ", ".join(str(expr) for expr in self.group_by))
        return " ".join(parts)
