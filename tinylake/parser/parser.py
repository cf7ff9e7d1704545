"""
Query parser.

Recursive descent over the lexer's token stream with precedence climbing
for binary expressions. Parses query strings into AST nodes for execution
and keeps parsing concerns apart from execution logic.
"""

from typing import List

from . import ast
from .lexer import Lexer, Token, TokenType
from ..utils.exceptions import ParseError


# Binding strength per token kind; anything absent ends an expression.
PRECEDENCE = {
    TokenType.ASTERISK: 3,
    TokenType.SLASH: 3,
    TokenType.PLUS: 2,
    TokenType.MINUS: 2,
    TokenType.OPERATOR: 2,
    TokenType.AND: 1,
    TokenType.OR: 0,
}

# Bound that every operator exceeds, so OR (0) is accepted at the top level.
LOWEST_PRECEDENCE = -1


class Parser:
    """
    Parses one query string.

    Holds a single token of lookahead (``current``). Construct it with the
    query text and call parse() once.
    """

    def __init__(self, sql: str):
        self.lexer = Lexer(sql)
        self.current: Token = self.lexer.next_token()

    # ----- Token handling -----

    def expect(self, token_type: TokenType) -> Token:
        """
        Consume the current token if it has the given kind.

        Returns:
            The consumed token

        Raises:
            ParseError: If the current token is of another kind
        """
        token = self.current
        if token.type != token_type:
            raise ParseError(
                f"expected {token_type.name}, got '{token}'",
                token.text,
                token.position,
            )
        self.current = self.lexer.next_token()
        return token

    def _precedence(self, token: Token) -> int:
        return PRECEDENCE.get(token.type, LOWEST_PRECEDENCE)

    # ----- Query -----

    def parse(self) -> ast.Query:
        """
        Parse the whole input into a Query.

        Returns:
            Query AST node

        Raises:
            LexError: If the input holds an unrecognized character
            ParseError: If the token stream does not match the grammar
        """
        self.expect(TokenType.SELECT)
        projections = self._parse_expression_list()

        self.expect(TokenType.FROM)
        if self.current.type != TokenType.IDENTIFIER:
            raise ParseError(
                f"expected table name, got '{self.current}'",
                self.current.text,
                self.current.position,
            )
        table_name = self.expect(TokenType.IDENTIFIER).text

        where = None
        if self.current.type == TokenType.WHERE:
            self.expect(TokenType.WHERE)
            where = self.parse_expression(LOWEST_PRECEDENCE)

        group_by: List[ast.Expression] = []
        if self.current.type == TokenType.GROUP:
            self.expect(TokenType.GROUP)
            self.expect(TokenType.BY)
            group_by = self._parse_expression_list()

        if self.current.type != TokenType.EOF:
            raise ParseError(
                f"unexpected trailing input '{self.current}'",
                self.current.text,
                self.current.position,
            )

        return ast.Query(
            projections=projections,
            table_name=table_name,
            where=where,
            group_by=group_by,
        )

    def _parse_expression_list(self) -> List[ast.Expression]:
        expressions = [self.parse_expression(LOWEST_PRECEDENCE)]
        while self.current.type == TokenType.COMMA:
            self.expect(TokenType.COMMA)
            expressions.append(self.parse_expression(LOWEST_PRECEDENCE))
        return expressions

    # ----- Expressions -----

    def parse_expression(self, min_precedence: int = LOWEST_PRECEDENCE) -> ast.Expression:
        """
        Parse a binary expression whose operators bind tighter than min_precedence.

        Equal precedence associates to the left because the recursive call
        only absorbs strictly tighter operators.
        """
        left = self._parse_primary()

        while self._precedence(self.current) > min_precedence:
            op_token = self.current
            self.expect(op_token.type)
            right = self.parse_expression(self._precedence(op_token))
            left = ast.BinaryExpr(
                left=left,
                op=ast.BinaryOp.from_token(op_token.text),
                right=right,
            )

        return left

    def _parse_primary(self) -> ast.Expression:
        token = self.current

        if token.type == TokenType.IDENTIFIER:
            self.expect(TokenType.IDENTIFIER)
            if self.current.type == TokenType.LPAREN:
                return self._parse_function_call(token.text)
            return ast.ColumnRef(name=token.text)

        if token.type == TokenType.LITERAL:
            self.expect(TokenType.LITERAL)
            return ast.Literal(text=token.text)

        if token.type == TokenType.LPAREN:
            self.expect(TokenType.LPAREN)
            inner = self.parse_expression(LOWEST_PRECEDENCE)
            self.expect(TokenType.RPAREN)
            return inner

        raise ParseError(
            f"unexpected token '{token}' where an expression was expected",
            token.text,
            token.position,
        )

    def _parse_function_call(self, name: str) -> ast.FuncCall:
        self.expect(TokenType.LPAREN)

        args: List[ast.Expression] = []
        if self.current.type == TokenType.ASTERISK:
            self.expect(TokenType.ASTERISK)
            args.append(ast.StarExpr())
        elif self.current.type != TokenType.RPAREN:
            args = self._parse_expression_list()

        self.expect(TokenType.RPAREN)
        return ast.FuncCall(name=name, args=args)


class SQLParser:
    """
    Query parser facade.

    Provides a reusable object for parsing query strings into AST nodes;
    each call gets a fresh Parser.
    """

    def parse(self, sql: str) -> ast.Query:
        """
        Parse query string into a Query node.

        Args:
            sql: Query string

        Returns:
            Query AST node

        Raises:
            SQLSyntaxError: If the query is malformed (LexError or ParseError)
        """
        return Parser(sql).parse()


def parse_query(sql: str) -> ast.Query:
    """Convenience function to parse without creating a parser object."""
    return Parser(sql).parse()
