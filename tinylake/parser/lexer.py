"""
Query lexer.

Turns a query string into a forward-only stream of tokens. The lexer keeps
nothing but its cursor, so a token, once produced, cannot be pushed back.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from ..utils.exceptions import LexError


class TokenType(Enum):
    """Token kinds produced by the lexer."""
    EOF = auto()
    SELECT = auto()
    FROM = auto()
    WHERE = auto()
    GROUP = auto()
    BY = auto()
    IDENTIFIER = auto()
    LITERAL = auto()
    COMMA = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    PLUS = auto()
    MINUS = auto()
    ASTERISK = auto()
    SLASH = auto()
    OPERATOR = auto()  # > < =
    LPAREN = auto()
    RPAREN = auto()


KEYWORDS = {
    'SELECT': TokenType.SELECT,
    'FROM': TokenType.FROM,
    'WHERE': TokenType.WHERE,
    'GROUP': TokenType.GROUP,
    'BY': TokenType.BY,
    'AND': TokenType.AND,
    'OR': TokenType.OR,
    'NOT': TokenType.NOT,
}

PUNCTUATION = {
    '>': TokenType.OPERATOR,
    '<': TokenType.OPERATOR,
    '=': TokenType.OPERATOR,
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.ASTERISK,
    '/': TokenType.SLASH,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    ',': TokenType.COMMA,
}


@dataclass(frozen=True)
class Token:
    """A single lexeme with its kind and starting offset."""
    type: TokenType
    text: str
    position: int = 0

    def __str__(self):
        if self.type == TokenType.EOF:
            return "end of input"
        return self.text


def _is_word_start(ch: str) -> bool:
    return ch.isalpha() or ch == '_'


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == '_'


class Lexer:
    """
    Single-pass tokenizer over a query string.

    Call next_token() until it returns an EOF token, or iterate the lexer.
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def next_token(self) -> Token:
        """
        Produce the next token and advance the cursor past it.

        Returns:
            The next Token; EOF once the input is exhausted

        Raises:
            LexError: If the next character starts no known token
        """
        self._skip_whitespace()

        if self.pos >= len(self.text):
            return Token(TokenType.EOF, "", self.pos)

        start = self.pos
        ch = self.text[start]

        if _is_word_start(ch):
            while self.pos < len(self.text) and _is_word_char(self.text[self.pos]):
                self.pos += 1
            word = self.text[start:self.pos]
            token_type = KEYWORDS.get(word.upper(), TokenType.IDENTIFIER)
            return Token(token_type, word, start)

        if ch.isdecimal() or ch == '.':
            return self._read_number(start)

        token_type = PUNCTUATION.get(ch)
        if token_type is not None:
            self.pos += 1
            return Token(token_type, ch, start)

        raise LexError(ch, start)

    def _read_number(self, start: int) -> Token:
        # A second '.' ends the literal; the rest is lexed as new tokens.
        seen_dot = False
        while self.pos < len(self.text):
            c = self.text[self.pos]
            if c == '.':
                if seen_dot:
                    break
                seen_dot = True
            elif not c.isdecimal():
                break
            self.pos += 1
        return Token(TokenType.LITERAL, self.text[start:self.pos], start)

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1


def tokenize(text: str) -> list:
    """Tokenize a whole string, including the trailing EOF token."""
    return list(Lexer(text))
