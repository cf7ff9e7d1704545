"""
Unit tests for the query lexer.
"""

import pytest
from tinylake.parser.lexer import Lexer, Token, TokenType, tokenize
from tinylake.utils.exceptions import LexError, SQLSyntaxError


def kinds(text):
    return [token.type for token in tokenize(text)]


def texts(text):
    return [token.text for token in tokenize(text)]


class TestLexer:
    """Test tokenization rules."""

    def test_empty_input_is_eof(self):
        """Test that empty and blank input produce only EOF."""
        assert kinds("") == [TokenType.EOF]
        assert kinds("   \n\t") == [TokenType.EOF]

    def test_eof_repeats(self):
        """Test that next_token keeps returning EOF at the end."""
        lexer = Lexer("x")
        assert lexer.next_token().type == TokenType.IDENTIFIER
        assert lexer.next_token().type == TokenType.EOF
        assert lexer.next_token().type == TokenType.EOF

    def test_keywords_case_insensitive(self):
        """Test that keywords match in any case and keep original text."""
        tokens = tokenize("select From wHeRe group BY and Or not")
        assert [t.type for t in tokens] == [
            TokenType.SELECT, TokenType.FROM, TokenType.WHERE,
            TokenType.GROUP, TokenType.BY, TokenType.AND,
            TokenType.OR, TokenType.NOT, TokenType.EOF,
        ]
        assert tokens[1].text == "From"

    def test_identifier_keeps_case(self):
        """Test identifiers with underscores and digits."""
        tokens = tokenize("Market_Cap _hidden col2")
        assert [t.type for t in tokens[:3]] == [TokenType.IDENTIFIER] * 3
        assert [t.text for t in tokens[:3]] == ["Market_Cap", "_hidden", "col2"]

    def test_keyword_prefix_is_identifier(self):
        """Test that a word merely starting with a keyword is an identifier."""
        tokens = tokenize("selection ordering")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].text == "selection"

    def test_numeric_literals(self):
        """Test integer, decimal and leading-dot literals."""
        assert texts("42 3.14 .5 7.") == ["42", "3.14", ".5", "7.", ""]
        assert kinds("42 3.14")[:2] == [TokenType.LITERAL, TokenType.LITERAL]

    def test_second_dot_ends_literal(self):
        """Test that a second dot starts a new token instead of failing."""
        tokens = tokenize("1.2.3")
        assert [(t.type, t.text) for t in tokens] == [
            (TokenType.LITERAL, "1.2"),
            (TokenType.LITERAL, ".3"),
            (TokenType.EOF, ""),
        ]

    def test_digits_then_letters_split(self):
        """Test that a number followed by letters gives two tokens."""
        tokens = tokenize("12abc")
        assert tokens[0].type == TokenType.LITERAL
        assert tokens[0].text == "12"
        assert tokens[1].type == TokenType.IDENTIFIER
        assert tokens[1].text == "abc"

    def test_punctuation(self):
        """Test single-character operators and punctuation."""
        assert kinds("> < = + - * / ( ) ,") == [
            TokenType.OPERATOR, TokenType.OPERATOR, TokenType.OPERATOR,
            TokenType.PLUS, TokenType.MINUS, TokenType.ASTERISK,
            TokenType.SLASH, TokenType.LPAREN, TokenType.RPAREN,
            TokenType.COMMA, TokenType.EOF,
        ]

    def test_no_multi_character_operators(self):
        """Test that >= lexes as two separate operator tokens."""
        tokens = tokenize("a >= 1")
        assert [t.text for t in tokens[1:3]] == [">", "="]
        assert tokens[1].type == TokenType.OPERATOR
        assert tokens[2].type == TokenType.OPERATOR

    def test_positions(self):
        """Test that tokens record their starting offsets."""
        tokens = tokenize("SELECT  a,b")
        assert [t.position for t in tokens] == [0, 8, 9, 10, 11]

    @pytest.mark.parametrize("text,char,position", [
        ("SELECT a FROM t WHERE a != 1", "!", 24),
        ("SELECT 'x' FROM t", "'", 7),
        ("SELECT a FROM t;", ";", 15),
    ])
    def test_unknown_character(self, text, char, position):
        """Test that unknown characters raise LexError with char and position."""
        with pytest.raises(LexError) as exc_info:
            tokenize(text)
        assert exc_info.value.char == char
        assert exc_info.value.position == position
        assert isinstance(exc_info.value, SQLSyntaxError)

    def test_lexing_is_lazy(self):
        """Test that iteration stops at the first error, not before."""
        lexer = iter(Lexer("a b $"))
        assert next(lexer).text == "a"
        assert next(lexer).text == "b"
        with pytest.raises(LexError):
            next(lexer)

    def test_token_str(self):
        """Test token display text."""
        assert str(Token(TokenType.IDENTIFIER, "Close", 0)) == "Close"
        assert str(Token(TokenType.EOF, "", 3)) == "end of input"
