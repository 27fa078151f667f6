"""
Lexical analyzer for BrightScript source.

This module converts raw source text into a flat stream of classified tokens:

Classes:
    CharacterStream: Bounded view over a source buffer with offset tracking.
    Token: A token kind plus the [start, end) range it covers in the buffer.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Functions:
    tokenize(source, start, end): Lazily yields every token in a range,
        terminated by a single zero-width EOF token.

Features:
    - Total: every character in the range belongs to exactly one token.
      Whitespace and comments are tokens too, and unknown characters become
      BAD_CHARACTER instead of failing.
    - Restartable from any offset, so a caller can re-lex from a resume point.
    - Recognizes:
        * ``'`` line comments, ``''`` and ``REM`` comments
        * Strings (unterminated strings stop at the end of the range)
        * Decimal and ``&h`` hexadecimal numbers
        * Identifiers with an optional type designator (``name$``)
        * Keywords, type keywords, boolean literals and builtin functions,
          all case-insensitive
        * Compound assignment, increment, comparison and shift operators

Example:
    >>> [t.kind.value for t in tokenize("x = 1")]
    ['IDENTIFIER', 'WHITESPACE', 'OPERATOR', 'WHITESPACE', 'NUMBER_LITERAL', 'EOF']

Exports:
    - CharacterStream
    - Token
    - Lexer
    - tokenize
"""

from collections.abc import Callable, Iterator
from typing import Any

from brs.brs_constants import (
    OPERATOR_CHARS,
    PUNCTUATION,
    TYPE_DESIGNATORS,
    TokenKind,
    word_kind,
)

HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def is_word_char(ch: str) -> bool:
    """Letters and decimal digits. Superscripts and fractions are not digits here."""
    return ch.isalpha() or ch.isdecimal()


class CharacterStream:
    """
    Reads characters from a bounded slice of a source string.

    Offsets are indices into the whole buffer, not into the slice, so tokens
    produced from a resumed stream line up with tokens from a full pass.

    Attributes:
        source (str): The complete source buffer.
        position (int): Offset of the next character to read.
        end (int): Exclusive upper bound of the readable range.
    """

    def __init__(self, source: str, position: int = 0, end: int | None = None):
        """
        Initializes the character stream.

        Args:
            source (str): The input source code.
            position (int, optional): Starting offset. Defaults to 0.
            end (int | None, optional): Exclusive end offset. Defaults to the
                length of the source.

        Raises:
            ValueError: If the range does not lie within the source.
        """
        if end is None:
            end = len(source)
        if not 0 <= position <= end <= len(source):
            raise ValueError(
                f"Invalid range [{position}, {end}) for source of length {len(source)}"
            )
        self.source = source
        self.position = position
        self.end = end

    def next(self) -> str:
        """
        Consumes and returns the next character in the range.

        Raises:
            Exception: If reading past the end of the range.
        """
        if self.position >= self.end:
            raise Exception(
                f"CharacterStreamError: Attempted to read past end of range at position=<{self.position}>"
            )
        char = self.source[self.position]
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """
        Returns the character at the given offset from the current position.

        Returns:
            str: The character, or an empty string if outside the range.
        """
        index = self.position + offset
        if index < 0 or index >= self.end:
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= self.end


class Token:
    """A single lexical token.

    Tokens do not copy text; ``text(source)`` slices it from the buffer the
    token was produced from.

    Attributes:
        kind (TokenKind): The lexical category.
        start (int): Offset of the first character.
        end (int): Offset one past the last character. Equal to ``start``
            only for the EOF marker.
    """

    def __init__(self, kind: TokenKind, start: int, end: int):
        self.kind = kind
        self.start = start
        self.end = end

    def text(self, source: str) -> str:
        return source[self.start : self.end]

    def contains_newline(self, source: str) -> bool:
        """True for a whitespace token that spans a line break."""
        return self.kind is TokenKind.WHITESPACE and "\n" in source[self.start : self.end]

    def __repr__(self) -> str:
        return f"Token({self.kind.value}, {self.start}, {self.end})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.kind == other.kind
            and self.start == other.start
            and self.end == other.end
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.start, self.end))


class Lexer:
    """Lexical analyzer for BrightScript.

    Each call to ``next_token`` applies the scanning rules in priority order at
    the current position. Once the range is exhausted every further call
    returns a zero-width EOF token.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def advance_while(self, predicate: Callable[[str], bool]) -> None:
        while not self.stream.end_of_file() and predicate(self.peek()):
            self.advance()

    def skip_to_line_end(self) -> None:
        """Advances up to, but not over, the next newline."""
        self.advance_while(lambda ch: ch != "\n")

    def is_rem(self) -> bool:
        """Checks for a ``REM`` comment starting at the current position."""
        if self.peek(0).lower() != "r" or self.peek(1).lower() != "e" or self.peek(2).lower() != "m":
            return False
        after = self.peek(3)
        return after == "" or not is_word_char(after)

    def scan_operator(self) -> None:
        """Consumes an operator, extending it to a compound form where one applies."""
        first = self.advance()
        nxt = self.peek()
        if nxt == "":
            return
        if nxt == "=" and first in "+-*/\\<>":
            # Compound assignment: +=, -=, *=, /=, \=, <=, >=
            self.advance()
        elif (first, nxt) in (("+", "+"), ("-", "-")):
            self.advance()
        elif (first == "<" and nxt in "=><") or (first == ">" and nxt in "=>"):
            # Comparison and shift: <>, <<, >>, then <<= and >>=
            self.advance()
            if nxt == first and self.peek() == "=":
                self.advance()

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Never raises on any input; unrecognized characters become BAD_CHARACTER.
        """
        stream = self.stream
        start = stream.position
        if stream.end_of_file():
            return Token(TokenKind.EOF, start, start)

        ch = self.peek()

        # 1-2. Apostrophe comments: '' is a REM-style comment, ' a plain one
        if ch == "'":
            kind = TokenKind.REM_COMMENT if self.peek(1) == "'" else TokenKind.LINE_COMMENT
            self.skip_to_line_end()
            return Token(kind, start, stream.position)

        # 3. REM comment
        if self.is_rem():
            self.skip_to_line_end()
            return Token(TokenKind.REM_COMMENT, start, stream.position)

        # 4. String, lenient about a missing closing quote
        if ch == '"':
            self.advance()
            self.advance_while(lambda c: c != '"')
            if not stream.end_of_file():
                self.advance()
            return Token(TokenKind.STRING_LITERAL, start, stream.position)

        # 5. Decimal number; dots are not validated
        if ch.isdecimal():
            self.advance_while(lambda c: c.isdecimal() or c == ".")
            return Token(TokenKind.NUMBER_LITERAL, start, stream.position)

        # 6. Hex number: &hFF0000
        if ch == "&" and self.peek(1) in ("h", "H"):
            self.advance()
            self.advance()
            self.advance_while(lambda c: c in HEX_DIGITS)
            return Token(TokenKind.NUMBER_LITERAL, start, stream.position)

        # 7. Identifier, keyword or directive, with optional type designator
        if ch.isalpha() or ch in "_#":
            self.advance()
            self.advance_while(lambda c: is_word_char(c) or c == "_")
            if self.peek() in TYPE_DESIGNATORS:
                self.advance()
            return Token(word_kind(stream.source[start : stream.position]), start, stream.position)

        # 8. Whitespace run, newlines included
        if ch.isspace():
            self.advance_while(str.isspace)
            return Token(TokenKind.WHITESPACE, start, stream.position)

        # 9. Brackets and punctuation
        if ch in PUNCTUATION:
            self.advance()
            return Token(PUNCTUATION[ch], start, stream.position)

        # 10. Operators
        if ch in OPERATOR_CHARS:
            self.scan_operator()
            return Token(TokenKind.OPERATOR, start, stream.position)

        # 11. Anything else
        self.advance()
        return Token(TokenKind.BAD_CHARACTER, start, stream.position)


def tokenize(source: str, start: int = 0, end: int | None = None) -> Iterator[Token]:
    """Lazily tokenizes ``source[start:end]``.

    Args:
        source (str): The complete source buffer.
        start (int): Offset to resume lexing from. Defaults to 0.
        end (int | None): Exclusive end offset. Defaults to the buffer length.

    Yields:
        Token: Every token in document order, then one EOF token.
    """
    lexer = Lexer(CharacterStream(source, start, end))
    while True:
        tok = lexer.next_token()
        yield tok
        if tok.kind is TokenKind.EOF:
            return


__all__ = ["CharacterStream", "Lexer", "Token", "tokenize"]
