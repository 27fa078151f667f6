"""
BrightScript Block Parser

Builds a tree of nested blocks from the BrightScript token stream.

The parser recovers block structure only: function, sub, if, for, while,
class, namespace and try regions, each a ``BlockNode`` whose children are
nested blocks and opaque leaf tokens. Statements and expressions are not
structured further.

Parser Behavior
---------------
- Total: never raises on malformed input. Unmatched or truncated constructs
  still yield a tree, and every token lands in it exactly once, so the leaves
  reproduce the source text.
- Pull-based: tokens are drawn lazily from the lexer through a small peek
  buffer. The buffer only grows while an ``end`` is tried speculatively.
- One parametrised routine, ``parse_block(kind)``, handles every block kind
  in three phases:
    * Header: up to a newline, ``then`` for ``if``, or a boundary word (an
      opener, ``end`` or one of the block's own closers), which is left for
      the body.
    * Body: nested blocks, ``else``/``elseif`` branches for ``if``, and leaves.
    * Closed: on the block's own terminator, or when a terminator of another
      kind is seen; that one is left unconsumed for the enclosing block.
- ``end`` is shared by every terminator. The body consumes it tentatively,
  looks at the word after it on the same line, and rolls back when the word
  is not its own. A mismatched ``end`` therefore closes open blocks one level
  at a time until it reaches the top level, where it stays a plain leaf.
- Openers past ``max_depth`` nested blocks are consumed as plain leaves, so
  recursion stays bounded for any input.

Entry Points
------------
- ``Parser(source).parse()``: Parse a buffer into a ``FileNode``.
- ``parse(source)``: Module-level shorthand.

Raises
------
ParserInvariantError
    Only if a parsing loop fails to make progress, which indicates a bug
    rather than bad input.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable

from brs.brs_ast import BlockNode, FileNode, Node
from brs.brs_constants import (
    ALL_COMPACT_CLOSERS,
    BLOCK_OPENERS,
    COMPACT_CLOSERS,
    CONDITION_BOUNDARIES,
    ELSE_WORDS,
    END_WORDS,
    HEADER_BOUNDARIES,
    NON_STRUCTURAL_PREFIXES,
    BlockKind,
    TokenKind,
)
from brs.brs_lexer import Token, tokenize

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 100

WORD_KINDS = frozenset(
    {
        TokenKind.KEYWORD,
        TokenKind.TYPE_KEYWORD,
        TokenKind.BUILTIN_FUNCTION,
        TokenKind.IDENTIFIER,
        TokenKind.BOOLEAN_LITERAL,
    }
)
COMMENT_KINDS = frozenset({TokenKind.LINE_COMMENT, TokenKind.REM_COMMENT})

# (children length, consumed count, previous word)
Checkpoint = tuple[int, int, str | None]


class ParserInvariantError(RuntimeError):
    """Raised when a parsing loop completes an iteration without consuming input."""


class Parser:
    """
    BrightScript block parser.

    Attributes
    ----------
    source : str
        The buffer the tokens were produced from.
    max_depth : int
        Number of nested blocks after which openers are treated as leaves.
    consumed : int
        Count of tokens placed into the tree so far.
    depth : int
        Number of blocks currently open.

    Methods
    -------
    parse() -> FileNode
        Parse the whole token stream.
    parse_block(kind) -> BlockNode
        Parse one block whose opening keyword is the current token.
    current() -> Token
        The next unconsumed token.
    peek(offset) -> Token
        The token ``offset`` places after the current one.
    """

    def __init__(
        self,
        source: str,
        tokens: Iterable[Token] | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        self.source = source
        self.max_depth = max_depth
        self.consumed = 0
        self.depth = 0
        self._stream = iter(tokens) if tokens is not None else tokenize(source)
        self._lookahead: deque[Token] = deque()
        self._eof: Token | None = None
        self._pulled_end = 0
        # Last significant word on the current line, "." for member access.
        self._previous: str | None = None

    # ------------------------------------------------------------------
    # Token cursor
    # ------------------------------------------------------------------

    def peek(self, offset: int = 1) -> Token:
        while len(self._lookahead) <= offset:
            if self._eof is not None:
                return self._eof
            tok = next(self._stream, None)
            if tok is None:
                tok = Token(TokenKind.EOF, self._pulled_end, self._pulled_end)
            if tok.kind is TokenKind.EOF:
                self._eof = tok
                return tok
            self._pulled_end = tok.end
            self._lookahead.append(tok)
        return self._lookahead[offset]

    def current(self) -> Token:
        return self.peek(0)

    def advance(self, node: Node) -> Token:
        """Moves the current token into ``node`` as a leaf."""
        tok = self.current()
        if tok.kind is TokenKind.EOF:
            return tok
        self._lookahead.popleft()
        node.children.append(tok)
        self.consumed += 1
        self._track(tok)
        return tok

    def mark(self, node: Node) -> Checkpoint:
        return (len(node.children), self.consumed, self._previous)

    def rollback(self, node: Node, checkpoint: Checkpoint) -> None:
        """Returns every token consumed into ``node`` since ``checkpoint`` to the stream."""
        size, consumed, previous = checkpoint
        replay = node.children[size:]
        del node.children[size:]
        self._lookahead.extendleft(reversed(replay))  # type: ignore[arg-type]
        self.consumed = consumed
        self._previous = previous

    def _track(self, tok: Token) -> None:
        if tok.kind is TokenKind.WHITESPACE:
            if tok.contains_newline(self.source):
                self._previous = None
        elif tok.kind in COMMENT_KINDS:
            pass
        elif tok.kind is TokenKind.DOT:
            self._previous = "."
        else:
            self._previous = self.word(tok)

    def word(self, tok: Token) -> str | None:
        """Lower-case text of a word token, None for anything else."""
        if tok.kind in WORD_KINDS:
            return tok.text(self.source).lower()
        return None

    def structural_word(self, tok: Token) -> str | None:
        """Like ``word``, but None where the word is a member name or part of a phrase.

        ``m.next``, the ``sub`` in ``end sub``, ``exit for`` and ``as function``
        never open or close anything on their own.
        """
        if self._previous in NON_STRUCTURAL_PREFIXES:
            return None
        return self.word(tok)

    def _same_line_next(self) -> Token:
        """The current token, or the one after it when the current one is same-line whitespace."""
        tok = self.current()
        if tok.kind is TokenKind.WHITESPACE and not tok.contains_newline(self.source):
            return self.peek(1)
        return tok

    def _check_progress(self, before: int, where: str) -> None:
        if self.consumed == before:
            tok = self.current()
            raise ParserInvariantError(
                f"No progress in {where} at offset {tok.start} ({tok.kind.value})"
            )

    # ------------------------------------------------------------------
    # Grammar
    # ------------------------------------------------------------------

    def parse(self) -> FileNode:
        """Parse the whole stream into a FileNode covering the buffer."""
        root = FileNode()
        while self.current().kind is not TokenKind.EOF:
            before = self.consumed
            self._parse_statement(root, self.structural_word(self.current()))
            self._check_progress(before, "top level")
        root.length = self.current().end
        return root

    def _parse_statement(self, node: Node, word: str | None) -> None:
        """Opens a nested block on an opener word, otherwise consumes one leaf."""
        kind = BLOCK_OPENERS.get(word) if word is not None else None
        if kind is None:
            self.advance(node)
        elif self.depth >= self.max_depth:
            logger.debug(
                "Nesting limit %d reached; %r at offset %d kept flat",
                self.max_depth,
                word,
                self.current().start,
            )
            self.advance(node)
        else:
            node.children.append(self.parse_block(kind))

    def parse_block(self, kind: BlockKind) -> BlockNode:
        """Parse one block. The current token must be its opening keyword."""
        block = BlockNode(kind)
        self.depth += 1
        try:
            self.advance(block)
            self._parse_header(block, HEADER_BOUNDARIES[kind])
            self._parse_body(block)
        finally:
            self.depth -= 1
        return block

    def _parse_header(
        self, block: BlockNode, boundaries: frozenset[str], condition: bool = False
    ) -> None:
        """Consumes a block header or an else-if condition.

        Stops after a newline or ``then``, or before a boundary word, which the
        body then sees first.
        """
        while True:
            tok = self.current()
            if tok.kind is TokenKind.EOF:
                return
            if tok.contains_newline(self.source):
                self.advance(block)
                return
            word = self.structural_word(tok)
            if word == "then" and block.kind is BlockKind.IF:
                self.advance(block)
                if not condition:
                    after = self._same_line_next()
                    block.single_line = not (
                        after.kind is TokenKind.EOF
                        or after.kind in COMMENT_KINDS
                        or after.contains_newline(self.source)
                    )
                return
            if word in boundaries:
                logger.debug(
                    "%s header cut short by %r at offset %d",
                    block.kind.value,
                    word,
                    tok.start,
                )
                return
            self.advance(block)

    def _parse_body(self, block: BlockNode) -> None:
        own_closers = COMPACT_CLOSERS[block.kind]
        while True:
            tok = self.current()
            if tok.kind is TokenKind.EOF:
                logger.debug("%s block left open at end of input", block.kind.value)
                return
            before = self.consumed
            word = self.structural_word(tok)

            if block.kind is BlockKind.IF and word in ELSE_WORDS:
                self._parse_else(block, word)
            elif word == "end":
                block.closed = self._close_with_end(block)
                return
            elif word in own_closers:
                self.advance(block)
                block.closed = True
                return
            elif word in ALL_COMPACT_CLOSERS:
                logger.debug(
                    "%s block deferring %r at offset %d",
                    block.kind.value,
                    word,
                    tok.start,
                )
                return
            else:
                self._parse_statement(block, word)
            self._check_progress(before, f"{block.kind.value} body")

    def _parse_else(self, block: BlockNode, word: str | None) -> None:
        """Consumes ``else``, ``else if``, ``elseif`` or ``elsif`` and any condition."""
        self.advance(block)
        if word == "else":
            if self.word(self._same_line_next()) != "if":
                return
            if self.current().kind is TokenKind.WHITESPACE:
                self.advance(block)
            self.advance(block)
        self._parse_header(block, CONDITION_BOUNDARIES, condition=True)

    def _close_with_end(self, block: BlockNode) -> bool:
        """Tries ``end <word>`` as this block's terminator.

        On a match the tokens are kept and True is returned. Otherwise they are
        rolled back, so the enclosing block sees the same ``end`` again.
        """
        checkpoint = self.mark(block)
        end_tok = self.advance(block)
        if self.current().kind is TokenKind.WHITESPACE and not self.current().contains_newline(
            self.source
        ):
            self.advance(block)
        if self.word(self.current()) == END_WORDS[block.kind]:
            self.advance(block)
            return True
        self.rollback(block, checkpoint)
        logger.debug(
            "%s block deferring 'end' at offset %d to enclosing block",
            block.kind.value,
            end_tok.start,
        )
        return False


def parse(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> FileNode:
    """Tokenizes and parses ``source`` in one step."""
    return Parser(source, max_depth=max_depth).parse()


__all__ = ["DEFAULT_MAX_DEPTH", "Parser", "ParserInvariantError", "parse"]
