"""
Defines the block tree produced by the BrightScript parser.

Classes:
    Node:
        Common base holding an ordered list of child nodes and leaf tokens.
    BlockNode:
        A nested block (function, sub, if, for, while, class, namespace, try).
    FileNode:
        The synthetic root covering the whole buffer.
    NodeDict, TokenDict:
        TypedDict shapes produced by ``to_dict`` for JSON output and tests.

Every node's leaves, concatenated in order and sliced against the source
buffer, reproduce exactly the text the node covers. Nothing in the tree owns
text; callers pass the source buffer to the methods that need it.

Example:
    tree = parse("function f()\\nend function")
    tree.blocks()[0].kind       # BlockKind.FUNCTION
    tree.text(source) == source # True
"""

import re
from collections.abc import Iterator
from typing import Any, TypedDict, Union

from brs.brs_constants import BlockKind
from brs.brs_lexer import Token

_NAME_PATTERNS: dict[BlockKind, re.Pattern[str]] = {
    BlockKind.FUNCTION: re.compile(r"^(?:function|sub)\s+(\w+)", re.IGNORECASE),
    BlockKind.SUB: re.compile(r"^(?:function|sub)\s+(\w+)", re.IGNORECASE),
    BlockKind.CLASS: re.compile(r"^class\s+(\w+)", re.IGNORECASE),
    BlockKind.NAMESPACE: re.compile(r"^namespace\s+([\w.]+)", re.IGNORECASE),
}


class TokenDict(TypedDict, total=False):
    """Serialized leaf token. ``text`` is present only when a source is given."""

    token: str
    start: int
    end: int
    text: str


class NodeDict(TypedDict, total=False):
    """
    Serialized tree node.

    Fields:
        kind (str): "FILE" for the root, otherwise the BlockKind value.
        start (int): Offset of the first covered character.
        end (int): Offset one past the last covered character.
        closed (bool): Whether the block consumed its own terminator.
        single_line (bool): Whether an ``if`` took body content before the
            first newline.
        children (list): Nested NodeDict and TokenDict entries, in order.
    """

    kind: str
    start: int
    end: int
    closed: bool
    single_line: bool
    children: list[Union["NodeDict", TokenDict]]


Child = Union["BlockNode", Token]


class Node:
    """Ordered container of child blocks and leaf tokens."""

    def __init__(self, children: list[Child] | None = None) -> None:
        self.children: list[Child] = children or []

    def leaves(self) -> Iterator[Token]:
        """Yields every leaf token below this node, in document order."""
        for child in self.children:
            if isinstance(child, Token):
                yield child
            else:
                yield from child.leaves()

    def blocks(self) -> list["BlockNode"]:
        """Returns the direct child blocks."""
        return [c for c in self.children if isinstance(c, BlockNode)]

    def walk(self) -> Iterator["BlockNode"]:
        """Yields every descendant block in pre-order."""
        for block in self.blocks():
            yield block
            yield from block.walk()

    @property
    def start(self) -> int:
        first = next(self.leaves(), None)
        return first.start if first is not None else 0

    @property
    def end(self) -> int:
        last = None
        for last in self.leaves():
            pass
        return last.end if last is not None else self.start

    @property
    def text_range(self) -> tuple[int, int]:
        return (self.start, self.end)

    def text(self, source: str) -> str:
        return "".join(tok.text(source) for tok in self.leaves())

    def _children_dicts(self, source: str | None) -> list[NodeDict | TokenDict]:
        out: list[NodeDict | TokenDict] = []
        for child in self.children:
            if isinstance(child, BlockNode):
                out.append(child.to_dict(source))
            else:
                tok: TokenDict = {
                    "token": child.kind.value,
                    "start": child.start,
                    "end": child.end,
                }
                if source is not None:
                    tok["text"] = child.text(source)
                out.append(tok)
        return out


class BlockNode(Node):
    """
    A block region delimited by an opening keyword and, usually, a terminator.

    Args:
        kind (BlockKind): Which construct opened the block.
        children (list, optional): Child blocks and leaf tokens in order.
        closed (bool): True when the block consumed its own terminator. False
            when it ran to end of input or deferred to an enclosing block.
        single_line (bool): For ``if`` blocks, True when non-comment content
            follows ``then`` on the same line.
    """

    def __init__(
        self,
        kind: BlockKind,
        children: list[Child] | None = None,
        closed: bool = False,
        single_line: bool = False,
    ) -> None:
        super().__init__(children)
        self.kind = kind
        self.closed = closed
        self.single_line = single_line

    def first_line(self, source: str) -> str:
        return source[self.start : self.end].split("\n", 1)[0].rstrip("\r")

    def name(self, source: str) -> str | None:
        """Declared name for function, sub, class and namespace blocks."""
        pattern = _NAME_PATTERNS.get(self.kind)
        if pattern is None:
            return None
        match = pattern.match(source[self.start : self.end])
        return match.group(1) if match else None

    def __repr__(self) -> str:
        parts = [self.kind.value]
        if self.closed:
            parts.append("closed")
        if self.single_line:
            parts.append("single_line")
        nested = self.blocks()
        if nested:
            preview = ", ".join(repr(b) for b in nested[:3])
            if len(nested) > 3:
                preview += ", ..."
            parts.append(f"blocks=[{preview}]")
        return f"BlockNode({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, BlockNode):
            return False
        return (
            self.kind == other.kind
            and self.closed == other.closed
            and self.single_line == other.single_line
            and self.children == other.children
        )

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self, source: str | None = None) -> NodeDict:
        return {
            "kind": self.kind.value,
            "start": self.start,
            "end": self.end,
            "closed": self.closed,
            "single_line": self.single_line,
            "children": self._children_dicts(source),
        }


class FileNode(Node):
    """Root of a parse. Its range is always the whole buffer, even when empty."""

    def __init__(self, children: list[Child] | None = None, length: int = 0) -> None:
        super().__init__(children)
        self.length = length

    @property
    def start(self) -> int:
        return 0

    @property
    def end(self) -> int:
        return self.length

    def __repr__(self) -> str:
        return f"FileNode(blocks={len(self.blocks())}, leaves={len(self.children) - len(self.blocks())})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, FileNode)
            and self.length == other.length
            and self.children == other.children
        )

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self, source: str | None = None) -> NodeDict:
        return {
            "kind": "FILE",
            "start": 0,
            "end": self.length,
            "children": self._children_dicts(source),
        }


def dump(node: Node, source: str, indent: int = 0) -> str:
    """Renders a node as an indented outline, one child per line."""
    pad = "  " * indent
    if isinstance(node, BlockNode):
        flags = "" if node.closed else " (unclosed)"
        if node.single_line:
            flags += " (single-line)"
        lines = [f"{pad}{node.kind.value} [{node.start}, {node.end}){flags}"]
    else:
        lines = [f"{pad}FILE [0, {node.end})"]
    for child in node.children:
        if isinstance(child, BlockNode):
            lines.append(dump(child, source, indent + 1))
        else:
            lines.append(f"{pad}  {child.kind.value} {child.text(source)!r}")
    return "\n".join(lines)
