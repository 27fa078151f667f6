"""
Read-only views over tokens and block trees, for editor-side consumers.

Nothing here changes how source is lexed or parsed. Each helper is a fixed
table or a simple pattern extraction over a finished tree.

Features:
    - display_category: TokenKind to highlighting category (or None).
    - closing_phrase / closing_variants: canonical and accepted closers per
      opening keyword, the same tables the parser closes blocks with.
    - declarations / find_declarations: function and sub definitions by
      name, searching the current file before the rest of the workspace.
    - fold_placeholder / fold_regions: short labels for collapsed blocks.

Example:
    >>> from brs.brs_parser import parse
    >>> source = "sub main()\\n  print 1\\nend sub\\n"
    >>> [d.name for d in declarations(parse(source), source)]
    ['main']
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass

from brs.brs_ast import BlockNode, Node
from brs.brs_constants import CLOSING_PHRASES, CLOSING_VARIANTS, BlockKind, TokenKind

HIGHLIGHT_CATEGORIES: dict[TokenKind, str] = {
    TokenKind.KEYWORD: "keyword",
    TokenKind.TYPE_KEYWORD: "type_keyword",
    TokenKind.STRING_LITERAL: "string",
    TokenKind.NUMBER_LITERAL: "number",
    TokenKind.BOOLEAN_LITERAL: "number",
    TokenKind.LINE_COMMENT: "comment",
    TokenKind.REM_COMMENT: "rem_comment",
    TokenKind.OPERATOR: "operator",
    TokenKind.IDENTIFIER: "identifier",
    TokenKind.LPAREN: "parentheses",
    TokenKind.RPAREN: "parentheses",
    TokenKind.LBRACE: "braces",
    TokenKind.RBRACE: "braces",
    TokenKind.LBRACKET: "brackets",
    TokenKind.RBRACKET: "brackets",
    TokenKind.DOT: "dot",
    TokenKind.COMMA: "comma",
    TokenKind.BUILTIN_FUNCTION: "builtin_function",
}

PARAMS_LIMIT = 20
CONDITION_LIMIT = 30


def display_category(kind: TokenKind) -> str | None:
    """Returns the highlighting category for a token kind, or None for plain text."""
    return HIGHLIGHT_CATEGORIES.get(kind)


def closing_phrase(keyword: str) -> str | None:
    """``closing_phrase("If") == "end if"``; None for words that open nothing."""
    return CLOSING_PHRASES.get(keyword.lower())


def closing_variants(keyword: str) -> tuple[str, ...]:
    return CLOSING_VARIANTS.get(keyword.lower(), ())


@dataclass(frozen=True)
class Declaration:
    """A named function or sub definition."""

    name: str
    kind: BlockKind
    start: int
    end: int
    path: str | None = None


def declarations(tree: Node, source: str, path: str | None = None) -> list[Declaration]:
    """Lists every named function and sub in ``tree``, nested ones included."""
    found = []
    for block in tree.walk():
        if block.kind not in (BlockKind.FUNCTION, BlockKind.SUB):
            continue
        name = block.name(source)
        if name is not None:
            found.append(Declaration(name, block.kind, block.start, block.end, path))
    return found


def find_declarations(
    name: str, current: str, index: Mapping[str, list[Declaration]]
) -> list[Declaration]:
    """Resolves ``name`` case-insensitively.

    Matches in the ``current`` file win. Only when it has none are the other
    files in ``index`` searched, in path order.
    """
    wanted = name.lower()
    local = [d for d in index.get(current, []) if d.name.lower() == wanted]
    if local:
        return local
    return [
        d
        for path in sorted(index)
        if path != current
        for d in index[path]
        if d.name.lower() == wanted
    ]


def _shorten(text: str, limit: int) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def _function_label(line: str, keyword: str) -> str | None:
    match = re.search(rf"\b{keyword}\s+(\w+)\s*\(", line, re.IGNORECASE)
    if match is None:
        return None
    name = match.group(1)
    params = line[match.end() :].split(")", 1)[0].strip()
    if not params:
        return f"{keyword} {name}()..."
    return f"{keyword} {name}({_shorten(params, PARAMS_LIMIT)})..."


def _for_label(line: str) -> str | None:
    match = re.search(r"\bfor\s+each\s+(\w+)", line, re.IGNORECASE)
    if match:
        return f"each {match.group(1)}"
    match = re.search(r"\bfor\s+(\w+)\s*=", line, re.IGNORECASE)
    return match.group(1) if match else None


def fold_placeholder(block: BlockNode, source: str) -> str:
    """Short label shown in place of a collapsed block."""
    line = block.first_line(source).strip()
    kind = block.kind
    if kind is BlockKind.FUNCTION:
        return _function_label(line, "function") or "function..."
    if kind is BlockKind.SUB:
        return _function_label(line, "sub") or "sub..."
    if kind is BlockKind.CLASS:
        match = re.search(r"\bclass\s+(\w+)", line, re.IGNORECASE)
        return f"class {match.group(1)}..." if match else "class..."
    if kind is BlockKind.NAMESPACE:
        match = re.search(r"\bnamespace\s+([\w.]+)", line, re.IGNORECASE)
        return f"namespace {match.group(1)}..." if match else "namespace..."
    if kind is BlockKind.IF:
        match = re.search(r"\bif\s+(.+?)\s+then", line, re.IGNORECASE)
        if match is None:
            return "if..."
        return f"if {_shorten(match.group(1).strip(), CONDITION_LIMIT)}..."
    if kind is BlockKind.FOR:
        variable = _for_label(line)
        return f"for {variable}..." if variable else "for..."
    if kind is BlockKind.WHILE:
        match = re.search(r"\bwhile\s+(.+)", line, re.IGNORECASE)
        if match is None:
            return "while..."
        return f"while {_shorten(match.group(1).strip(), CONDITION_LIMIT)}..."
    return "try..."


def fold_regions(tree: Node, source: str) -> list[tuple[int, int, str]]:
    """(start, end, placeholder) for every block spanning more than one line."""
    regions = []
    for block in tree.walk():
        start, end = block.text_range
        if "\n" in source[start:end].rstrip():
            regions.append((start, end, fold_placeholder(block, source)))
    return regions
