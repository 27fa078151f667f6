"""
Shared vocabulary for the BrightScript lexer and block parser.

Contents:
    TokenKind: Closed set of lexical categories produced by the lexer.
    BlockKind: Closed set of block constructs recognized by the parser.
    KEYWORDS, TYPE_KEYWORDS, CONSTANTS, BUILTIN_FUNCTIONS:
        Lower-case word sets used to classify identifier-like tokens.
    word_kind(text):
        Case-insensitive lookup from word text to its TokenKind.
    BLOCK_OPENERS, END_WORDS, COMPACT_CLOSERS, ALL_COMPACT_CLOSERS:
        Tables driving block opening and termination in the parser.
    CLOSING_PHRASES, CLOSING_VARIANTS:
        Canonical and accepted closing spellings per opening keyword.
    HEADER_BOUNDARIES, CONDITION_BOUNDARIES:
        Per-kind words that cut a block header (or an else-if condition) short.
"""

from enum import Enum


class TokenKind(str, Enum):
    KEYWORD = "KEYWORD"
    TYPE_KEYWORD = "TYPE_KEYWORD"
    BUILTIN_FUNCTION = "BUILTIN_FUNCTION"
    IDENTIFIER = "IDENTIFIER"
    STRING_LITERAL = "STRING_LITERAL"
    NUMBER_LITERAL = "NUMBER_LITERAL"
    BOOLEAN_LITERAL = "BOOLEAN_LITERAL"
    LINE_COMMENT = "LINE_COMMENT"
    REM_COMMENT = "REM_COMMENT"
    OPERATOR = "OPERATOR"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    LBRACE = "LBRACE"
    RBRACE = "RBRACE"
    LBRACKET = "LBRACKET"
    RBRACKET = "RBRACKET"
    DOT = "DOT"
    COMMA = "COMMA"
    COLON = "COLON"
    WHITESPACE = "WHITESPACE"
    BAD_CHARACTER = "BAD_CHARACTER"
    EOF = "EOF"


class BlockKind(str, Enum):
    FUNCTION = "FUNCTION"
    SUB = "SUB"
    IF = "IF"
    FOR = "FOR"
    WHILE = "WHILE"
    CLASS = "CLASS"
    NAMESPACE = "NAMESPACE"
    TRY = "TRY"


# Control flow and structure keywords
KEYWORDS: frozenset[str] = frozenset(
    {
        "if", "then", "else", "elseif", "elsif", "endif",
        "for", "to", "step", "next", "each", "endfor", "exitfor",
        "while", "endwhile", "exitwhile",
        "function", "endfunction", "sub", "endsub",
        "return", "exit", "goto", "stop",
        "and", "or", "not", "mod",
        "as", "in", "dim", "let", "print", "run",
        "class", "endclass", "namespace", "endnamespace",
        "interface", "implements", "extends",
        "public", "private", "protected", "override",
        "new", "import", "library", "alias",
        "try", "catch", "endtry", "finally", "throw",
        "continue", "continuefor", "continuewhile",
        "enum", "endenum", "const",
        "m", "super", "me", "global",
    }
)  # fmt: skip

TYPE_KEYWORDS: frozenset[str] = frozenset(
    {
        "boolean", "integer", "longinteger", "float", "double",
        "string", "object", "function", "dynamic", "brsub",
        "interface",
    }
)  # fmt: skip

CONSTANTS: frozenset[str] = frozenset({"true", "false", "invalid"})

BUILTIN_FUNCTIONS: frozenset[str] = frozenset(
    {
        # Math
        "abs", "atn", "cdbl", "cint", "cos", "csng", "exp", "fix", "int",
        "log", "rnd", "sgn", "sin", "sqr", "tan",
        # Runtime
        "createobject", "type", "getglobalaa", "box", "run", "eval",
        "getlastruncompileerror", "getlastrunruntimeerror",
        # Global utilities
        "sleep", "wait", "getinterface", "findmemberfunction", "uptime",
        "rebootsystem", "listdir", "readasciifile", "writeasciifile",
        "copyfile", "movefile", "matchfiles", "deletefile",
        "deletedirectory", "createdirectory", "formatdrive", "strtoi",
        "rungarbagecollector", "parsejson", "formatjson", "tr",
        # Strings
        "ucase", "lcase", "asc", "chr", "instr", "left", "len", "mid",
        "right", "str", "stri", "string", "stringi", "val", "substitute",
    }
)  # fmt: skip

# Built once, in reverse precedence so stronger categories overwrite weaker ones.
_WORD_TABLE: dict[str, TokenKind] = {}
for _words, _kind in (
    (BUILTIN_FUNCTIONS, TokenKind.BUILTIN_FUNCTION),
    (CONSTANTS, TokenKind.BOOLEAN_LITERAL),
    (TYPE_KEYWORDS, TokenKind.TYPE_KEYWORD),
    (KEYWORDS, TokenKind.KEYWORD),
):
    for _word in _words:
        _WORD_TABLE[_word] = _kind


def word_kind(text: str) -> TokenKind:
    """Classifies an identifier-like word, ignoring case.

    A trailing type designator (``name$``) is part of the word, so ``str$``
    classifies as an identifier rather than the ``str`` builtin.
    """
    return _WORD_TABLE.get(text.lower(), TokenKind.IDENTIFIER)


TYPE_DESIGNATORS = frozenset("$%!#&@")
OPERATOR_CHARS = frozenset("+-*/\\^=<>&")
PUNCTUATION: dict[str, TokenKind] = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    ".": TokenKind.DOT,
    ",": TokenKind.COMMA,
    ":": TokenKind.COLON,
}

BLOCK_OPENERS: dict[str, BlockKind] = {
    "function": BlockKind.FUNCTION,
    "sub": BlockKind.SUB,
    "if": BlockKind.IF,
    "for": BlockKind.FOR,
    "while": BlockKind.WHILE,
    "class": BlockKind.CLASS,
    "namespace": BlockKind.NAMESPACE,
    "try": BlockKind.TRY,
}

# Word following ``end`` that closes each block kind.
END_WORDS: dict[BlockKind, str] = {kind: word for word, kind in BLOCK_OPENERS.items()}

COMPACT_CLOSERS: dict[BlockKind, frozenset[str]] = {
    BlockKind.FUNCTION: frozenset({"endfunction"}),
    BlockKind.SUB: frozenset({"endsub"}),
    BlockKind.IF: frozenset({"endif"}),
    BlockKind.FOR: frozenset({"endfor", "next"}),
    BlockKind.WHILE: frozenset({"endwhile"}),
    BlockKind.CLASS: frozenset({"endclass"}),
    BlockKind.NAMESPACE: frozenset({"endnamespace"}),
    BlockKind.TRY: frozenset({"endtry"}),
}

ALL_COMPACT_CLOSERS: frozenset[str] = frozenset().union(*COMPACT_CLOSERS.values())

ELSE_WORDS = frozenset({"else", "elseif", "elsif"})

# A header stops before any opener, ``end``, or one of its own block's
# compact closers. Other kinds' closers (``next`` in ``sub next()``) are text.
HEADER_BOUNDARIES: dict[BlockKind, frozenset[str]] = {
    kind: frozenset(BLOCK_OPENERS) | {"end"} | closers
    for kind, closers in COMPACT_CLOSERS.items()
}
CONDITION_BOUNDARIES: frozenset[str] = HEADER_BOUNDARIES[BlockKind.IF] | {"else"}

# Previous word (or ".") after which an opener word is plain text. The "#" forms
# cover conditional-compilation directives such as "#end if" and "#else if".
NON_STRUCTURAL_PREFIXES = frozenset({".", "end", "exit", "continue", "as", "#end", "#else"})

CLOSING_PHRASES: dict[str, str] = {
    word: f"end {word}" for word in BLOCK_OPENERS
}

CLOSING_VARIANTS: dict[str, tuple[str, ...]] = {
    "function": ("end function", "endfunction"),
    "sub": ("end sub", "endsub"),
    "if": ("end if", "endif"),
    "for": ("end for", "endfor", "next"),
    "while": ("end while", "endwhile"),
    "class": ("end class", "endclass"),
    "namespace": ("end namespace", "endnamespace"),
    "try": ("end try", "endtry"),
}
