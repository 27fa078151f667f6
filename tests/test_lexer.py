import pytest
from hypothesis import given
from hypothesis import strategies as st

from brs.brs_constants import TokenKind
from brs.brs_lexer import CharacterStream, Lexer, Token, tokenize


def lex(source: str) -> list[Token]:
    return [tok for tok in tokenize(source) if tok.kind is not TokenKind.EOF]


def kinds(source: str) -> list[TokenKind]:
    return [tok.kind for tok in lex(source)]


def texts(source: str) -> list[str]:
    return [tok.text(source) for tok in lex(source)]


def significant(source: str) -> list[tuple[TokenKind, str]]:
    return [
        (tok.kind, tok.text(source))
        for tok in lex(source)
        if tok.kind is not TokenKind.WHITESPACE
    ]


def test_punctuation_tokens() -> None:
    assert kinds("()[]{}.,:") == [
        TokenKind.LPAREN,
        TokenKind.RPAREN,
        TokenKind.LBRACKET,
        TokenKind.RBRACKET,
        TokenKind.LBRACE,
        TokenKind.RBRACE,
        TokenKind.DOT,
        TokenKind.COMMA,
        TokenKind.COLON,
    ]


def test_line_comment_stops_before_newline() -> None:
    source = "x = 1 ' note\ny"
    toks = lex(source)
    comment = [t for t in toks if t.kind is TokenKind.LINE_COMMENT]
    assert len(comment) == 1
    assert comment[0].text(source) == "' note"
    assert toks[-1].text(source) == "y"


def test_double_apostrophe_is_rem_comment() -> None:
    assert significant("'' section") == [(TokenKind.REM_COMMENT, "'' section")]


@pytest.mark.parametrize("source", ["REM hello", "rem hello", "Rem", "rem\n", "REM:x"])  # type: ignore[misc]
def test_rem_comment(source: str) -> None:
    assert lex(source)[0].kind is TokenKind.REM_COMMENT
    assert "\n" not in lex(source)[0].text(source)


@pytest.mark.parametrize("source", ["remark", "rem1", "Remove"])  # type: ignore[misc]
def test_rem_prefix_inside_word_is_identifier(source: str) -> None:
    assert significant(source) == [(TokenKind.IDENTIFIER, source)]


def test_rem_only_at_token_start() -> None:
    assert significant("premium") == [(TokenKind.IDENTIFIER, "premium")]


def test_string_token() -> None:
    assert significant('print "hello world"') == [
        (TokenKind.KEYWORD, "print"),
        (TokenKind.STRING_LITERAL, '"hello world"'),
    ]


def test_unterminated_string_runs_to_end_of_input() -> None:
    source = 'x = "abc\ndef'
    toks = lex(source)
    assert toks[-1].kind is TokenKind.STRING_LITERAL
    assert toks[-1].text(source) == '"abc\ndef'


@pytest.mark.parametrize("source", ["123", "1.5", "1.2.3", "10."])  # type: ignore[misc]
def test_decimal_numbers_are_single_tokens(source: str) -> None:
    assert significant(source) == [(TokenKind.NUMBER_LITERAL, source)]


@pytest.mark.parametrize("char", ["²", "½", "⑦"])  # type: ignore[misc]
def test_non_decimal_digits_are_bad_characters(char: str) -> None:
    assert significant(char) == [(TokenKind.BAD_CHARACTER, char)]
    assert texts(f"x{char}1") == ["x", char, "1"]


def test_other_decimal_scripts_are_numbers() -> None:
    assert significant("٤٢") == [(TokenKind.NUMBER_LITERAL, "٤٢")]


def test_rem_followed_by_superscript_is_comment() -> None:
    assert significant("rem² note") == [(TokenKind.REM_COMMENT, "rem² note")]


@pytest.mark.parametrize("source", ["&hFF0000", "&HfF", "&h"])  # type: ignore[misc]
def test_hex_numbers(source: str) -> None:
    assert significant(source) == [(TokenKind.NUMBER_LITERAL, source)]


def test_hex_stops_at_non_hex_digit() -> None:
    assert texts("&h1FG") == ["&h1F", "G"]


@pytest.mark.parametrize("suffix", ["$", "%", "!", "#", "&", "@"])  # type: ignore[misc]
def test_type_designator_is_part_of_identifier(suffix: str) -> None:
    source = f"name{suffix}"
    assert significant(source) == [(TokenKind.IDENTIFIER, source)]


def test_only_one_type_designator() -> None:
    assert texts("a$$") == ["a$", "$"]
    assert kinds("a$$")[1] is TokenKind.BAD_CHARACTER


def test_designator_turns_builtin_into_identifier() -> None:
    assert significant("str$") == [(TokenKind.IDENTIFIER, "str$")]


def test_hash_starts_directive_word() -> None:
    assert significant("#if DEBUG") == [
        (TokenKind.IDENTIFIER, "#if"),
        (TokenKind.IDENTIFIER, "DEBUG"),
    ]


@pytest.mark.parametrize(  # type: ignore[misc]
    "word, kind",
    [
        ("function", TokenKind.KEYWORD),
        ("FUNCTION", TokenKind.KEYWORD),
        ("EndFunction", TokenKind.KEYWORD),
        ("interface", TokenKind.KEYWORD),
        ("string", TokenKind.TYPE_KEYWORD),
        ("Integer", TokenKind.TYPE_KEYWORD),
        ("true", TokenKind.BOOLEAN_LITERAL),
        ("Invalid", TokenKind.BOOLEAN_LITERAL),
        ("UCase", TokenKind.BUILTIN_FUNCTION),
        ("run", TokenKind.KEYWORD),
        ("end", TokenKind.IDENTIFIER),
        ("myVar", TokenKind.IDENTIFIER),
        ("_private", TokenKind.IDENTIFIER),
    ],
)
def test_word_classification(word: str, kind: TokenKind) -> None:
    assert significant(word) == [(kind, word)]


@pytest.mark.parametrize(  # type: ignore[misc]
    "op",
    [
        "+", "-", "*", "/", "\\", "^", "=", "<", ">", "&",
        "+=", "-=", "*=", "/=", "\\=", "<=", ">=",
        "++", "--", "<>", "<<", ">>", "<<=", ">>=",
    ],
)  # fmt: skip
def test_operators(op: str) -> None:
    source = f"a {op} b"
    assert significant(source)[1] == (TokenKind.OPERATOR, op)
    assert len(significant(source)) == 3


def test_operator_extends_at_most_once_past_comparison() -> None:
    assert texts("<>=") == ["<>", "="]
    assert texts("+++") == ["++", "+"]
    assert texts("=<") == ["=", "<"]


def test_whitespace_run_is_one_token() -> None:
    source = "a  \n\t \r\n b"
    toks = lex(source)
    assert [t.kind for t in toks] == [
        TokenKind.IDENTIFIER,
        TokenKind.WHITESPACE,
        TokenKind.IDENTIFIER,
    ]
    assert toks[1].contains_newline(source)
    assert not lex("a b")[1].contains_newline("a b")


@pytest.mark.parametrize("char", ["`", "~", "?", "$", ";", "|"])  # type: ignore[misc]
def test_bad_character(char: str) -> None:
    assert significant(char) == [(TokenKind.BAD_CHARACTER, char)]


def test_empty_input_yields_only_eof() -> None:
    toks = list(tokenize(""))
    assert toks == [Token(TokenKind.EOF, 0, 0)]


def test_eof_repeats_after_end() -> None:
    lexer = Lexer(CharacterStream("x"))
    assert lexer.next_token().kind is TokenKind.IDENTIFIER
    assert lexer.next_token() == Token(TokenKind.EOF, 1, 1)
    assert lexer.next_token() == Token(TokenKind.EOF, 1, 1)


def test_tokenize_respects_range() -> None:
    source = "foo bar baz"
    toks = list(tokenize(source, 4, 7))
    assert [t.text(source) for t in toks] == ["bar", ""]
    assert toks[-1] == Token(TokenKind.EOF, 7, 7)


def test_comment_truncated_by_range_end() -> None:
    source = "' comment text"
    toks = list(tokenize(source, 0, 5))
    assert toks[0] == Token(TokenKind.LINE_COMMENT, 0, 5)


def test_invalid_range_raises() -> None:
    with pytest.raises(ValueError):
        list(tokenize("abc", 2, 1))
    with pytest.raises(ValueError):
        CharacterStream("abc", 0, 10)


def test_character_stream_read_past_end_raises() -> None:
    stream = CharacterStream("a")
    assert stream.next() == "a"
    assert stream.peek() == ""
    with pytest.raises(Exception, match="past end"):
        stream.next()


def test_token_repr_and_hash() -> None:
    tok = Token(TokenKind.KEYWORD, 0, 2)
    assert repr(tok) == "Token(KEYWORD, 0, 2)"
    assert tok == Token(TokenKind.KEYWORD, 0, 2)
    assert tok != Token(TokenKind.IDENTIFIER, 0, 2)
    assert len({tok, Token(TokenKind.KEYWORD, 0, 2)}) == 1


@given(st.text())  # type: ignore[misc]
def test_tokens_tile_the_input(source: str) -> None:
    toks = list(tokenize(source))
    assert toks[-1] == Token(TokenKind.EOF, len(source), len(source))
    position = 0
    for tok in toks[:-1]:
        assert tok.start == position
        assert tok.end > tok.start
        position = tok.end
    assert position == len(source)


@given(st.text(alphabet=st.sampled_from(list("aRrEeMm'\"&hH1.$# \n<>=+-(){}~"))))  # type: ignore[misc]
def test_tokens_tile_basic_alphabet(source: str) -> None:
    toks = lex(source)
    assert "".join(t.text(source) for t in toks) == source


@given(st.text(), st.data())  # type: ignore[misc]
def test_restart_from_token_boundary(source: str, data: st.DataObject) -> None:
    full = list(tokenize(source))
    index = data.draw(st.integers(min_value=0, max_value=len(full) - 1))
    resumed = list(tokenize(source, full[index].start))
    assert resumed == full[index:]
