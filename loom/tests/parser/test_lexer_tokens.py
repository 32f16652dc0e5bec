# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from loom.loomc.core.span import Index, Span
from loom.loomc.parser.ast import BinaryOperation, NumericLiteral, StringLiteralTerm
from loom.loomc.parser.errors import LexError
from loom.loomc.parser.lexer import tokenize
from loom.loomc.parser.tokens import TokenKind as K


def _kinds(text: str) -> list:
	return [info.kind for _span, info in tokenize(text)]


def _values(text: str) -> list:
	return [info.token.value for _span, info in tokenize(text)]


def test_operators_use_longest_match() -> None:
	assert _kinds("a >>= b >> c > d") == [
		K.IDENTIFIER, K.DOUBLE_GREATER_EQUAL, K.IDENTIFIER, K.DOUBLE_GREATER,
		K.IDENTIFIER, K.GREATER, K.IDENTIFIER,
	]
	assert _kinds("x->y") == [K.IDENTIFIER, K.HYPHEN_GREATER, K.IDENTIFIER]
	assert _kinds("a&&b||c") == [K.IDENTIFIER, K.DOUBLE_AMPERSAND, K.IDENTIFIER, K.DOUBLE_BAR, K.IDENTIFIER]


def test_keywords_identifiers_and_wildcard() -> None:
	assert _kinds("while end var int float _ _x héllo") == [
		K.KEYWORD_WHILE, K.KEYWORD_END, K.KEYWORD_VAR, K.KEYWORD_INT,
		K.KEYWORD_FLOAT, K.UNDERSCORE, K.IDENTIFIER, K.IDENTIFIER,
	]
	assert _values("_x héllo") == ["_x", "héllo"]


def test_digits_drop_underscores_and_take_exponent_sign() -> None:
	assert _values("1_000 1e-5 0x1F") == ["1000", "1e-5", "0x1F"]
	assert _kinds("1-2") == [K.DIGITS, K.HYPHEN, K.DIGITS]


def test_adjacency_and_new_line_flags() -> None:
	tokens = tokenize("3.x y\nz")
	flags = [(info.kind, info.is_adjacent, info.is_on_new_line) for _span, info in tokens]
	assert flags[1:] == [
		(K.DOT, True, False),
		(K.IDENTIFIER, True, False),
		(K.IDENTIFIER, False, False),
		(K.IDENTIFIER, False, True),
	]


def test_token_spans() -> None:
	spans = [span for span, _info in tokenize("ab  +=\n c")]
	assert spans == [
		Span(Index(0, 0), Index(0, 2)),
		Span(Index(0, 4), Index(0, 6)),
		Span(Index(1, 1), Index(1, 2)),
	]


def test_line_comment_puts_next_token_on_new_line() -> None:
	tokens = tokenize("a -- comment\nb")
	assert [info.token.value for _s, info in tokens] == ["a", "b"]
	assert tokens[1][1].is_on_new_line is True
	assert tokens[1][1].is_adjacent is False


def test_nested_comment_is_one_comment() -> None:
	tokens = tokenize("/- /- -/ -/ x")
	assert [info.token.value for _s, info in tokens] == ["x"]
	assert tokens[0][1].is_adjacent is False


def test_unterminated_nested_comment_reports_every_open_start() -> None:
	with pytest.raises(LexError) as exc:
		tokenize("/- a /- b")
	err = exc.value
	assert err.code == "E-LEX-UNTERMINATED-COMMENT"
	assert err.span.start == Index(0, 5)
	assert [span.start for _label, span in err.related] == [Index(0, 0), Index(0, 5)]


def test_line_block_comment_skips_rest_of_closing_line() -> None:
	tokens = tokenize("a\n// one\n// nested \\\\\n\\\\ ignored\nb")
	assert [info.token.value for _s, info in tokens] == ["a", "b"]
	assert tokens[1][1].is_on_new_line is True


def test_line_block_comment_must_start_a_line() -> None:
	with pytest.raises(LexError) as exc:
		tokenize("a // b")
	assert exc.value.code == "E-LEX-INVALID-BLOCK-COMMENT"


def test_unexpected_character() -> None:
	with pytest.raises(LexError) as exc:
		tokenize("a @ b")
	assert exc.value.code == "E-LEX-UNEXPECTED-CHAR"
	assert exc.value.span.start == Index(0, 2)


def test_string_with_embedded_expression() -> None:
	[components] = _values('"a{1+1}b"')
	assert components[0] == "a"
	assert isinstance(components[1], StringLiteralTerm)
	assert components[1].opening_pos.start == Index(0, 2)
	term = components[1].term.term
	assert isinstance(term, BinaryOperation)
	assert term.operator.term.name == "add"
	assert term.opt_left_operand.term == NumericLiteral("1")
	assert components[2] == "b"
	assert len(components) == 3


def test_string_escapes_and_doubled_braces() -> None:
	assert _values('"x{{y}}\\n\\t\\"\\\\"') == [["x{y}\n\t\"\\"]]
	assert _values('""') == [[]]
	[components] = _values('"{}"')
	assert components == [StringLiteralTerm(None)]


def test_tokens_after_string_continue_normally() -> None:
	assert _kinds('"a{x}" + 1') == [K.STRING_LITERAL, K.PLUS, K.DIGITS]


@pytest.mark.parametrize(
	"source, code",
	[
		('"abc', "E-LEX-UNTERMINATED-STRING"),
		('"{1', "E-LEX-UNTERMINATED-STRING"),
		('"a\\qb"', "E-LEX-INVALID-ESCAPE"),
		('"a}b"', "E-LEX-UNMATCHED-BRACE"),
		('"{1 2}"', "E-LEX-UNCLOSED-INTERPOLATION"),
	],
)
def test_string_errors(source: str, code: str) -> None:
	with pytest.raises(LexError) as exc:
		tokenize(source)
	assert exc.value.code == code


def test_long_comment_runs_are_skipped_iteratively() -> None:
	text = "-- c\n" * 1500 + "x " + "/- c -/ " * 1500 + "y\n" + "// c \\\\\n" * 1500 + "z"
	tokens = tokenize(text)
	assert [info.token.value for _s, info in tokens] == ["x", "y", "z"]
	assert tokens[0][0].start == Index(1500, 0)
	assert [info.is_on_new_line for _s, info in tokens] == [True, False, True]
	assert tokens[1][1].is_adjacent is False
