# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Loom tokenizer.

`read_token` scans exactly one token from a `CharCursor`. It is driven by the
parser, which threads two flags through every call:

- `is_adjacent`: nothing (no whitespace, no comment) separates the previous
  token from this one. Used to tell `3.5` from `3. 5`.
- `is_on_new_line`: a line break precedes this token. Statements end at line
  breaks, so the parser consults this constantly.

The tokenizer is context-sensitive in one place: a `{` inside a string
literal re-enters the full expression parser on the same cursor, and the
string resumes after the matching `}`.
"""

from __future__ import annotations

from typing import List, Optional, Tuple, Union

from loom.loomc.core.cursor import CharCursor
from loom.loomc.core.span import Index, Span

from . import errors
from .ast import StringLiteralTerm
from .tokens import KEYWORDS, OPERATORS, Token, TokenInfo, TokenKind

_WHITESPACE = " \t\n\r\x0c"

_ESCAPES = {
	"n": "\n",
	"r": "\r",
	"t": "\t",
	'"': '"',
	"\\": "\\",
	"0": "\0",
	"'": "'",
}


def _is_ident_start(ch: str) -> bool:
	return ch == "_" or ch.isidentifier()


def _is_ident_continue(ch: str) -> bool:
	return ("a" + ch).isidentifier()


def read_token(
	cursor: CharCursor,
	is_adjacent: bool,
	is_on_new_line: bool,
	depth: int = 0,
) -> Tuple[Index, Optional[TokenInfo]]:
	"""
	Scan the next token.

	Returns the start index of the token and its info, or `(end index, None)`
	at end of input. Comments are skipped here; they clear adjacency, and line
	comments / `//` block comments put the following token on a new line.
	`depth` is the parser nesting level the token is scanned at; embedded `{...}`
	expressions sit one level deeper.
	"""
	while True:
		ch = cursor.peek_char()
		if ch is None:
			return cursor.peek_index(), None
		if ch in _WHITESPACE:
			is_adjacent = False
			if ch == "\n":
				is_on_new_line = True
			cursor.consume()
			continue

		start = cursor.peek_index()
		cursor.consume()
		if ch == "-" and cursor.consume_if("-"):
			skip_line_comment(cursor)
			is_adjacent = False
			is_on_new_line = True
		elif ch == "/" and cursor.consume_if("-"):
			skip_block_comment(cursor, start, "/-", "-/")
			is_adjacent = False
		elif ch == "/" and cursor.peek_char() == "/":
			if not is_on_new_line:
				raise errors.invalid_block_comment(start)
			cursor.consume()
			skip_block_comment(cursor, start, "//", "\\\\")
			# The rest of the closing line belongs to the comment.
			skip_line_comment(cursor)
			is_adjacent = False
			is_on_new_line = True
		else:
			break

	if "0" <= ch <= "9":
		token = Token(TokenKind.DIGITS, _scan_digits(cursor, ch))
	elif ch == '"':
		token = Token(TokenKind.STRING_LITERAL, _scan_string(cursor, start, depth))
	elif _is_ident_start(ch):
		name = ch
		while True:
			nxt = cursor.peek_char()
			if nxt is None or not _is_ident_continue(nxt):
				break
			name += nxt
			cursor.consume()
		kind = KEYWORDS.get(name)
		token = Token(kind) if kind is not None else Token(TokenKind.IDENTIFIER, name)
	elif ch in OPERATORS:
		text = ch
		while True:
			nxt = cursor.peek_char()
			if nxt is None or text + nxt not in OPERATORS:
				break
			text += nxt
			cursor.consume()
		token = Token(OPERATORS[text])
	else:
		raise errors.unexpected_character(start, ch)

	return start, TokenInfo(token=token, is_adjacent=is_adjacent, is_on_new_line=is_on_new_line)


def _scan_digits(cursor: CharCursor, first: str) -> str:
	"""
	Greedy numeric scan: digits, ASCII letters and `_` (dropped); a sign is
	admitted right after an exponent marker. Validation of the text is left to
	the backend.
	"""
	value = first
	after_e = False
	while True:
		ch = cursor.peek_char()
		if ch is None:
			break
		if ch in "eE":
			after_e = True
		elif ch.isascii() and (ch.isalnum() or ch == "_"):
			after_e = False
		elif ch in "+-" and after_e:
			after_e = False
		else:
			break
		if ch != "_":
			value += ch
		cursor.consume()
	return value


def _scan_string(cursor: CharCursor, start: Index, depth: int) -> List[Union[str, StringLiteralTerm]]:
	# Deferred: the parser module imports this one.
	from .parser import MAX_NESTING_DEPTH, Parser

	components: List[Union[str, StringLiteralTerm]] = []
	buf: List[str] = []
	while True:
		ch = cursor.peek_char()
		if ch is None:
			raise errors.unterminated_string(start)
		index = cursor.peek_index()
		cursor.consume()
		if ch == '"':
			if buf:
				components.append("".join(buf))
			return components
		if ch == "{":
			if cursor.consume_if("{"):
				buf.append("{")
				continue
			if buf:
				components.append("".join(buf))
				buf = []
			brace = Span.between(index, Index(index.line, index.column + 1))
			if depth >= MAX_NESTING_DEPTH:
				raise errors.nested_too_deeply(brace, MAX_NESTING_DEPTH)
			embedded = Parser(cursor, is_on_new_line=False, prev_token_end=index, depth=depth + 1)
			term = embedded.parse_disjunction(True)
			closing = embedded.next_token()
			if closing is None:
				raise errors.unterminated_string(start)
			if closing is not TokenKind.CLOSING_BRACE:
				raise errors.unclosed_interpolation(embedded.next_token_pos(), index)
			components.append(StringLiteralTerm(term, brace))
		elif ch == "}":
			if not cursor.consume_if("}"):
				raise errors.unmatched_closing_brace(index, start)
			buf.append("}")
		elif ch == "\\":
			nxt = cursor.peek_char()
			if nxt is None:
				raise errors.unterminated_string(start)
			cursor.consume()
			if nxt not in _ESCAPES:
				raise errors.invalid_escape(index)
			buf.append(_ESCAPES[nxt])
		else:
			buf.append(ch)


def skip_line_comment(cursor: CharCursor) -> None:
	"""Skip through the end of the current line (or input)."""
	while True:
		ch = cursor.peek_char()
		cursor.consume()
		if ch is None or ch == "\n":
			return


def skip_block_comment(cursor: CharCursor, start: Index, opener: str, closer: str) -> None:
	"""
	Skip a nestable block comment whose opener has already been consumed.

	`starts` holds the start of every comment still open, innermost last, so an
	unterminated comment can report all of them.
	"""
	starts = [start]
	while True:
		ch = cursor.peek_char()
		if ch is None:
			raise errors.unterminated_comment(starts)
		index = cursor.peek_index()
		cursor.consume()
		if ch == opener[0] and cursor.consume_if(opener[1]):
			starts.append(index)
		elif ch == closer[0] and cursor.consume_if(closer[1]):
			starts.pop()
			if not starts:
				return


def tokenize(text: str) -> List[Tuple[Span, TokenInfo]]:
	"""
	Scan a whole source string into `(span, token info)` pairs.

	Convenience for tests and tooling; the parser pulls tokens one at a time
	instead.
	"""
	cursor = CharCursor(text)
	out: List[Tuple[Span, TokenInfo]] = []
	start, info = read_token(cursor, True, True)
	while info is not None:
		out.append((Span.between(start, cursor.peek_index()), info))
		start, info = read_token(cursor, True, False)
	return out


__all__ = ["read_token", "skip_block_comment", "skip_line_comment", "tokenize"]
