# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structured lexical and syntax errors.

Errors are raised at the point of detection and abort the rest of the file
being parsed. The reader converts them into `Diagnostic` records; they carry
enough positions for a renderer to point at both the offending token and the
construct it breaks (an opening parenthesis, the `while` keyword, the stack
of enclosing blocks).
"""

from __future__ import annotations

from typing import Sequence, Tuple

from loom.loomc.core.span import Index, Span


class ParseError(ValueError):
	"""
	Error raised while tokenizing or parsing one file.

	This is a `ValueError` subclass so callers can treat it as a parse-time
	failure; `code` is stable and meant for tests and tooling, `message` is
	for humans.

	- `span`: the primary position (offending token or character).
	- `related`: secondary positions named in the message, in order.
	- `open_blocks`: spans of the `func`/`while` keywords whose blocks were
	  still open, outermost first.
	"""

	phase = "parser"

	def __init__(
		self,
		code: str,
		message: str,
		*,
		span: Span,
		related: Sequence[Tuple[str, Span]] = (),
		open_blocks: Sequence[Span] = (),
	) -> None:
		super().__init__(message)
		self.code = code
		self.message = message
		self.span = span
		self.related = tuple(related)
		self.open_blocks = tuple(open_blocks)


class LexError(ParseError):
	"""Malformed literal, comment, string or character."""

	phase = "lexer"


def _point(index: Index) -> Span:
	return Span.between(index, Index(index.line, index.column + 1))


# Lexical errors


def unterminated_string(start: Index) -> LexError:
	return LexError("E-LEX-UNTERMINATED-STRING", "unterminated string literal", span=_point(start))


def invalid_escape(backslash: Index) -> LexError:
	return LexError(
		"E-LEX-INVALID-ESCAPE",
		"invalid escape sequence in string literal",
		span=Span.between(backslash, Index(backslash.line, backslash.column + 2)),
	)


def unmatched_closing_brace(brace: Index, literal_start: Index) -> LexError:
	return LexError(
		"E-LEX-UNMATCHED-BRACE",
		"unmatched '}' in string literal (write '}}' for a literal brace)",
		span=_point(brace),
		related=[("string literal starts here", _point(literal_start))],
	)


def unclosed_interpolation(unexpected: Span, brace: Index) -> LexError:
	return LexError(
		"E-LEX-UNCLOSED-INTERPOLATION",
		"expected '}' to close the embedded expression",
		span=unexpected,
		related=[("embedded expression opened here", _point(brace))],
	)


def unterminated_comment(starts: Sequence[Index]) -> LexError:
	spans = [Span.between(s, Index(s.line, s.column + 2)) for s in starts]
	return LexError(
		"E-LEX-UNTERMINATED-COMMENT",
		"unterminated block comment",
		span=spans[-1],
		related=[("comment opened here", s) for s in spans],
	)


def invalid_block_comment(start: Index) -> LexError:
	return LexError(
		"E-LEX-INVALID-BLOCK-COMMENT",
		"'//' block comments must be the first token on a line",
		span=Span.between(start, Index(start.line, start.column + 2)),
	)


def unexpected_character(index: Index, ch: str) -> LexError:
	return LexError("E-LEX-UNEXPECTED-CHAR", f"unexpected character {ch!r}", span=_point(index))


# Syntax errors


def nested_too_deeply(span: Span, limit: int) -> ParseError:
	return ParseError(
		"E-PARSE-TOO-DEEP",
		f"expression or block nested more than {limit} levels deep",
		span=span,
	)


__all__ = [
	"LexError",
	"ParseError",
	"invalid_block_comment",
	"invalid_escape",
	"nested_too_deeply",
	"unclosed_interpolation",
	"unexpected_character",
	"unmatched_closing_brace",
	"unterminated_comment",
	"unterminated_string",
]
