# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Loom parser package: tokenizer, syntax tree and recursive-descent parser.

The reader drives `Parser.parse_top_level` file by file; the helpers here
cover the pieces that sit between the parser and the rest of the front end:
turning a `ParseError` into a `Diagnostic`, and parsing standalone snippets.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from loom.loomc.core.cursor import CharCursor
from loom.loomc.core.diagnostics import Diagnostic, format_span_short
from loom.loomc.core.span import Span

from . import ast
from .errors import LexError, ParseError
from .parser import Parser, TopLevel


def _span_in_file(path: Path, span: Span) -> Span:
	return span.in_file(str(path))


def diagnostic_from_parse_error(path: Path, err: ParseError) -> Diagnostic:
	"""
	Convert a lexical/syntax error into a Diagnostic anchored to `path`.

	Related positions and the open-block stack become notes, outermost block
	first.
	"""
	notes: List[str] = []
	for label, span in err.related:
		notes.append(f"{label}: {format_span_short(_span_in_file(path, span))}")
	for span in err.open_blocks:
		notes.append(f"block opened here: {format_span_short(_span_in_file(path, span))}")
	return Diagnostic(
		message=err.message,
		code=err.code,
		phase=err.phase,
		severity="error",
		span=_span_in_file(path, err.span),
		notes=notes,
	)


def parse_expression(text: str) -> Optional[ast.TermWithPos]:
	"""
	Parse `text` as a single expression (assignment level, line breaks
	allowed). Returns None for empty input; trailing tokens are an error.
	"""
	parser = Parser(CharCursor(text))
	term = parser.parse_assign(True)
	if parser.has_remaining_token():
		raise ParseError(
			"E-PARSE-UNEXPECTED-TOKEN",
			"unexpected token after expression",
			span=parser.next_token_pos(),
		)
	return term


def parse_source(text: str, path: Path = Path("<memory>")) -> List[TopLevel]:
	"""
	Parse a whole source text into its top-level constructs without resolving
	imports. Raises the first `ParseError`.
	"""
	parser = Parser(CharCursor(text))
	out: List[TopLevel] = []
	while parser.has_remaining_token():
		out.append(parser.parse_top_level(path))
	return out


__all__ = [
	"LexError",
	"ParseError",
	"Parser",
	"TopLevel",
	"ast",
	"diagnostic_from_parse_error",
	"parse_expression",
	"parse_source",
]
