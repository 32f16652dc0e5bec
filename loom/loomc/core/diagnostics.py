# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the reader, parser and resolver.

A diagnostic is a message plus a span and optional notes. Notes are plain
strings; secondary positions (the opening parenthesis of an unclosed list,
the enclosing blocks of an unterminated body) are formatted into them with
`format_span_short` so every renderer sees the same text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a compiler diagnostic (error/note)."""

	message: str
	code: str | None = None
	# Which front-end stage produced it: "io", "lexer", "parser", "import",
	# "resolve".
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()


def format_span_short(span: Span) -> str:
	"""Format a span as `file:line:column` (1-based) for use in notes."""
	f = span.file or "<unknown>"
	return f"{f}:{span.line + 1}:{span.column + 1}"


def count_errors(diagnostics: Sequence[Diagnostic]) -> int:
	return sum(1 for d in diagnostics if d.severity == "error")


def render_diagnostic(
	diag: Diagnostic,
	source: Optional[str] = None,
	lines: Optional[List[Tuple[int, int]]] = None,
) -> str:
	"""
	Render a diagnostic as human-readable text.

	When the owning file's text and line-offset table are given, the offending
	line is quoted with a caret run under the span (clipped to that line).
	"""
	span = diag.span
	head = f"{span.file or '<unknown>'}:{span.line + 1}:{span.column + 1}: {diag.severity}: {diag.message}"
	if diag.code:
		head += f" [{diag.code}]"
	out = [head]
	if source is not None and lines is not None and 0 <= span.line < len(lines):
		start, end = lines[span.line]
		text = source[start:end]
		width = 1
		if span.end_line == span.line and span.end_column > span.column:
			width = span.end_column - span.column
		out.append(f"  {text}")
		out.append("  " + " " * span.column + "^" * width)
	for note in diag.notes:
		out.append(f"  note: {note}")
	return "\n".join(out)


def diagnostic_to_json(diag: Diagnostic) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	span = diag.span
	return {
		"phase": diag.phase,
		"code": diag.code,
		"message": diag.message,
		"severity": diag.severity,
		"file": span.file,
		"line": span.line + 1,
		"column": span.column + 1,
		"notes": list(diag.notes),
	}


__all__ = [
	"Diagnostic",
	"count_errors",
	"diagnostic_to_json",
	"format_span_short",
	"render_diagnostic",
]
