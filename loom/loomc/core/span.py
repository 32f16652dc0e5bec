# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source positions used by every syntax node and diagnostic.

An `Index` is a single (line, column) point; a `Span` is the half-open range
between two of them. Both are 0-based and count code points, matching the
character cursor. Rendering to 1-based `file:line:column` happens only at the
diagnostic boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, order=True)
class Index:
	"""A point in the source text (0-based line and column)."""

	line: int = 0
	column: int = 0

	def __str__(self) -> str:
		return f"{self.line + 1}:{self.column + 1}"


@dataclass(frozen=True)
class Span:
	"""Half-open source range `start..end`, optionally anchored to a file."""

	start: Index = Index()
	end: Index = Index()
	file: Optional[str] = None

	@property
	def line(self) -> int:
		return self.start.line

	@property
	def column(self) -> int:
		return self.start.column

	@property
	def end_line(self) -> int:
		return self.end.line

	@property
	def end_column(self) -> int:
		return self.end.column

	@classmethod
	def between(cls, start: Index, end: Index) -> "Span":
		return cls(start=start, end=end)

	def in_file(self, file: str) -> "Span":
		"""Return the same range anchored to `file` (diagnostics need the origin)."""
		return Span(start=self.start, end=self.end, file=file)

	def __str__(self) -> str:
		prefix = f"{self.file}:" if self.file else ""
		return f"{prefix}{self.start}"


__all__ = ["Index", "Span"]
