# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Position-tracked character cursor over a source string.

The tokenizer only needs three primitives: look at the next character, learn
where it is, and step past it. `lines()` exposes the line-offset table that
diagnostic rendering uses to recover the text of a line.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .span import Index


class CharCursor:
	def __init__(self, text: str) -> None:
		self._text = text
		self._offset = 0
		self._line = 0
		self._column = 0

	@property
	def text(self) -> str:
		return self._text

	def peek_char(self) -> Optional[str]:
		if self._offset < len(self._text):
			return self._text[self._offset]
		return None

	def peek_index(self) -> Index:
		return Index(self._line, self._column)

	def consume(self) -> None:
		"""Step past the next character; a no-op at end of input."""
		if self._offset >= len(self._text):
			return
		ch = self._text[self._offset]
		self._offset += 1
		if ch == "\n":
			self._line += 1
			self._column = 0
		else:
			self._column += 1

	def consume_if(self, expected: str) -> bool:
		if self.peek_char() == expected:
			self.consume()
			return True
		return False

	def lines(self) -> List[Tuple[int, int]]:
		"""
		Return `(start, end)` character offsets for every line of the text.

		`end` excludes the line terminator. A trailing newline does not open an
		extra empty line.
		"""
		table: List[Tuple[int, int]] = []
		start = 0
		for offset, ch in enumerate(self._text):
			if ch == "\n":
				table.append((start, offset))
				start = offset + 1
		if start < len(self._text) or not table:
			table.append((start, len(self._text)))
		return table


__all__ = ["CharCursor"]
