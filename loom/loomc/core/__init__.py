# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
loom.loomc.core: shared position/diagnostic primitives used across stages.

Modules:
  - span: Index/Span source positions
  - cursor: CharCursor (peek/consume/position + line-offset table)
  - diagnostics: Diagnostic record and text/JSON rendering
"""

__all__ = [
	"span",
	"cursor",
	"diagnostics",
]
