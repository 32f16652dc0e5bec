# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
loom package: the Loom language front end.

Layout:
  loomc.core:    spans, diagnostics, the character cursor
  loomc.parser:  tokens, tokenizer, syntax tree, recursive-descent parser
  loomc.reader:  import graph / file table
  loomc.stage1:  name resolution and lowering to backend-facing nodes
"""

__all__ = ["loomc"]
