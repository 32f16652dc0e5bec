# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
loomc: the Loom compiler front end.

Pipeline:
  source text → tokens/syntax tree (parser) → file table (reader)
     → lowered tree (stage1) → backend
"""

__all__ = ["core", "parser", "reader", "stage1", "loomc"]
