# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Stage 1: name resolution and lowering of the syntax tree into the
backend-facing tree (`lowered_nodes`).
"""

from .lowered_nodes import (
	LExpr,
	LStmt,
	LoweredFile,
	LoweredFunction,
	LoweredProgram,
)
from .resolver import (
	ResolveError,
	Resolver,
	Scope,
	binding_name,
	resolve_program,
)

__all__ = [
	"LExpr",
	"LStmt",
	"LoweredFile",
	"LoweredFunction",
	"LoweredProgram",
	"ResolveError",
	"Resolver",
	"Scope",
	"binding_name",
	"resolve_program",
]
