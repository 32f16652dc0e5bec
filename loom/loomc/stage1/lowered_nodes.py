# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lowered tree handed to the backend.

Pipeline placement:
  syntax tree (parser/ast.py) → lowered tree (this file) → backend

Every identifier is resolved here: locals and globals become slot numbers,
functions become overload sets (indices into the function-definition table)
and imports become module references (file indices). Operators become calls
of synthetic methods (`add`, `logical_not`...) so the backend sees one call
shape for both.

Type expressions are not interpreted: they survive as `LUnresolvedType`
holding the syntax it was written with.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from loom.loomc.core.span import Span
from loom.loomc.parser.ast import TermWithPos


class LNode:
	"""Base class for all lowered nodes."""
	pass


class LExpr(LNode):
	pass


class LStmt(LNode):
	pass


# References


@dataclass
class LLocal(LExpr):
	"""A function-local variable or parameter."""
	slot: int
	span: Span = field(default_factory=Span)


@dataclass
class LGlobal(LExpr):
	"""A top-level variable of file `file_index`."""
	file_index: int
	slot: int
	span: Span = field(default_factory=Span)


@dataclass
class LFunction(LExpr):
	"""An overload set: indices into `LoweredProgram.functions`."""
	definitions: List[int]
	span: Span = field(default_factory=Span)


@dataclass
class LModule(LExpr):
	file_index: int
	span: Span = field(default_factory=Span)


@dataclass
class LUnresolvedType(LExpr):
	"""
	A type expression kept as syntax. `type_index` is set when the name
	resolved to a type item.
	"""
	term: TermWithPos
	type_index: Optional[int] = None
	span: Span = field(default_factory=Span)


# Values


@dataclass
class LWildcard(LExpr):
	span: Span = field(default_factory=Span)


@dataclass
class LNumber(LExpr):
	"""Numeric literal text, validated by the backend."""
	text: str
	span: Span = field(default_factory=Span)


@dataclass
class LString(LExpr):
	components: List[Union[str, LExpr]]
	span: Span = field(default_factory=Span)


@dataclass
class LMethod(LExpr):
	"""Synthetic method an operator dispatches to."""
	name: str
	span: Span = field(default_factory=Span)


@dataclass
class LCall(LExpr):
	callee: LExpr
	args: List[LExpr]
	span: Span = field(default_factory=Span)


@dataclass
class LAssign(LExpr):
	"""`target <op> value`; `operator` is `assign`, `add_assign`..."""
	operator: str
	target: LExpr
	value: LExpr
	span: Span = field(default_factory=Span)


@dataclass
class LAnd(LExpr):
	conditions: List[LExpr]
	span: Span = field(default_factory=Span)


@dataclass
class LOr(LExpr):
	conditions: List[LExpr]
	span: Span = field(default_factory=Span)


@dataclass
class LTuple(LExpr):
	elements: List[LExpr]
	span: Span = field(default_factory=Span)


@dataclass
class LField(LExpr):
	base: LExpr
	name: str
	span: Span = field(default_factory=Span)


@dataclass
class LFieldIndex(LExpr):
	base: LExpr
	index: str
	span: Span = field(default_factory=Span)


@dataclass
class LTypeApply(LExpr):
	base: LExpr
	parameters: List[LUnresolvedType]
	span: Span = field(default_factory=Span)


@dataclass
class LAnnotated(LExpr):
	value: LExpr
	type: LUnresolvedType
	span: Span = field(default_factory=Span)


# Statements


@dataclass
class LExprStmt(LStmt):
	expr: LExpr


@dataclass
class LVarDecl(LStmt):
	"""
	Declaration of a fresh slot: `LLocal` inside functions, `LGlobal` at a
	file's top level.
	"""
	name: str
	target: Union[LLocal, LGlobal]
	annotation: Optional[LUnresolvedType] = None


@dataclass
class LWhile(LStmt):
	condition: LExpr
	body: List[LStmt]


# Containers


@dataclass
class LoweredFile:
	path: Path
	file_index: int
	stmts: List[LStmt] = field(default_factory=list)
	num_globals: int = 0


@dataclass
class LoweredFunction:
	name: str
	path: Path
	file_index: int
	params: List[LVarDecl] = field(default_factory=list)
	type_parameters: List[LUnresolvedType] = field(default_factory=list)
	ret_type: Optional[LUnresolvedType] = None
	body: List[LStmt] = field(default_factory=list)
	num_locals: int = 0


@dataclass
class LoweredProgram:
	"""
	`files[i]` is module `i`; `functions[j]` lowers function definition `j`,
	so `LFunction.definitions` index straight into it.
	"""
	files: List[LoweredFile] = field(default_factory=list)
	functions: List[LoweredFunction] = field(default_factory=list)


__all__ = [
	"LAnd",
	"LAnnotated",
	"LAssign",
	"LCall",
	"LExpr",
	"LExprStmt",
	"LField",
	"LFieldIndex",
	"LFunction",
	"LGlobal",
	"LLocal",
	"LMethod",
	"LModule",
	"LNode",
	"LNumber",
	"LOr",
	"LStmt",
	"LString",
	"LTuple",
	"LTypeApply",
	"LUnresolvedType",
	"LVarDecl",
	"LWhile",
	"LWildcard",
	"LoweredFile",
	"LoweredFunction",
	"LoweredProgram",
]
