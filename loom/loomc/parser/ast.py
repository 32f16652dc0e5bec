# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Syntax tree produced by the Loom parser.

`Term` is the universal expression node; every term travels inside a
`TermWithPos` so each subtree knows its exact source range. Operands and list
elements may be absent: the parser records what is missing (with the position
of the operator or comma around the gap) and leaves it to later stages to
decide whether the gap is an error.

Files, items and function definitions are kept in flat tables owned by the
reader and addressed by index, so mutually importing files never own each
other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from loom.loomc.core.span import Span


class Term:
	"""Base class for all expression variants."""
	pass


@dataclass
class TermWithPos:
	term: Term
	pos: Span


@dataclass
class ListElementNonEmpty:
	term: TermWithPos


@dataclass
class ListElementEmpty:
	"""A gap before a comma, e.g. the middle slot of `f(a, , b)`."""
	comma_pos: Span


ListElement = Union[ListElementNonEmpty, ListElementEmpty]

# Components of a string literal: literal text, or an embedded expression
# (None for an empty `{}`).
StringLiteralComponent = Union[str, "StringLiteralTerm"]


@dataclass
class StringLiteralTerm:
	"""An embedded `{...}` expression inside a string literal; `opening_pos` is its `{`."""
	term: Optional[TermWithPos]
	opening_pos: Span = field(default_factory=Span)


# Leaves


@dataclass
class NumericLiteral(Term):
	value: str


@dataclass
class StringLiteral(Term):
	components: List[Union[str, StringLiteralTerm]]


@dataclass
class IntegerTy(Term):
	pass


@dataclass
class FloatTy(Term):
	pass


@dataclass
class Identity(Term):
	"""The wildcard `_`."""
	pass


@dataclass
class Identifier(Term):
	name: str


@dataclass
class MethodName(Term):
	"""Synthetic name of the method an operator stands for (`add`, `assign`...)."""
	name: str


# Postfix forms


@dataclass
class FieldByName(Term):
	term_left: TermWithPos
	name: str


@dataclass
class FieldByNumber(Term):
	term_left: TermWithPos
	number: str


@dataclass
class TypeAnnotation(Term):
	term_left: TermWithPos
	colon_pos: Span
	opt_term_right: Optional[TermWithPos]


@dataclass
class FunctionCall(Term):
	function: TermWithPos
	arguments: List[ListElement]


@dataclass
class TypeParameters(Term):
	term_left: TermWithPos
	parameters: List[ListElement]


@dataclass
class ReturnType(Term):
	arrow_pos: Span
	args: TermWithPos
	opt_ret: Optional[TermWithPos]


# Operators


@dataclass
class UnaryOperation(Term):
	operator: TermWithPos
	opt_operand: Optional[TermWithPos]


@dataclass
class BinaryOperation(Term):
	opt_left_operand: Optional[TermWithPos]
	operator: TermWithPos
	opt_right_operand: Optional[TermWithPos]


@dataclass
class Assignment(Term):
	opt_left_hand_side: Optional[TermWithPos]
	operator: TermWithPos
	opt_right_hand_side: Optional[TermWithPos]


@dataclass
class Conjunction(Term):
	"""`a && b && c` kept flat; `operators_pos[i]` sits between conditions i and i+1."""
	opt_conditions: List[Optional[TermWithPos]]
	operators_pos: List[Span]


@dataclass
class Disjunction(Term):
	opt_conditions: List[Optional[TermWithPos]]
	operators_pos: List[Span]


# Grouping


@dataclass
class Parenthesized(Term):
	inner: TermWithPos


@dataclass
class Tuple(Term):
	elements: List[ListElement]


# Statements


class Stmt:
	pass


@dataclass
class VarStmt(Stmt):
	keyword_pos: Span
	term: TermWithPos


@dataclass
class TermStmt(Stmt):
	term: TermWithPos


@dataclass
class WhileStmt(Stmt):
	keyword_pos: Span
	condition: TermWithPos
	body: List[Stmt]


# Top-level declarations


@dataclass
class RetTy:
	arrow_pos: Span
	opt_ret_ty: Optional[TermWithPos]


@dataclass
class FunctionDefinition:
	path: Path
	name: str
	name_pos: Span
	opt_type_parameters: Optional[List[ListElement]]
	opt_parameters: Optional[List[ListElement]]
	opt_ret_ty: Optional[RetTy]
	body: List[Stmt]


@dataclass
class ImportDecl:
	"""
	`import name` or `import name("path")`, before the target is resolved.

	`opt_path` is the explicit path text when given; the reader resolves it (or
	the name) against the importing file's directory.
	"""
	keyword_pos: Span
	name: str
	name_pos: Span
	opt_path: Optional[str]
	pos: Span


class Item:
	"""Per-file namespace entry."""
	pass


@dataclass
class ImportItem(Item):
	file_index: int


@dataclass
class FunctionItem(Item):
	"""Overload set: indices into the function-definition table."""
	definitions: List[int] = field(default_factory=list)


@dataclass
class TypeItem(Item):
	"""Reserved for type declarations; nothing produces it yet."""
	index: int


@dataclass
class GlobalVariableItem(Item):
	slot: int


__all__ = [
	"Assignment",
	"BinaryOperation",
	"Conjunction",
	"Disjunction",
	"FieldByName",
	"FieldByNumber",
	"FloatTy",
	"FunctionCall",
	"FunctionDefinition",
	"FunctionItem",
	"GlobalVariableItem",
	"Identifier",
	"Identity",
	"ImportDecl",
	"ImportItem",
	"IntegerTy",
	"Item",
	"ListElement",
	"ListElementEmpty",
	"ListElementNonEmpty",
	"MethodName",
	"NumericLiteral",
	"Parenthesized",
	"RetTy",
	"ReturnType",
	"Stmt",
	"StringLiteral",
	"StringLiteralComponent",
	"StringLiteralTerm",
	"Term",
	"TermStmt",
	"TermWithPos",
	"Tuple",
	"TypeAnnotation",
	"TypeItem",
	"TypeParameters",
	"UnaryOperation",
	"VarStmt",
	"WhileStmt",
]
