# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Name resolution: syntax tree → lowered tree.

Two passes over the reader's tables:

  1. every file's top-level statements, in file-table order. Top-level `var`
     allocates global slots, dense per file. When a file is done, its
     outermost bindings are published into that file's items as
     `GlobalVariableItem`s.
  2. every function definition, in table order, with a fresh local counter.
     Parameters are bound first, at slots 0..n-1.

Identifiers resolve innermost scope first, then the owning file's items,
else `E-UNDEFINED-IDENTIFIER`. A resolution error aborts only the statement
it occurs in; it is recorded and lowering continues, so one run reports every
unresolved name.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from loom.loomc.core.diagnostics import Diagnostic
from loom.loomc.core.span import Span
from loom.loomc.reader import Reader
from loom.loomc.parser import ast as A
from loom.loomc.parser.ast import (
	FunctionItem,
	GlobalVariableItem,
	ImportItem,
	Item,
	TypeItem,
)

from . import lowered_nodes as L

logger = logging.getLogger(__name__)


class ResolveError(ValueError):
	"""Semantic error found while lowering one statement."""

	phase = "resolve"

	def __init__(self, code: str, message: str, *, span: Span) -> None:
		super().__init__(message)
		self.code = code
		self.message = message
		self.span = span


class Scope:
	"""
	Name → slot bindings for one function body (or one file's top level).

	A single map holds whatever is visible right now. `declare` always takes a
	fresh slot and records what it shadowed in an undo log; leaving a block
	replays the log back to the block's mark, so outer bindings reappear.
	Slots are never reused.
	"""

	def __init__(self) -> None:
		self.bindings: Dict[str, int] = {}
		self.num_slots = 0
		self._undo: List[Tuple[str, Optional[int]]] = []
		self._marks: List[int] = []

	@property
	def depth(self) -> int:
		return len(self._marks)

	def declare(self, name: str) -> int:
		slot = self.num_slots
		self.num_slots += 1
		self._undo.append((name, self.bindings.get(name)))
		self.bindings[name] = slot
		return slot

	def lookup(self, name: str) -> Optional[int]:
		return self.bindings.get(name)

	def push(self) -> None:
		self._marks.append(len(self._undo))

	def pop(self) -> None:
		mark = self._marks.pop()
		while len(self._undo) > mark:
			name, prev = self._undo.pop()
			if prev is None:
				del self.bindings[name]
			else:
				self.bindings[name] = prev


def binding_name(term: A.TermWithPos) -> Optional[Tuple[str, Optional[A.TermWithPos]]]:
	"""
	Reduce a declaration term to `(name, type annotation)`.

	Accepts `x`, `x: T` and parenthesized forms of those; anything else is not
	a variable name.
	"""
	node = term.term
	while isinstance(node, A.Parenthesized):
		node = node.inner.term
	if isinstance(node, A.Identifier):
		return node.name, None
	if isinstance(node, A.TypeAnnotation):
		left = node.term_left.term
		while isinstance(left, A.Parenthesized):
			left = left.inner.term
		if isinstance(left, A.Identifier):
			return left.name, node.opt_term_right
	return None


class Resolver:
	"""
	Lowers one body (a file's top level or a function) against one file's items.

	Entry points:
	  - lower_block: lower statements, recording errors per statement
	  - lower_term: lower a single expression (raises ResolveError)
	Helper visitors are named `_lower_<TermClass>`.
	"""

	def __init__(
		self,
		*,
		path: Path,
		file_index: int,
		items: Dict[str, Item],
		is_global: bool,
		diagnostics: List[Diagnostic],
	) -> None:
		self.path = path
		self.file_index = file_index
		self.items = items
		self.is_global = is_global
		self.scope = Scope()
		self.diagnostics = diagnostics
		# Top-level declarations at depth 0, in order; published as items later.
		self.outer_decls: Dict[str, Span] = {}

	def _span(self, span: Span) -> Span:
		return span.in_file(str(self.path))

	def _report(self, err: ResolveError) -> None:
		logger.debug("resolve error %s at %s", err.code, err.span)
		self.diagnostics.append(
			Diagnostic(
				message=err.message,
				code=err.code,
				phase=err.phase,
				severity="error",
				span=err.span,
			)
		)

	def _missing(self, at: Span) -> ResolveError:
		return ResolveError("E-MISSING-EXPRESSION", "expected an expression", span=self._span(at))

	def _slot_ref(self, slot: int, span: Span) -> L.LExpr:
		if self.is_global:
			return L.LGlobal(file_index=self.file_index, slot=slot, span=span)
		return L.LLocal(slot=slot, span=span)

	# Statements

	def lower_block(self, stmts: Sequence[A.Stmt]) -> List[L.LStmt]:
		out: List[L.LStmt] = []
		for stmt in stmts:
			try:
				out.append(self.lower_stmt(stmt))
			except ResolveError as err:
				self._report(err)
		return out

	def lower_stmt(self, stmt: A.Stmt) -> L.LStmt:
		if isinstance(stmt, A.VarStmt):
			return self.declare(stmt.term)
		if isinstance(stmt, A.WhileStmt):
			condition = self.lower_term(stmt.condition)
			self.scope.push()
			try:
				body = self.lower_block(stmt.body)
			finally:
				self.scope.pop()
			return L.LWhile(condition=condition, body=body)
		if isinstance(stmt, A.TermStmt):
			return L.LExprStmt(self.lower_term(stmt.term))
		raise NotImplementedError(f"cannot lower statement {type(stmt).__name__}")

	def declare(self, term: A.TermWithPos) -> L.LVarDecl:
		"""Bind a fresh slot for a `var` term or a parameter."""
		reduced = binding_name(term)
		if reduced is None:
			raise ResolveError(
				"E-INVALID-VARIABLE-NAME",
				"variable name must be an identifier",
				span=self._span(term.pos),
			)
		name, opt_annotation = reduced
		annotation = None
		if opt_annotation is not None:
			annotation = self._type(opt_annotation)
		elif isinstance(term.term, A.TypeAnnotation):
			raise self._missing(term.term.colon_pos)
		span = self._span(term.pos)
		slot = self.scope.declare(name)
		if self.is_global and self.scope.depth == 0:
			self.outer_decls[name] = span
		logger.debug("%s: %s -> slot %d", self.path.name, name, slot)
		return L.LVarDecl(name=name, target=self._slot_ref(slot, span), annotation=annotation)

	# Expressions

	def lower_term(self, node: Optional[A.TermWithPos], missing_at: Optional[Span] = None) -> L.LExpr:
		if node is None:
			assert missing_at is not None
			raise self._missing(missing_at)
		method = getattr(self, f"_lower_{type(node.term).__name__}", None)
		if method is None:
			raise NotImplementedError(f"cannot lower term {type(node.term).__name__}")
		return method(node.term, self._span(node.pos))

	def _elements(self, elements: Sequence[A.ListElement]) -> List[L.LExpr]:
		out: List[L.LExpr] = []
		for elem in elements:
			if isinstance(elem, A.ListElementEmpty):
				raise self._missing(elem.comma_pos)
			out.append(self.lower_term(elem.term))
		return out

	def _type(self, node: A.TermWithPos) -> L.LUnresolvedType:
		return L.LUnresolvedType(term=node, span=self._span(node.pos))

	def _types(self, elements: Sequence[A.ListElement]) -> List[L.LUnresolvedType]:
		out: List[L.LUnresolvedType] = []
		for elem in elements:
			if isinstance(elem, A.ListElementEmpty):
				raise self._missing(elem.comma_pos)
			out.append(self._type(elem.term))
		return out

	def _conditions(self, conditions: List[Optional[A.TermWithPos]], operators_pos: List[Span]) -> List[L.LExpr]:
		out: List[L.LExpr] = []
		for i, cond in enumerate(conditions):
			# A gap is reported at the operator after it (or before, for the last).
			at = operators_pos[i] if i < len(operators_pos) else operators_pos[i - 1]
			out.append(self.lower_term(cond, at))
		return out

	def _lower_Identifier(self, t: A.Identifier, span: Span) -> L.LExpr:
		slot = self.scope.lookup(t.name)
		if slot is not None:
			return self._slot_ref(slot, span)
		item = self.items.get(t.name)
		if isinstance(item, FunctionItem):
			return L.LFunction(definitions=list(item.definitions), span=span)
		if isinstance(item, GlobalVariableItem):
			return L.LGlobal(file_index=self.file_index, slot=item.slot, span=span)
		if isinstance(item, ImportItem):
			return L.LModule(file_index=item.file_index, span=span)
		if isinstance(item, TypeItem):
			return L.LUnresolvedType(
				term=A.TermWithPos(t, span),
				type_index=item.index,
				span=span,
			)
		raise ResolveError(
			"E-UNDEFINED-IDENTIFIER",
			f"undefined identifier '{t.name}'",
			span=span,
		)

	def _lower_Identity(self, t: A.Identity, span: Span) -> L.LExpr:
		return L.LWildcard(span=span)

	def _lower_NumericLiteral(self, t: A.NumericLiteral, span: Span) -> L.LExpr:
		return L.LNumber(text=t.value, span=span)

	def _lower_StringLiteral(self, t: A.StringLiteral, span: Span) -> L.LExpr:
		components: List = []
		for comp in t.components:
			if isinstance(comp, str):
				components.append(comp)
			else:
				components.append(self.lower_term(comp.term, comp.opening_pos))
		return L.LString(components=components, span=span)

	def _lower_IntegerTy(self, t: A.IntegerTy, span: Span) -> L.LExpr:
		return L.LUnresolvedType(term=A.TermWithPos(t, span), span=span)

	def _lower_FloatTy(self, t: A.FloatTy, span: Span) -> L.LExpr:
		return L.LUnresolvedType(term=A.TermWithPos(t, span), span=span)

	def _lower_MethodName(self, t: A.MethodName, span: Span) -> L.LExpr:
		return L.LMethod(name=t.name, span=span)

	def _lower_Parenthesized(self, t: A.Parenthesized, span: Span) -> L.LExpr:
		return self.lower_term(t.inner)

	def _lower_Tuple(self, t: A.Tuple, span: Span) -> L.LExpr:
		return L.LTuple(elements=self._elements(t.elements), span=span)

	def _lower_FieldByName(self, t: A.FieldByName, span: Span) -> L.LExpr:
		return L.LField(base=self.lower_term(t.term_left), name=t.name, span=span)

	def _lower_FieldByNumber(self, t: A.FieldByNumber, span: Span) -> L.LExpr:
		return L.LFieldIndex(base=self.lower_term(t.term_left), index=t.number, span=span)

	def _lower_TypeAnnotation(self, t: A.TypeAnnotation, span: Span) -> L.LExpr:
		value = self.lower_term(t.term_left)
		if t.opt_term_right is None:
			raise self._missing(t.colon_pos)
		return L.LAnnotated(value=value, type=self._type(t.opt_term_right), span=span)

	def _lower_FunctionCall(self, t: A.FunctionCall, span: Span) -> L.LExpr:
		callee = self.lower_term(t.function)
		return L.LCall(callee=callee, args=self._elements(t.arguments), span=span)

	def _lower_TypeParameters(self, t: A.TypeParameters, span: Span) -> L.LExpr:
		base = self.lower_term(t.term_left)
		return L.LTypeApply(base=base, parameters=self._types(t.parameters), span=span)

	def _lower_ReturnType(self, t: A.ReturnType, span: Span) -> L.LExpr:
		if t.opt_ret is None:
			raise self._missing(t.arrow_pos)
		return L.LUnresolvedType(term=A.TermWithPos(t, span), span=span)

	def _lower_UnaryOperation(self, t: A.UnaryOperation, span: Span) -> L.LExpr:
		method = self.lower_term(t.operator)
		operand = self.lower_term(t.opt_operand, t.operator.pos)
		return L.LCall(callee=method, args=[operand], span=span)

	def _lower_BinaryOperation(self, t: A.BinaryOperation, span: Span) -> L.LExpr:
		method = self.lower_term(t.operator)
		left = self.lower_term(t.opt_left_operand, t.operator.pos)
		right = self.lower_term(t.opt_right_operand, t.operator.pos)
		return L.LCall(callee=method, args=[left, right], span=span)

	def _lower_Assignment(self, t: A.Assignment, span: Span) -> L.LExpr:
		target = self.lower_term(t.opt_left_hand_side, t.operator.pos)
		value = self.lower_term(t.opt_right_hand_side, t.operator.pos)
		return L.LAssign(operator=t.operator.term.name, target=target, value=value, span=span)

	def _lower_Conjunction(self, t: A.Conjunction, span: Span) -> L.LExpr:
		return L.LAnd(conditions=self._conditions(t.opt_conditions, t.operators_pos), span=span)

	def _lower_Disjunction(self, t: A.Disjunction, span: Span) -> L.LExpr:
		return L.LOr(conditions=self._conditions(t.opt_conditions, t.operators_pos), span=span)


def _lower_function(
	definition: A.FunctionDefinition,
	file_index: int,
	items: Dict[str, Item],
	diagnostics: List[Diagnostic],
) -> L.LoweredFunction:
	resolver = Resolver(
		path=definition.path,
		file_index=file_index,
		items=items,
		is_global=False,
		diagnostics=diagnostics,
	)
	lowered = L.LoweredFunction(name=definition.name, path=definition.path, file_index=file_index)

	if definition.opt_type_parameters is not None:
		try:
			lowered.type_parameters = resolver._types(definition.opt_type_parameters)
		except ResolveError as err:
			resolver._report(err)

	for elem in definition.opt_parameters or []:
		if isinstance(elem, A.ListElementEmpty):
			resolver._report(resolver._missing(elem.comma_pos))
			continue
		try:
			lowered.params.append(resolver.declare(elem.term))
		except ResolveError as err:
			resolver._report(err)

	if definition.opt_ret_ty is not None:
		if definition.opt_ret_ty.opt_ret_ty is None:
			resolver._report(resolver._missing(definition.opt_ret_ty.arrow_pos))
		else:
			lowered.ret_type = resolver._type(definition.opt_ret_ty.opt_ret_ty)

	lowered.body = resolver.lower_block(definition.body)
	lowered.num_locals = resolver.scope.num_slots
	return lowered


def resolve_program(reader: Reader) -> Tuple[L.LoweredProgram, List[Diagnostic]]:
	"""
	Lower every file and function of a fully read program.

	Publishes each file's outermost top-level variables into
	`reader.items[file_index]` as a side effect, before any function body is
	lowered, so functions can refer to globals declared anywhere in their file.
	"""
	diagnostics: List[Diagnostic] = []
	program = L.LoweredProgram()

	for file_index, source in enumerate(reader.files):
		items = reader.items[file_index]
		resolver = Resolver(
			path=source.path,
			file_index=file_index,
			items=items,
			is_global=True,
			diagnostics=diagnostics,
		)
		stmts = resolver.lower_block(source.stmts)
		for name, slot in resolver.scope.bindings.items():
			if name in items:
				diagnostics.append(
					Diagnostic(
						message=f"'{name}' is already defined in this file",
						code="E-DUPLICATE-DEFINITION",
						phase="resolve",
						severity="error",
						span=resolver.outer_decls.get(name, Span(file=str(source.path))),
					)
				)
				continue
			items[name] = GlobalVariableItem(slot)
		logger.debug(
			"lowered %s: %d statement(s), %d global slot(s)",
			source.path, len(stmts), resolver.scope.num_slots,
		)
		program.files.append(
			L.LoweredFile(
				path=source.path,
				file_index=file_index,
				stmts=stmts,
				num_globals=resolver.scope.num_slots,
			)
		)

	for definition in reader.function_definitions:
		file_index = reader.file_indices[definition.path]
		program.functions.append(
			_lower_function(definition, file_index, reader.items[file_index], diagnostics)
		)
	return program, diagnostics


__all__ = ["ResolveError", "Resolver", "Scope", "binding_name", "resolve_program"]
