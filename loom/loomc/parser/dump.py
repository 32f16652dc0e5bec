# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Indented text dump of the syntax tree, one node per line, each prefixed with
its 1-based position. Used by `loomc --dump-ast` and handy in test failures.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from . import ast as A


def _pos(span) -> str:
	return f"{span.line + 1}:{span.column + 1}"


class TreeDumper:
	"""
	Dispatches on the node class name (`_dump_<Class>`), mirroring how the
	resolver lowers terms.
	"""

	def __init__(self, indent: str = "  ") -> None:
		self._indent = indent
		self._lines: List[str] = []

	def lines(self) -> List[str]:
		return list(self._lines)

	def _emit(self, depth: int, text: str) -> None:
		self._lines.append(self._indent * depth + text)

	# Terms

	def term(self, node: Optional[A.TermWithPos], depth: int) -> None:
		if node is None:
			self._emit(depth, "<missing>")
			return
		method = getattr(self, f"_dump_{type(node.term).__name__}", None)
		if method is None:
			raise NotImplementedError(f"no dump for {type(node.term).__name__}")
		method(node.term, _pos(node.pos), depth)

	def elements(self, label: str, elements: Sequence[A.ListElement], depth: int) -> None:
		self._emit(depth, f"{label}({len(elements)}):")
		for elem in elements:
			if isinstance(elem, A.ListElementEmpty):
				self._emit(depth + 1, f"{_pos(elem.comma_pos)} <empty>")
			else:
				self.term(elem.term, depth + 1)

	def _dump_NumericLiteral(self, t: A.NumericLiteral, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} number({t.value})")

	def _dump_StringLiteral(self, t: A.StringLiteral, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} string")
		for comp in t.components:
			if isinstance(comp, str):
				self._emit(depth + 1, f"text({comp!r})")
			else:
				self._emit(depth + 1, "embedded")
				if comp.term is None:
					self._emit(depth + 2, "<empty>")
				else:
					self.term(comp.term, depth + 2)

	def _dump_IntegerTy(self, t: A.IntegerTy, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} type int")

	def _dump_FloatTy(self, t: A.FloatTy, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} type float")

	def _dump_Identity(self, t: A.Identity, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} wildcard")

	def _dump_Identifier(self, t: A.Identifier, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} identifier({t.name})")

	def _dump_MethodName(self, t: A.MethodName, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} method({t.name})")

	def _dump_FieldByName(self, t: A.FieldByName, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} field({t.name})")
		self.term(t.term_left, depth + 1)

	def _dump_FieldByNumber(self, t: A.FieldByNumber, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} field #{t.number}")
		self.term(t.term_left, depth + 1)

	def _dump_TypeAnnotation(self, t: A.TypeAnnotation, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} annotated")
		self.term(t.term_left, depth + 1)
		self.term(t.opt_term_right, depth + 1)

	def _dump_FunctionCall(self, t: A.FunctionCall, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} call")
		self.term(t.function, depth + 1)
		self.elements("args", t.arguments, depth)

	def _dump_TypeParameters(self, t: A.TypeParameters, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} type application")
		self.term(t.term_left, depth + 1)
		self.elements("params", t.parameters, depth)

	def _dump_ReturnType(self, t: A.ReturnType, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} return type")
		self.term(t.args, depth + 1)
		self.term(t.opt_ret, depth + 1)

	def _dump_UnaryOperation(self, t: A.UnaryOperation, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} unary {t.operator.term.name}")
		self.term(t.opt_operand, depth + 1)

	def _dump_BinaryOperation(self, t: A.BinaryOperation, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} binary {t.operator.term.name}")
		self.term(t.opt_left_operand, depth + 1)
		self.term(t.opt_right_operand, depth + 1)

	def _dump_Assignment(self, t: A.Assignment, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} {t.operator.term.name}")
		self.term(t.opt_left_hand_side, depth + 1)
		self.term(t.opt_right_hand_side, depth + 1)

	def _dump_Conjunction(self, t: A.Conjunction, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} and")
		for cond in t.opt_conditions:
			self.term(cond, depth + 1)

	def _dump_Disjunction(self, t: A.Disjunction, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} or")
		for cond in t.opt_conditions:
			self.term(cond, depth + 1)

	def _dump_Parenthesized(self, t: A.Parenthesized, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} parenthesized")
		self.term(t.inner, depth + 1)

	def _dump_Tuple(self, t: A.Tuple, pos: str, depth: int) -> None:
		self._emit(depth, f"{pos} tuple")
		self.elements("elements", t.elements, depth)

	# Statements and definitions

	def stmt(self, stmt: A.Stmt, depth: int) -> None:
		if isinstance(stmt, A.VarStmt):
			self._emit(depth, f"{_pos(stmt.keyword_pos)} var")
			self.term(stmt.term, depth + 1)
		elif isinstance(stmt, A.WhileStmt):
			self._emit(depth, f"{_pos(stmt.keyword_pos)} while")
			self.term(stmt.condition, depth + 1)
			self._emit(depth, "do")
			for inner in stmt.body:
				self.stmt(inner, depth + 1)
			self._emit(depth, "end while")
		elif isinstance(stmt, A.TermStmt):
			self._emit(depth, f"{_pos(stmt.term.pos)} expression statement")
			self.term(stmt.term, depth + 1)
		else:
			raise NotImplementedError(f"no dump for {type(stmt).__name__}")

	def function(self, fn: A.FunctionDefinition, depth: int) -> None:
		self._emit(depth, f"{_pos(fn.name_pos)} func {fn.name}")
		if fn.opt_type_parameters is not None:
			self.elements("type params", fn.opt_type_parameters, depth + 1)
		if fn.opt_parameters is not None:
			self.elements("params", fn.opt_parameters, depth + 1)
		if fn.opt_ret_ty is not None:
			self._emit(depth + 1, f"{_pos(fn.opt_ret_ty.arrow_pos)} returns")
			self.term(fn.opt_ret_ty.opt_ret_ty, depth + 2)
		for stmt in fn.body:
			self.stmt(stmt, depth + 1)
		self._emit(depth, "end func")


def dump_term(term: Optional[A.TermWithPos]) -> str:
	d = TreeDumper()
	d.term(term, 0)
	return "\n".join(d.lines())


def dump_stmts(stmts: Sequence[A.Stmt]) -> str:
	d = TreeDumper()
	for stmt in stmts:
		d.stmt(stmt, 0)
	return "\n".join(d.lines())


def dump_function(fn: A.FunctionDefinition) -> str:
	d = TreeDumper()
	d.function(fn, 0)
	return "\n".join(d.lines())


__all__ = ["TreeDumper", "dump_function", "dump_stmts", "dump_term"]
