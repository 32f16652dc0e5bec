# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Recursive-descent parser for Loom.

Precedence, loosest to tightest:

  assignment (right associative)
  `||`  (flattened n-ary chain)
  `&&`  (flattened n-ary chain)
  `== !=`
  `< <= > >=`
  `|`
  `^`
  `&`
  `<< >>`
  `+ -`
  `* / %`
  prefix operators, then a primary factor with its postfix chain

Every expression entry point returns None when nothing is there. Callers turn
that absence into an empty list slot or a missing operand, and raise only where
a gap is structurally impossible (e.g. `var` with no name).

`allow_line_break` is True inside delimiters. Outside them, a token on a new
line ends the expression: Loom statements are terminated by line breaks.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from loom.loomc.core.cursor import CharCursor
from loom.loomc.core.span import Index, Span

from .ast import (
	Assignment,
	BinaryOperation,
	Conjunction,
	Disjunction,
	FieldByName,
	FieldByNumber,
	FloatTy,
	FunctionCall,
	FunctionDefinition,
	Identifier,
	Identity,
	ImportDecl,
	IntegerTy,
	ListElement,
	ListElementEmpty,
	ListElementNonEmpty,
	MethodName,
	NumericLiteral,
	Parenthesized,
	RetTy,
	ReturnType,
	Stmt,
	StringLiteral,
	Term,
	TermStmt,
	TermWithPos,
	Tuple as TupleTerm,
	TypeAnnotation,
	TypeParameters,
	UnaryOperation,
	VarStmt,
	WhileStmt,
)
from .errors import ParseError, nested_too_deeply
from .lexer import read_token
from .tokens import TokenInfo, TokenKind, describe

K = TokenKind

PREFIX_OPERATORS: Dict[TokenKind, str] = {
	K.PLUS: "plus",
	K.HYPHEN: "minus",
	K.SLASH: "reciprocal",
	K.EXCLAMATION: "logical_not",
	K.TILDE: "bitwise_not",
}

# Binary tiers, loosest first. Each tier's operands are parsed at the next one.
BINARY_TIERS: List[Dict[TokenKind, str]] = [
	{K.DOUBLE_EQUAL: "equal", K.EXCLAMATION_EQUAL: "not_equal"},
	{
		K.GREATER: "greater",
		K.GREATER_EQUAL: "greater_or_equal",
		K.LESS: "less",
		K.LESS_EQUAL: "less_or_equal",
	},
	{K.BAR: "bitwise_or"},
	{K.CIRCUMFLEX: "bitwise_xor"},
	{K.AMPERSAND: "bitwise_and"},
	{K.DOUBLE_GREATER: "right_shift", K.DOUBLE_LESS: "left_shift"},
	{K.PLUS: "add", K.HYPHEN: "sub"},
	{K.ASTERISK: "mul", K.SLASH: "div", K.PERCENT: "rem"},
]

ASSIGNMENT_OPERATORS: Dict[TokenKind, str] = {
	K.EQUAL: "assign",
	K.PLUS_EQUAL: "add_assign",
	K.HYPHEN_EQUAL: "sub_assign",
	K.ASTERISK_EQUAL: "mul_assign",
	K.SLASH_EQUAL: "div_assign",
	K.PERCENT_EQUAL: "rem_assign",
	K.DOUBLE_GREATER_EQUAL: "right_shift_assign",
	K.DOUBLE_LESS_EQUAL: "left_shift_assign",
	K.AMPERSAND_EQUAL: "bitwise_and_assign",
	K.CIRCUMFLEX_EQUAL: "bitwise_xor_assign",
	K.BAR_EQUAL: "bitwise_or_assign",
}

# Parenthesized, prefixed, interpolated and assigned terms plus `while` bodies
# each count one level.
MAX_NESTING_DEPTH = 32

TopLevel = Union[ImportDecl, FunctionDefinition, Stmt]


class Parser:
	"""
	One-token-lookahead parser over a `CharCursor`.

	The lookahead is scanned eagerly, so the cursor always sits just past the
	next token; `next_token_pos` relies on that.
	"""

	def __init__(
		self,
		cursor: CharCursor,
		*,
		is_on_new_line: bool = True,
		prev_token_end: Optional[Index] = None,
		depth: int = 0,
	) -> None:
		self._cursor = cursor
		self._depth = depth
		start, info = read_token(cursor, True, is_on_new_line, depth)
		self._next: Optional[TokenInfo] = info
		self._next_start: Index = start
		self._prev_token_end: Index = prev_token_end if prev_token_end is not None else Index()

	# Lookahead accessors

	def next_token(self) -> Optional[TokenKind]:
		return self._next.kind if self._next is not None else None

	def take_payload(self) -> object:
		"""Move the payload out of the lookahead token (it is consumed next)."""
		if self._next is None:
			raise RuntimeError("no lookahead token to take a payload from")
		value = self._next.token.value
		self._next.token.value = None
		return value

	def adjacent_token(self) -> Optional[TokenKind]:
		if self._next is not None and self._next.is_adjacent:
			return self._next.kind
		return None

	def next_token_on_current_line(self) -> Optional[TokenKind]:
		if self._next is not None and not self._next.is_on_new_line:
			return self._next.kind
		return None

	def has_remaining_token(self) -> bool:
		return self._next is not None

	def has_remaining_token_on_current_line(self) -> bool:
		return self._next is not None and not self._next.is_on_new_line

	def next_token_start(self) -> Index:
		return self._next_start

	def next_token_pos(self) -> Span:
		return Span.between(self._next_start, self._cursor.peek_index())

	def range_from(self, start: Index) -> Span:
		return Span.between(start, self._prev_token_end)

	def consume_token(self) -> None:
		self._prev_token_end = self._cursor.peek_index()
		start, info = read_token(self._cursor, True, False, self._depth)
		self._next_start = start
		self._next = info

	def _operator_token(self, allow_line_break: bool) -> Optional[TokenKind]:
		if allow_line_break:
			return self.next_token()
		return self.next_token_on_current_line()

	@contextmanager
	def _nested(self) -> Iterator[None]:
		if self._depth >= MAX_NESTING_DEPTH:
			raise nested_too_deeply(self.next_token_pos(), MAX_NESTING_DEPTH)
		self._depth += 1
		try:
			yield
		finally:
			self._depth -= 1

	def _unexpected(self, code: str, what: str, related: List[Tuple[str, Span]] = ()) -> ParseError:
		return ParseError(
			code,
			f"unexpected {describe(self.next_token())} {what}",
			span=self.next_token_pos(),
			related=related,
		)

	# Top level

	def parse_top_level(self, path: Path) -> TopLevel:
		"""
		Parse one top-level construct: an import, a function definition or a
		statement. Callers loop while `has_remaining_token()`.
		"""
		kind = self.next_token()
		if kind is K.KEYWORD_IMPORT:
			return self.parse_import()
		if kind is K.KEYWORD_FUNC:
			return self.parse_function_definition(path)
		stmt = self.parse_stmt([])
		if stmt is None:
			raise ParseError(
				"E-PARSE-UNEXPECTED-TOKEN",
				f"unexpected {describe(kind)}",
				span=self.next_token_pos(),
			)
		return stmt

	def parse_import(self) -> ImportDecl:
		keyword_pos = self.next_token_pos()
		self.consume_token()

		# The name must follow `import` on the same line.
		kind = self.next_token_on_current_line()
		if kind is None:
			raise ParseError(
				"E-PARSE-MISSING-IMPORT-NAME",
				"expected a module name after 'import'",
				span=keyword_pos,
			)
		if kind is not K.IDENTIFIER:
			raise self._unexpected(
				"E-PARSE-UNEXPECTED-AFTER-IMPORT",
				"after 'import'",
				[("'import' is here", keyword_pos)],
			)
		name_pos = self.next_token_pos()
		name = self.take_payload()
		self.consume_token()

		opt_path: Optional[str] = None
		kind = self.next_token_on_current_line()
		if kind is K.OPENING_PARENTHESIS:
			opening_pos = self.next_token_pos()
			self.consume_token()
			path_term = self.parse_assign(True)
			closing = self.next_token()
			if closing is None:
				raise ParseError(
					"E-PARSE-UNCLOSED-PAREN",
					"unclosed parenthesis",
					span=self.next_token_pos(),
					related=[("opened here", opening_pos)],
				)
			if closing is not K.CLOSING_PARENTHESIS:
				raise self._unexpected(
					"E-PARSE-UNEXPECTED-TOKEN-IN-PARENS",
					"in parentheses",
					[("opened here", opening_pos)],
				)
			closing_pos = self.next_token_pos()
			self.consume_token()
			if path_term is None:
				raise ParseError(
					"E-PARSE-MISSING-IMPORT-PATH",
					"expected a path string between the parentheses",
					span=Span.between(opening_pos.start, closing_pos.end),
				)
			opt_path = _single_string_component(path_term)
			if opt_path is None:
				raise ParseError(
					"E-PARSE-INVALID-IMPORT-PATH",
					"import path must be a plain string literal",
					span=path_term.pos,
				)
		elif kind is not None:
			raise self._unexpected(
				"E-PARSE-UNEXPECTED-AFTER-IMPORT-NAME",
				"after the import name",
				[("import name is here", name_pos)],
			)

		return ImportDecl(
			keyword_pos=keyword_pos,
			name=name,
			name_pos=name_pos,
			opt_path=opt_path,
			pos=self.range_from(keyword_pos.start),
		)

	def parse_function_definition(self, path: Path) -> FunctionDefinition:
		keyword_pos = self.next_token_pos()
		self.consume_token()

		kind = self.next_token_on_current_line()
		if kind is None:
			raise ParseError(
				"E-PARSE-MISSING-FUNC-NAME",
				"expected a function name after 'func'",
				span=keyword_pos,
			)
		if kind is not K.IDENTIFIER:
			raise self._unexpected(
				"E-PARSE-UNEXPECTED-AFTER-FUNC",
				"after 'func'",
				[("'func' is here", keyword_pos)],
			)
		name_pos = self.next_token_pos()
		name = self.take_payload()
		self.consume_token()

		# Generic parameters are kept as an uninterpreted list of terms.
		opt_type_parameters: Optional[List[ListElement]] = None
		if self.next_token_on_current_line() is K.OPENING_BRACKET:
			opening_pos = self.next_token_pos()
			self.consume_token()
			opt_type_parameters, _ = self._parse_list(K.CLOSING_BRACKET, opening_pos)

		opt_parameters: Optional[List[ListElement]] = None
		if self.next_token_on_current_line() is K.OPENING_PARENTHESIS:
			opening_pos = self.next_token_pos()
			self.consume_token()
			opt_parameters, _ = self._parse_list(K.CLOSING_PARENTHESIS, opening_pos)

		opt_ret_ty: Optional[RetTy] = None
		if self.next_token() is K.HYPHEN_GREATER:
			arrow_pos = self.next_token_pos()
			self.consume_token()
			opt_ret_ty = RetTy(arrow_pos=arrow_pos, opt_ret_ty=self.parse_disjunction(False))

		body = self.parse_block([keyword_pos])
		return FunctionDefinition(
			path=path,
			name=name,
			name_pos=name_pos,
			opt_type_parameters=opt_type_parameters,
			opt_parameters=opt_parameters,
			opt_ret_ty=opt_ret_ty,
			body=body,
		)

	# Statements

	def parse_block(self, open_blocks: List[Span]) -> List[Stmt]:
		"""Parse statements up to and including `end`."""
		stmts: List[Stmt] = []
		while True:
			if self.next_token() is K.KEYWORD_END:
				self.consume_token()
				return stmts
			stmt = self.parse_stmt(open_blocks)
			if stmt is not None:
				stmts.append(stmt)
			elif self.has_remaining_token():
				raise ParseError(
					"E-PARSE-UNEXPECTED-TOKEN-IN-BLOCK",
					f"unexpected {describe(self.next_token())} in block",
					span=self.next_token_pos(),
					open_blocks=list(open_blocks),
				)
			else:
				raise ParseError(
					"E-PARSE-UNCLOSED-BLOCK",
					"block is not closed with 'end'",
					span=self.next_token_pos(),
					open_blocks=list(open_blocks),
				)

	def parse_stmt(self, open_blocks: List[Span]) -> Optional[Stmt]:
		kind = self.next_token()
		if kind is K.KEYWORD_VAR:
			keyword_pos = self.next_token_pos()
			self.consume_token()
			if not self.has_remaining_token_on_current_line():
				raise ParseError(
					"E-PARSE-MISSING-VAR-NAME",
					"expected a variable name after 'var'",
					span=keyword_pos,
				)
			term = self.parse_assign(False)
			if term is None:
				raise self._unexpected(
					"E-PARSE-MISSING-VAR-NAME",
					"after 'var'",
					[("'var' is here", keyword_pos)],
				)
			self._expect_line_break(term)
			return VarStmt(keyword_pos=keyword_pos, term=term)

		if kind is K.KEYWORD_WHILE:
			keyword_pos = self.next_token_pos()
			self.consume_token()

			# The condition must follow `while` on the same line.
			if not self.has_remaining_token_on_current_line():
				raise ParseError(
					"E-PARSE-MISSING-WHILE-CONDITION",
					"expected a condition after 'while'",
					span=keyword_pos,
				)
			condition = self.parse_disjunction(False)
			if condition is None:
				raise self._unexpected(
					"E-PARSE-UNEXPECTED-AFTER-WHILE",
					"after 'while'",
					[("'while' is here", keyword_pos)],
				)
			# A line break is required right after the condition.
			if self.has_remaining_token_on_current_line():
				raise self._unexpected(
					"E-PARSE-UNEXPECTED-AFTER-WHILE-CONDITION",
					"after the loop condition",
					[("condition is here", condition.pos)],
				)
			open_blocks.append(keyword_pos)
			with self._nested():
				body = self.parse_block(open_blocks)
			open_blocks.pop()
			return WhileStmt(keyword_pos=keyword_pos, condition=condition, body=body)

		term = self.parse_assign(False)
		if term is None:
			return None
		self._expect_line_break(term)
		return TermStmt(term=term)

	def _expect_line_break(self, term: TermWithPos) -> None:
		if self.has_remaining_token_on_current_line():
			raise self._unexpected(
				"E-PARSE-UNEXPECTED-AFTER-STMT",
				"after statement (statements end at a line break)",
				[("statement is here", term.pos)],
			)

	# Expressions

	def parse_assign(self, allow_line_break: bool) -> Optional[TermWithPos]:
		start = self.next_token_start()
		left = self.parse_disjunction(allow_line_break)
		kind = self._operator_token(allow_line_break)
		operator = ASSIGNMENT_OPERATORS.get(kind) if kind is not None else None
		if operator is None:
			return left
		operator_pos = self.next_token_pos()
		self.consume_token()
		with self._nested():
			right = self.parse_assign(allow_line_break)
		return TermWithPos(
			term=Assignment(
				opt_left_hand_side=left,
				operator=TermWithPos(MethodName(operator), operator_pos),
				opt_right_hand_side=right,
			),
			pos=self.range_from(start),
		)

	def parse_disjunction(self, allow_line_break: bool) -> Optional[TermWithPos]:
		return self._parse_chain(
			allow_line_break, K.DOUBLE_BAR, Disjunction, self.parse_conjunction
		)

	def parse_conjunction(self, allow_line_break: bool) -> Optional[TermWithPos]:
		return self._parse_chain(
			allow_line_break, K.DOUBLE_AMPERSAND, Conjunction, self.parse_binary_operator
		)

	def _parse_chain(self, allow_line_break, operator_kind, node_cls, parse_operand) -> Optional[TermWithPos]:
		start = self.next_token_start()
		first = parse_operand(allow_line_break)
		if self._operator_token(allow_line_break) is not operator_kind:
			return first
		conditions = [first]
		operators_pos: List[Span] = []
		while self._operator_token(allow_line_break) is operator_kind:
			operators_pos.append(self.next_token_pos())
			self.consume_token()
			conditions.append(parse_operand(allow_line_break))
		return TermWithPos(
			term=node_cls(opt_conditions=conditions, operators_pos=operators_pos),
			pos=self.range_from(start),
		)

	def parse_binary_operator(self, allow_line_break: bool) -> Optional[TermWithPos]:
		return self._parse_binary_tier(allow_line_break, 0)

	def _parse_binary_tier(self, allow_line_break: bool, tier: int) -> Optional[TermWithPos]:
		if tier == len(BINARY_TIERS):
			return self.parse_factor(allow_line_break)
		operators = BINARY_TIERS[tier]
		start = self.next_token_start()
		left = self._parse_binary_tier(allow_line_break, tier + 1)
		while True:
			kind = self._operator_token(allow_line_break)
			operator = operators.get(kind) if kind is not None else None
			if operator is None:
				return left
			operator_pos = self.next_token_pos()
			self.consume_token()
			right = self._parse_binary_tier(allow_line_break, tier + 1)
			left = TermWithPos(
				term=BinaryOperation(
					opt_left_operand=left,
					operator=TermWithPos(MethodName(operator), operator_pos),
					opt_right_operand=right,
				),
				pos=self.range_from(start),
			)

	def parse_factor(self, allow_line_break: bool) -> Optional[TermWithPos]:
		with self._nested():
			return self._parse_factor(allow_line_break)

	def _parse_factor(self, allow_line_break: bool) -> Optional[TermWithPos]:
		factor_start = self.next_token_start()
		kind = self.next_token()
		if kind is None:
			return None

		factor: Term
		if kind is K.UNDERSCORE:
			self.consume_token()
			factor = Identity()
		elif kind is K.IDENTIFIER:
			name = self.take_payload()
			self.consume_token()
			factor = Identifier(name)
		elif kind is K.KEYWORD_INT:
			self.consume_token()
			factor = IntegerTy()
		elif kind is K.KEYWORD_FLOAT:
			self.consume_token()
			factor = FloatTy()
		elif kind is K.STRING_LITERAL:
			components = self.take_payload()
			self.consume_token()
			factor = StringLiteral(components)
		elif kind is K.DIGITS:
			factor = self._parse_number(factor_start)
		elif kind is K.DOT:
			dot_pos = self.next_token_pos()
			self.consume_token()
			if self.adjacent_token() is not K.DIGITS:
				raise ParseError(
					"E-PARSE-UNEXPECTED-TOKEN",
					"unexpected '.'",
					span=dot_pos,
				)
			factor = NumericLiteral("." + self.take_payload())
			self.consume_token()
		elif kind is K.OPENING_PARENTHESIS:
			opening_pos = self.next_token_pos()
			self.consume_token()
			elements, has_trailing_comma = self._parse_list(K.CLOSING_PARENTHESIS, opening_pos)
			if len(elements) == 1 and not has_trailing_comma and isinstance(elements[0], ListElementNonEmpty):
				factor = Parenthesized(elements[0].term)
			else:
				factor = TupleTerm(elements)
		elif kind in PREFIX_OPERATORS:
			operator_pos = self.next_token_pos()
			self.consume_token()
			operand = self.parse_factor(allow_line_break)
			factor = UnaryOperation(
				operator=TermWithPos(MethodName(PREFIX_OPERATORS[kind]), operator_pos),
				opt_operand=operand,
			)
		else:
			return None

		result = TermWithPos(term=factor, pos=self.range_from(factor_start))
		return self._parse_postfix(result, factor_start, allow_line_break)

	def _parse_number(self, factor_start: Index) -> Term:
		"""
		Digits, optionally followed by an adjacent `.`:

		- `3.degrees` is the literal `3` with field `degrees`,
		- `3.5` extends to the decimal `3.5`,
		- `3.` alone is the literal `3.`.
		"""
		value = self.take_payload()
		self.consume_token()
		if self.adjacent_token() is not K.DOT:
			return NumericLiteral(value)
		number_pos = self.range_from(factor_start)
		self.consume_token()
		if self.next_token_on_current_line() is K.IDENTIFIER:
			name = self.take_payload()
			self.consume_token()
			return FieldByName(term_left=TermWithPos(NumericLiteral(value), number_pos), name=name)
		value += "."
		if self.adjacent_token() is K.DIGITS:
			value += self.take_payload()
			self.consume_token()
		return NumericLiteral(value)

	def _parse_postfix(self, factor: TermWithPos, factor_start: Index, allow_line_break: bool) -> TermWithPos:
		"""
		Field access and annotations chain across lines; calls, type-parameter
		lists and return types must stay on the factor's line unless inside
		delimiters.
		"""
		while self._next is not None:
			kind = self._next.kind
			if kind is K.DOT:
				dot_pos = self.next_token_pos()
				self.consume_token()
				field_kind = self.next_token()
				if field_kind is K.IDENTIFIER:
					term: Term = FieldByName(term_left=factor, name=self.take_payload())
				elif field_kind is K.DIGITS:
					term = FieldByNumber(term_left=factor, number=self.take_payload())
				else:
					raise self._unexpected(
						"E-PARSE-UNEXPECTED-TOKEN",
						"after '.' (expected a field name or number)",
						[("'.' is here", dot_pos)],
					)
				self.consume_token()
			elif kind is K.COLON:
				colon_pos = self.next_token_pos()
				self.consume_token()
				term = TypeAnnotation(
					term_left=factor,
					colon_pos=colon_pos,
					opt_term_right=self.parse_factor(allow_line_break),
				)
			elif not allow_line_break and self._next.is_on_new_line:
				break
			elif kind is K.HYPHEN_GREATER:
				arrow_pos = self.next_token_pos()
				self.consume_token()
				term = ReturnType(arrow_pos=arrow_pos, args=factor, opt_ret=self.parse_factor(allow_line_break))
			elif kind is K.OPENING_PARENTHESIS:
				opening_pos = self.next_token_pos()
				self.consume_token()
				arguments, _ = self._parse_list(K.CLOSING_PARENTHESIS, opening_pos)
				term = FunctionCall(function=factor, arguments=arguments)
			elif kind is K.OPENING_BRACKET:
				opening_pos = self.next_token_pos()
				self.consume_token()
				parameters, _ = self._parse_list(K.CLOSING_BRACKET, opening_pos)
				term = TypeParameters(term_left=factor, parameters=parameters)
			else:
				break
			factor = TermWithPos(term=term, pos=self.range_from(factor_start))
		return factor

	def _parse_list(self, closing: TokenKind, opening_pos: Span) -> Tuple[List[ListElement], bool]:
		"""
		Parse comma-separated elements up to `closing` (the opener is consumed).

		Returns the elements and whether the list ended with a gap (a trailing
		comma, or an empty list). Gaps before a comma are kept as
		`ListElementEmpty` so a missing element can be reported at its comma.
		"""
		in_brackets = closing is K.CLOSING_BRACKET
		elements: List[ListElement] = []
		while True:
			element = self.parse_assign(True)
			kind = self.next_token()
			if kind is closing:
				self.consume_token()
				if element is None:
					return elements, True
				elements.append(ListElementNonEmpty(element))
				return elements, False
			if kind is K.COMMA:
				comma_pos = self.next_token_pos()
				self.consume_token()
				if element is None:
					elements.append(ListElementEmpty(comma_pos))
				else:
					elements.append(ListElementNonEmpty(element))
				continue
			if kind is None:
				raise ParseError(
					"E-PARSE-UNCLOSED-BRACKET" if in_brackets else "E-PARSE-UNCLOSED-PAREN",
					"unclosed bracket" if in_brackets else "unclosed parenthesis",
					span=self.next_token_pos(),
					related=[("opened here", opening_pos)],
				)
			raise self._unexpected(
				"E-PARSE-UNEXPECTED-TOKEN-IN-BRACKETS" if in_brackets else "E-PARSE-UNEXPECTED-TOKEN-IN-PARENS",
				"in brackets" if in_brackets else "in parentheses",
				[("opened here", opening_pos)],
			)


def _single_string_component(term: TermWithPos) -> Optional[str]:
	if not isinstance(term.term, StringLiteral):
		return None
	components = term.term.components
	if len(components) != 1 or not isinstance(components[0], str):
		return None
	return components[0]


__all__ = [
	"ASSIGNMENT_OPERATORS",
	"BINARY_TIERS",
	"PREFIX_OPERATORS",
	"Parser",
	"TopLevel",
]
