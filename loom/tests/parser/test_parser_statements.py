# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

import pytest

from loom.loomc.core.span import Index, Span
from loom.loomc.parser import parse_source
from loom.loomc.parser import ast as A
from loom.loomc.parser.dump import dump_function, dump_stmts
from loom.loomc.parser.errors import LexError, ParseError


def _error(source: str) -> ParseError:
	with pytest.raises(ParseError) as exc:
		parse_source(source)
	return exc.value


def test_var_and_expression_statements() -> None:
	stmts = parse_source("var x\nx = 1\n")
	assert isinstance(stmts[0], A.VarStmt)
	assert stmts[0].term.term == A.Identifier("x")
	assert stmts[0].keyword_pos == Span(Index(0, 0), Index(0, 3))
	assert isinstance(stmts[1], A.TermStmt)
	assert isinstance(stmts[1].term.term, A.Assignment)


def test_while_block() -> None:
	[stmt] = parse_source("while x > 0\n\tx -= 1\n\tvar y\nend\n")
	assert isinstance(stmt, A.WhileStmt)
	assert isinstance(stmt.condition.term, A.BinaryOperation)
	assert [type(s) for s in stmt.body] == [A.TermStmt, A.VarStmt]


def test_function_definition() -> None:
	[fn] = parse_source("func add(a: int, b: int) -> int\n\ta + b\nend\n", Path("m.loom"))
	assert isinstance(fn, A.FunctionDefinition)
	assert fn.name == "add"
	assert fn.path == Path("m.loom")
	assert fn.name_pos == Span(Index(0, 5), Index(0, 8))
	assert len(fn.opt_parameters) == 2
	assert isinstance(fn.opt_parameters[0].term.term, A.TypeAnnotation)
	assert isinstance(fn.opt_ret_ty.opt_ret_ty.term, A.IntegerTy)
	assert fn.opt_type_parameters is None
	assert len(fn.body) == 1


def test_function_with_type_parameters_and_no_parameter_list() -> None:
	[fn] = parse_source("func id[T](x: T) -> T\n\tx\nend\n")
	assert len(fn.opt_type_parameters) == 1
	[bare] = parse_source("func main\nend\n")
	assert bare.opt_parameters is None
	assert bare.body == []


def test_return_type_may_follow_on_next_line() -> None:
	[fn] = parse_source("func f()\n-> int\nend\n")
	assert isinstance(fn.opt_ret_ty.opt_ret_ty.term, A.IntegerTy)


def test_imports() -> None:
	implicit, explicit = parse_source('import m\nimport util("lib/helpers")\n')
	assert isinstance(implicit, A.ImportDecl)
	assert (implicit.name, implicit.opt_path) == ("m", None)
	assert implicit.name_pos == Span(Index(0, 7), Index(0, 8))
	assert (explicit.name, explicit.opt_path) == ("util", "lib/helpers")
	assert explicit.pos == Span(Index(1, 0), Index(1, 26))


@pytest.mark.parametrize(
	"source, code",
	[
		("import\nm\n", "E-PARSE-MISSING-IMPORT-NAME"),
		("import 1\n", "E-PARSE-UNEXPECTED-AFTER-IMPORT"),
		("import m x\n", "E-PARSE-UNEXPECTED-AFTER-IMPORT-NAME"),
		("import m()\n", "E-PARSE-MISSING-IMPORT-PATH"),
		("import m(x)\n", "E-PARSE-INVALID-IMPORT-PATH"),
		('import m("a{x}")\n', "E-PARSE-INVALID-IMPORT-PATH"),
		('import m("a" b)\n', "E-PARSE-UNEXPECTED-TOKEN-IN-PARENS"),
		('import m("a"\n', "E-PARSE-UNCLOSED-PAREN"),
		("func\nf()\nend\n", "E-PARSE-MISSING-FUNC-NAME"),
		("func 1()\nend\n", "E-PARSE-UNEXPECTED-AFTER-FUNC"),
		("while\nx\nend\n", "E-PARSE-MISSING-WHILE-CONDITION"),
		("while )\nend\n", "E-PARSE-UNEXPECTED-AFTER-WHILE"),
		("while x y\nend\n", "E-PARSE-UNEXPECTED-AFTER-WHILE-CONDITION"),
		("a b\n", "E-PARSE-UNEXPECTED-AFTER-STMT"),
		("var\nx\n", "E-PARSE-MISSING-VAR-NAME"),
		("var )\n", "E-PARSE-MISSING-VAR-NAME"),
		("var x y\n", "E-PARSE-UNEXPECTED-AFTER-STMT"),
		("end\n", "E-PARSE-UNEXPECTED-TOKEN"),
		(")\n", "E-PARSE-UNEXPECTED-TOKEN"),
	],
)
def test_statement_errors(source: str, code: str) -> None:
	assert _error(source).code == code


def test_unclosed_block_reports_open_block_stack() -> None:
	err = _error("func f()\n\twhile x\n\t\ty\n")
	assert err.code == "E-PARSE-UNCLOSED-BLOCK"
	assert [span.start for span in err.open_blocks] == [Index(0, 0), Index(1, 1)]


def test_unexpected_token_in_block_reports_open_block_stack() -> None:
	err = _error("func f()\n\t)\nend\n")
	assert err.code == "E-PARSE-UNEXPECTED-TOKEN-IN-BLOCK"
	assert err.span.start == Index(1, 1)
	assert [span.start for span in err.open_blocks] == [Index(0, 0)]


def test_top_level_while_block_stack() -> None:
	err = _error("while a\n\twhile b\n")
	assert err.code == "E-PARSE-UNCLOSED-BLOCK"
	assert [span.start for span in err.open_blocks] == [Index(0, 0), Index(1, 1)]


def test_deeply_nested_while_blocks_are_an_error() -> None:
	err = _error("while a\n" * 200 + "end\n" * 200)
	assert err.code == "E-PARSE-TOO-DEEP"


def test_lexical_errors_surface_through_the_parser() -> None:
	with pytest.raises(LexError) as exc:
		parse_source('var s\ns = "oops\n')
	assert exc.value.code == "E-LEX-UNTERMINATED-STRING"
	assert exc.value.phase == "lexer"


def test_dump_statements_and_functions() -> None:
	stmts = parse_source("while x\n\tvar y\nend\n")
	assert dump_stmts(stmts).splitlines() == [
		"1:1 while",
		"  1:7 identifier(x)",
		"do",
		"  2:2 var",
		"    2:6 identifier(y)",
		"end while",
	]
	[fn] = parse_source("func f(a)\n\ta\nend\n")
	assert dump_function(fn).splitlines() == [
		"1:6 func f",
		"  params(1):",
		"    1:8 identifier(a)",
		"  2:2 expression statement",
		"    2:2 identifier(a)",
		"end func",
	]
