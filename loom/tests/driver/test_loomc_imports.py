# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Import graph: diamonds are shared, cycles are diagnosed, and failures stay
local to the importing file.
"""

from __future__ import annotations

from pathlib import Path

from loom.loomc.core.span import Index
from loom.loomc.parser.ast import ImportItem
from loom.loomc.reader import read_program


def _write(root: Path, **files: str) -> None:
	for name, text in files.items():
		path = root / f"{name}.loom"
		path.parent.mkdir(parents=True, exist_ok=True)
		path.write_text(text)


def _names(reader) -> list[str]:
	return [f.path.stem for f in reader.files]


def _assert_tables_consistent(reader) -> None:
	assert len(reader.files) == len(reader.items) == len(reader.file_indices)
	for index, source in enumerate(reader.files):
		assert reader.file_indices[source.path] == index


def test_diamond_import_parses_shared_file_once(tmp_path: Path) -> None:
	_write(
		tmp_path,
		main="import a\nimport b\n",
		a="import c\n",
		b="import c\n",
		c="var shared\n",
	)
	reader = read_program(tmp_path / "main")
	assert reader.diagnostics == []
	# Imports complete before their importer, so the root is last.
	assert _names(reader) == ["c", "a", "b", "main"]
	assert reader.items[1]["c"] == ImportItem(0)
	assert reader.items[2]["c"] == ImportItem(0)
	assert reader.import_chain == set()
	_assert_tables_consistent(reader)


def test_circular_import_is_reported_and_terminates(tmp_path: Path) -> None:
	_write(tmp_path, main="import a\nvar m\n", a="import main\nvar x\n")
	reader = read_program(tmp_path / "main")
	[diag] = reader.diagnostics
	assert diag.code == "E-IMPORT-CIRCULAR"
	assert diag.span.file == str((tmp_path / "a.loom").resolve())
	assert diag.span.start.line == 0
	assert _names(reader) == ["a", "main"]
	# Both files keep parsing past the failed import.
	assert len(reader.files[0].stmts) == 1
	assert len(reader.files[1].stmts) == 1
	assert "main" not in reader.items[0]
	assert reader.items[1]["a"] == ImportItem(0)
	assert reader.import_chain == set()
	_assert_tables_consistent(reader)


def test_self_import_is_circular(tmp_path: Path) -> None:
	_write(tmp_path, main="import main\n")
	reader = read_program(tmp_path / "main")
	assert [d.code for d in reader.diagnostics] == ["E-IMPORT-CIRCULAR"]


def test_explicit_import_path_is_relative_to_importer(tmp_path: Path) -> None:
	_write(tmp_path, **{"main": 'import util("lib/helpers")\n', "lib/helpers": 'import inner("deep")\n', "lib/deep": ""})
	reader = read_program(tmp_path / "main")
	assert reader.diagnostics == []
	assert _names(reader) == ["deep", "helpers", "main"]
	assert reader.items[2]["util"] == ImportItem(1)
	assert reader.items[1]["inner"] == ImportItem(0)


def test_same_file_through_two_spellings_is_one_module(tmp_path: Path) -> None:
	_write(tmp_path, **{"main": 'import a\nimport b("sub/../a")\n', "a": "", "sub/keep": ""})
	reader = read_program(tmp_path / "main")
	assert reader.diagnostics == []
	assert _names(reader) == ["a", "main"]
	assert reader.items[1]["a"] == reader.items[1]["b"] == ImportItem(0)


def test_missing_import_is_local_to_the_importer(tmp_path: Path) -> None:
	_write(tmp_path, main="import nope\nvar x\n")
	reader = read_program(tmp_path / "main")
	[diag] = reader.diagnostics
	assert diag.code == "E-IMPORT-UNREADABLE"
	assert "nope" in diag.message
	assert len(reader.files[0].stmts) == 1
	assert "nope" not in reader.items[0]


def test_parse_error_keeps_what_was_parsed(tmp_path: Path) -> None:
	_write(tmp_path, main="var a\nfunc f()\nend\n)\nvar b\n")
	reader = read_program(tmp_path / "main")
	[diag] = reader.diagnostics
	assert diag.code == "E-PARSE-UNEXPECTED-TOKEN"
	assert diag.phase == "parser"
	assert diag.span.start.line == 3
	assert len(reader.files[0].stmts) == 1
	assert len(reader.function_definitions) == 1


def test_parse_error_in_imported_file_still_binds_the_import(tmp_path: Path) -> None:
	_write(tmp_path, main="import a\nvar x\n", a='var s\ns = "open\n')
	reader = read_program(tmp_path / "main")
	[diag] = reader.diagnostics
	assert diag.code == "E-LEX-UNTERMINATED-STRING"
	assert diag.phase == "lexer"
	assert diag.span.file == str((tmp_path / "a.loom").resolve())
	assert reader.items[1]["a"] == ImportItem(0)


def test_duplicate_definitions_in_one_file(tmp_path: Path) -> None:
	_write(tmp_path, main="import a\nimport a\nfunc a()\nend\n", a="")
	reader = read_program(tmp_path / "main")
	assert [d.code for d in reader.diagnostics] == ["E-DUPLICATE-DEFINITION", "E-DUPLICATE-DEFINITION"]
	assert [d.span.start.line for d in reader.diagnostics] == [1, 2]


def test_overloads_accumulate(tmp_path: Path) -> None:
	_write(tmp_path, main="func f()\nend\nfunc g()\nend\nfunc f(x)\nend\n")
	reader = read_program(tmp_path / "main")
	assert reader.diagnostics == []
	assert reader.items[0]["f"].definitions == [0, 2]
	assert reader.items[0]["g"].definitions == [1]
	assert all(d.path == reader.files[0].path for d in reader.function_definitions)


def test_root_suffix_is_replaced(tmp_path: Path) -> None:
	_write(tmp_path, main="var x\n")
	reader = read_program(tmp_path / "main.txt")
	assert reader.diagnostics == []
	assert reader.files[0].path == (tmp_path / "main.loom").resolve()


def test_unreadable_root_is_fatal(tmp_path: Path) -> None:
	reader = read_program(tmp_path / "absent")
	[diag] = reader.diagnostics
	assert diag.code == "E-ROOT-UNREADABLE"
	assert reader.files == []


def test_long_comment_runs_read_cleanly(tmp_path: Path) -> None:
	_write(tmp_path, main="-- c\n" * 1500 + "var x\n" + "/- c -/ " * 1500 + "\nx\n")
	reader = read_program(tmp_path / "main")
	assert reader.diagnostics == []
	assert len(reader.files[0].stmts) == 2


def test_excessive_nesting_is_a_file_local_diagnostic(tmp_path: Path) -> None:
	_write(tmp_path, main="import deep\nvar y\n", deep="var a\n" + "(" * 60 + "a" + ")" * 60 + "\n")
	reader = read_program(tmp_path / "main")
	[diag] = reader.diagnostics
	assert diag.code == "E-PARSE-TOO-DEEP"
	assert diag.phase == "parser"
	assert diag.span.start == Index(1, 32)
	assert diag.span.file == str((tmp_path / "deep.loom").resolve())
	assert len(reader.files[0].stmts) == 1
	assert len(reader.files[1].stmts) == 1
