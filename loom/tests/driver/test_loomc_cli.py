# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

from loom.loomc import loomc
from loom.loomc.stage1 import LoweredProgram


class RecordingBackend:
	def __init__(self) -> None:
		self.programs: list[LoweredProgram] = []

	def run(self, program: LoweredProgram) -> None:
		self.programs.append(program)


def test_backend_runs_on_clean_program(tmp_path: Path) -> None:
	(tmp_path / "lib.loom").write_text("var counter\nfunc bump(n)\n\tcounter += n\nend\n")
	(tmp_path / "main.loom").write_text("import lib\nlib.bump(1)\n")
	backend = RecordingBackend()
	result = loomc.compile_program(tmp_path / "main", backend)
	assert result.ok
	assert result.diagnostics == []
	[program] = backend.programs
	assert program is result.program
	assert len(program.files) == 2
	assert program.functions[0].name == "bump"
	assert str((tmp_path / "main.loom").resolve()) in result.sources


def test_backend_skipped_after_read_errors(tmp_path: Path) -> None:
	(tmp_path / "main.loom").write_text("var x\nwhile x\n")
	backend = RecordingBackend()
	result = loomc.compile_program(tmp_path / "main", backend)
	assert not result.ok
	assert result.program is None
	assert backend.programs == []
	assert [d.code for d in result.diagnostics] == ["E-PARSE-UNCLOSED-BLOCK"]


def test_backend_skipped_after_resolution_errors(tmp_path: Path) -> None:
	(tmp_path / "main.loom").write_text("var x\ny\nz\n")
	backend = RecordingBackend()
	result = loomc.compile_program(tmp_path / "main", backend)
	assert [d.code for d in result.diagnostics] == ["E-UNDEFINED-IDENTIFIER"] * 2
	assert result.program is not None
	assert backend.programs == []


def test_backend_skipped_after_invalid_parameter(tmp_path: Path) -> None:
	(tmp_path / "main.loom").write_text("func f(a, undefined_thing + 1)\nend\n")
	backend = RecordingBackend()
	result = loomc.compile_program(tmp_path / "main", backend)
	assert [d.code for d in result.diagnostics] == ["E-INVALID-VARIABLE-NAME"]
	assert backend.programs == []


def test_cli_human_output(tmp_path: Path, capsys) -> None:
	(tmp_path / "main.loom").write_text("func f()\n\tvar a\n\tmissing\nend\n")
	exit_code = loomc.main([str(tmp_path / "main")])
	assert exit_code == 1
	err = capsys.readouterr().err.splitlines()
	assert err[0].endswith("main.loom:3:2: error: undefined identifier 'missing' [E-UNDEFINED-IDENTIFIER]")
	assert err[1] == "  \tmissing"
	assert err[2] == "   " + "^" * 7


def test_cli_json_output(tmp_path: Path, capsys) -> None:
	(tmp_path / "main.loom").write_text("func f()\n\twhile x\n")
	exit_code = loomc.main([str(tmp_path / "main"), "--json"])
	assert exit_code == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	[diag] = payload["diagnostics"]
	assert diag["code"] == "E-PARSE-UNCLOSED-BLOCK"
	assert diag["phase"] == "parser"
	assert len(diag["notes"]) == 2
	assert all(note.startswith("block opened here: ") for note in diag["notes"])


def test_cli_success_and_dump(tmp_path: Path, capsys) -> None:
	(tmp_path / "main.loom").write_text("var x\nx = 1\n")
	exit_code = loomc.main([str(tmp_path / "main"), "--dump-ast", "--json"])
	assert exit_code == 0
	lines = capsys.readouterr().out.splitlines()
	assert lines[0].startswith("module 0: ")
	assert lines[1] == "  1:1 var"
	assert json.loads(lines[-1]) == {"exit_code": 0, "diagnostics": []}


def test_cli_missing_root(tmp_path: Path, capsys) -> None:
	exit_code = loomc.main([str(tmp_path / "nowhere")])
	assert exit_code == 1
	assert "E-ROOT-UNREADABLE" in capsys.readouterr().err
