# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
loomc driver: read → resolve → backend.

`compile_program` runs the whole front end on a root file and hands the
lowered program to a backend only when no stage reported an error. `main`
wraps it as a CLI that prints diagnostics either human-readably to stderr or
as JSON to stdout (`--json`).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from loom.loomc.core.diagnostics import (
	Diagnostic,
	count_errors,
	diagnostic_to_json,
	render_diagnostic,
)
from loom.loomc.parser.dump import TreeDumper
from loom.loomc.reader import Reader, SourceFile, read_program
from loom.loomc.stage1 import LoweredProgram, resolve_program

logger = logging.getLogger(__name__)


class Backend(Protocol):
	"""Type-checks, generates code for, or executes a lowered program."""

	def run(self, program: LoweredProgram) -> None:
		...


@dataclass
class CompileResult:
	"""
	Outcome of one front-end run.

	`program` is None when reading failed (resolution never ran). `sources`
	maps each file path (as a string, like `Span.file`) to its SourceFile so
	diagnostics can be rendered against the right text.
	"""

	program: Optional[LoweredProgram]
	diagnostics: List[Diagnostic] = field(default_factory=list)
	sources: Dict[str, SourceFile] = field(default_factory=dict)
	reader: Optional[Reader] = None

	@property
	def ok(self) -> bool:
		return count_errors(self.diagnostics) == 0


def compile_program(root: Path, backend: Optional[Backend] = None) -> CompileResult:
	"""
	Compile the program rooted at `root` (the `.loom` extension is applied).

	Read errors stop before name resolution; any error at all stops before the
	backend.
	"""
	reader = read_program(root)
	sources = {str(f.path): f for f in reader.files}
	diagnostics = list(reader.diagnostics)
	if count_errors(diagnostics):
		logger.debug("aborting after read: %d error(s)", count_errors(diagnostics))
		return CompileResult(program=None, diagnostics=diagnostics, sources=sources, reader=reader)

	program, resolve_diags = resolve_program(reader)
	diagnostics.extend(resolve_diags)
	result = CompileResult(program=program, diagnostics=diagnostics, sources=sources, reader=reader)
	if not result.ok:
		logger.debug("aborting after resolution: %d error(s)", count_errors(diagnostics))
		return result
	if backend is not None:
		backend.run(program)
	return result


def _render(diag: Diagnostic, sources: Dict[str, SourceFile]) -> str:
	source = sources.get(diag.span.file or "")
	if source is None:
		return render_diagnostic(diag)
	return render_diagnostic(diag, source.text, source.lines)


def _dump_ast(reader: Reader) -> None:
	for file_index, source in enumerate(reader.files):
		print(f"module {file_index}: {source.path}")
		dumper = TreeDumper()
		for stmt in source.stmts:
			dumper.stmt(stmt, 1)
		for definition in reader.function_definitions:
			if definition.path == source.path:
				dumper.function(definition, 1)
		for line in dumper.lines():
			print(line)


def main(argv: list[str] | None = None) -> int:
	"""
	Compile a Loom program and report diagnostics.

	With --json, prints structured diagnostics (phase/code/message/severity/
	file/line/column/notes) and an exit_code; otherwise prints human-readable
	messages to stderr.
	"""
	parser = argparse.ArgumentParser(description="Loom compiler front end")
	parser.add_argument("root", type=Path, help="Path to the root Loom source file (.loom is implied)")
	parser.add_argument("--json", action="store_true", help="Emit diagnostics as JSON")
	parser.add_argument("--dump-ast", action="store_true", help="Print the syntax tree of every file read")
	parser.add_argument("-v", "--verbose", action="store_true", help="Log front-end progress to stderr")
	args = parser.parse_args(argv)

	if args.verbose:
		logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

	result = compile_program(args.root)
	if args.dump_ast and result.reader is not None:
		_dump_ast(result.reader)

	exit_code = 0 if result.ok else 1
	if args.json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [diagnostic_to_json(d) for d in result.diagnostics],
		}
		print(json.dumps(payload))
	else:
		for diag in result.diagnostics:
			print(_render(diag, result.sources), file=sys.stderr)
	return exit_code


__all__ = ["Backend", "CompileResult", "compile_program", "main"]
