# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
File table and import-graph resolution.

`read_program(root)` reads the root file and, depth first, every file it
imports. Each distinct canonical path is parsed exactly once and gets a
stable index into the flat tables owned by the `Reader`:

  files[i]                 SourceFile (path, text, line table, statements)
  items[i]                 the per-file namespace (name -> Item)
  function_definitions[j]  every function definition of every file

Indices are assigned when a file finishes parsing, so imported files always
precede their importers and the root file is last.

`import_chain` holds the canonical paths whose imports are still being
processed. Meeting one of those again is a cycle; meeting a path that is
already in `file_indices` is a diamond and returns the cached index.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from loom.loomc.core.cursor import CharCursor
from loom.loomc.core.diagnostics import Diagnostic, count_errors
from loom.loomc.core.span import Span
from loom.loomc.parser import diagnostic_from_parse_error
from loom.loomc.parser.ast import (
	FunctionDefinition,
	FunctionItem,
	ImportDecl,
	ImportItem,
	Item,
	Stmt,
)
from loom.loomc.parser.errors import ParseError
from loom.loomc.parser.parser import Parser

logger = logging.getLogger(__name__)

SOURCE_EXTENSION = ".loom"


@dataclass
class SourceFile:
	"""One parsed file; its position in `Reader.files` is its module index."""

	path: Path
	text: str
	lines: List[Tuple[int, int]]
	stmts: List[Stmt] = field(default_factory=list)


def source_path(path: Path) -> Path:
	"""
	Apply the fixed `.loom` extension (replacing any existing suffix).

	Raises ValueError for paths with no file name (e.g. `""` or `dir/..`).
	"""
	return path.with_suffix(SOURCE_EXTENSION)


class Reader:
	def __init__(self) -> None:
		self.files: List[SourceFile] = []
		self.items: List[Dict[str, Item]] = []
		self.function_definitions: List[FunctionDefinition] = []
		self.file_indices: Dict[Path, int] = {}
		self.import_chain: Set[Path] = set()
		self.diagnostics: List[Diagnostic] = []

	@property
	def num_errors(self) -> int:
		return count_errors(self.diagnostics)

	def read_file(self, path: Path) -> int:
		"""
		Parse the file at canonical `path` (if not already done) and return its
		index.

		Raises OSError when the file cannot be read. Lexical and syntax errors
		do not raise: they are recorded and end parsing of this file only,
		keeping everything parsed before them.
		"""
		cached = self.file_indices.get(path)
		if cached is not None:
			logger.debug("reuse %s as module %d", path, cached)
			return cached

		logger.debug("read %s", path)
		text = path.read_text(encoding="utf-8")
		cursor = CharCursor(text)
		stmts: List[Stmt] = []
		items: Dict[str, Item] = {}
		try:
			parser = Parser(cursor)
			while parser.has_remaining_token():
				node = parser.parse_top_level(path)
				if isinstance(node, ImportDecl):
					self._import(path, node, items)
				elif isinstance(node, FunctionDefinition):
					self._define_function(path, node, items)
				else:
					stmts.append(node)
		except ParseError as err:
			logger.debug("parse error in %s: %s", path, err.code)
			self.diagnostics.append(diagnostic_from_parse_error(path, err))

		index = len(self.files)
		self.files.append(SourceFile(path=path, text=text, lines=cursor.lines(), stmts=stmts))
		self.items.append(items)
		self.file_indices[path] = index
		logger.debug("module %d is %s", index, path)
		return index

	def _import(self, importer: Path, decl: ImportDecl, items: Dict[str, Item]) -> None:
		site = decl.pos.in_file(str(importer))
		relative = decl.opt_path if decl.opt_path is not None else decl.name
		try:
			target = source_path(importer.parent / relative)
		except ValueError:
			self._error("E-IMPORT-UNREADABLE", "import", f"invalid import path '{relative}'", site)
			return
		try:
			canonical = target.resolve(strict=True)
		except (OSError, RuntimeError) as err:
			self._error("E-IMPORT-UNREADABLE", "io", f"cannot read imported file '{target}': {err}", site)
			return

		if canonical in self.import_chain:
			logger.debug("circular import of %s from %s", canonical, importer)
			self._error("E-IMPORT-CIRCULAR", "import", f"circular import of '{canonical}'", site)
			return

		self.import_chain.add(canonical)
		try:
			index = self.read_file(canonical)
		except (OSError, UnicodeDecodeError) as err:
			self._error("E-IMPORT-UNREADABLE", "io", f"cannot read imported file '{canonical}': {err}", site)
			return
		finally:
			self.import_chain.discard(canonical)

		if decl.name in items:
			self._error(
				"E-DUPLICATE-DEFINITION",
				"import",
				f"'{decl.name}' is already defined in this file",
				decl.name_pos.in_file(str(importer)),
			)
			return
		items[decl.name] = ImportItem(index)

	def _define_function(self, path: Path, definition: FunctionDefinition, items: Dict[str, Item]) -> None:
		existing = items.get(definition.name)
		if existing is None:
			existing = FunctionItem()
			items[definition.name] = existing
		elif not isinstance(existing, FunctionItem):
			self._error(
				"E-DUPLICATE-DEFINITION",
				"parser",
				f"'{definition.name}' is already defined in this file",
				definition.name_pos.in_file(str(path)),
			)
			return
		existing.definitions.append(len(self.function_definitions))
		self.function_definitions.append(definition)

	def _error(self, code: str, phase: str, message: str, span: Span, notes: Optional[List[str]] = None) -> None:
		self.diagnostics.append(
			Diagnostic(message=message, code=code, phase=phase, severity="error", span=span, notes=notes or [])
		)


def read_program(root: Path) -> Reader:
	"""
	Read `root` (with the `.loom` extension applied) and everything it imports.

	An unreadable root is fatal: a single `E-ROOT-UNREADABLE` diagnostic is
	recorded and the tables stay empty.
	"""
	reader = Reader()
	try:
		canonical = source_path(root).resolve(strict=True)
	except (ValueError, OSError, RuntimeError) as err:
		reader._error("E-ROOT-UNREADABLE", "io", f"cannot read root file '{root}': {err}", Span(file=str(root)))
		return reader

	reader.import_chain.add(canonical)
	try:
		reader.read_file(canonical)
	except (OSError, UnicodeDecodeError) as err:
		reader._error("E-ROOT-UNREADABLE", "io", f"cannot read root file '{canonical}': {err}", Span(file=str(canonical)))
	finally:
		reader.import_chain.discard(canonical)
	if reader.num_errors:
		logger.debug("%d error(s) while reading %s", reader.num_errors, canonical)
	return reader


__all__ = ["Reader", "SOURCE_EXTENSION", "SourceFile", "read_program", "source_path"]
