"""Output buffer for one generated file."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, List, Optional

from google.protobuf.compiler import plugin_pb2

from protoc_graph.generator.imports import Ident, ImportPath, alias_import_path, resolve_import

logger = logging.getLogger(__name__)


class ArgKind(Enum):
    TEXT = auto()
    IDENT = auto()


@dataclass(frozen=True)
class LineArg:
    """One piece of a line passed to GeneratedFile.P: plain text or an identifier."""

    kind: ArgKind
    text: str = ""
    ident: Optional[Ident] = None

    @classmethod
    def of(cls, value) -> LineArg:
        if isinstance(value, LineArg):
            return value
        if isinstance(value, Ident):
            return cls(ArgKind.IDENT, ident=value)
        return cls(ArgKind.TEXT, text=str(value))


class GeneratedFile:
    """A buffer that generated code is written to, line by line.

    Identifiers passed to :meth:`P` or :meth:`qualified_ident` are written as
    bare names when they live in the module of this file (``import_path``).
    Otherwise their module is recorded as an import and the name is prefixed
    with the import alias. The import statements are spliced into the output
    at the position marked by :meth:`print_imports` when the file is
    finalized, so identifiers may be referenced after the mark was set.

    Example::

        g.P("// Code generated by protoc-gen-foo. DO NOT EDIT.")
        g.print_imports()
        g.P()
        g.P("const ts = new ", timestamp_ident, "();")
    """

    def __init__(self, name: str, import_path: ImportPath):
        self.name = name
        self.import_path = import_path
        self._buf: List[str] = []
        self._imports: List[ImportPath] = []
        self._import_mark = -1
        self._indent = 0
        self._before_response: Callable[[str], str] = lambda content: content

    def set_indent(self, level: int) -> int:
        """Indent following lines by level spaces. Returns the previous level."""
        if level < 0:
            raise ValueError("indent must be greater or equal zero")
        old = self._indent
        self._indent = level
        return old

    def P(self, *args) -> None:
        """Append one line made of args, with no separator between them."""
        line = ""
        for arg in map(LineArg.of, args):
            if arg.kind is ArgKind.IDENT:
                line += self.qualified_ident(arg.ident)
            elif arg.kind is ArgKind.TEXT:
                line += arg.text
        if line and self._indent:
            line = " " * self._indent + line
        self._buf.append(line)

    def qualified_ident(self, ident: Ident) -> str:
        """Name to write for ident in this file, recording its import if needed."""
        if ident.import_path == self.import_path:
            return ident.name
        if ident.import_path not in self._imports:
            self._imports.append(ident.import_path)
        return f"{alias_import_path(self.import_path, ident.import_path)}.{ident.name}"

    def print_imports(self) -> None:
        """Mark the current position as the place for the import statements.

        Only one mark exists; a later call moves it.
        """
        self._import_mark = len(self._buf)

    def do_before_response(self, func: Callable[[str], str]) -> None:
        """Apply func to the final content, e.g. to run a formatter."""
        self._before_response = func

    @property
    def imports(self) -> List[ImportPath]:
        return list(self._imports)

    def import_statements(self) -> List[str]:
        return [
            f'import * as {alias_import_path(self.import_path, imp)} '
            f'from "{resolve_import(self.import_path, imp)}";'
            for imp in self._imports
        ]

    def content(self) -> str:
        lines = self._buf
        if self._import_mark > -1:
            lines = (
                self._buf[: self._import_mark]
                + self.import_statements()
                + self._buf[self._import_mark:]
            )
        logger.debug("finalized %s: %d line(s), %d import(s)", self.name, len(lines), len(self._imports))
        return self._before_response("\n".join(lines))

    def to_proto(self) -> plugin_pb2.CodeGeneratorResponse.File:
        return plugin_pb2.CodeGeneratorResponse.File(name=self.name, content=self.content())
