"""Reference generator: references one identifier of every dependency.

The output shows the import statements and aliases the import resolution
produces for local dependencies, well-known types and npm packages.
"""

from __future__ import annotations

from typing import List, Optional

from protoc_graph.descriptor.nodes import File
from protoc_graph.generator.graph_dump import output_name
from protoc_graph.generator.imports import Ident, ImportPath
from protoc_graph.plugin import Plugin

PACKAGE_A = ImportPath.npm("@package/hello-world")
PACKAGE_B = ImportPath.npm("hallo-welt", "my/awesome/protos_pb")


def first_ident(file: File) -> Optional[Ident]:
    """Ident of the first message, enum or service of file, if any."""
    for declarations in (file.messages, file.enums, file.services):
        if declarations:
            return declarations[0].ident
    # A file that only declares extensions.
    return None


def generate(plugin: Plugin) -> None:
    for file in plugin.files_to_generate:
        name = output_name(file.name, ".imports.ts")
        g = plugin.new_generated_file(name, ImportPath(name))

        idents: List[Ident] = []
        for dependency in file.dependencies:
            ident = first_ident(dependency)
            if ident is not None:
                idents.append(ident)
        idents.append(PACKAGE_A.ident("A"))
        idents.append(PACKAGE_B.ident("B"))

        g.P("// Code generated by protoc-gen-imports. DO NOT EDIT.")
        g.P("// source: ", file.name)
        g.P()
        g.print_imports()
        g.P()
        g.P("export const references = [")
        reset = g.set_indent(2)
        for ident in idents:
            g.P(ident, ",")
        g.set_indent(reset)
        g.P("];")
