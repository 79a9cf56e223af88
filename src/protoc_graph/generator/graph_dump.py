"""Reference generator: writes a YAML-like description of each resolved file.

Useful to inspect what the resolve pass produced for a set of .proto files:

    protoc -I proto --plugin=protoc-gen-graph --graph_out=out proto/foo.proto
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from jinja2 import Environment, FileSystemLoader

from protoc_graph.descriptor.nodes import Enum, File, Message
from protoc_graph.generator.imports import ImportPath
from protoc_graph.plugin import Plugin


def _get_template_env() -> Environment:
    template_dir = Path(__file__).parent.parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def collect_messages(scope: Union[File, Message]) -> List[Message]:
    """All messages declared in scope, nested ones included (depth first)."""
    messages: List[Message] = []
    for message in scope.messages:
        messages.append(message)
        messages.extend(collect_messages(message))
    return messages


def collect_enums(scope: Union[File, Message]) -> List[Enum]:
    enums: List[Enum] = list(scope.enums)
    for message in scope.messages:
        enums.extend(collect_enums(message))
    return enums


def output_name(proto_name: str, suffix: str) -> str:
    stem = proto_name[: -len(".proto")] if proto_name.endswith(".proto") else proto_name
    return stem + suffix


def render_file(file: File) -> str:
    template = _get_template_env().get_template("graph.yaml.j2")
    return template.render(
        file=file,
        collect_messages=collect_messages,
        collect_enums=collect_enums,
    )


def generate(plugin: Plugin) -> None:
    for file in plugin.files_to_generate:
        name = output_name(file.name, ".out")
        g = plugin.new_generated_file(name, ImportPath(name))
        for line in render_file(file).splitlines():
            g.P(line)
