from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List

from google.protobuf import descriptor_pb2

from protoc_graph.descriptor.builder import GraphBuilder, ImportFunc
from protoc_graph.descriptor.linker import link_file
from protoc_graph.descriptor.nodes import File
from protoc_graph.errors import UnresolvedReferenceError
from protoc_graph.generator.imports import default_import_func
from protoc_graph.registry import Registry

logger = logging.getLogger(__name__)


@dataclass
class Graph:
    """The resolved descriptor graph of one request."""

    registry: Registry
    files: List[File]
    files_to_generate: List[File]


def build_graph(
    file_protos: Iterable[descriptor_pb2.FileDescriptorProto],
    files_to_generate: Iterable[str],
    import_func: ImportFunc = default_import_func,
) -> Graph:
    """Build and resolve the graph for all file_protos.

    Every file is registered before any file is resolved, so references
    between files may point forwards or form cycles.
    """
    wanted = list(files_to_generate)
    wanted_set = set(wanted)
    registry = Registry()
    builder = GraphBuilder(registry, import_func)

    files = [builder.build_file(proto, proto.name in wanted_set) for proto in file_protos]
    for file in files:
        link_file(file, registry)

    for name in wanted:
        if registry.file_by_name(name) is None:
            raise UnresolvedReferenceError(f"file to generate {name} is not in the request")
    # proto_file order: every file comes after the files it imports.
    to_generate = [f for f in files if f.generate]

    logger.debug(
        "resolved %d file(s), %d to generate", len(files), len(to_generate)
    )
    return Graph(
        registry=registry,
        files=files,
        files_to_generate=to_generate,
    )
