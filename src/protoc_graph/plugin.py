"""Running a generator function as a protoc plugin.

protoc writes a serialized CodeGeneratorRequest to the plugin's stdin and
expects a serialized CodeGeneratorResponse on stdout. :class:`Options` reads
the request, builds the resolved descriptor graph, hands it to the generator
function through a :class:`Plugin` and writes the response back.
"""

from __future__ import annotations

import logging
import sys
import traceback
from typing import BinaryIO, Callable, Dict, List, Optional

from google.protobuf.compiler import plugin_pb2

from protoc_graph.descriptor.builder import ImportFunc
from protoc_graph.descriptor.graph import build_graph
from protoc_graph.descriptor.nodes import File
from protoc_graph.generator.generated_file import GeneratedFile
from protoc_graph.generator.imports import ImportPath, default_import_func
from protoc_graph.registry import Registry

logger = logging.getLogger(__name__)

FEATURE_PROTO3_OPTIONAL = plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL


def parse_parameter(parameter: str) -> Dict[str, str]:
    """Parse the plugin parameter string.

    protoc joins every ``--<plugin>_opt`` value (and the part of
    ``--<plugin>_out`` before the colon) with commas, e.g.
    ``"key1=value1,key2,,key3=a=b"``. Entries are ``key=value`` pairs split on
    the first ``=``; an entry without ``=`` gets an empty value and empty
    entries are skipped. The example yields
    ``{"key1": "value1", "key2": "", "key3": "a=b"}``.
    """
    params: Dict[str, str] = {}
    for entry in parameter.split(","):
        if entry == "":
            continue
        key, _, value = entry.partition("=")
        params[key] = value
    return params


class Plugin:
    """One invocation of the plugin, as seen by the generator function.

    Attributes:
        parameter: parsed plugin parameters, see :func:`parse_parameter`.
        files_to_generate: files protoc was asked to generate code for, in
            the order of the request's proto_file list, so every file appears
            after the files it imports.
        registry: every declaration of the request, including imports.
    """

    def __init__(
        self,
        parameter: Dict[str, str],
        files_to_generate: List[File],
        registry: Registry,
        supported_features: int = 0,
    ):
        self.parameter = parameter
        self.files_to_generate = files_to_generate
        self.registry = registry
        self._supported_features = supported_features
        self._generated_files: List[GeneratedFile] = []
        self._error: Optional[str] = None

    def new_generated_file(self, name: str, import_path: ImportPath) -> GeneratedFile:
        """Create an output buffer that becomes a file of the response.

        import_path is the module the generated file represents; identifiers
        of that module are written without an import.
        """
        g = GeneratedFile(name, import_path)
        self._generated_files.append(g)
        return g

    @property
    def generated_files(self) -> List[GeneratedFile]:
        """Buffers created so far, in creation order."""
        return list(self._generated_files)

    def error(self, msg: str) -> None:
        """Report an error to protoc instead of any output. The first error wins."""
        if self._error is None:
            self._error = msg

    def response(self) -> plugin_pb2.CodeGeneratorResponse:
        resp = plugin_pb2.CodeGeneratorResponse()
        if self._error is not None:
            resp.error = self._error
            return resp
        resp.supported_features = self._supported_features
        for g in self._generated_files:
            resp.file.append(g.to_proto())
        return resp


class Options:
    """How to turn a CodeGeneratorRequest into a Plugin and run a generator on it.

    Args:
        import_func: derives the ImportPath of the module generated for each
            proto file from its file name and package. The idents of messages,
            enums and services inherit it.
        input: stream the request is read from. Defaults to stdin.
        output: stream the response is written to. Defaults to stdout.
        supported_features: CodeGeneratorResponse.Feature flags announced to
            protoc.
    """

    def __init__(
        self,
        *,
        import_func: ImportFunc = default_import_func,
        input: Optional[BinaryIO] = None,
        output: Optional[BinaryIO] = None,
        supported_features: int = FEATURE_PROTO3_OPTIONAL,
    ):
        self._import_func = import_func
        self._input = input
        self._output = output
        self._supported_features = supported_features

    def process(
        self,
        request: plugin_pb2.CodeGeneratorRequest,
        f: Callable[[Plugin], None],
    ) -> plugin_pb2.CodeGeneratorResponse:
        """Build the graph for request and run f on it.

        A malformed request raises (ValueError or a DescriptorError) before f
        runs. An exception raised by f is reported in the response's error
        field and no files are returned.
        """
        if len(request.proto_file) == 0:
            raise ValueError("no proto files provided")
        if len(request.file_to_generate) == 0:
            raise ValueError("no files to generate provided")

        parameter = parse_parameter(request.parameter)
        graph = build_graph(request.proto_file, request.file_to_generate, self._import_func)
        plugin = Plugin(
            parameter,
            graph.files_to_generate,
            graph.registry,
            self._supported_features,
        )

        try:
            f(plugin)
            return plugin.response()
        except Exception as e:
            logger.debug("generator failed", exc_info=True)
            return plugin_pb2.CodeGeneratorResponse(
                error=f'Plugin exited with error: "{e}"\n{traceback.format_exc()}'
            )

    def run(self, f: Callable[[Plugin], None]) -> None:
        """Read the request, run f and write the response.

        The whole request is read before anything is built.
        """
        input = self._input if self._input is not None else sys.stdin.buffer
        output = self._output if self._output is not None else sys.stdout.buffer

        request = plugin_pb2.CodeGeneratorRequest.FromString(input.read())
        logger.debug(
            "request: %d proto file(s), generating %s",
            len(request.proto_file),
            ", ".join(request.file_to_generate),
        )
        response = self.process(request, f)
        output.write(response.SerializeToString())
        output.flush()
