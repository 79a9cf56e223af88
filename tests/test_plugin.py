import io

import pytest
from google.protobuf.compiler import plugin_pb2

from protoc_graph.errors import UnresolvedReferenceError
from protoc_graph.generator.imports import ImportPath
from protoc_graph.plugin import FEATURE_PROTO3_OPTIONAL, Options, Plugin, parse_parameter
from protoc_graph.registry import Registry


class TestParseParameter:
    def test_mixed_entries(self):
        assert parse_parameter("key1=value1,key2,,key3=a=b") == {
            "key1": "value1",
            "key2": "",
            "key3": "a=b",
        }

    def test_empty(self):
        assert parse_parameter("") == {}

    def test_later_entry_wins(self):
        assert parse_parameter("k=1,k=2") == {"k": "2"}


class TestPlugin:
    def test_response_with_files(self):
        plugin = Plugin({}, [], Registry(), FEATURE_PROTO3_OPTIONAL)
        g = plugin.new_generated_file("x.ts", ImportPath("x"))
        g.P("hello")
        resp = plugin.response()
        assert resp.supported_features == FEATURE_PROTO3_OPTIONAL
        assert [(f.name, f.content) for f in resp.file] == [("x.ts", "hello")]
        assert not resp.HasField("error")

    def test_first_error_wins_and_drops_files(self):
        plugin = Plugin({}, [], Registry())
        plugin.new_generated_file("x.ts", ImportPath("x")).P("lost")
        plugin.error("first")
        plugin.error("second")
        resp = plugin.response()
        assert resp.error == "first"
        assert len(resp.file) == 0


class TestProcess:
    def test_generator_sees_resolved_graph(self, request_ab):
        seen = {}

        def generate(plugin):
            seen["parameter"] = plugin.parameter
            seen["files"] = [f.name for f in plugin.files_to_generate]
            n = plugin.files_to_generate[0].messages[0]
            g = plugin.new_generated_file("b.txt", ImportPath("b.txt"))
            g.P(n.full_name, " -> ", n.fields[0].message.full_name)

        resp = Options().process(request_ab, generate)

        assert seen["parameter"] == {"mode": "dump", "verbose": ""}
        assert seen["files"] == ["b.proto"]
        assert resp.supported_features == FEATURE_PROTO3_OPTIONAL
        assert [(f.name, f.content) for f in resp.file] == [("b.txt", "q.N -> p.M")]

    def test_generator_exception_becomes_error(self, request_ab):
        def generate(plugin):
            plugin.new_generated_file("b.txt", ImportPath("b.txt")).P("never")
            raise RuntimeError("boom")

        resp = Options().process(request_ab, generate)

        assert resp.error.startswith('Plugin exited with error: "boom"\n')
        assert "RuntimeError" in resp.error
        assert len(resp.file) == 0

    def test_custom_import_func(self, request_ab):
        def import_func(filename, package):
            return ImportPath(filename.replace(".proto", ".ts"), package)

        def generate(plugin):
            ident = plugin.files_to_generate[0].messages[0].ident
            plugin.new_generated_file("out", ident.import_path).P(ident.import_path.filename)

        resp = Options(import_func=import_func).process(request_ab, generate)
        assert resp.file[0].content == "b.ts"

    def test_supported_features_option(self, request_ab):
        resp = Options(supported_features=0).process(request_ab, lambda plugin: None)
        assert resp.supported_features == 0

    def test_no_proto_files(self):
        request = plugin_pb2.CodeGeneratorRequest(file_to_generate=["a.proto"])
        with pytest.raises(ValueError, match="no proto files provided"):
            Options().process(request, lambda plugin: None)

    def test_no_files_to_generate(self, request_ab):
        del request_ab.file_to_generate[:]
        with pytest.raises(ValueError, match="no files to generate provided"):
            Options().process(request_ab, lambda plugin: None)

    def test_malformed_request_raises_before_generator(self, request_ab):
        del request_ab.proto_file[0]
        called = []
        with pytest.raises(UnresolvedReferenceError, match="google/protobuf/timestamp.proto"):
            Options().process(request_ab, called.append)
        assert called == []


class TestRun:
    def test_reads_request_and_writes_response(self, request_ab):
        input = io.BytesIO(request_ab.SerializeToString())
        output = io.BytesIO()

        def generate(plugin):
            for file in plugin.files_to_generate:
                plugin.new_generated_file(file.name + ".txt", ImportPath("")).P(file.package)

        Options(input=input, output=output).run(generate)

        resp = plugin_pb2.CodeGeneratorResponse.FromString(output.getvalue())
        assert [(f.name, f.content) for f in resp.file] == [("b.proto.txt", "q")]
