import pytest
from google.protobuf import descriptor_pb2 as d2
from google.protobuf.compiler import plugin_pb2

FD = d2.FieldDescriptorProto


def timestamp_file():
    return d2.FileDescriptorProto(
        name="google/protobuf/timestamp.proto",
        package="google.protobuf",
        syntax="proto3",
        message_type=[d2.DescriptorProto(
            name="Timestamp",
            field=[
                FD(name="seconds", number=1, type=FD.TYPE_INT64, label=FD.LABEL_OPTIONAL),
                FD(name="nanos", number=2, type=FD.TYPE_INT32, label=FD.LABEL_OPTIONAL),
            ],
        )],
    )


def a_file():
    return d2.FileDescriptorProto(
        name="a.proto",
        package="p",
        syntax="proto3",
        message_type=[d2.DescriptorProto(
            name="M",
            field=[FD(name="s", number=1, type=FD.TYPE_STRING, label=FD.LABEL_OPTIONAL)],
        )],
    )


def b_file():
    return d2.FileDescriptorProto(
        name="b.proto",
        package="q",
        syntax="proto3",
        dependency=["a.proto", "google/protobuf/timestamp.proto"],
        message_type=[d2.DescriptorProto(
            name="N",
            field=[
                FD(name="m", number=1, type=FD.TYPE_MESSAGE, label=FD.LABEL_OPTIONAL, type_name=".p.M"),
                FD(
                    name="at", number=2, type=FD.TYPE_MESSAGE,
                    label=FD.LABEL_OPTIONAL, type_name=".google.protobuf.Timestamp",
                ),
            ],
        )],
        service=[d2.ServiceDescriptorProto(
            name="S",
            method=[d2.MethodDescriptorProto(
                name="Get", input_type=".q.N", output_type=".p.M", server_streaming=True,
            )],
        )],
    )


@pytest.fixture
def request_ab():
    """A request generating b.proto, which imports a.proto and a well-known type."""
    return plugin_pb2.CodeGeneratorRequest(
        file_to_generate=["b.proto"],
        parameter="mode=dump,verbose",
        proto_file=[timestamp_file(), a_file(), b_file()],
    )
