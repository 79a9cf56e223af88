"""Node types of the resolved descriptor graph.

Nodes are created by the register pass (``builder``) and completed by the
resolve pass (``linker``). References that can only be filled in once every
file is registered (field types, extendees, method input/output) live in a
Slot and are exposed through read-only properties.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional

from google.protobuf import descriptor_pb2

from protoc_graph.descriptor.location import Location
from protoc_graph.descriptor.slot import Slot
from protoc_graph.generator.imports import Ident, ImportPath


class Kind(IntEnum):
    """Wire kind of a field. Same values as FieldDescriptorProto.Type."""

    DOUBLE = 1
    FLOAT = 2
    INT64 = 3
    UINT64 = 4
    INT32 = 5
    FIXED64 = 6
    FIXED32 = 7
    BOOL = 8
    STRING = 9
    GROUP = 10
    MESSAGE = 11
    BYTES = 12
    UINT32 = 13
    ENUM = 14
    SFIXED32 = 15
    SFIXED64 = 16
    SINT32 = 17
    SINT64 = 18


class Cardinality(IntEnum):
    OPTIONAL = 1
    REQUIRED = 2
    REPEATED = 3


def _relative_name(full_name: str, package: str) -> str:
    """Full name without the package prefix, e.g. ``Outer.Inner``."""
    if package and full_name.startswith(package + "."):
        return full_name[len(package) + 1:]
    return full_name


@dataclass(eq=False)
class File:
    proto: descriptor_pb2.FileDescriptorProto = field(repr=False)
    name: str
    package: str
    syntax: str
    generate: bool
    import_path: ImportPath
    location: Location = field(repr=False)
    # Resolve pass.
    dependencies: List[File] = field(default_factory=list, repr=False)
    messages: List[Message] = field(default_factory=list, repr=False)
    enums: List[Enum] = field(default_factory=list, repr=False)
    services: List[Service] = field(default_factory=list, repr=False)
    extensions: List[Field] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class Message:
    proto: descriptor_pb2.DescriptorProto = field(repr=False)
    name: str
    full_name: str
    parent_file: File = field(repr=False)
    parent: Optional[Message] = field(repr=False)
    location: Location = field(repr=False)
    fields: List[Field] = field(default_factory=list, repr=False)
    oneofs: List[Oneof] = field(default_factory=list, repr=False)
    messages: List[Message] = field(default_factory=list, repr=False)
    enums: List[Enum] = field(default_factory=list, repr=False)
    extensions: List[Field] = field(default_factory=list, repr=False)

    @property
    def ident(self) -> Ident:
        return self.parent_file.import_path.ident(
            _relative_name(self.full_name, self.parent_file.package)
        )

    @property
    def is_map_entry(self) -> bool:
        """True for the synthetic key/value message protoc creates for a map field."""
        return self.proto.options.map_entry

    @property
    def deprecated(self) -> bool:
        return self.proto.options.deprecated


@dataclass(eq=False)
class Oneof:
    proto: descriptor_pb2.OneofDescriptorProto = field(repr=False)
    name: str
    full_name: str
    parent: Message = field(repr=False)
    location: Location = field(repr=False)
    fields: List[Field] = field(default_factory=list, repr=False)

    @property
    def is_synthetic(self) -> bool:
        """True for the oneof protoc wraps around a proto3 ``optional`` field."""
        return len(self.fields) == 1 and self.fields[0].proto.proto3_optional


@dataclass(eq=False)
class Field:
    """A message field or an extension.

    Extensions have an extendee and, when declared at file level, no parent
    message.
    """

    proto: descriptor_pb2.FieldDescriptorProto = field(repr=False)
    name: str
    full_name: str
    json_name: str
    number: int
    kind: Kind
    cardinality: Cardinality
    parent_file: File = field(repr=False)
    parent: Optional[Message] = field(repr=False)
    oneof: Optional[Oneof] = field(repr=False)
    location: Location = field(repr=False)
    _enum_type: Slot[Optional[Enum]] = field(init=False, repr=False)
    _message: Slot[Optional[Message]] = field(init=False, repr=False)
    _extendee: Slot[Optional[Message]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._enum_type = Slot(self.full_name, "enum type")
        self._message = Slot(self.full_name, "message type")
        self._extendee = Slot(self.full_name, "extendee")

    @property
    def enum_type(self) -> Optional[Enum]:
        return self._enum_type.get()

    @property
    def message(self) -> Optional[Message]:
        return self._message.get()

    @property
    def extendee(self) -> Optional[Message]:
        return self._extendee.get()

    @property
    def is_extension(self) -> bool:
        return self.proto.HasField("extendee")

    def is_map(self) -> bool:
        message = self.message
        return message is not None and message.is_map_entry

    def is_list(self) -> bool:
        return self.cardinality == Cardinality.REPEATED and not self.is_map()

    def map_key(self) -> Optional[Field]:
        if not self.is_map():
            return None
        return self.message.fields[0]

    def map_value(self) -> Optional[Field]:
        if not self.is_map():
            return None
        return self.message.fields[1]

    def _set_target(self, enum_type: Optional[Enum], message: Optional[Message]) -> None:
        self._enum_type.set(enum_type)
        self._message.set(message)

    def _set_extendee(self, extendee: Optional[Message]) -> None:
        self._extendee.set(extendee)


Extension = Field


@dataclass(eq=False)
class Enum:
    proto: descriptor_pb2.EnumDescriptorProto = field(repr=False)
    name: str
    full_name: str
    parent_file: File = field(repr=False)
    parent: Optional[Message] = field(repr=False)
    location: Location = field(repr=False)
    values: List[EnumValue] = field(default_factory=list, repr=False)

    @property
    def ident(self) -> Ident:
        return self.parent_file.import_path.ident(
            _relative_name(self.full_name, self.parent_file.package)
        )


@dataclass(eq=False)
class EnumValue:
    """A value of an enum.

    Unlike every other declaration, the full name of an enum value lives in
    the namespace of the enclosing file's package, not in the enum's: value
    ``FOO`` of enum ``my.pkg.Outer.State`` is ``my.pkg.FOO``.
    """

    proto: descriptor_pb2.EnumValueDescriptorProto = field(repr=False)
    name: str
    full_name: str
    number: int
    parent: Enum = field(repr=False)
    location: Location = field(repr=False)


@dataclass(eq=False)
class Service:
    proto: descriptor_pb2.ServiceDescriptorProto = field(repr=False)
    name: str
    full_name: str
    parent_file: File = field(repr=False)
    location: Location = field(repr=False)
    methods: List[Method] = field(default_factory=list, repr=False)

    @property
    def ident(self) -> Ident:
        return self.parent_file.import_path.ident(self.name)


@dataclass(eq=False)
class Method:
    proto: descriptor_pb2.MethodDescriptorProto = field(repr=False)
    name: str
    full_name: str
    parent: Service = field(repr=False)
    client_streaming: bool
    server_streaming: bool
    grpc_path: str
    location: Location = field(repr=False)
    _input: Slot[Message] = field(init=False, repr=False)
    _output: Slot[Message] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._input = Slot(self.full_name, "input")
        self._output = Slot(self.full_name, "output")

    @property
    def input(self) -> Message:
        return self._input.get()

    @property
    def output(self) -> Message:
        return self._output.get()

    def _set_io(self, input: Message, output: Message) -> None:
        self._input.set(input)
        self._output.set(output)
