"""Register pass: raw descriptors -> graph nodes, registered as they are built.

Only structure is built here. References to other declarations (field types,
extendees, method input/output, file dependencies) are left unresolved until
every file of the request has been registered; see ``linker``.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional

from google.protobuf import descriptor_pb2

from protoc_graph.descriptor.location import LocationIndex
from protoc_graph.descriptor.nodes import (
    Cardinality,
    Enum,
    EnumValue,
    Field,
    File,
    Kind,
    Message,
    Method,
    Oneof,
    Service,
)
from protoc_graph.errors import (
    MissingFieldError,
    OneofIndexOutOfRangeError,
    UnrecognizedLabelError,
)
from protoc_graph.generator.imports import ImportPath
from protoc_graph.registry import Registry

logger = logging.getLogger(__name__)

ImportFunc = Callable[[str, str], ImportPath]

_FileProto = descriptor_pb2.FileDescriptorProto
_MessageProto = descriptor_pb2.DescriptorProto
_EnumProto = descriptor_pb2.EnumDescriptorProto
_ServiceProto = descriptor_pb2.ServiceDescriptorProto

_CARDINALITIES = {
    1: Cardinality.OPTIONAL,
    2: Cardinality.REQUIRED,
    3: Cardinality.REPEATED,
}


def _join(scope: str, name: str) -> str:
    return f"{scope}.{name}" if scope else name


_NON_ALNUM_RUN = re.compile(r"[^a-zA-Z0-9]+(.)")

# Names the JavaScript generator renames in the object representation of a
# message, see protobuf's js_generator.cc.
JS_RESERVED_NAMES = frozenset(
    """
    abstract boolean break byte case catch char class const continue debugger
    default delete do double else enum export extends false final finally float
    for function goto if implements import in instanceof int interface long
    native new null package private protected public return short static super
    switch synchronized this throw throws transient try typeof var void volatile
    while with
    """.split()
)


def camel_case(name: str) -> str:
    """Drop each run of non-alphanumerics and upper-case the character after it.

    foo_bar_baz -> fooBarBaz, foo-1x -> foo1x.
    """
    return _NON_ALNUM_RUN.sub(lambda m: m.group(1).upper(), name)


def normalize_json_name(name: str) -> str:
    """JSON name of a field as the JavaScript generator exposes it.

    Reserved words get a ``pb_`` prefix: class -> pb_class.
    """
    name = camel_case(name)
    if name in JS_RESERVED_NAMES:
        return f"pb_{name}"
    return name


def _require_name(proto, what: str, where: str) -> str:
    if not proto.name:
        raise MissingFieldError(f"{where}: {what} has no name")
    return proto.name


class GraphBuilder:
    """Builds the nodes of one file after another into a shared Registry."""

    def __init__(self, registry: Registry, import_func: ImportFunc):
        self._registry = registry
        self._import_func = import_func

    def build_file(self, proto: _FileProto, generate: bool) -> File:
        """Build and register a File with everything it declares."""
        if not proto.name:
            raise MissingFieldError("file descriptor has no name")
        locations = LocationIndex(proto)
        file = File(
            proto=proto,
            name=proto.name,
            package=proto.package,
            # An empty syntax field means proto2.
            syntax=proto.syntax or "proto2",
            generate=generate,
            import_path=self._import_func(proto.name, proto.package),
            location=locations.find([]),
        )
        self._registry.register_file(file)

        for i, message_proto in enumerate(proto.message_type):
            path = [_FileProto.MESSAGE_TYPE_FIELD_NUMBER, i]
            file.messages.append(
                self._build_message(message_proto, file, None, path, locations)
            )

        for i, enum_proto in enumerate(proto.enum_type):
            path = [_FileProto.ENUM_TYPE_FIELD_NUMBER, i]
            file.enums.append(self._build_enum(enum_proto, file, None, path, locations))

        for i, service_proto in enumerate(proto.service):
            path = [_FileProto.SERVICE_FIELD_NUMBER, i]
            file.services.append(self._build_service(service_proto, file, path, locations))

        for i, extension_proto in enumerate(proto.extension):
            path = [_FileProto.EXTENSION_FIELD_NUMBER, i]
            extension = self._build_field(extension_proto, file, None, None, path, locations)
            self._registry.register_extension(extension)
            file.extensions.append(extension)

        logger.debug(
            "built file %s: %d message(s), %d enum(s), %d service(s), %d extension(s)",
            file.name,
            len(file.messages),
            len(file.enums),
            len(file.services),
            len(file.extensions),
        )
        return file

    # -- messages --

    def _build_message(
        self,
        proto: _MessageProto,
        file: File,
        parent: Optional[Message],
        path: List[int],
        locations: LocationIndex,
    ) -> Message:
        scope = parent.full_name if parent is not None else file.package
        name = _require_name(proto, "message", scope or file.name)
        message = Message(
            proto=proto,
            name=name,
            full_name=_join(scope, name),
            parent_file=file,
            parent=parent,
            location=locations.find(path),
        )
        self._registry.register_message(message)

        # Oneofs first: fields refer to them by index.
        for i, oneof_proto in enumerate(proto.oneof_decl):
            oneof_name = _require_name(oneof_proto, "oneof", message.full_name)
            message.oneofs.append(
                Oneof(
                    proto=oneof_proto,
                    name=oneof_name,
                    full_name=_join(message.full_name, oneof_name),
                    parent=message,
                    location=locations.find(
                        path + [_MessageProto.ONEOF_DECL_FIELD_NUMBER, i]
                    ),
                )
            )

        for i, field_proto in enumerate(proto.field):
            oneof = None
            if field_proto.HasField("oneof_index"):
                index = field_proto.oneof_index
                if not 0 <= index < len(message.oneofs):
                    raise OneofIndexOutOfRangeError(
                        f"{message.full_name}: field '{field_proto.name}' has oneof "
                        f"index {index}, but the message declares "
                        f"{len(message.oneofs)} oneof(s)"
                    )
                oneof = message.oneofs[index]
            field_path = path + [_MessageProto.FIELD_FIELD_NUMBER, i]
            field = self._build_field(field_proto, file, message, oneof, field_path, locations)
            # A oneof member belongs to both lists.
            message.fields.append(field)
            if oneof is not None:
                oneof.fields.append(field)

        for i, nested_proto in enumerate(proto.nested_type):
            nested_path = path + [_MessageProto.NESTED_TYPE_FIELD_NUMBER, i]
            message.messages.append(
                self._build_message(nested_proto, file, message, nested_path, locations)
            )

        for i, enum_proto in enumerate(proto.enum_type):
            enum_path = path + [_MessageProto.ENUM_TYPE_FIELD_NUMBER, i]
            message.enums.append(
                self._build_enum(enum_proto, file, message, enum_path, locations)
            )

        for i, extension_proto in enumerate(proto.extension):
            extension_path = path + [_MessageProto.EXTENSION_FIELD_NUMBER, i]
            extension = self._build_field(
                extension_proto, file, message, None, extension_path, locations
            )
            self._registry.register_extension(extension)
            message.extensions.append(extension)

        return message

    def _build_field(
        self,
        proto: descriptor_pb2.FieldDescriptorProto,
        file: File,
        parent: Optional[Message],
        oneof: Optional[Oneof],
        path: List[int],
        locations: LocationIndex,
    ) -> Field:
        scope = parent.full_name if parent is not None else file.package
        name = _require_name(proto, "field", scope or file.name)
        full_name = _join(scope, name)

        if proto.number <= 0:
            raise MissingFieldError(f"field {full_name}: number not populated")
        if not proto.HasField("type"):
            raise MissingFieldError(f"field {full_name}: type not populated")

        label = proto.label if proto.HasField("label") else 0
        cardinality = _CARDINALITIES.get(label)
        if cardinality is None:
            raise UnrecognizedLabelError(f"field {full_name}: unrecognized label {label}")

        return Field(
            proto=proto,
            name=name,
            full_name=full_name,
            json_name=normalize_json_name(proto.json_name or name),
            number=proto.number,
            kind=Kind(proto.type),
            cardinality=cardinality,
            parent_file=file,
            parent=parent,
            oneof=oneof,
            location=locations.find(path),
        )

    # -- enums --

    def _build_enum(
        self,
        proto: _EnumProto,
        file: File,
        parent: Optional[Message],
        path: List[int],
        locations: LocationIndex,
    ) -> Enum:
        scope = parent.full_name if parent is not None else file.package
        name = _require_name(proto, "enum", scope or file.name)
        enum = Enum(
            proto=proto,
            name=name,
            full_name=_join(scope, name),
            parent_file=file,
            parent=parent,
            location=locations.find(path),
        )
        self._registry.register_enum(enum)

        for i, value_proto in enumerate(proto.value):
            value_name = _require_name(value_proto, "enum value", enum.full_name)
            enum.values.append(
                EnumValue(
                    proto=value_proto,
                    name=value_name,
                    full_name=_join(file.package, value_name),
                    number=value_proto.number,
                    parent=enum,
                    location=locations.find(path + [_EnumProto.VALUE_FIELD_NUMBER, i]),
                )
            )
        return enum

    # -- services --

    def _build_service(
        self,
        proto: _ServiceProto,
        file: File,
        path: List[int],
        locations: LocationIndex,
    ) -> Service:
        name = _require_name(proto, "service", file.package or file.name)
        service = Service(
            proto=proto,
            name=name,
            full_name=_join(file.package, name),
            parent_file=file,
            location=locations.find(path),
        )
        self._registry.register_service(service)

        for i, method_proto in enumerate(proto.method):
            method_name = _require_name(method_proto, "method", service.full_name)
            service.methods.append(
                Method(
                    proto=method_proto,
                    name=method_name,
                    full_name=f"{service.full_name}.{method_name}",
                    parent=service,
                    client_streaming=method_proto.client_streaming,
                    server_streaming=method_proto.server_streaming,
                    grpc_path=f"/{service.full_name}/{method_name}",
                    location=locations.find(path + [_ServiceProto.METHOD_FIELD_NUMBER, i]),
                )
            )
        return service
