"""Resolve pass: fill in the references left open by the register pass.

Must only run once every file of the request is registered, since files may
reference each other in any order (including cycles).
"""

from __future__ import annotations

import logging
from typing import Optional

from protoc_graph.descriptor.nodes import Enum, Field, File, Kind, Message, Method
from protoc_graph.errors import UnresolvedReferenceError
from protoc_graph.name_resolver import resolve_message_type_name, resolve_type_name
from protoc_graph.registry import DeclarationKind, Registry

logger = logging.getLogger(__name__)

# Only these kinds have a target; scalar fields never do, whatever their type_name.
_TARGET_KINDS = {
    Kind.ENUM: (DeclarationKind.ENUM,),
    Kind.MESSAGE: (DeclarationKind.MESSAGE,),
    Kind.GROUP: (DeclarationKind.MESSAGE,),
}


def link_file(file: File, registry: Registry) -> None:
    """Resolve dependencies and every reference declared in file."""
    for dependency_name in file.proto.dependency:
        dependency = registry.file_by_name(dependency_name)
        if dependency is None:
            raise UnresolvedReferenceError(
                f"file {file.name}: failed to resolve dependency {dependency_name}"
            )
        file.dependencies.append(dependency)

    for message in file.messages:
        _link_message(message, registry)
    for service in file.services:
        for method in service.methods:
            _link_method(method, registry)
    for extension in file.extensions:
        _link_field(extension, registry, file.package)


def _link_message(message: Message, registry: Registry) -> None:
    for nested in message.messages:
        _link_message(nested, registry)
    for field in message.fields:
        _link_field(field, registry, message.full_name)
    for extension in message.extensions:
        _link_field(extension, registry, message.full_name)

    # Map entries stay registered; only the owner's list drops them. This
    # happens after the fields above are resolved, so map_key()/map_value()
    # see resolved key and value fields.
    map_entries = [m for m in message.messages if m.is_map_entry]
    if map_entries:
        message.messages[:] = [m for m in message.messages if not m.is_map_entry]
        logger.debug(
            "%s: dropped map entries %s",
            message.full_name,
            ", ".join(m.name for m in map_entries),
        )


def _where(field: Field) -> str:
    return field.parent.full_name if field.parent is not None else f"top-level of {field.parent_file.name}"


def _link_field(field: Field, registry: Registry, scope: str) -> None:
    enum_type: Optional[Enum] = None
    message: Optional[Message] = None

    type_name = field.proto.type_name
    if field.kind in _TARGET_KINDS and type_name:
        target = resolve_type_name(registry, scope, type_name, _TARGET_KINDS[field.kind])
        if target is None:
            raise UnresolvedReferenceError(
                f"No message or enum found for type_name={type_name} "
                f"of field {field.full_name} in {_where(field)}."
            )
        if isinstance(target, Enum):
            enum_type = target
        else:
            message = target
    elif field.kind in _TARGET_KINDS:
        raise UnresolvedReferenceError(
            f"field {field.full_name}: {field.kind.name.lower()} field without type_name"
        )
    elif type_name:
        logger.debug(
            "%s: ignoring type_name %s of %s field",
            field.full_name,
            type_name,
            field.kind.name.lower(),
        )
    field._set_target(enum_type, message)

    extendee: Optional[Message] = None
    if field.proto.extendee:
        extendee = resolve_message_type_name(registry, scope, field.proto.extendee)
        if extendee is None:
            raise UnresolvedReferenceError(
                f"Extendee not found in type registry: extendee={field.proto.extendee} "
                f"of {field.full_name} in {_where(field)}."
            )
    field._set_extendee(extendee)


def _link_method(method: Method, registry: Registry) -> None:
    scope = method.parent.full_name
    resolved = []
    for what, type_name in (("input", method.proto.input_type), ("output", method.proto.output_type)):
        message = resolve_message_type_name(registry, scope, type_name) if type_name else None
        if message is None:
            raise UnresolvedReferenceError(
                f"Method {method.full_name}: {what} type '{type_name}' not registered"
            )
        resolved.append(message)
    method._set_io(*resolved)
