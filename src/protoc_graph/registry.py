"""Registry of resolved declarations, keyed by full name.

A registry is created for one plugin invocation and threaded explicitly through
the register and resolve passes. It keeps one namespace per declaration kind.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from protoc_graph.errors import DuplicateRegistrationError

if TYPE_CHECKING:
    from protoc_graph.descriptor.nodes import Enum as EnumNode
    from protoc_graph.descriptor.nodes import Field, File, Message, Service

logger = logging.getLogger(__name__)


class DeclarationKind(Enum):
    FILE = auto()
    MESSAGE = auto()
    ENUM = auto()
    SERVICE = auto()
    EXTENSION = auto()


class Registry:
    """Holds the files, messages, enums, services and extensions of one request.

    Files are keyed by file name (e.g. ``google/protobuf/any.proto``), every
    other declaration by its full proto name without a leading dot (e.g.
    ``google.protobuf.Any``).
    """

    def __init__(self) -> None:
        self._by_kind: Dict[DeclarationKind, Dict[str, Any]] = {
            kind: {} for kind in DeclarationKind
        }

    # -- registration --

    def register(self, kind: DeclarationKind, key: str, declaration: Any) -> None:
        """Insert a declaration. Raises DuplicateRegistrationError if key is taken."""
        table = self._by_kind[kind]
        if key in table:
            raise DuplicateRegistrationError(
                f"Failed to register {kind.name.lower()} '{key}': already registered."
            )
        table[key] = declaration
        logger.debug("registered %s %s", kind.name.lower(), key)

    def register_file(self, file: File) -> None:
        self.register(DeclarationKind.FILE, file.name, file)

    def register_message(self, message: Message) -> None:
        self.register(DeclarationKind.MESSAGE, message.full_name, message)

    def register_enum(self, enum: EnumNode) -> None:
        self.register(DeclarationKind.ENUM, enum.full_name, enum)

    def register_service(self, service: Service) -> None:
        self.register(DeclarationKind.SERVICE, service.full_name, service)

    def register_extension(self, extension: Field) -> None:
        self.register(DeclarationKind.EXTENSION, extension.full_name, extension)

    # -- lookup --

    def lookup(self, kind: DeclarationKind, key: str) -> Optional[Any]:
        """Return the declaration registered under key, or None."""
        return self._by_kind[kind].get(key)

    def file_by_name(self, name: str) -> Optional[File]:
        return self.lookup(DeclarationKind.FILE, name)

    def message_by_name(self, full_name: str) -> Optional[Message]:
        return self.lookup(DeclarationKind.MESSAGE, full_name)

    def enum_by_name(self, full_name: str) -> Optional[EnumNode]:
        return self.lookup(DeclarationKind.ENUM, full_name)

    def service_by_name(self, full_name: str) -> Optional[Service]:
        return self.lookup(DeclarationKind.SERVICE, full_name)

    def extension_by_name(self, full_name: str) -> Optional[Field]:
        return self.lookup(DeclarationKind.EXTENSION, full_name)

    # -- enumeration --

    def all(self, kind: DeclarationKind) -> List[Any]:
        """All declarations of a kind, in registration order."""
        return list(self._by_kind[kind].values())

    def all_files(self) -> List[File]:
        return self.all(DeclarationKind.FILE)

    def all_messages(self) -> List[Message]:
        return self.all(DeclarationKind.MESSAGE)

    def all_enums(self) -> List[EnumNode]:
        return self.all(DeclarationKind.ENUM)

    def all_services(self) -> List[Service]:
        return self.all(DeclarationKind.SERVICE)

    def all_extensions(self) -> List[Field]:
        return self.all(DeclarationKind.EXTENSION)

    def by_package(
        self,
        kind: DeclarationKind,
        package: str,
        top_level_only: bool = False,
    ) -> List[Any]:
        """Declarations of a kind whose owning file is in the given proto package.

        With top_level_only, declarations nested in a message are skipped. This
        only affects messages and enums; other kinds have no parent message.
        """
        nestable = kind in (DeclarationKind.MESSAGE, DeclarationKind.ENUM)
        result = []
        for declaration in self._by_kind[kind].values():
            if kind == DeclarationKind.FILE:
                owner_package = declaration.package
            else:
                owner_package = declaration.parent_file.package
            if owner_package != package:
                continue
            if top_level_only and nestable and declaration.parent is not None:
                continue
            result.append(declaration)
        return result

    def files_by_package(self, package: str) -> List[File]:
        return self.by_package(DeclarationKind.FILE, package)

    def messages_by_package(self, package: str, top_level_only: bool = False) -> List[Message]:
        return self.by_package(DeclarationKind.MESSAGE, package, top_level_only)

    def enums_by_package(self, package: str, top_level_only: bool = False) -> List[EnumNode]:
        return self.by_package(DeclarationKind.ENUM, package, top_level_only)

    def services_by_package(self, package: str) -> List[Service]:
        return self.by_package(DeclarationKind.SERVICE, package)

    def extensions_by_package(self, package: str) -> List[Field]:
        return self.by_package(DeclarationKind.EXTENSION, package)
