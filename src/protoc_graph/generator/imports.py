"""Module identities and the import statements that connect them.

An ImportPath identifies the module a generated identifier lives in: either a
local file (relative to the output root) or a module of an external package,
optionally below a sub-path of that package. When a generated file refers to
an identifier of another module, the other module is imported under an alias
derived here, and the import path is either the package path or the relative
path between the two files.
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass

_ALIAS_UNSAFE = re.compile(r"[/.\-@]")


@dataclass(frozen=True)
class ImportPath:
    """A module identity.

    ``filename`` is the path of the module relative to the output root, e.g.
    ``mycom/iam/v1/policy_pb.js``. ``package`` is the external package the
    module belongs to ("" for local modules) and ``path_under_package`` the
    module path inside that package, e.g. ``google/protobuf/timestamp_pb`` in
    ``google-protobuf``.
    """

    filename: str
    package: str = ""
    path_under_package: str = ""

    @classmethod
    def npm(cls, package: str, path_under_package: str = "") -> ImportPath:
        """Import path of a module that is only reachable through its package."""
        return cls("", package, path_under_package)

    def ident(self, name: str) -> Ident:
        return Ident(self, name)

    @property
    def filename_without_extension(self) -> str:
        # ".d.ts" counts as one extension.
        if self.filename.endswith(".d.ts"):
            return self.filename[: -len(".d.ts")]
        return posixpath.splitext(self.filename)[0]


@dataclass(frozen=True)
class Ident:
    """A named symbol (class, function, constant, ...) of a module.

    For nested proto messages the name is dotted, e.g. ``Outer.Inner``.
    """

    import_path: ImportPath
    name: str


def sanitize(value: str) -> str:
    """Replace each of ``/ . - @`` with an underscore."""
    return _ALIAS_UNSAFE.sub("_", value)


def _is_relative(home: ImportPath, foreign: ImportPath) -> bool:
    # Local modules and modules of the home package are imported by relative
    # path, as long as their file is known.
    same_package = foreign.package == "" or foreign.package == home.package
    return same_package and foreign.filename != ""


def alias_import_path(home: ImportPath, foreign: ImportPath) -> str:
    """Alias under which a file at home imports the foreign module.

    - ``<package>`` or ``<package>__<path under package>`` for external packages
    - ``_<filename without extension>`` for modules of the same package

    E.g. ``google_protobuf__google_protobuf_timestamp_pb`` or ``_foo_bar_pb``.
    """
    if not _is_relative(home, foreign):
        package_part = sanitize(foreign.package)
        if foreign.path_under_package == "":
            return package_part
        return f"{package_part}__{sanitize(foreign.path_under_package)}"
    return "_" + sanitize(foreign.filename_without_extension)


def resolve_import(home: ImportPath, foreign: ImportPath) -> str:
    """Path a file at home uses in the import statement for foreign."""
    if not _is_relative(home, foreign):
        if foreign.path_under_package == "":
            return foreign.package
        return f"{foreign.package}/{foreign.path_under_package}"

    home_dir = posixpath.dirname(home.filename) or "."
    rel_path = posixpath.relpath(
        posixpath.normpath(foreign.filename_without_extension), home_dir
    )
    if rel_path != ".." and not rel_path.startswith("../"):
        rel_path = "./" + rel_path
    return rel_path


def default_import_func(filename: str, package: str) -> ImportPath:
    """Import path of the module generated for a .proto file.

    Follows the layout of the official JavaScript generator: ``path/to/x.proto``
    becomes ``path/to/x_pb.js``. Well-known types of ``google.protobuf`` live
    in the ``google-protobuf`` package.
    """
    stem = filename[: -len(".proto")] if filename.endswith(".proto") else filename
    if package == "google.protobuf" or package.startswith("google.protobuf."):
        return ImportPath(f"{stem}_pb.js", "google-protobuf", f"{stem}_pb")
    return ImportPath(f"{stem}_pb.js")
