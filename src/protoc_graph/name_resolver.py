"""Resolution of proto type names against a Registry.

Type names in descriptors are either fully qualified (``.my.pkg.Type``) or
relative to the scope they appear in. Relative names follow C++ scoping rules:
for a reference scope ``my.pkg.A.B`` and a type name ``C`` the candidates are
``my.pkg.A.B.C``, ``my.pkg.A.C``, ``my.pkg.C``, ``my.C`` and ``C``, in that
order. The first declaration found wins.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional, Sequence

from protoc_graph.registry import DeclarationKind, Registry

TYPE_KINDS = (DeclarationKind.ENUM, DeclarationKind.MESSAGE)


def _candidates(reference: str, type_name: str) -> Iterator[str]:
    scope = reference
    while scope:
        yield f"{scope}.{type_name}"
        scope = scope.rpartition(".")[0]
    yield type_name


def resolve_type_name(
    registry: Registry,
    reference: str,
    type_name: str,
    kinds: Sequence[DeclarationKind] = TYPE_KINDS,
) -> Optional[Any]:
    """Resolve type_name seen in the reference scope to a registered declaration.

    Every candidate name is looked up for each kind in kinds, in order, before
    moving to the next candidate. Returns None if nothing matches.
    """
    if type_name.startswith("."):
        full_name = type_name[1:]
        for kind in kinds:
            found = registry.lookup(kind, full_name)
            if found is not None:
                return found
        return None

    for candidate in _candidates(reference, type_name):
        for kind in kinds:
            found = registry.lookup(kind, candidate)
            if found is not None:
                return found
    return None


def resolve_message_type_name(registry: Registry, reference: str, type_name: str):
    return resolve_type_name(registry, reference, type_name, (DeclarationKind.MESSAGE,))


def resolve_enum_type_name(registry: Registry, reference: str, type_name: str):
    return resolve_type_name(registry, reference, type_name, (DeclarationKind.ENUM,))
