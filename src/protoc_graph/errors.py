"""Errors raised while turning raw descriptors into the descriptor graph.

Every DescriptorError is fatal: it describes a structural inconsistency in the
CodeGeneratorRequest and aborts the run before any generator code executes.
"""

from __future__ import annotations


class DescriptorError(Exception):
    """Base class for failures while building the descriptor graph."""


class MissingFieldError(DescriptorError):
    """Raised when a required descriptor attribute (name, number, type) is absent."""


class DuplicateRegistrationError(DescriptorError):
    """Raised when two declarations share a full name within one registry."""


class UnresolvedReferenceError(DescriptorError):
    """Raised when a type name, extendee or file dependency cannot be resolved."""


class UnrecognizedLabelError(DescriptorError):
    """Raised when a field label is not one of optional, required or repeated."""


class OneofIndexOutOfRangeError(DescriptorError):
    """Raised when a field points at a oneof its message does not declare."""


class NotResolvedError(RuntimeError):
    """Raised when a resolve-pass reference is read before it was set, or set twice."""
