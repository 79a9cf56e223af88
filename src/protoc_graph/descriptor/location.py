"""Comment lookup in a file's SourceCodeInfo."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from google.protobuf import descriptor_pb2


@dataclass(frozen=True)
class Location:
    """Comments attached to one declaration of a .proto file.

    ``path`` identifies the declaration inside the FileDescriptorProto: pairs
    of (field number in the parent descriptor, index in that repeated field).
    E.g. ``[4, 0, 2, 1]`` is the second field of the first top-level message.
    """

    source_file: str
    path: Tuple[int, ...]
    leading_detached_comments: List[str] = field(default_factory=list)
    leading_comments: str = ""
    trailing_comments: str = ""


class LocationIndex:
    """Path -> Location lookup for a single file, built once per file."""

    def __init__(self, file_proto: descriptor_pb2.FileDescriptorProto):
        self._source_file = file_proto.name
        self._locations: Dict[Tuple[int, ...], descriptor_pb2.SourceCodeInfo.Location] = {}
        if file_proto.HasField("source_code_info"):
            for loc in file_proto.source_code_info.location:
                # First location wins when a path repeats.
                self._locations.setdefault(tuple(loc.path), loc)

    def find(self, path: Sequence[int]) -> Location:
        """Location for path, or an empty Location if the file has none."""
        key = tuple(path)
        loc = self._locations.get(key)
        if loc is None:
            return Location(self._source_file, key)
        return Location(
            source_file=self._source_file,
            path=key,
            leading_detached_comments=list(loc.leading_detached_comments),
            leading_comments=loc.leading_comments,
            trailing_comments=loc.trailing_comments,
        )


def find_location(
    file_proto: descriptor_pb2.FileDescriptorProto, path: Sequence[int]
) -> Location:
    return LocationIndex(file_proto).find(path)
