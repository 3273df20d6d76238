# tdmsstruct/core/rawinfo.py
from __future__ import annotations

from typing import Iterator

from .exceptions import MissingPriorDescriptor
from .metadata import RawDataDescriptor


class RawInfoRegistry:
    """
    Mapping of object path -> last known raw data descriptor.

    A decoding run holds two of these: one that lives for the whole file
    (resolves the "reuse previous layout" selector) and one that is cleared
    whenever a segment starts a new object list (drives the chunk geometry).
    Iteration yields paths in sorted order, the order channels are reported in.
    """

    def __init__(self, name: str = "registry") -> None:
        self.name = name
        self._descriptors: dict[str, RawDataDescriptor] = {}

    def define(self, descriptor: RawDataDescriptor) -> None:
        self._descriptors[descriptor.path] = descriptor

    def lookup(self, path: str, *, offset: int | None = None) -> RawDataDescriptor:
        try:
            return self._descriptors[path]
        except KeyError as e:
            raise MissingPriorDescriptor(
                f"No raw data layout defined in a previous segment for '{path}'",
                offset=offset,
            ) from e

    def get(self, path: str, default: RawDataDescriptor | None = None) -> RawDataDescriptor | None:
        return self._descriptors.get(path, default)

    def clear(self) -> None:
        self._descriptors.clear()

    def __contains__(self, path: object) -> bool:
        return path in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._descriptors))

    def descriptors(self) -> list[RawDataDescriptor]:
        return [self._descriptors[p] for p in self]

    def chunk_byte_size(self) -> int:
        return sum(d.chunk_byte_size for d in self._descriptors.values())

    def __repr__(self) -> str:
        return f"RawInfoRegistry(name={self.name!r}, paths={list(self)!r})"
