"""Value types making up a decoded .vox scene.

These are plain, read-only containers. :class:`voxread.voxfile.VoxFile` ties
them together into the final result of a decode.
"""

from typing import Iterable, Iterator, NamedTuple


class Color(NamedTuple):
    """RGBA palette color, one byte per component."""

    r: int
    g: int
    b: int
    a: int = 255

    @classmethod
    def from_abgr(cls, value: int) -> "Color":
        """Build a color from a packed 0xAABBGGRR integer."""
        return cls(
            value & 0xFF, (value >> 8) & 0xFF, (value >> 16) & 0xFF, (value >> 24) & 0xFF
        )


class Voxel(NamedTuple):
    """Single voxel: position within its model plus a palette index."""

    x: int
    y: int
    z: int
    color_index: int


class VoxHeader(NamedTuple):
    """File header. The version is recorded but never checked."""

    magic: bytes
    version: int


class Model:
    """Model class.

    The size only describes the intended bounds; voxel positions are not checked
    against it. Voxels keep the order they were stored in.
    """

    def __init__(self, size: tuple[int, int, int], voxels: Iterable[Voxel]):
        self._size = size
        self._voxels = tuple(voxels)

    @property
    def size(self) -> tuple[int, int, int]:
        return self._size

    @property
    def voxels(self) -> tuple[Voxel, ...]:
        return self._voxels

    def __len__(self):
        return len(self._voxels)

    def __iter__(self) -> Iterator[Voxel]:
        return iter(self._voxels)

    def __eq__(self, other):
        if not isinstance(other, Model):
            return False
        return self._size == other._size and self._voxels == other._voxels

    def __hash__(self):
        return hash((self._size, self._voxels))

    def __repr__(self):
        return f"Model(size={self._size}, voxels=<{len(self._voxels)}>)"
