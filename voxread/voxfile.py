"""VoxFile structure and related functions.

The goal of this module is to decode MagicaVoxel .vox files into a more
Pythonic structure than the raw chunk layout: a list of models, a 256-entry
palette and a 256-entry material table. Decoding is read-only and all-or-nothing:
either a complete :class:`VoxFile` comes back or a
:class:`~voxread.errors.VoxDecodeError` is raised.

All integers are little-endian. Every chunk starts with the same frame:

-------------------------------------------------------------------------------
# Bytes  | Type       | Value
-------------------------------------------------------------------------------
1x4      | char       | chunk id
4        | int        | num bytes of chunk content (N)
4        | int        | num bytes of children chunks (M)

N        |            | chunk content

M        |            | children chunks
-------------------------------------------------------------------------------
"""

import logging
import struct
from collections import Counter
from typing import NamedTuple, Optional, Union

from voxread.errors import (
    BadContainerError,
    BadMagicError,
    BadNumericFieldError,
    MalformedChunkSequenceError,
    ModelCountExceededError,
    TruncatedError,
)
from voxread.material import FIELD_KEYS, TYPE_NAMES, Material, MaterialField, MaterialType
from voxread.palette import DEFAULT_PALETTE, PALETTE_SIZE
from voxread.scene import Color, Model, VoxHeader, Voxel

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]

MAGIC = b"VOX "

_HEADER = struct.Struct("<4si")
_FRAME = struct.Struct("<4sii")
_INT32 = struct.Struct("<i")
_UINT32 = struct.Struct("<I")
_FLOAT32 = struct.Struct("<f")
_SIZE = struct.Struct("<3i")
_XYZI = struct.Struct("<4B")
_RGBA = struct.Struct("<4B")
_MATT = struct.Struct("<iifI")


class ByteCursor:
    """Advancing view over an immutable byte buffer.

    The buffer is wrapped in a ``memoryview`` and never copied as a whole;
    only the small slices handed out by ``peek_bytes``/``read_bytes`` are.
    """

    def __init__(self, data: BytesLike, base_offset: int = 0):
        self._view = memoryview(data).cast("B")
        self._pos = 0
        self._base_offset = base_offset

    @property
    def position(self) -> int:
        """Absolute offset of the next unread byte."""
        return self._base_offset + self._pos

    def __len__(self):
        return len(self._view) - self._pos

    def __bool__(self):
        return self._pos < len(self._view)

    def _require(self, n: int, what: Optional[str]):
        if n > len(self):
            raise TruncatedError(self.position, n, len(self), what)

    def peek_bytes(self, n: int, what: Optional[str] = None) -> bytes:
        """Return the next n bytes without advancing."""
        if n <= 0:
            return b""
        self._require(n, what)
        return bytes(self._view[self._pos : self._pos + n])

    def read_bytes(self, n: int, what: Optional[str] = None) -> bytes:
        """Read n bytes."""
        data = self.peek_bytes(n, what)
        self._pos += len(data)
        return data

    def skip_bytes(self, n: int, what: Optional[str] = None):
        """Advance by n bytes. Zero or negative counts do nothing."""
        if n <= 0:
            return
        self._require(n, what)
        self._pos += n

    def sub_cursor(self, n: int, what: Optional[str] = None) -> "ByteCursor":
        """Consume exactly n bytes and return a cursor bounded to them."""
        n = max(n, 0)
        self._require(n, what)
        sub = ByteCursor(self._view[self._pos : self._pos + n], self.position)
        self._pos += n
        return sub

    def read_struct(self, fmt: struct.Struct, what: Optional[str] = None) -> tuple:
        """Read a fixed-size little-endian record."""
        return fmt.unpack(self.read_bytes(fmt.size, what))

    def read_int32(self, what: Optional[str] = None) -> int:
        return self.read_struct(_INT32, what)[0]

    def read_uint32(self, what: Optional[str] = None) -> int:
        return self.read_struct(_UINT32, what)[0]

    def read_float32(self, what: Optional[str] = None) -> float:
        return self.read_struct(_FLOAT32, what)[0]

    def read_string(self, what: str = "string") -> str:
        """Read an int32 length followed by that many bytes of text.

        Bytes are passed through as-is; invalid UTF-8 survives as surrogates.
        """
        length = self.read_int32(f"{what} length")
        return self.read_bytes(length, what).decode("utf-8", "surrogateescape")

    def read_pairs(self) -> list[tuple[str, str]]:
        """Read a DICT as (key, value) pairs in stored order."""
        count = self.read_int32("dict size")
        return [(self.read_string("key"), self.read_string("value")) for _ in range(count)]


class ChunkFrame(NamedTuple):
    """Chunk id plus the declared content and children sizes."""

    id: bytes
    content_bytes: int
    child_bytes: int


class Chunk:
    """Chunk class."""

    id = b""

    @staticmethod
    def open(cursor: ByteCursor) -> tuple[ChunkFrame, ByteCursor]:
        """Read the next chunk frame and consume its content.

        Returns the frame and a cursor bounded to the content, so readers can
        never run into the next chunk and the outer cursor always lands on the
        following frame.
        """
        offset = cursor.position
        frame = ChunkFrame(*cursor.read_struct(_FRAME, "chunk header"))
        logger.debug(
            "chunk %r at offset %d: %d content bytes, %d child bytes",
            frame.id,
            offset,
            frame.content_bytes,
            frame.child_bytes,
        )
        content = cursor.sub_cursor(frame.content_bytes, f"{frame.id!r} content")
        return frame, content


class PackChunk(Chunk):
    """Pack chunk class.

    -------------------------------------------------------------------------------
    # Bytes  | Type       | Value
    -------------------------------------------------------------------------------
    4        | int        | numModels : num of SIZE and XYZI chunks
    -------------------------------------------------------------------------------
    """

    id = b"PACK"

    @classmethod
    def read(cls, content: ByteCursor) -> int:
        return content.read_int32("model count")


class SizeChunk(Chunk):
    """Size chunk class.

    -------------------------------------------------------------------------------
    # Bytes  | Type       | Value
    -------------------------------------------------------------------------------
    4        | int        | size x
    4        | int        | size y
    4        | int        | size z : gravity direction
    -------------------------------------------------------------------------------
    """

    id = b"SIZE"

    @classmethod
    def read(cls, content: ByteCursor) -> tuple[int, int, int]:
        return content.read_struct(_SIZE, "model size")


class XYZIChunk(Chunk):
    """XYZI chunk class.

    -------------------------------------------------------------------------------
    # Bytes  | Type       | Value
    -------------------------------------------------------------------------------
    4        | int        | numVoxels (N)
    4 x N    | int        | (x, y, z, colorIndex) : 1 byte for each component
    -------------------------------------------------------------------------------
    """

    id = b"XYZI"

    @classmethod
    def open_after_size(cls, cursor: ByteCursor) -> ByteCursor:
        """Open the XYZI chunk that must directly follow a SIZE chunk."""
        if not cursor:
            raise MalformedChunkSequenceError(
                f"Missing {cls.id!r} chunk following {SizeChunk.id!r} at end of data"
            )
        id = cursor.peek_bytes(4, "chunk id")
        if id != cls.id:
            raise MalformedChunkSequenceError(
                f"Invalid chunk ID at offset {cursor.position}: {id!r}; "
                f"expected {cls.id!r} following {SizeChunk.id!r}"
            )
        _, content = cls.open(cursor)
        return content

    @classmethod
    def read(cls, content: ByteCursor) -> list[Voxel]:
        num_voxels = content.read_int32("voxel count")
        data = content.read_bytes(num_voxels * _XYZI.size, "voxels")
        return [Voxel(*voxel) for voxel in _XYZI.iter_unpack(data)]


class PaletteChunk(Chunk):
    """Palette chunk class.

    -------------------------------------------------------------------------------
    # Bytes  | Type     | Value
    -------------------------------------------------------------------------------
    4 x 256  | int      | (R, G, B, A) : 1 byte for each component
    -------------------------------------------------------------------------------

    The table replaces the whole palette, entry i landing on index i.
    """

    id = b"RGBA"

    @classmethod
    def read(cls, content: ByteCursor) -> list[Color]:
        data = content.read_bytes(PALETTE_SIZE * _RGBA.size, "palette")
        return [Color(*rgba) for rgba in _RGBA.iter_unpack(data)]


class MaterialChunk(Chunk):
    """Material chunk class.

    int32	: material id
    DICT	: material properties
          (_type : str) _diffuse, _metal, _glass, _emit
          (_rough : float)
          (_spec : float)
          (_ior : float)
          (_att : float)
          (_flux : float)
          ...
    """

    id = b"MATL"

    @classmethod
    def read(cls, content: ByteCursor) -> tuple[int, Material]:
        material_id = content.read_int32("material id") & 0xFF
        material = Material()

        for key, value in content.read_pairs():
            if key == "_type":
                material.type = TYPE_NAMES.get(value, material.type)
            elif key in FIELD_KEYS:
                try:
                    number = float(value)
                except ValueError as err:
                    raise BadNumericFieldError(
                        f"Invalid value for {key!r} in material {material_id}: {value!r}"
                    ) from err
                material.assign(FIELD_KEYS[key], number)
            # other keys (_weight, _plastic, ...) are not interpreted

        return material_id, material


class LegacyMaterialChunk(Chunk):
    """Legacy material chunk class.

    -------------------------------------------------------------------------------
    # Bytes  | Type       | Value
    -------------------------------------------------------------------------------
    4        | int        | id [1-255]
    4        | int        | material type : 0 diffuse, 1 metal, 2 glass, 3 emissive
    4        | float      | material weight
    4        | int        | property bits
    4 x N    | float      | normalized property values, one per set bit
    -------------------------------------------------------------------------------

    Only the weight is kept; the property values are skipped.
    """

    id = b"MATT"

    WEIGHT_FIELDS = {
        MaterialType.METAL: MaterialField.METAL,
        MaterialType.GLASS: MaterialField.TRANS,
        MaterialType.EMIT: MaterialField.EMIT,
    }

    @classmethod
    def read(cls, content: ByteCursor) -> tuple[int, Material]:
        material_id, type_tag, weight, _property_bits = content.read_struct(
            _MATT, "legacy material"
        )
        material_id &= 0xFF

        try:
            material = Material(MaterialType(type_tag))
        except ValueError:
            material = Material()

        field = cls.WEIGHT_FIELDS.get(material.type)
        if field is not None:
            material.assign(field, weight)

        return material_id, material


class MainChunk(Chunk):
    """Main chunk class.

    Chunk 'MAIN'
    {
        // pack of models
        Chunk 'PACK'    : optional

        // models
        Chunk 'SIZE'
        Chunk 'XYZI'

        ...

        // palette
        Chunk 'RGBA'    : optional

        // materials
        Chunk 'MATL' / 'MATT'    : optional

        // anything else is skipped
    }
    """

    id = b"MAIN"

    def __init__(
        self, models: list[Model], palette: list[Color], materials: list[Material]
    ):
        """MainChunk constructor."""
        self.models = models
        self.palette = palette
        self.materials = materials

    @classmethod
    def read(cls, cursor: ByteCursor) -> "MainChunk":
        """Read the main chunk and everything after it."""
        if not cursor:
            raise BadContainerError(f"Missing {cls.id!r} chunk")
        frame = ChunkFrame(*cursor.read_struct(_FRAME, "chunk header"))
        if frame.id != cls.id:
            raise BadContainerError(f"Invalid chunk ID: {frame.id!r}; expected {cls.id!r}")
        cursor.skip_bytes(frame.content_bytes, f"{cls.id!r} content")

        num_models = 1
        if len(cursor) >= 4 and cursor.peek_bytes(4) == PackChunk.id:
            _, content = cls.open(cursor)
            num_models = PackChunk.read(content)
            logger.debug("pack declares %d models", num_models)

        models: list[Model] = []
        palette = list(DEFAULT_PALETTE)
        materials = [Material() for _ in range(PALETTE_SIZE)]
        skipped: Counter = Counter()

        while cursor:
            frame, content = cls.open(cursor)

            if frame.id == SizeChunk.id:
                if len(models) >= num_models:
                    raise ModelCountExceededError(
                        f"Found more than {num_models} {SizeChunk.id!r} chunks"
                    )
                size = SizeChunk.read(content)
                voxels = XYZIChunk.read(XYZIChunk.open_after_size(cursor))
                models.append(Model(size, voxels))
                logger.debug("model %d: size %s, %d voxels", len(models) - 1, size, len(voxels))
            elif frame.id == PaletteChunk.id:
                palette = PaletteChunk.read(content)
            elif frame.id == MaterialChunk.id:
                material_id, material = MaterialChunk.read(content)
                materials[material_id] = material
                logger.debug("material %d: %r", material_id, material)
            elif frame.id == LegacyMaterialChunk.id:
                material_id, material = LegacyMaterialChunk.read(content)
                materials[material_id] = material
                logger.debug("legacy material %d: %r", material_id, material)
            else:
                # content already consumed by open()
                skipped[frame.id] += 1

        if skipped:
            logger.info(
                "Skipped unknown chunks: %s",
                ", ".join(f"{id!r} x{count}" for id, count in sorted(skipped.items())),
            )

        return MainChunk(models, palette, materials)


class VoxFile:
    """VoxFile class.

    Decoded scene: header, models in file order, the 256-entry palette and the
    256-entry material table indexed like the palette.
    """

    def __init__(
        self,
        header: VoxHeader,
        models: list[Model],
        palette: list[Color],
        materials: list[Material],
    ):
        """VoxFile constructor."""
        self.header = header
        self.models = models
        self.palette = palette
        self.materials = materials

    @property
    def version(self) -> int:
        return self.header.version

    @classmethod
    def from_bytes(cls, data: BytesLike) -> "VoxFile":
        """Decode a .vox file held in memory."""
        cursor = ByteCursor(data)

        magic = cursor.peek_bytes(4, "magic")
        if magic != MAGIC:
            raise BadMagicError(f"Invalid .vox file header: {magic!r}")
        header = VoxHeader(*cursor.read_struct(_HEADER, "header"))
        logger.debug("vox version %d, %d bytes", header.version, len(cursor) + _HEADER.size)

        main = MainChunk.read(cursor)

        return cls(header, main.models, main.palette, main.materials)

    @classmethod
    def read(cls, path: str) -> "VoxFile":
        """Read a .vox file from the given path."""
        with open(path, "rb") as f:
            data = f.read()
        return cls.from_bytes(data)

    def color_of(self, voxel: Voxel) -> Color:
        return self.palette[voxel.color_index]

    def material_of(self, voxel: Voxel) -> Material:
        return self.materials[voxel.color_index]

    def __eq__(self, other):
        if not isinstance(other, VoxFile):
            return False
        return (
            self.header == other.header
            and self.models == other.models
            and self.palette == other.palette
            and self.materials == other.materials
        )

    def __repr__(self):
        return f"VoxFile(version={self.version}, models={len(self.models)})"


def decode(data: BytesLike) -> VoxFile:
    """Decode .vox bytes into a :class:`VoxFile`."""
    return VoxFile.from_bytes(data)
