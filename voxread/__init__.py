"""Read-only decoder for MagicaVoxel .vox files."""

from voxread.errors import (
    BadContainerError,
    BadMagicError,
    BadNumericFieldError,
    MalformedChunkSequenceError,
    ModelCountExceededError,
    TruncatedError,
    VoxDecodeError,
)
from voxread.material import Material, MaterialField, MaterialType
from voxread.palette import DEFAULT_PALETTE
from voxread.scene import Color, Model, VoxHeader, Voxel
from voxread.voxfile import ByteCursor, VoxFile, decode

__all__ = [
    "BadContainerError",
    "BadMagicError",
    "BadNumericFieldError",
    "ByteCursor",
    "Color",
    "DEFAULT_PALETTE",
    "MalformedChunkSequenceError",
    "Material",
    "MaterialField",
    "MaterialType",
    "Model",
    "ModelCountExceededError",
    "TruncatedError",
    "VoxDecodeError",
    "VoxFile",
    "VoxHeader",
    "Voxel",
    "decode",
]
