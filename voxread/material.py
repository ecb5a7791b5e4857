"""Material records attached to palette indices.

A material is produced either by a ``MATL`` chunk (string key/value pairs) or by
a legacy ``MATT`` chunk (fixed layout). Both end up as a :class:`Material`.
Numeric fields are only meaningful when marked as assigned; unassigned slots
hold 0.0.
"""

from enum import IntEnum
from typing import Iterator, Optional


class MaterialType(IntEnum):
    """Material type. Values match the legacy ``MATT`` type tag."""

    DIFFUSE = 0
    METAL = 1
    GLASS = 2
    EMIT = 3
    BLEND = 4
    MEDIA = 5


class MaterialField(IntEnum):
    """Numeric material properties, in storage order."""

    METAL = 0
    ROUGH = 1
    SPEC = 2
    IOR = 3
    ATT = 4
    FLUX = 5
    EMIT = 6
    LDR = 7
    TRANS = 8
    ALPHA = 9
    D = 10
    SP = 11
    G = 12
    MEDIA = 13


# (_type : str) values understood in MATL chunks
TYPE_NAMES = {
    "_diffuse": MaterialType.DIFFUSE,
    "_metal": MaterialType.METAL,
    "_glass": MaterialType.GLASS,
    "_emit": MaterialType.EMIT,
}

# MATL property keys holding numeric fields
FIELD_KEYS = {
    "_metal": MaterialField.METAL,
    "_rough": MaterialField.ROUGH,
    "_spec": MaterialField.SPEC,
    "_ior": MaterialField.IOR,
    "_att": MaterialField.ATT,
    "_flux": MaterialField.FLUX,
    "_emit": MaterialField.EMIT,
    "_ldr": MaterialField.LDR,
    "_trans": MaterialField.TRANS,
    "_alpha": MaterialField.ALPHA,
    "_d": MaterialField.D,
    "_sp": MaterialField.SP,
    "_g": MaterialField.G,
    "_media": MaterialField.MEDIA,
}


class Material:
    """Material class.

    ``assigned`` is a bit mask indexed by :class:`MaterialField`; ``values``
    always has one slot per field.
    """

    def __init__(self, type: MaterialType = MaterialType.DIFFUSE):
        self.type = type
        self.assigned = 0
        self.values: list[float] = [0.0] * len(MaterialField)

    def assign(self, field: MaterialField, value: float):
        """Store a value and mark the field as assigned."""
        self.values[field] = value
        self.assigned |= 1 << field

    def is_assigned(self, field: MaterialField) -> bool:
        return bool(self.assigned & (1 << field))

    def get(self, field: MaterialField, default: Optional[float] = None) -> Optional[float]:
        """Return the field value, or ``default`` if it was never assigned."""
        if self.is_assigned(field):
            return self.values[field]
        return default

    @property
    def assigned_fields(self) -> frozenset[MaterialField]:
        return frozenset(field for field in MaterialField if self.is_assigned(field))

    def __iter__(self) -> Iterator[tuple[MaterialField, float]]:
        """Iterate over (field, value) for assigned fields only."""
        for field in MaterialField:
            if self.is_assigned(field):
                yield field, self.values[field]

    def __eq__(self, other):
        if not isinstance(other, Material):
            return False
        return (
            self.type == other.type
            and self.assigned == other.assigned
            and self.values == other.values
        )

    def __repr__(self):
        fields = ", ".join(f"{field.name.lower()}={value}" for field, value in self)
        return f"Material({self.type.name}{', ' if fields else ''}{fields})"
