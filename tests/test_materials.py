import pytest

import voxread
from voxread import Material, MaterialField, MaterialType

from vox_builder import matl, matt, rgba, size, vox, xyzi


def test_matl_type_and_field():
    scene = voxread.decode(vox(matl(3, [("_type", "_metal"), ("_rough", "0.5")])))
    material = scene.materials[3]

    assert material.type == MaterialType.METAL
    assert material.is_assigned(MaterialField.ROUGH)
    assert material.values[MaterialField.ROUGH] == 0.5
    assert material.assigned_fields == {MaterialField.ROUGH}


def test_matl_unknown_key_does_not_shift_pairs():
    properties = [
        ("_type", "_glass"),
        ("_weight", "not a number"),
        ("_ior", "1.3"),
        ("_plastic", ""),
        ("_trans", "0.8"),
    ]
    scene = voxread.decode(vox(matl(9, properties), size(1, 1, 1), xyzi([(0, 0, 0, 9)])))
    material = scene.materials[9]

    assert material.type == MaterialType.GLASS
    assert material.get(MaterialField.IOR) == 1.3
    assert material.get(MaterialField.TRANS) == 0.8
    assert material.assigned_fields == {MaterialField.IOR, MaterialField.TRANS}
    assert len(scene.models) == 1


def test_matl_all_fields():
    keys = ["_metal", "_rough", "_spec", "_ior", "_att", "_flux", "_emit",
            "_ldr", "_trans", "_alpha", "_d", "_sp", "_g", "_media"]
    properties = [(key, str(i)) for i, key in enumerate(keys)]
    material = voxread.decode(vox(matl(1, properties))).materials[1]

    assert material.assigned_fields == set(MaterialField)
    assert material.values == [float(i) for i in range(len(keys))]


def test_matl_index_masked_to_byte():
    scene = voxread.decode(vox(matl(256 + 3, [("_type", "_emit")])))

    assert scene.materials[3].type == MaterialType.EMIT


@pytest.mark.parametrize("type_name", ["_blend", "_media", "_plastic", ""])
def test_matl_unknown_type_stays_diffuse(type_name):
    material = voxread.decode(vox(matl(4, [("_type", type_name)]))).materials[4]

    assert material.type == MaterialType.DIFFUSE


def test_matl_bad_number():
    with pytest.raises(voxread.BadNumericFieldError, match="_rough"):
        voxread.decode(vox(matl(3, [("_rough", "half")])))


def test_matl_last_chunk_wins():
    data = vox(
        matl(5, [("_type", "_metal"), ("_rough", "0.1"), ("_spec", "0.2")]),
        matl(5, [("_type", "_glass"), ("_ior", "1.5")]),
    )
    material = voxread.decode(data).materials[5]

    assert material.type == MaterialType.GLASS
    assert material.assigned_fields == {MaterialField.IOR}
    assert material.get(MaterialField.ROUGH) is None


def test_matt_glass():
    data = vox(matt(12, 2, 0.75, 0b101, b"\x01" * 12), rgba([(4, 3, 2, 1)] * 256))
    scene = voxread.decode(data)
    material = scene.materials[12]

    assert material.type == MaterialType.GLASS
    assert material.assigned_fields == {MaterialField.TRANS}
    assert material.values[MaterialField.TRANS] == 0.75
    assert scene.palette[0] == (4, 3, 2, 1)


@pytest.mark.parametrize(
    "type_tag,field",
    [(1, MaterialField.METAL), (2, MaterialField.TRANS), (3, MaterialField.EMIT)],
)
def test_matt_weight_field(type_tag, field):
    material = voxread.decode(vox(matt(1, type_tag, 0.5))).materials[1]

    assert material.type == MaterialType(type_tag)
    assert material.assigned_fields == {field}
    assert material.get(field) == 0.5


@pytest.mark.parametrize("type_tag", [0, 4, 5, 9, -1])
def test_matt_weight_discarded(type_tag):
    material = voxread.decode(vox(matt(1, type_tag, 0.5))).materials[1]

    assert material.assigned_fields == frozenset()
    assert material.values == [0.0] * len(MaterialField)


def test_matt_unknown_type_is_diffuse():
    material = voxread.decode(vox(matt(1, 9, 0.5))).materials[1]

    assert material.type == MaterialType.DIFFUSE


def test_matt_overrides_matl():
    data = vox(matl(6, [("_type", "_metal"), ("_rough", "0.3")]), matt(6 + 512, 3, 0.9))
    material = voxread.decode(data).materials[6]

    assert material.type == MaterialType.EMIT
    assert material.assigned_fields == {MaterialField.EMIT}


def test_matt_too_short():
    with pytest.raises(voxread.TruncatedError):
        voxread.decode(vox(b"MATT" + (12).to_bytes(4, "little") + b"\x00" * 16))


def test_material_defaults():
    material = Material()

    assert material.type == MaterialType.DIFFUSE
    assert len(material.values) == 14
    assert not material.is_assigned(MaterialField.METAL)
    assert material.get(MaterialField.METAL) is None
    assert material.get(MaterialField.METAL, 1.0) == 1.0
    assert list(material) == []


def test_material_assign():
    material = Material(MaterialType.METAL)
    material.assign(MaterialField.G, 0.25)

    assert material.is_assigned(MaterialField.G)
    assert list(material) == [(MaterialField.G, 0.25)]
    assert material != Material(MaterialType.METAL)
