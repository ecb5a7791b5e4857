import pytest

import voxread

from vox_builder import chunk, int32, pack, rgba, size, vox, xyzi


def test_bad_magic():
    data = vox()

    with pytest.raises(voxread.BadMagicError):
        voxread.decode(b"VOXX" + data[4:])


def test_missing_main():
    with pytest.raises(voxread.BadContainerError):
        voxread.decode(b"VOX " + int32(150))


def test_wrong_main_tag():
    data = b"VOX " + int32(150) + chunk(b"PACK", int32(1))

    with pytest.raises(voxread.BadContainerError):
        voxread.decode(data)


def test_main_content_is_skipped():
    data = b"VOX " + int32(150) + chunk(b"MAIN", b"\x00" * 6, size(1, 2, 3) + xyzi([]))

    assert voxread.decode(data).models[0].size == (1, 2, 3)


def test_size_without_xyzi():
    with pytest.raises(voxread.MalformedChunkSequenceError):
        voxread.decode(vox(size(2, 2, 2), rgba([(0, 0, 0, 0)] * 256)))


def test_size_at_end_of_data():
    with pytest.raises(voxread.MalformedChunkSequenceError):
        voxread.decode(vox(size(2, 2, 2)))


def test_xyzi_without_size_is_skipped():
    scene = voxread.decode(vox(xyzi([(0, 0, 0, 1)])))

    assert scene.models == []


def test_more_models_than_default_count():
    data = vox(size(1, 1, 1), xyzi([]), size(1, 1, 1), xyzi([]))

    with pytest.raises(voxread.ModelCountExceededError):
        voxread.decode(data)


def test_more_models_than_pack_count():
    data = vox(pack(2), *[size(1, 1, 1) + xyzi([])] * 3)

    with pytest.raises(voxread.ModelCountExceededError):
        voxread.decode(data)


def test_voxel_count_overruns_chunk():
    bad_xyzi = chunk(b"XYZI", int32(3) + bytes([0, 0, 0, 1]))

    with pytest.raises(voxread.TruncatedError):
        voxread.decode(vox(size(1, 1, 1), bad_xyzi))


def test_short_palette():
    with pytest.raises(voxread.TruncatedError):
        voxread.decode(vox(chunk(b"RGBA", b"\x00" * 1020)))


def test_unknown_chunk_larger_than_data():
    data = vox(b"nTRN" + int32(100) + int32(0) + b"\x00" * 10)

    with pytest.raises(voxread.TruncatedError):
        voxread.decode(data)


@pytest.mark.parametrize(
    "data",
    [b"", b"VO", b"VOX \x96\x00", b"VOX " + int32(150) + b"MAI"],
)
def test_short_input(data):
    with pytest.raises(voxread.TruncatedError):
        voxread.decode(data)


def test_errors_are_repeatable():
    data = vox(size(1, 1, 1), xyzi([]), size(1, 1, 1), xyzi([]))

    errors = []
    for _ in range(2):
        with pytest.raises(voxread.VoxDecodeError) as excinfo:
            voxread.decode(data)
        errors.append(type(excinfo.value))

    assert errors == [voxread.ModelCountExceededError] * 2
