import pytest

from core.errors import ValidationError
from models.enums import AssetType, UploadKind
from schemas.upload_schema import CompletedPart
from services.upload_service import build_object_key, detect_asset_type, normalize_parts, part_count


def test_part_count_rounds_up():
    assert part_count(1, 10) == 1
    assert part_count(10, 10) == 1
    assert part_count(11, 10) == 2


def test_object_keys():
    assert build_object_key(UploadKind.ASSET, "p1", None, "a b.png", now_ms=1700000000000) == (
        "assets/p1/1700000000000-a%20b.png"
    )
    assert build_object_key(UploadKind.DELIVERY, "p1", "f9", "final/cut.mp4", now_ms=5) == (
        "deliveries/p1/folders/f9/5-final%2Fcut.mp4"
    )


@pytest.mark.parametrize(
    "content_type, filename, expected",
    [
        ("image/png", "x.bin", AssetType.IMAGE),
        ("audio/mpeg", None, AssetType.AUDIO),
        ("video/mp4", "clip.mp4", AssetType.OTHER),
        ("application/json", None, AssetType.SCRIPT),
        ("application/octet-stream", "script.DOCX", AssetType.SCRIPT),
        ("application/octet-stream", "track.flac", AssetType.AUDIO),
        ("application/octet-stream", "blob", AssetType.OTHER),
    ],
)
def test_detect_asset_type(content_type, filename, expected):
    assert detect_asset_type(content_type, filename) == expected


def _parts(*numbers):
    return [CompletedPart(ETag=f"e{n}", PartNumber=n) for n in numbers]


def test_normalize_parts_sorts():
    assert normalize_parts(_parts(2, 3, 1), 3) == [
        {"ETag": "e1", "PartNumber": 1},
        {"ETag": "e2", "PartNumber": 2},
        {"ETag": "e3", "PartNumber": 3},
    ]


@pytest.mark.parametrize("numbers", [(1, 1, 2), (1, 3), (2, 3, 4), (1, 2, 3, 4)])
def test_normalize_parts_rejects_bad_sets(numbers):
    with pytest.raises(ValidationError):
        normalize_parts(_parts(*numbers), 3)
