import json

import pytest

from playlist_bingo.core.generator import PlateGenerator
from playlist_bingo.core.models import BingoField, ContentMode, FieldKind, Plate, Track


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("tracks", ContentMode.TRACKS),
        (" Artists ", ContentMode.ARTISTS),
        ("COMBINED", ContentMode.COMBINED),
        ("mixed", ContentMode.MIXED),
        ("", ContentMode.MIXED),
        (None, ContentMode.MIXED),
    ],
)
def test_content_mode_parse(raw, expected):
    assert ContentMode.parse(raw) is expected


def test_content_mode_parse_rejects_unknown():
    with pytest.raises(ValueError, match="Unknown content mode"):
        ContentMode.parse("albums")


def test_blank_plate():
    plate = Plate.blank()
    assert len(plate.grid) == 3
    assert all(len(row) == 9 for row in plate.grid)
    assert list(plate.filled_cells()) == []
    # Rows must not alias one another.
    plate.grid[0][0].marked = True
    assert not plate.grid[1][0].marked


def test_plate_json_layout():
    plate = Plate.blank()
    plate.grid[1][4] = BingoField(content="Song", kind=FieldKind.TRACK)
    data = plate.to_dict()
    assert data["grid"][1][4] == {"content": "Song", "type": "track", "marked": False}
    assert data["grid"][0][0] == {"content": "", "type": "", "marked": False}


def test_generated_plate_survives_json():
    pool = [Track(name=f"Song {i}", artists=(f"Artist {i}",)) for i in range(30)]
    plate = PlateGenerator(seed=3).generate_plates(pool, 1, ContentMode.MIXED)[0]
    restored = Plate.from_dict(json.loads(json.dumps(plate.to_dict())))
    assert restored == plate


def test_from_dict_rejects_wrong_shape():
    with pytest.raises(ValueError):
        Plate.from_dict({"grid": [[{"content": "x", "type": "track", "marked": False}]]})
