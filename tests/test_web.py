from io import BytesIO

import pytest

from playlist_bingo.web.app import app


TRACKS = "\n".join(f"Artist {i} - Song {i}" for i in range(40))


@pytest.fixture
def client():
    app.config.update(TESTING=True, BASE_URL=None)
    with app.test_client() as client:
        yield client


def _flashes(client) -> list[str]:
    with client.session_transaction() as session:
        return [msg for _, msg in session.get("_flashes", [])]


def test_index_renders_form(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"Playlist Bingo" in resp.data
    assert b'value="combined"' in resp.data


def test_generate_json(client):
    resp = client.post(
        "/generate",
        data={"players": "2", "plates_per_player": "1", "content_mode": "tracks", "seed": "7", "format": "json", "tracks": TRACKS},
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert len(body["game_code"]) == 6 and body["game_code"].isdigit()
    assert body["content_mode"] == "tracks"
    assert [p["player"] for p in body["players"]] == [1, 2]
    for player in body["players"]:
        assert len(player["plates"]) == 1
        grid = player["plates"][0]["grid"]
        assert len(grid) == 3
        for row in grid:
            assert len(row) == 9
            assert sum(1 for cell in row if cell["type"] == "track") == 5


def test_generate_pdf_from_upload(client):
    resp = client.post(
        "/generate",
        data={
            "players": "1",
            "plates_per_player": "2",
            "file": (BytesIO(TRACKS.encode("utf-8")), "tracks.txt"),
        },
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    assert resp.mimetype == "application/pdf"
    assert resp.data.startswith(b"%PDF-")
    assert "attachment" in resp.headers["Content-Disposition"]


def test_short_track_list_is_flashed(client):
    resp = client.post("/generate", data={"players": "3", "plates_per_player": "1", "tracks": TRACKS})
    assert resp.status_code == 302
    assert any("at least 45 tracks" in msg and "it has 40" in msg for msg in _flashes(client))


@pytest.mark.parametrize(
    "form,message",
    [
        ({"players": "0"}, "between 1 and 20"),
        ({"players": "21"}, "between 1 and 20"),
        ({"players": "x"}, "whole number"),
        ({"players": "1", "plates_per_player": "11"}, "10 or fewer"),
        ({"players": "1", "content_mode": "albums"}, "Unknown content mode"),
        ({"players": "1", "seed": "abc"}, "whole number"),
        ({"players": "1", "tracks": "   "}, "Provide a track list"),
    ],
)
def test_invalid_form_is_flashed(client, form, message):
    data = {"tracks": TRACKS}
    data.update(form)
    resp = client.post("/generate", data=data)
    assert resp.status_code == 302
    assert any(message in msg for msg in _flashes(client))
