import pytest

from playlist_bingo.core.generator import PlateGenerator
from playlist_bingo.core.models import ContentMode, Track
from playlist_bingo.core.pdf import RenderOptions, render_plates_pdf
from playlist_bingo.core.qr import join_url, make_qr_image


def _plates(count: int):
    pool = [
        Track(name=f"A Rather Long Song Title Number {i}", artists=(f"Artist {i}", f"Guest {i}"))
        for i in range(count * 15)
    ]
    return PlateGenerator(seed=1).generate_plates(pool, count, ContentMode.COMBINED)


def test_render_plates_pdf_produces_pdf_bytes():
    plates = _plates(3)
    opts = RenderOptions(game_code="012345", join_url="https://bingo.example/join?code=012345")
    pdf = render_plates_pdf(plates, opts, labels=["Player 1 - Plate 1", "Player 1 - Plate 2", "Player 2 - Plate 1"])
    assert pdf.startswith(b"%PDF-")


def test_render_without_join_url():
    pdf = render_plates_pdf(_plates(1), RenderOptions(game_code="999999", plates_per_page=1))
    assert pdf.startswith(b"%PDF-")


def test_labels_must_match_plates():
    with pytest.raises(ValueError):
        render_plates_pdf(_plates(2), RenderOptions(game_code="000000"), labels=["only one"])


def test_join_url():
    assert join_url("https://bingo.example/", "004211") == "https://bingo.example/join?code=004211"


def test_make_qr_image():
    img = make_qr_image("https://bingo.example/join?code=004211")
    assert img.mode == "RGB"
    assert img.size[0] == img.size[1]
