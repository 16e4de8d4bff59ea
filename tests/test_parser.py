import pytest

from playlist_bingo.core.models import Track
from playlist_bingo.core.parser import (
    clean_track_name,
    format_track_line,
    parse_track_list_text,
    split_artists,
)


def test_parse_ignores_headers_and_splits_artists_title():
    text = """
    # Friday quiz
    1980s (25)

    Queen – Bohemian Rhapsody
    Daft Punk; Pharrell Williams - Get Lucky (Radio Edit)
    NotAValidLine
    """
    result = parse_track_list_text(text)
    assert Track(name="Bohemian Rhapsody", artists=("Queen",)) in result.tracks
    assert Track(name="Get Lucky", artists=("Daft Punk", "Pharrell Williams")) in result.tracks
    assert any("1980s" in line for line in result.ignored_lines)
    assert any("Friday quiz" in line for line in result.ignored_lines)
    assert any("NotAValidLine" in line for line in result.ignored_lines)


def test_parse_drops_duplicates_case_insensitively():
    text = "Queen - Bohemian Rhapsody\nqueen - bohemian rhapsody\nQueen - Under Pressure\n"
    result = parse_track_list_text(text)
    assert [t.name for t in result.tracks] == ["Bohemian Rhapsody", "Under Pressure"]


def test_title_keeps_its_own_dashes_until_a_version_suffix():
    result = parse_track_list_text("The Beatles - Let It Be - Remastered 2009\n")
    assert result.tracks == [Track(name="Let It Be", artists=("The Beatles",))]


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Blue Monday (12\" Version)", "Blue Monday"),
        ("Heroes - 2017 Remaster", "Heroes"),
        ("Levels (Original Mix)", "Levels"),
        ("One More Time - Radio Edit", "One More Time"),
        ("Stay (feat. Justin Bieber)", "Stay"),
        ("Song [Extended Mix]", "Song"),
        ("Yesterday (1965)", "Yesterday"),
        ("  Plain   Title ", "Plain Title"),
        ("(Remix)", "(Remix)"),
    ],
)
def test_clean_track_name(raw, expected):
    assert clean_track_name(raw) == expected


def test_split_artists():
    assert split_artists("Calvin Harris feat. Rihanna") == ("Calvin Harris", "Rihanna")
    assert split_artists("Simon & Garfunkel") == ("Simon & Garfunkel",)
    assert split_artists("A;B ; C") == ("A", "B", "C")


def test_format_track_line_parses_back():
    track = Track(name="Get Lucky", artists=("Daft Punk", "Pharrell Williams"))
    assert parse_track_list_text(format_track_line(track)).tracks == [track]


def test_hash_prefixed_artist_is_not_a_comment():
    track = Track(name="Song", artists=("#1 Dads",))
    result = parse_track_list_text("# Playlist name\n" + format_track_line(track))
    assert result.tracks == [track]
    assert result.ignored_lines == ["# Playlist name"]
