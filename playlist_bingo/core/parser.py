from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Iterable

from .models import Track


_DECADE_HEADER_RE = re.compile(r"^\s*\d{4}s\s*\(\s*\d+\s*\)\s*$")
_SPLIT_RE = re.compile(r"\s+[–—-]\s+")
_ARTIST_SPLIT_RE = re.compile(r"\s*;\s*|\s+(?i:feat\.?|ft\.?|featuring)\s+")
_WS_RE = re.compile(r"\s+")

_VERSION_WORDS = "mix|edit|version|remaster|original"

# Applied in order; each strips one kind of release suffix from a track name.
_TRACK_SUFFIX_RES = [
    re.compile(r"\s*[(\[]\s*(?:feat|ft)\.?\s[^)\]]*[)\]]", re.IGNORECASE),
    re.compile(r"\s*[(\[][^)\]]*?(?:" + _VERSION_WORDS + r")[^)\]]*[)\]]", re.IGNORECASE),
    re.compile(r"\s*\([^)]*(?:\d{4}|year)[^)]*\)", re.IGNORECASE),
    re.compile(r"\s+[–—-]\s+.*?(?:" + _VERSION_WORDS + r"|radio).*$", re.IGNORECASE),
]


@dataclass(frozen=True)
class ParseResult:
    tracks: list[Track]
    ignored_lines: list[str]


def clean_track_name(name: str) -> str:
    """Strip remix/edit/remaster style suffixes so cells stay short.

    Returns the input unchanged if cleaning would leave nothing behind.
    """
    cleaned = name
    for pattern in _TRACK_SUFFIX_RES:
        cleaned = pattern.sub("", cleaned)
    cleaned = _WS_RE.sub(" ", cleaned).strip()
    return cleaned or name


def split_artists(raw: str) -> tuple[str, ...]:
    parts = (_WS_RE.sub(" ", part).strip() for part in _ARTIST_SPLIT_RE.split(raw))
    return tuple(part for part in parts if part)


def format_track_line(track: Track) -> str:
    return f"{'; '.join(track.artists)} - {track.name}"


def _iter_nonempty_lines(text: str) -> Iterable[str]:
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        yield line


def parse_track_list_text(text: str) -> ParseResult:
    tracks: list[Track] = []
    seen_keys: set[tuple[tuple[str, ...], str]] = set()
    ignored: list[str] = []

    for line in _iter_nonempty_lines(text):
        # "#1 Dads - Song" is a track; comments need "# ".
        if line == "#" or line.startswith("# ") or _DECADE_HEADER_RE.match(line):
            ignored.append(line)
            continue

        parts = _SPLIT_RE.split(line, maxsplit=1)
        if len(parts) != 2:
            ignored.append(line)
            continue

        artists = split_artists(parts[0])
        title = clean_track_name(_WS_RE.sub(" ", parts[1]).strip())
        if not artists or not title:
            ignored.append(line)
            continue

        key = (tuple(a.casefold() for a in artists), title.casefold())
        if key in seen_keys:
            continue
        seen_keys.add(key)
        tracks.append(Track(name=title, artists=artists))

    return ParseResult(tracks=tracks, ignored_lines=ignored)
