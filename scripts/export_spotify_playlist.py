from __future__ import annotations

import argparse
from dataclasses import dataclass
from getpass import getpass
import os
from pathlib import Path
import re
import sys

from playlist_bingo.core.models import CELLS_PER_PLATE, Track
from playlist_bingo.core.parser import clean_track_name, format_track_line, parse_track_list_text

SCOPE = "playlist-read-private playlist-read-collaborative"

DEFAULT_OUTPUT_FILENAME = "track_list.txt"
DEFAULT_REDIRECT_URI = "http://127.0.0.1:8888/callback"
PAGE_SIZE = 100

SCRIPT_DIR = Path(__file__).resolve().parent

_PLAYLIST_URL_RE = re.compile(r"open\.spotify\.com/(?:intl-[\w-]+/)?playlist/([A-Za-z0-9]+)")
_PLAYLIST_URI_RE = re.compile(r"^spotify:playlist:([A-Za-z0-9]+)$")
_PLAYLIST_ID_RE = re.compile(r"^[A-Za-z0-9]{22}$")


@dataclass(frozen=True)
class SpotifyConfig:
    client_id: str
    client_secret: str
    redirect_uri: str


class MissingSpotifyCredentialsError(RuntimeError):
    pass


def _missing_dependency(dist: str) -> RuntimeError:
    return RuntimeError(f"Missing dependency: {dist}.\nInstall it with:\n  python3 -m pip install -e .")


def _import_dotenv():
    try:
        from dotenv import dotenv_values, set_key
    except ModuleNotFoundError as exc:  # pragma: no cover - depends on local env
        raise _missing_dependency("python-dotenv") from exc
    return dotenv_values, set_key


def _import_spotify_client():
    try:
        import spotipy
        from spotipy.oauth2 import SpotifyOAuth
        from tqdm import tqdm
    except ModuleNotFoundError as exc:  # pragma: no cover - depends on local env
        raise _missing_dependency(exc.name or "spotipy") from exc
    return spotipy, SpotifyOAuth, tqdm


def extract_playlist_id(value: str) -> str | None:
    """Accept a bare ID, a spotify:playlist: URI or an open.spotify.com link."""
    v = (value or "").strip()
    for pattern in (_PLAYLIST_URL_RE, _PLAYLIST_URI_RE):
        m = pattern.search(v)
        if m:
            return m.group(1)
    if _PLAYLIST_ID_RE.match(v):
        return v
    return None


def track_from_item(item: dict) -> Track | None:
    """Convert one playlist item; local files, episodes and removed tracks yield None."""
    track = item.get("track") or {}
    if not track.get("id") or track.get("type", "track") != "track":
        return None
    artists = tuple(a.get("name", "") for a in track.get("artists") or [] if a.get("name"))
    return Track(
        name=clean_track_name(track.get("name") or ""),
        artists=artists,
        track_id=track["id"],
    )


ENV_KEYS = ("SPOTIFY_CLIENT_ID", "SPOTIFY_CLIENT_SECRET", "SPOTIFY_REDIRECT_URI")


def _strip_quotes(value: str | None) -> str:
    v = (value or "").strip()
    if len(v) >= 2 and v[0] == v[-1] and v[0] in "\"'":
        v = v[1:-1].strip()
    return v


def load_spotify_config(dotenv_values, env_path: Path = SCRIPT_DIR / ".env") -> SpotifyConfig:
    """Read credentials from the process environment, falling back to the .env file."""
    file_values = dotenv_values(env_path) if env_path.exists() else {}
    values = {key: _strip_quotes(os.environ.get(key) or file_values.get(key)) for key in ENV_KEYS}

    missing = [key for key in ENV_KEYS[:2] if not values[key]]
    if missing:
        raise MissingSpotifyCredentialsError(
            "Missing Spotify credentials: " + ", ".join(missing) + "\n"
            f"Add them to {env_path} or run:\n"
            "  python3 export_spotify_playlist.py --configure"
        )

    return SpotifyConfig(
        client_id=values["SPOTIFY_CLIENT_ID"],
        client_secret=values["SPOTIFY_CLIENT_SECRET"],
        redirect_uri=values["SPOTIFY_REDIRECT_URI"] or DEFAULT_REDIRECT_URI,
    )


def _configure_env_interactive(set_key, env_path: Path = SCRIPT_DIR / ".env") -> int:
    if env_path.exists():
        if input(f"Update credentials in {env_path.name}? [y/N]: ").strip().lower() not in {"y", "yes"}:
            return 0

    print("Register an app at https://developer.spotify.com/dashboard for a Client ID and Secret.")
    answers = {
        "SPOTIFY_CLIENT_ID": input("SPOTIFY_CLIENT_ID: ").strip(),
        "SPOTIFY_CLIENT_SECRET": getpass("SPOTIFY_CLIENT_SECRET: ").strip(),
        "SPOTIFY_REDIRECT_URI": input(f"SPOTIFY_REDIRECT_URI [{DEFAULT_REDIRECT_URI}]: ").strip()
        or DEFAULT_REDIRECT_URI,
    }
    if not answers["SPOTIFY_CLIENT_ID"] or not answers["SPOTIFY_CLIENT_SECRET"]:
        raise RuntimeError("Both SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET are required.")

    env_path.touch(exist_ok=True)
    for key, value in answers.items():
        set_key(env_path, key, value)
    print(f"Saved {', '.join(answers)} to {env_path}")
    return 0


def fetch_playlist_tracks(sp, playlist_id: str, *, tqdm) -> tuple[str, list[Track]]:
    playlist = sp.playlist(playlist_id, fields="name,tracks.total")
    name = playlist.get("name") or playlist_id
    total = (playlist.get("tracks") or {}).get("total") or 0

    tracks: list[Track] = []
    page = sp.playlist_items(playlist_id, limit=PAGE_SIZE, additional_types=("track",))
    with tqdm(total=total, desc="Fetching") as bar:
        while page:
            items = page.get("items") or []
            for item in items:
                track = track_from_item(item)
                if track is not None:
                    tracks.append(track)
            bar.update(len(items))
            page = sp.next(page) if page.get("next") else None

    return name, tracks


def build_track_list(name: str, tracks: list[Track]) -> tuple[str, list[Track]]:
    """Render the track-list file and return it with the tracks it will yield when parsed."""
    text = "\n".join([f"# {name}"] + [format_track_line(t) for t in tracks]) + "\n"
    return text, parse_track_list_text(text).tracks


def main(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(description="Export a Spotify playlist as a Playlist Bingo track list.")
    parser.add_argument("--configure", action="store_true", help="Store Spotify credentials in a .env file next to this script")
    parser.add_argument("--playlist", default=None, help="Playlist ID, spotify:playlist: URI or open.spotify.com URL")
    parser.add_argument(
        "--output",
        default=None,
        help=f"Where to write the track list (default: {DEFAULT_OUTPUT_FILENAME} next to this script)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Fetch and report, but do not write the output file")
    args = parser.parse_args(argv)

    if args.configure:
        _, set_key = _import_dotenv()
        return _configure_env_interactive(set_key)

    if not args.playlist:
        raise RuntimeError("A playlist is required. Pass --playlist <id or url>.")
    playlist_id = extract_playlist_id(args.playlist)
    if not playlist_id:
        raise RuntimeError(f"Not a Spotify playlist ID or URL:\n  {args.playlist}")

    dotenv_values, _ = _import_dotenv()
    spotipy, SpotifyOAuth, tqdm = _import_spotify_client()
    cfg = load_spotify_config(dotenv_values)

    sp = spotipy.Spotify(
        auth_manager=SpotifyOAuth(
            client_id=cfg.client_id,
            client_secret=cfg.client_secret,
            redirect_uri=cfg.redirect_uri,
            scope=SCOPE,
            cache_path=str(SCRIPT_DIR / ".spotify_token_cache"),
        )
    )

    name, tracks = fetch_playlist_tracks(sp, playlist_id, tqdm=tqdm)
    text, usable = build_track_list(name, tracks)
    if not usable:
        raise RuntimeError(f'Playlist "{name}" has no usable tracks.')

    skipped = len(tracks) - len(usable)
    print(
        f'\nPlaylist "{name}": {len(usable)} usable tracks'
        + (f" ({skipped} duplicate or without artist)" if skipped else "")
        + f", enough for {len(usable) // CELLS_PER_PLATE} plate(s)."
    )
    if args.dry_run:
        print("[dry-run] Not writing a track list.")
        return 0

    out_path = Path(args.output).expanduser() if args.output else SCRIPT_DIR / DEFAULT_OUTPUT_FILENAME
    out_path.write_text(text, encoding="utf-8")
    print(f"Wrote {out_path}")
    return 0


def run(argv: list[str]) -> int:
    """Exit-code wrapper: 130 on Ctrl-C, 2 with an ERROR: line on any failure."""
    try:
        return main(argv)
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        return 130
    except Exception as exc:
        first, _, rest = (str(exc).rstrip() or repr(exc)).partition("\n")
        print(f"ERROR: {first}", file=sys.stderr)
        if rest:
            print(rest, file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(run(sys.argv[1:]))
