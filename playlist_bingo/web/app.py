from __future__ import annotations

import os
from typing import Any

from flask import Flask, Response, flash, jsonify, redirect, render_template_string, request

from playlist_bingo.core.generator import InsufficientPoolError, PlateGenerator, generate_game_code
from playlist_bingo.core.models import ContentMode, Plate
from playlist_bingo.core.parser import parse_track_list_text
from playlist_bingo.core.pdf import RenderOptions, render_plates_pdf
from playlist_bingo.core.qr import join_url


MAX_PLAYERS = 20
MAX_PLATES_PER_PLAYER = 10
DEFAULT_PLATES_PER_PLAYER = 3


HTML = """
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>Playlist Bingo</title>
    <style>
      body { font-family: system-ui, -apple-system, Segoe UI, Roboto, sans-serif; margin: 24px; max-width: 920px; }
      h1 { margin: 0 0 8px; }
      .hint { color: #333; margin: 0 0 16px; }
      label { display: block; font-weight: 600; margin: 12px 0 6px; }
      input[type="number"], select, textarea { width: 100%; padding: 10px; border: 1px solid #111; border-radius: 6px; }
      textarea { min-height: 260px; font-family: ui-monospace, SFMono-Regular, Menlo, Monaco, Consolas, monospace; }
      .row3 { display: grid; grid-template-columns: 1fr 1fr 1fr; gap: 12px; }
      .btn { margin-top: 14px; padding: 10px 14px; border: 2px solid #111; border-radius: 10px; background: #fff; font-weight: 700; cursor: pointer; }
      .box { border: 2px solid #111; border-radius: 12px; padding: 14px; }
      .flash { margin: 10px 0; padding: 10px 12px; border: 1px solid #111; border-radius: 8px; }
      .small { font-size: 12px; color: #333; }
    </style>
  </head>
  <body>
    <h1>Playlist Bingo</h1>
    <p class="hint">Paste or upload a track list (one "Artist - Title" per line) and generate 3&times;9 bingo plates for every player.</p>

    {% with messages = get_flashed_messages() %}
      {% if messages %}
        {% for msg in messages %}
          <div class="flash">{{ msg }}</div>
        {% endfor %}
      {% endif %}
    {% endwith %}

    <form class="box" method="post" action="/generate" enctype="multipart/form-data">
      <div class="row3">
        <div>
          <label>Players</label>
          <input type="number" name="players" value="1" min="1" max="{{ max_players }}" step="1" required>
        </div>
        <div>
          <label>Plates per player</label>
          <input type="number" name="plates_per_player" value="{{ default_plates }}" min="1" max="{{ max_plates }}" step="1">
        </div>
        <div>
          <label>Cell content</label>
          <select name="content_mode">
            {% for mode in modes %}
              <option value="{{ mode }}" {% if mode == "mixed" %}selected{% endif %}>{{ mode }}</option>
            {% endfor %}
          </select>
        </div>
      </div>

      <div class="row3">
        <div>
          <label>Seed (optional, for reproducible plates)</label>
          <input type="number" name="seed" placeholder="e.g. 12345">
        </div>
        <div>
          <label>Output</label>
          <select name="format">
            <option value="pdf" selected>PDF</option>
            <option value="json">JSON</option>
          </select>
        </div>
        <div>
          <label>Track list file (optional)</label>
          <input type="file" name="file" accept=".txt,text/plain">
          <div class="small">If provided, this overrides the pasted text.</div>
        </div>
      </div>

      <label>Track list (plain text)</label>
      <textarea name="tracks" placeholder="Queen - Bohemian Rhapsody"></textarea>

      <button class="btn" type="submit">Generate plates</button>
      <p class="small">Each plate needs 15 tracks, so the list must hold at least 15 &times; players &times; plates per player tracks.</p>
    </form>

  </body>
</html>
"""


class FormError(ValueError):
    pass


app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
app.config["BASE_URL"] = os.environ.get("PLAYLIST_BINGO_BASE_URL", "").strip() or None


def _parse_int(raw: str | None, *, name: str, default: int | None = None) -> int:
    value = (raw or "").strip()
    if not value:
        if default is None:
            raise FormError(f"{name} is required.")
        return default
    try:
        return int(value)
    except ValueError:
        raise FormError(f"{name} must be a whole number.") from None


def _read_track_text() -> str:
    text = (request.form.get("tracks") or "").strip()
    uploaded = request.files.get("file")
    if uploaded and uploaded.filename:
        try:
            text = uploaded.read().decode("utf-8")
        except UnicodeDecodeError:
            raise FormError("Unable to read uploaded file as UTF-8 text.") from None
    if not text.strip():
        raise FormError("Provide a track list (paste text or upload a .txt file).")
    return text


def _players_payload(plates: list[Plate], players: int, plates_per_player: int) -> list[dict[str, Any]]:
    return [
        {
            "player": player + 1,
            "plates": [
                plate.to_dict()
                for plate in plates[player * plates_per_player : (player + 1) * plates_per_player]
            ],
        }
        for player in range(players)
    ]


@app.get("/")
def index() -> str:
    return render_template_string(
        HTML,
        max_players=MAX_PLAYERS,
        max_plates=MAX_PLATES_PER_PLAYER,
        default_plates=DEFAULT_PLATES_PER_PLAYER,
        modes=[mode.value for mode in ContentMode],
    )


@app.post("/generate")
def generate() -> Response:
    try:
        players = _parse_int(request.form.get("players"), name="Number of players")
        if not 1 <= players <= MAX_PLAYERS:
            raise FormError(f"Player count must be between 1 and {MAX_PLAYERS}.")

        plates_per_player = _parse_int(
            request.form.get("plates_per_player"),
            name="Plates per player",
            default=DEFAULT_PLATES_PER_PLAYER,
        )
        if plates_per_player <= 0:
            plates_per_player = DEFAULT_PLATES_PER_PLAYER
        if plates_per_player > MAX_PLATES_PER_PLAYER:
            raise FormError(f"Plates per player must be {MAX_PLATES_PER_PLAYER} or fewer.")

        seed_raw = (request.form.get("seed") or "").strip()
        seed = _parse_int(seed_raw, name="Seed") if seed_raw else None

        try:
            mode = ContentMode.parse(request.form.get("content_mode"))
        except ValueError as e:
            raise FormError(str(e)) from None

        output = (request.form.get("format") or "pdf").strip().lower()
        if output not in {"pdf", "json"}:
            raise FormError("Output must be pdf or json.")

        parsed = parse_track_list_text(_read_track_text())
    except FormError as e:
        flash(str(e))
        return redirect("/")

    if parsed.ignored_lines:
        app.logger.info("Ignored %d unparseable line(s) in track list", len(parsed.ignored_lines))

    total_plates = players * plates_per_player
    generator = PlateGenerator(seed=seed)
    try:
        plates = generator.generate_plates(parsed.tracks, total_plates, mode)
    except InsufficientPoolError as e:
        app.logger.warning("Track list too short: need %d, have %d", e.required, e.have)
        flash(
            f"The track list must have at least {e.required} tracks for {players} player(s) "
            f"({total_plates} plates); it has {e.have}."
        )
        return redirect("/")

    game_code = generate_game_code()
    app.logger.info("Game %s: %d plate(s) for %d player(s)", game_code, total_plates, players)

    if output == "json":
        return jsonify(
            {
                "game_code": game_code,
                "content_mode": mode.value,
                "players": _players_payload(plates, players, plates_per_player),
            }
        )

    base_url = app.config.get("BASE_URL")
    opts = RenderOptions(
        game_code=game_code,
        join_url=join_url(base_url, game_code) if base_url else None,
    )
    labels = [
        f"Player {i // plates_per_player + 1} - Plate {i % plates_per_player + 1}"
        for i in range(total_plates)
    ]
    pdf_bytes = render_plates_pdf(plates, opts, labels=labels)

    return Response(
        pdf_bytes,
        mimetype="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="playlist-bingo-{game_code}.pdf"'},
    )


if __name__ == "__main__":
    app.run(host="127.0.0.1", port=5000, debug=True)
