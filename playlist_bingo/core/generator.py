from __future__ import annotations

import logging
import random
import time
from typing import Sequence

from .models import (
    CELLS_PER_PLATE,
    CELLS_PER_ROW,
    COLUMNS,
    ROWS,
    BingoField,
    ContentMode,
    FieldKind,
    Plate,
    Track,
)


logger = logging.getLogger(__name__)

MAX_CONTENT_ATTEMPTS = 100
GAME_CODE_LENGTH = 6


class InsufficientPoolError(ValueError):
    def __init__(self, required: int, have: int) -> None:
        self.required = required
        self.have = have
        super().__init__(
            f"Playlist must have at least {required} tracks "
            f"({CELLS_PER_PLATE} per plate), got {have}"
        )


def _combined_label(track: Track, *, max_artists: int = 2) -> str:
    return f"{track.name} - {' & '.join(track.artists[:max_artists])}"


class PlateGenerator:
    """Builds bingo plates from a pool of tracks.

    The generator owns its random source. Pass ``seed`` (or a ready
    ``random.Random``) for reproducible plates; share one instance per request,
    not across threads.
    """

    def __init__(
        self,
        *,
        seed: int | None = None,
        rng: random.Random | None = None,
        max_attempts: int = MAX_CONTENT_ATTEMPTS,
    ) -> None:
        if max_attempts <= 0:
            raise ValueError("max_attempts must be > 0")
        self.rng = rng if rng is not None else random.Random(seed)
        self.max_attempts = max_attempts

    def generate_plates(
        self,
        pool: Sequence[Track],
        count: int,
        mode: ContentMode,
        *,
        unique_across_plates: bool = False,
    ) -> list[Plate]:
        if count <= 0:
            raise ValueError("count must be > 0")
        required = count * CELLS_PER_PLATE
        if len(pool) < required:
            raise InsufficientPoolError(required=required, have=len(pool))

        logger.info("Generating %d plate(s) in %s mode from %d tracks", count, mode.value, len(pool))

        # Only consulted when cross-plate uniqueness is requested.
        used_combinations: set[str] = set()
        plates: list[Plate] = []
        for _ in range(count):
            if unique_across_plates:
                plate = self.fill_plate(pool, mode, used=used_combinations)
                used_combinations.update(plate.contents())
            else:
                plate = self.fill_plate(pool, mode)
            plates.append(plate)
        return plates

    def fill_plate(
        self,
        pool: Sequence[Track],
        mode: ContentMode,
        *,
        used: set[str] | None = None,
    ) -> Plate:
        plate = Plate.blank()
        used_content: set[str] = set(used) if used else set()

        for row in range(ROWS):
            for col in self.row_positions():
                content, kind = self.select_content(pool, used_content, mode)
                plate.grid[row][col] = BingoField(content=content, kind=kind)
                used_content.add(content)

        return plate

    def row_positions(self) -> list[int]:
        positions = list(range(COLUMNS))
        self.rng.shuffle(positions)
        return positions[:CELLS_PER_ROW]

    def select_content(
        self,
        pool: Sequence[Track],
        used: set[str],
        mode: ContentMode,
    ) -> tuple[str, FieldKind]:
        for _attempt in range(self.max_attempts):
            track = pool[self.rng.randrange(len(pool))]
            picked = self._extract(track, mode)
            if picked is None:
                continue
            content, kind = picked
            if content and content not in used:
                return content, kind

        return self._fallback(pool, mode)

    def _extract(self, track: Track, mode: ContentMode) -> tuple[str, FieldKind] | None:
        if mode is ContentMode.MIXED:
            mode = ContentMode.TRACKS if self.rng.random() < 0.5 else ContentMode.ARTISTS

        if mode is ContentMode.TRACKS:
            return track.name, FieldKind.TRACK
        if mode is ContentMode.ARTISTS:
            if not track.artists:
                return None
            return track.artists[self.rng.randrange(len(track.artists))], FieldKind.ARTIST
        if mode is ContentMode.COMBINED:
            if not track.name or not track.artists or not track.artists[0]:
                return None
            return _combined_label(track), FieldKind.COMBINED
        raise ValueError(f"Unsupported content mode: {mode!r}")

    def _fallback(self, pool: Sequence[Track], mode: ContentMode) -> tuple[str, FieldKind]:
        track = pool[self.rng.randrange(len(pool))]
        logger.debug(
            "No fresh %s content after %d attempts; reusing %r",
            mode.value,
            self.max_attempts,
            track.name,
        )
        if mode is ContentMode.ARTISTS and track.artists:
            return track.artists[0], FieldKind.ARTIST
        if mode is ContentMode.COMBINED and track.name and track.artists:
            return _combined_label(track, max_artists=1), FieldKind.COMBINED
        return track.name, FieldKind.TRACK


def generate_plates(
    pool: Sequence[Track],
    *,
    count: int,
    mode: ContentMode = ContentMode.MIXED,
    seed: int | None = None,
    unique_across_plates: bool = False,
) -> list[Plate]:
    generator = PlateGenerator(seed=seed)
    return generator.generate_plates(pool, count, mode, unique_across_plates=unique_across_plates)


def generate_game_code(rng: random.Random | None = None) -> str:
    if rng is None:
        rng = random.Random(time.time_ns())
    return "".join(str(rng.randrange(10)) for _ in range(GAME_CODE_LENGTH))
