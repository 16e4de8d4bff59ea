from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


ROWS = 3
COLUMNS = 9
CELLS_PER_ROW = 5
CELLS_PER_PLATE = ROWS * CELLS_PER_ROW


class ContentMode(str, Enum):
    TRACKS = "tracks"
    ARTISTS = "artists"
    COMBINED = "combined"
    MIXED = "mixed"

    @classmethod
    def parse(cls, raw: str | None) -> "ContentMode":
        """Map user input to a mode; blank input means mixed."""
        value = (raw or "").strip().lower()
        if not value:
            return cls.MIXED
        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown content mode {raw!r} (expected one of: {choices})") from None


class FieldKind(str, Enum):
    TRACK = "track"
    ARTIST = "artist"
    COMBINED = "combined"


@dataclass(frozen=True)
class Track:
    name: str
    artists: tuple[str, ...] = ()
    track_id: str = ""


@dataclass
class BingoField:
    content: str = ""
    kind: FieldKind | None = None
    marked: bool = False

    @property
    def is_filled(self) -> bool:
        return self.kind is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "type": self.kind.value if self.kind is not None else "",
            "marked": self.marked,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BingoField":
        raw_kind = data.get("type") or ""
        return cls(
            content=data.get("content") or "",
            kind=FieldKind(raw_kind) if raw_kind else None,
            marked=bool(data.get("marked", False)),
        )


def _blank_grid() -> list[list[BingoField]]:
    return [[BingoField() for _ in range(COLUMNS)] for _ in range(ROWS)]


@dataclass
class Plate:
    grid: list[list[BingoField]] = field(default_factory=_blank_grid)

    @classmethod
    def blank(cls) -> "Plate":
        return cls()

    def filled_cells(self) -> Iterator[tuple[int, int, BingoField]]:
        for r, row in enumerate(self.grid):
            for c, cell in enumerate(row):
                if cell.is_filled:
                    yield r, c, cell

    def contents(self) -> list[str]:
        return [cell.content for _, _, cell in self.filled_cells()]

    def to_dict(self) -> dict[str, Any]:
        return {"grid": [[cell.to_dict() for cell in row] for row in self.grid]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Plate":
        rows = data.get("grid") or []
        if len(rows) != ROWS or any(len(row) != COLUMNS for row in rows):
            raise ValueError(f"Plate grid must be {ROWS}x{COLUMNS}")
        return cls(grid=[[BingoField.from_dict(cell) for cell in row] for row in rows])
