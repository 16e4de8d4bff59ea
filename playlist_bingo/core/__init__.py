"""
Core modules (models, plate generator, track-list parser, PDF renderer, QR utilities).

Avoid importing heavy dependencies at package import time; import submodules directly:
- `playlist_bingo.core.models`
- `playlist_bingo.core.generator`
- `playlist_bingo.core.parser`
- `playlist_bingo.core.pdf`
"""

__all__ = []
