"""Named random streams.

Each subsystem asks for its own stream by name (``rng.get("game.agent")``)
so reseeding for a reproducible run touches every consumer at once, and
one subsystem drawing more numbers does not shift another's sequence.
"""

from __future__ import annotations

import random
import zlib

_base_seed: int | None = None
_streams: dict[str, random.Random] = {}


def _stream_seed(name: str) -> int | None:
    if _base_seed is None:
        return None
    return _base_seed ^ zlib.crc32(name.encode("utf-8"))


def get(name: str) -> random.Random:
    """Return the stream registered under ``name``, creating it if needed."""
    stream = _streams.get(name)
    if stream is None:
        stream = random.Random(_stream_seed(name))
        _streams[name] = stream
    return stream


def reset(seed: int | None = None) -> None:
    """Reseed every stream. ``None`` reseeds from system entropy."""
    global _base_seed
    _base_seed = seed
    for name, stream in _streams.items():
        stream.seed(_stream_seed(name))
