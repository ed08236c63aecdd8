"""Word-level profanity masking for chirp bodies."""

from __future__ import annotations

PROFANE_WORDS = frozenset({"kerfuffle", "sharbert", "fornax"})
MASK = "****"


def clean_body(body: str, banned: frozenset[str] = PROFANE_WORDS) -> str:
    """Replace banned words (case-insensitive, whole words) with ``****``."""
    return " ".join(MASK if word.lower() in banned else word for word in body.split(" "))
