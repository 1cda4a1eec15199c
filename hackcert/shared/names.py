"""Name utilities for certificates."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9\s]+")
_WORD_SPLIT_RE = re.compile(r"[^0-9A-Za-z]+")


def _underscored(value: str) -> str:
    return _WHITESPACE_RE.sub("_", (value or "").strip())


def certificate_filename(brand: str, hackathon_title: str, honoree: str) -> str:
    """Return ``{Brand}_{HackathonTitle}_{HonoreeName}_Certificate.pdf``.

    Whitespace runs become underscores in every token; punctuation is only
    stripped from the honoree token.
    """
    honoree_token = _underscored(_NON_ALNUM_RE.sub("", honoree or ""))
    return (
        f"{_underscored(brand)}_{_underscored(hackathon_title)}_"
        f"{honoree_token}_Certificate.pdf"
    )


def initials(value: str) -> str:
    """Two-letter mark used when a logo is missing.

    ``"Acme Robotics"`` → ``"AR"``; a single word uses its first and last
    letters, so ``"Saarthix"`` → ``"SX"``.
    """
    words = [w for w in _WORD_SPLIT_RE.split(value or "") if w]
    if not words:
        return "?"
    if len(words) == 1:
        word = words[0]
        return (word[0] + word[-1]).upper() if len(word) > 1 else word.upper()
    return (words[0][0] + words[1][0]).upper()
