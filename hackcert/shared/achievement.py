"""Achievement wording for certificates.

Every template except ``template2`` always prints the composed text; the
``customMessage`` override is a template decision and never reaches here.
"""

from __future__ import annotations

from typing import Any

_POSITIONS: dict[int, str] = {
    1: "First Place",
    2: "Second Place",
    3: "Third Place",
}

_HEADINGS: dict[int, str] = {
    1: "WINNER - FIRST PLACE",
    2: "WINNER - SECOND PLACE",
    3: "WINNER - THIRD PLACE",
}


def _position(rank: Any) -> str | None:
    # bool is an int subclass; True must not read as first place.
    if isinstance(rank, bool) or not isinstance(rank, int):
        return None
    return _POSITIONS.get(rank)


def compose_achievement_text(rank: Any, hackathon_title: str, date: str) -> str:
    position = _position(rank)
    if position:
        return (
            f"for securing {position} in {hackathon_title} held on {date}. "
            "This achievement reflects outstanding innovation and technical excellence."
        )
    return (
        f"for successfully participating in {hackathon_title} held on {date}. "
        "We appreciate the dedication and effort shown throughout the event."
    )


def rank_heading(rank: Any) -> str:
    position = _position(rank)
    if position:
        return _HEADINGS[rank]
    return "PARTICIPATION"
