# novelfactory/generators/genres.py
from __future__ import annotations

from types import MappingProxyType
from typing import NamedTuple


class GenreRequirement(NamedTuple):
    requirements: str
    pacing: str


GENRE_REQUIREMENTS = MappingProxyType({
    "fantasy": GenreRequirement(
        "World-building consistency, magic system rules, mythical creatures, hero's journey structure",
        "Gradual world revelation, action-adventure balance, character growth arcs",
    ),
    "romance": GenreRequirement(
        "Emotional tension, relationship development milestones, chemistry building, satisfying resolution",
        "Meet-cute, conflict, emotional stakes escalation, climactic confession, resolution",
    ),
    "mystery": GenreRequirement(
        "Clue placement, red herrings, logical deduction, fair play rules, satisfying revelation",
        "Hook opening, clue discovery rhythm, misdirection timing, revelation climax",
    ),
    "thriller": GenreRequirement(
        "Constant tension, escalating stakes, time pressure, plot twists, high-impact scenes",
        "Fast-paced chapters, cliffhanger endings, increasing urgency, explosive climax",
    ),
    "science-fiction": GenreRequirement(
        "Scientific plausibility, technology integration, future society rules, consequence exploration",
        "Concept introduction, world exploration, conflict escalation, resolution with implications",
    ),
    "horror": GenreRequirement(
        "Atmosphere building, fear escalation, psychological tension, supernatural/realistic elements",
        "Slow dread building, jump scares, psychological terror, climactic confrontation",
    ),
})

GENRES = tuple(GENRE_REQUIREMENTS)
