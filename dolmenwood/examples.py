"""Sample characters seeded into an empty roster."""

from __future__ import annotations

import copy
from uuid import uuid4

from dolmenwood.models import Entity


def _scores(st: int, in_: int, wi: int, dx: int, co: int, ch: int) -> dict[str, dict[str, int]]:
    def mod(score: int) -> int:
        if score <= 3:
            return -3
        if score <= 5:
            return -2
        if score <= 8:
            return -1
        if score <= 12:
            return 0
        if score <= 15:
            return 1
        if score <= 17:
            return 2
        return 3

    names = ("strength", "intelligence", "wisdom", "dexterity", "constitution", "charisma")
    return {n: {"score": s, "mod": mod(s)} for n, s in zip(names, (st, in_, wi, dx, co, ch))}


EXAMPLE_CHARACTERS: list[Entity] = [
    {
        "name": "Brion Blackthorn",
        "kindredClass": "Breggle Knight",
        "background": "Sorcerer's Assistant",
        "alignment": "Lawful",
        "affiliation": "House Harrowmoor",
        "moonSign": "Fall Robbers Moon",
        "abilityScores": _scores(15, 11, 11, 9, 16, 13),
        "hp": 9,
        "maxHp": 9,
        "ac": "14/15 +shield",
        "level": 1,
        "xp": 1665,
        "languages": ["Woldish", "Gaelic", "Ogrice"],
        "inventory": {
            "tinyItems": ["thigh bone flute"],
            "equippedItems": [
                {"item": "Chainmail", "weight": "14 AC", "description": ""},
                {"item": "Long sword", "weight": "1D8+1", "description": ""},
            ],
            "stowedItems": [{"item": "Water Skin", "weight": None, "description": ""}],
        },
        "coins": {"copper": None, "silver": 8, "gold": 294, "pellucidum": None},
        "otherNotes": "Age 21",
        "partyName": "",
    },
    {
        "name": "Gilly Dagwood",
        "kindredClass": "Half Human/Elf Friar",
        "background": "Jeweler",
        "alignment": "Lawful",
        "moonSign": "Waxing Witchs Moon",
        "abilityScores": _scores(8, 9, 12, 5, 8, 8),
        "hp": 4,
        "maxHp": 4,
        "ac": "10",
        "level": 1,
        "otherNotes": "Age 26",
        "partyName": "",
    },
    {
        "name": "Mudwort Mosfoot",
        "kindredClass": "Mossling Hunter",
        "background": "Squirrel Trainer",
        "alignment": "Lawful",
        "moonSign": "Waning Witchs Moon",
        "abilityScores": _scores(11, 11, 9, 9, 9, 9),
        "hp": 10,
        "maxHp": 10,
        "ac": "12/13",
        "level": 1,
        "partyName": "",
    },
]


def example_characters(owner: str | None) -> list[Entity]:
    """Fresh copies of the samples, owned by `owner`, each with a new id.

    Summaries in the shared party-member collection are keyed by character id,
    so two rosters must never share one.
    """
    characters = copy.deepcopy(EXAMPLE_CHARACTERS)
    for character in characters:
        character["id"] = str(uuid4())
        character["userId"] = owner
    return characters
