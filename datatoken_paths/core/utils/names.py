import random
from collections.abc import Sequence
from typing import TypedDict

from datatoken_paths.core.adapters.models import DatatokenName
from datatoken_paths.core.constants.words import ADJECTIVES, NOUNS


class WordList(TypedDict):
    adjectives: Sequence[str]
    nouns: Sequence[str]


def generate_dt_name(
    word_list: WordList | None = None, rng: random.Random | None = None
) -> DatatokenName:
    """Random datatoken name and symbol, e.g. ``Endemic Jellyfish Token`` / ``ENDJEL-45``."""
    words = word_list or {"adjectives": ADJECTIVES, "nouns": NOUNS}
    if not words["adjectives"] or not words["nouns"]:
        raise ValueError("word list needs at least one adjective and one noun")
    rng = rng or random.Random()

    adjective = rng.choice(list(words["adjectives"]))
    noun = rng.choice(list(words["nouns"]))
    index = rng.randrange(100)

    adjective = adjective[:1].upper() + adjective[1:]
    noun = noun[:1].upper() + noun[1:]
    return DatatokenName(
        name=f"{adjective} {noun} Token",
        symbol=f"{(adjective[:3] + noun[:3]).upper()}-{index}",
    )
