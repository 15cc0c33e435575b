import random
import re

import pytest

from datatoken_paths.core.constants.words import ADJECTIVES, NOUNS
from datatoken_paths.core.utils.names import generate_dt_name


def test_single_word_list_is_deterministic_apart_from_index():
    generated = generate_dt_name({"adjectives": ["endemic"], "nouns": ["jellyfish"]})

    assert generated.name == "Endemic Jellyfish Token"
    assert re.fullmatch(r"ENDJEL-\d{1,2}", generated.symbol)


def test_seeded_rng_is_reproducible():
    a = generate_dt_name(rng=random.Random(7))
    b = generate_dt_name(rng=random.Random(7))

    assert a == b


def test_default_words_shape():
    for seed in range(20):
        generated = generate_dt_name(rng=random.Random(seed))
        adjective, noun, suffix = generated.name.split(" ")
        assert suffix == "Token"
        assert adjective.lower() in ADJECTIVES
        assert noun.lower() in NOUNS
        prefix, number = generated.symbol.split("-")
        assert prefix == (adjective[:3] + noun[:3]).upper()
        assert 0 <= int(number) < 100


def test_short_words_keep_whole_word_in_symbol():
    generated = generate_dt_name({"adjectives": ["ok"], "nouns": ["yak"]})

    assert generated.symbol.startswith("OKYAK-")


def test_empty_word_list_rejected():
    with pytest.raises(ValueError):
        generate_dt_name({"adjectives": [], "nouns": ["yak"]})
