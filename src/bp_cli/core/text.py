"""Placeholder text for messages and notices created without content."""

from __future__ import annotations

import random

_WORDS: tuple[str, ...] = (
    "lorem", "ipsum", "dolor", "sit", "amet", "consectetur", "adipiscing",
    "elit", "sed", "do", "eiusmod", "tempor", "incididunt", "ut", "labore",
    "et", "dolore", "magna", "aliqua", "enim", "ad", "minim", "veniam",
    "quis", "nostrud", "exercitation", "ullamco", "laboris", "nisi",
    "aliquip", "ex", "ea", "commodo", "consequat", "duis", "aute", "irure",
    "in", "reprehenderit", "voluptate", "velit", "esse", "cillum", "fugiat",
    "nulla", "pariatur", "excepteur", "sint", "occaecat", "cupidatat",
    "non", "proident", "sunt", "culpa", "qui", "officia", "deserunt",
    "mollit", "anim", "id", "est", "laborum",
)


def _sentence(rng: random.Random) -> str:
    words = rng.choices(_WORDS, k=rng.randint(6, 14))
    return " ".join(words).capitalize() + "."


def generate_random_text(
    sentences: int = 3,
    *,
    rng: random.Random | None = None,
) -> str:
    """Return *sentences* sentences of lorem-ipsum text.

    Pass a seeded *rng* for reproducible output.
    """
    source = rng if rng is not None else random.Random()
    return " ".join(_sentence(source) for _ in range(max(sentences, 1)))
