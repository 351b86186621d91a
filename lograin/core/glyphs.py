from __future__ import annotations

import random


_KATAKANA = (
    "アァカサタナハマヤャラワガザダバパイィキシチニヒミリヰギジヂビピ"
    "ウゥクスツヌフムユュルグズブヅプエェケセテネヘメレヱゲゼデベペ"
    "オォコソトノホモヨョロヲゴゾドボポヴッン"
)
_LATIN = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_DIGITS = "0123456789"

ALPHABET = _KATAKANA + _LATIN + _DIGITS


def random_glyph(rng: random.Random) -> str:
    return ALPHABET[rng.randrange(len(ALPHABET))]


def random_glyphs(rng: random.Random, length: int) -> str:
    return "".join(random_glyph(rng) for _ in range(length))
