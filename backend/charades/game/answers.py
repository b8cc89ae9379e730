from __future__ import annotations

import re


_NON_ANSWER_CHARS = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_answer(text: str) -> str:
    t = (text or "").lower()
    t = _NON_ANSWER_CHARS.sub("", t)
    t = _WHITESPACE.sub(" ", t)
    return t.strip()


def answers_match(guess: str, answer: str) -> bool:
    a = normalize_answer(answer)
    if not a:
        return False
    return normalize_answer(guess) == a
