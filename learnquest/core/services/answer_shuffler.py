"""Randomized ordering of answer options."""

from __future__ import annotations

from dataclasses import dataclass
import random


@dataclass(frozen=True, slots=True)
class ShuffledAnswers:
    """Options in display order plus the position of the correct one."""

    options: list[str]
    correct_index: int


def shuffle_answers(
    correct_answer: str,
    incorrect_answers: list[str],
    rng: random.Random | None = None,
) -> ShuffledAnswers:
    """Uniformly permute the correct answer together with the incorrect ones.

    The correct option is tracked by its original slot rather than by value,
    so duplicated option strings cannot confuse the returned index.
    """
    if not incorrect_answers:
        raise ValueError("A question needs at least one incorrect answer.")

    # random.Random.shuffle is a Fisher-Yates shuffle.
    combined = list(enumerate([correct_answer, *incorrect_answers]))
    (rng or random).shuffle(combined)

    options = [text for _, text in combined]
    correct_index = next(position for position, (slot, _) in enumerate(combined) if slot == 0)
    return ShuffledAnswers(options=options, correct_index=correct_index)
