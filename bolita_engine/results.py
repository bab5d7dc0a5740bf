from __future__ import annotations

from itertools import permutations
import re
from typing import Any, FrozenSet

from .models import CENTENA, CORRIDO, FIJO, PARLE, TRIPLETA, DrawResult

RESULT_PATTERN = re.compile(r"[0-9]{3} [0-9]{4}")


def canonical_parle(number: str | None) -> str:
    """Collapse ``AB+CD`` and ``CD+AB`` onto the smaller of the two strings."""
    if not number or len(number) != 4:
        return number or ""
    alternate = number[2:] + number[:2]
    return alternate if alternate < number else number


def parse_result(raw: Any) -> DrawResult | None:
    if not isinstance(raw, str) or not RESULT_PATTERN.fullmatch(raw):
        return None

    pick3, pick4 = raw.split(" ")
    fijo = pick3[1:]
    corridos = (pick4[:2], pick4[2:])

    parle_winners = frozenset(
        canonical_parle(candidate) for candidate in (fijo + corridos[0], fijo + corridos[1], pick4)
    )

    return DrawResult(
        pick3=pick3,
        pick4=pick4,
        fijo=fijo,
        corridos=corridos,
        centena=pick3,
        parle_winners=parle_winners,
        tripleta_winners=_tripleta_winners(fijo, corridos[0], corridos[1]),
    )


def _tripleta_winners(first: str, second: str, third: str) -> FrozenSet[str]:
    # Equal groups collapse orderings: 6 distinct, 3 with one pair equal, 1 if all equal.
    groups = (first, second, third)
    return frozenset("".join(order) for order in permutations(groups, 3))


def winners_by_type(draw: DrawResult | None, play_type: str) -> FrozenSet[str]:
    if draw is None:
        return frozenset()
    if play_type == FIJO:
        return frozenset({draw.fijo})
    if play_type == CORRIDO:
        return frozenset(draw.corridos)
    if play_type == CENTENA:
        return frozenset({draw.centena})
    if play_type == PARLE:
        return draw.parle_winners
    if play_type == TRIPLETA:
        return draw.tripleta_winners
    return frozenset()
