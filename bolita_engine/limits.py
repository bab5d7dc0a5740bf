from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from .models import PARLE, BetInstruction, LimitViolation, PlayRecord
from .payout import split_bet_numbers
from .results import canonical_parle

UsageKey = Tuple[str, str, str]


def limit_key(schedule_id: str, play_type: str, number: str) -> UsageKey:
    if play_type == PARLE:
        number = canonical_parle(number)
    return (str(schedule_id), play_type, number)


def usage_from_plays(plays: Iterable[PlayRecord]) -> Dict[UsageKey, float]:
    """Sum the per-number stake already taken today for each schedule."""
    usage: Dict[UsageKey, float] = {}
    for play in plays:
        for number in split_bet_numbers(play.numbers):
            key = limit_key(play.schedule_id, play.play_type, number)
            usage[key] = usage.get(key, 0.0) + float(play.amount or 0)
    return usage


def _effective_limit(per_number: float | None, per_agent: float | None) -> float | None:
    if per_number is not None and per_agent is not None:
        return min(per_number, per_agent)
    return per_number if per_number is not None else per_agent


def check_instruction_limits(
    instructions: Iterable[BetInstruction],
    schedule_ids: Sequence[str],
    per_number_limits: Mapping[UsageKey, float],
    agent_limits: Mapping[str, float] | None = None,
    usage: Mapping[UsageKey, float] | None = None,
) -> List[LimitViolation]:
    agent_limits = agent_limits or {}
    usage = usage or {}
    violations: List[LimitViolation] = []

    for instruction in instructions:
        counts = Counter(instruction.numbers)
        for number, repeats in counts.items():
            attempt = instruction.amount_each * repeats
            for schedule_id in schedule_ids:
                key = limit_key(schedule_id, instruction.play_type, number)
                allowed = _effective_limit(per_number_limits.get(key), agent_limits.get(instruction.play_type))
                # A zero or missing limit leaves the number uncapped.
                if not allowed:
                    continue
                used = usage.get(key, 0.0)
                if used + attempt > allowed:
                    violations.append(
                        LimitViolation(
                            number=number,
                            play_type=instruction.play_type,
                            schedule_id=str(schedule_id),
                            allowed=allowed,
                            used=used,
                            attempt=attempt,
                        )
                    )
    return violations
