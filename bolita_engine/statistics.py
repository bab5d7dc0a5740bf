from __future__ import annotations

import logging
import re
from typing import Callable, Container, Dict, Iterable, List, Mapping, Tuple, Union

from .models import DrawResult, GroupTotals, PlayRecord, PlaySettlement, PriceTable
from .payout import evaluate_bet, round_money
from .results import parse_result

LOGGER = logging.getLogger(__name__)

STATUS_WON = "bingo"
STATUS_LOST = "no cogió premio"
STATUS_NO_RESULT = "resultado no disponible"

ResultKey = Tuple[str, str]
ResultLookup = Mapping[ResultKey, Union[DrawResult, None]]
LimitedLookup = Mapping[str, Container[str]]
GroupKey = Union[str, Callable[[PlayRecord], str]]

GROUP_KEYS: Dict[str, Callable[[PlayRecord], str]] = {
    "day": lambda record: record.day,
    "schedule": lambda record: record.schedule_id,
    "lottery": lambda record: record.lottery,
    "agent": lambda record: record.agent,
}

# Display names for groups keyed by an id; other groupings label with the key.
GROUP_LABELS: Dict[str, Callable[[PlayRecord], str]] = {
    "schedule": lambda record: record.schedule or record.schedule_id,
}

NUMBER_SPLIT = re.compile(r"[ ,]+")


def count_numbers(raw: str | None) -> int:
    if not raw:
        return 0
    return len([token for token in NUMBER_SPLIT.split(str(raw)) if token.strip()])


def collected_amount(record: PlayRecord) -> float:
    if record.total is not None:
        return float(record.total)
    return float(record.amount or 0) * count_numbers(record.numbers)


def index_results(rows: Iterable[Tuple[str, str, str]]) -> Dict[ResultKey, DrawResult | None]:
    """Build the (schedule_id, day) lookup; later rows for the same key win."""
    lookup: Dict[ResultKey, DrawResult | None] = {}
    for schedule_id, day, raw in rows:
        draw = parse_result(raw)
        if draw is None:
            LOGGER.debug("Ignoring malformed result %r for %s on %s", raw, schedule_id, day)
        lookup[(str(schedule_id), str(day))] = draw
    return lookup


def settle_play(
    record: PlayRecord,
    draw: DrawResult | None,
    limited_numbers: Container[str] | None,
    price_table: PriceTable,
) -> PlaySettlement:
    collected = round_money(collected_amount(record))
    if draw is None:
        return PlaySettlement(
            record=record,
            status=STATUS_NO_RESULT,
            has_prize=False,
            pay=0.0,
            collected=collected,
            result=None,
        )

    evaluation = evaluate_bet(record.as_bet(), draw, limited_numbers or frozenset(), price_table)
    return PlaySettlement(
        record=record,
        status=STATUS_WON if evaluation.has_prize else STATUS_LOST,
        has_prize=evaluation.has_prize,
        pay=round_money(evaluation.pay),
        collected=collected,
        result=draw.raw,
    )


def play_details(
    records: Iterable[PlayRecord],
    results: ResultLookup,
    limited_by_schedule: LimitedLookup,
    price_table: PriceTable,
) -> List[PlaySettlement]:
    return [
        settle_play(
            record,
            results.get((record.schedule_id, record.day)),
            limited_by_schedule.get(record.schedule_id),
            price_table,
        )
        for record in records
    ]


def _resolve_key(key: GroupKey) -> Callable[[PlayRecord], str]:
    if callable(key):
        return key
    try:
        return GROUP_KEYS[key]
    except KeyError:
        raise ValueError(f"Unsupported grouping: {key}") from None


def group_settlements(settlements: Iterable[PlaySettlement], key: GroupKey = "day") -> List[GroupTotals]:
    key_fn = _resolve_key(key)
    label_fn = GROUP_LABELS.get(key) if isinstance(key, str) else None
    groups: Dict[str, GroupTotals] = {}
    for settlement in settlements:
        group_key = key_fn(settlement.record)
        group = groups.get(group_key)
        if group is None:
            label = label_fn(settlement.record) if label_fn else group_key
            group = groups[group_key] = GroupTotals(key=group_key, label=label)
        group.collected += settlement.collected
        group.paid += settlement.pay
        group.plays += 1

    for group in groups.values():
        group.collected = round_money(group.collected)
        group.paid = round_money(group.paid)
    return list(groups.values())


def aggregate(
    records: Iterable[PlayRecord],
    results: ResultLookup,
    limited_by_schedule: LimitedLookup,
    price_table: PriceTable,
    key: GroupKey = "day",
) -> List[GroupTotals]:
    _resolve_key(key)
    settlements = play_details(records, results, limited_by_schedule, price_table)
    return group_settlements(settlements, key)


def daily_totals(
    records: Iterable[PlayRecord],
    results: ResultLookup,
    limited_by_schedule: LimitedLookup,
    price_table: PriceTable,
) -> List[GroupTotals]:
    groups = aggregate(records, results, limited_by_schedule, price_table, key="day")
    return sorted(groups, key=lambda group: group.key)


def summarize(settlements: Iterable[PlaySettlement]) -> Dict[str, float]:
    collected = 0.0
    paid = 0.0
    for settlement in settlements:
        collected += settlement.collected
        paid += settlement.pay
    return {
        "collected": round_money(collected),
        "paid": round_money(paid),
        "balance": round_money(collected - paid),
    }
