from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Container, List, Sequence, Union

from .models import PARLE, Bet, DrawResult, Evaluation, PriceRate, PriceTable
from .results import canonical_parle, winners_by_type

NO_PRIZE = Evaluation(has_prize=False, pay=0)
ZERO_RATE = PriceRate(limited=0, regular=0)


def round_money(value: Any) -> float:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return 0.0
    if not amount.is_finite():
        return 0.0
    return float(amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def split_bet_numbers(raw: Union[str, Sequence[str], None]) -> List[str]:
    if not raw:
        return []
    if isinstance(raw, str):
        tokens = raw.split(",")
    elif isinstance(raw, (list, tuple)):
        tokens = list(raw)
    else:
        tokens = [str(raw)]
    return [str(token).strip() for token in tokens if str(token).strip()]


def _to_number(value: Any) -> float:
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return 0.0
    return number if number == number else 0.0


def _multiplier(rate: PriceRate, number: str, limited_numbers: Container[str] | None) -> float:
    is_limited = limited_numbers is not None and number in limited_numbers
    return _to_number(rate.limited if is_limited else rate.regular)


def evaluate_bet(
    bet: Bet,
    draw: DrawResult | None,
    limited_numbers: Container[str] | None,
    price_table: PriceTable | None,
) -> Evaluation:
    """Pay every winning number of ``bet`` at its own limited or regular rate."""
    if bet is None or draw is None or price_table is None:
        return NO_PRIZE

    numbers = split_bet_numbers(bet.numbers)
    if not numbers:
        return NO_PRIZE

    winners = winners_by_type(draw, bet.play_type)
    rate = price_table.get(bet.play_type, ZERO_RATE)
    amount = _to_number(bet.amount)

    total = 0.0
    has_prize = False
    for number in numbers:
        candidate = canonical_parle(number) if bet.play_type == PARLE else number
        if candidate not in winners:
            continue
        has_prize = True
        total += amount * _multiplier(rate, number, limited_numbers)

    return Evaluation(has_prize=has_prize, pay=round_money(total))
