from __future__ import annotations

from collections import Counter
from dataclasses import replace
from itertools import combinations
import logging
import re
from typing import Any, Callable, Dict, List, Sequence

from .models import (
    CENTENA,
    CORRIDO,
    FIJO,
    PARLE,
    TRIPLETA,
    BetInstruction,
    ParseError,
    ParseOutcome,
)
from .results import canonical_parle

LOGGER = logging.getLogger(__name__)

MSG_MISSING_PARLE_AMOUNT = "Falta monto parle"
MSG_PARLE_BASE = "Parle requiere >=2 números de 2 dígitos"
MSG_PARLE_AMOUNT = "Monto parle debe ser >0"
MSG_LOCKED_INSUFFICIENT = "Monto insuficiente para repartir entre parle"
MSG_MISSING_DASH = "Falta monto (guion)"
MSG_NO_NUMBERS = "Sin números"
MSG_MIXED_LENGTHS = "Longitudes mezcladas"
MSG_BOTH_ZERO = "Ambos montos 0 (fijo/corrido)"
MSG_UNSUPPORTED_LENGTH = "Longitud no soportada"

MSG_MISSING_CON = 'Falta palabra "con"'
MSG_NO_AMOUNTS = "Sin montos"
MSG_NO_VALID_NUMBERS = "Sin números válidos"
MSG_INVALID_TOKEN = "Token inválido: {token}"
MSG_LOCKED_CON_INSUFFICIENT = "Monto parle candado insuficiente"
MSG_MISSING_PLAY_TYPE = "Falta tipo de jugada (f/c/p/can)"
MSG_CENTENA_AMOUNT = "Centena requiere monto simple"
MSG_DIRECT_PARLE_AMOUNT = "Parle directo requiere monto"
MSG_TRIPLETA_AMOUNT = "Tripleta requiere monto simple"
MSG_INVALID_AMOUNT = "Monto inválido"

SINGLE_AMOUNT_TYPES = {
    3: (CENTENA, "Monto centena debe ser >0", None),
    4: (PARLE, MSG_PARLE_AMOUNT, "direct"),
    6: (TRIPLETA, "Monto tripleta debe ser >0", None),
}

LINE_SPLIT = re.compile(r"\n+")
NON_DIGITS = re.compile(r"[^0-9]")
DASH_NUMBER_SPLIT = re.compile(r"[\s.,]+")

CON_SPLIT = re.compile(r"\bcon\b", flags=re.IGNORECASE)
CON_SEGMENT_SPLIT = re.compile(r"[\s,;]+")
CON_NUMBER_SPLIT = re.compile(r"[.*\-]+")
CMD_PAIRS = re.compile(r"c([0-9])[x*]p", flags=re.IGNORECASE)
CMD_DECENA = re.compile(r"c([0-9])[x*]d([0-9])", flags=re.IGNORECASE)
CMD_TERMINAL = re.compile(r"c([0-9])[x*]t([0-9])", flags=re.IGNORECASE)
CMD_LIST = re.compile(r"c([0-9])[x*]([0-9]{2}(?:[.*\-][0-9]{2})*)", flags=re.IGNORECASE)
AMOUNT_TOKEN = re.compile(r"([0-9]+)(can|p|f|c)?")
AMOUNT_SLOTS = {"can": "locked", "p": "parle", "f": FIJO, "c": CORRIDO, None: "generic"}


class BetSyntaxError(ValueError):
    pass


def _digits(token: str) -> str:
    return NON_DIGITS.sub("", token)


def _to_int(token: str) -> int:
    digits = _digits(token)
    if not digits:
        return 0
    try:
        return int(digits)
    except ValueError as exc:
        raise BetSyntaxError(MSG_INVALID_AMOUNT) from exc


def _split_lines(text: Any) -> List[str]:
    if not isinstance(text, str) or not text.strip():
        return []
    lines = [line.strip() for line in LINE_SPLIT.split(text.strip())]
    return [line for line in lines if line]


def _pairs(numbers: Sequence[str]) -> List[str]:
    return [first + second for first, second in combinations(numbers, 2)]


def _instruction(
    play_type: str,
    numbers: Sequence[str],
    amount_each: int,
    line: int,
    total: int | None = None,
    **meta: Any,
) -> BetInstruction:
    return BetInstruction(
        play_type=play_type,
        numbers=tuple(numbers),
        amount_each=amount_each,
        total_per_lottery=amount_each * len(numbers) if total is None else total,
        line=line,
        meta=tuple(meta.items()),
    )


def parse_text(text: Any, is_locked: bool = False) -> ParseOutcome:
    """Parse dash-syntax bet text; rejected lines land in ``errors``."""
    return _parse_lines(text, lambda line, line_no: _parse_dash_line(line, line_no, is_locked), _plain_key)


def parse_con_text(text: Any) -> ParseOutcome:
    return _parse_lines(text, _parse_con_line, _canonical_key)


def _parse_lines(
    text: Any,
    parse_line: Callable[[str, int], List[BetInstruction]],
    duplicate_key: Callable[[str, str], str],
) -> ParseOutcome:
    instructions: List[BetInstruction] = []
    errors: List[ParseError] = []

    for line_no, line in enumerate(_split_lines(text), start=1):
        try:
            instructions.extend(parse_line(line, line_no))
        except BetSyntaxError as exc:
            LOGGER.debug("Rejected bet line %d (%r): %s", line_no, line, exc)
            errors.append(ParseError(line=line_no, message=str(exc)))

    instructions = _attach_duplicates(instructions, duplicate_key)
    return ParseOutcome(
        instructions=instructions,
        errors=errors,
        per_lottery_sum=sum(item.total_per_lottery for item in instructions),
    )


def _plain_key(play_type: str, number: str) -> str:
    return f"{play_type}|{number}"


def _canonical_key(play_type: str, number: str) -> str:
    if play_type == PARLE:
        number = canonical_parle(number)
    return f"{play_type}|{number}"


def _attach_duplicates(
    instructions: List[BetInstruction],
    key: Callable[[str, str], str],
) -> List[BetInstruction]:
    counts = Counter(key(item.play_type, number) for item in instructions for number in item.numbers)
    flagged: List[BetInstruction] = []
    for item in instructions:
        repeated = [number for number in item.numbers if counts[key(item.play_type, number)] > 1]
        flagged.append(replace(item, duplicates=tuple(dict.fromkeys(repeated))))
    return flagged


def _parse_dash_line(line: str, line_no: int, is_locked: bool) -> List[BetInstruction]:
    if "*" in line:
        return [_parse_pairs_line(line, line_no, is_locked)]

    parts = [part.strip() for part in line.split("-")]
    parts = [part for part in parts if part]
    if len(parts) < 2:
        raise BetSyntaxError(MSG_MISSING_DASH)

    numbers = [digits for digits in (_digits(token) for token in DASH_NUMBER_SPLIT.split(parts[0])) if digits]
    if not numbers:
        raise BetSyntaxError(MSG_NO_NUMBERS)
    if len({len(number) for number in numbers}) != 1:
        raise BetSyntaxError(MSG_MIXED_LENGTHS)

    first_amount = _to_int(parts[1])
    width = len(numbers[0])

    if width == 2:
        second_amount = _to_int(parts[2]) if len(parts) > 2 else 0
        if first_amount <= 0 and second_amount <= 0:
            raise BetSyntaxError(MSG_BOTH_ZERO)
        built: List[BetInstruction] = []
        if first_amount > 0:
            built.append(_instruction(FIJO, numbers, first_amount, line_no))
        if second_amount > 0:
            built.append(_instruction(CORRIDO, numbers, second_amount, line_no))
        return built

    if width not in SINGLE_AMOUNT_TYPES:
        raise BetSyntaxError(MSG_UNSUPPORTED_LENGTH)

    play_type, amount_message, mode = SINGLE_AMOUNT_TYPES[width]
    if first_amount <= 0:
        raise BetSyntaxError(amount_message)
    meta = {"mode": mode} if mode else {}
    return [_instruction(play_type, numbers, first_amount, line_no, **meta)]


def _parse_pairs_line(line: str, line_no: int, is_locked: bool) -> BetInstruction:
    segments = line.split("-")
    if len(segments) < 2 or not segments[1]:
        raise BetSyntaxError(MSG_MISSING_PARLE_AMOUNT)

    amount = _to_int(segments[1].strip())
    base = [digits.zfill(2) for digits in (_digits(token) for token in segments[0].split("*")) if digits]
    base = [number for number in base if len(number) == 2]
    if len(base) < 2:
        raise BetSyntaxError(MSG_PARLE_BASE)
    if amount <= 0:
        raise BetSyntaxError(MSG_PARLE_AMOUNT)

    pairs = _pairs(base)
    if is_locked:
        amount_each = amount // len(pairs)
        if amount_each == 0:
            raise BetSyntaxError(MSG_LOCKED_INSUFFICIENT)
        return _instruction(PARLE, pairs, amount_each, line_no, total=amount, mode="pairs")

    return _instruction(PARLE, pairs, amount, line_no, total=amount * len(pairs), mode="pairs")


def _expand_command(segment: str) -> List[str] | None:
    match = CMD_PAIRS.fullmatch(segment)
    if match:
        hundred = match.group(1)
        return [f"{hundred}{digit}{digit}" for digit in range(10)]

    match = CMD_DECENA.fullmatch(segment)
    if match:
        hundred, ten = match.groups()
        return [f"{hundred}{ten}{unit}" for unit in range(10)]

    match = CMD_TERMINAL.fullmatch(segment)
    if match:
        hundred, unit = match.groups()
        return [f"{hundred}{ten}{unit}" for ten in range(10)]

    match = CMD_LIST.fullmatch(segment)
    if match:
        hundred = match.group(1)
        return [hundred + tail for tail in CON_NUMBER_SPLIT.split(match.group(2)) if tail]

    return None


def _con_numbers(left: str) -> List[str]:
    numbers: List[str] = []
    for segment in CON_SEGMENT_SPLIT.split(left):
        if not segment:
            continue
        expanded = _expand_command(segment)
        if expanded is not None:
            numbers.extend(expanded)
            continue
        numbers.extend(digits for digits in (_digits(token) for token in CON_NUMBER_SPLIT.split(segment)) if digits)
    return numbers


def _con_amounts(right: str) -> Dict[str, int]:
    amounts = {slot: 0 for slot in AMOUNT_SLOTS.values()}
    for token in right.split():
        match = AMOUNT_TOKEN.fullmatch(token.lower())
        if not match:
            raise BetSyntaxError(MSG_INVALID_TOKEN.format(token=token))
        amounts[AMOUNT_SLOTS[match.group(2)]] = _to_int(match.group(1))
    return amounts


def _parse_con_line(line: str, line_no: int) -> List[BetInstruction]:
    parts = CON_SPLIT.split(line)
    if len(parts) < 2:
        raise BetSyntaxError(MSG_MISSING_CON)
    left = parts[0].strip()
    right = " con ".join(parts[1:]).strip()
    if not left:
        raise BetSyntaxError(MSG_NO_NUMBERS)
    if not right:
        raise BetSyntaxError(MSG_NO_AMOUNTS)

    numbers = _con_numbers(left)
    if not numbers:
        raise BetSyntaxError(MSG_NO_VALID_NUMBERS)
    if len({len(number) for number in numbers}) != 1:
        raise BetSyntaxError(MSG_MIXED_LENGTHS)

    amounts = _con_amounts(right)
    width = len(numbers[0])

    if width == 2:
        return _con_two_digit(numbers, amounts, line_no)
    if width == 3:
        if not amounts["generic"]:
            raise BetSyntaxError(MSG_CENTENA_AMOUNT)
        return [_instruction(CENTENA, numbers, amounts["generic"], line_no)]
    if width == 4:
        amount = amounts["generic"] or amounts["parle"]
        if not amount:
            raise BetSyntaxError(MSG_DIRECT_PARLE_AMOUNT)
        return [_instruction(PARLE, numbers, amount, line_no, mode="direct")]
    if width == 6:
        if not amounts["generic"]:
            raise BetSyntaxError(MSG_TRIPLETA_AMOUNT)
        return [_instruction(TRIPLETA, numbers, amounts["generic"], line_no)]
    raise BetSyntaxError(MSG_UNSUPPORTED_LENGTH)


def _con_two_digit(numbers: List[str], amounts: Dict[str, int], line_no: int) -> List[BetInstruction]:
    built: List[BetInstruction] = []
    if amounts[FIJO]:
        built.append(_instruction(FIJO, numbers, amounts[FIJO], line_no))
    if amounts[CORRIDO]:
        built.append(_instruction(CORRIDO, numbers, amounts[CORRIDO], line_no))

    unit, locked_total = amounts["parle"], amounts["locked"]
    if unit or locked_total:
        if len(numbers) < 2:
            raise BetSyntaxError(MSG_PARLE_BASE)
        pairs = _pairs(numbers)
        if unit:
            built.append(_instruction(PARLE, pairs, unit, line_no, mode="pairs"))
        if locked_total:
            each = locked_total // len(pairs)
            if each <= 0:
                raise BetSyntaxError(MSG_LOCKED_CON_INSUFFICIENT)
            built.append(
                _instruction(
                    PARLE,
                    pairs,
                    each,
                    line_no,
                    total=locked_total,
                    mode="pairs-locked",
                    original_total=locked_total,
                )
            )

    if not built:
        raise BetSyntaxError(MSG_MISSING_PLAY_TYPE)
    return built
