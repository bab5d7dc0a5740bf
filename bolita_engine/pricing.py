from __future__ import annotations

import json
import logging
import math
import os
from typing import Any, Dict, Mapping

from .models import CENTENA, CORRIDO, FIJO, PARLE, TRIPLETA, PriceRate, PriceTable, list_play_types

LOGGER = logging.getLogger(__name__)

PRICE_TABLE_ENV = "BOLITA_PRICE_TABLE"

# Reference fallback used when an agent has no price profile assigned.
REFERENCE_PRICES: Dict[str, Dict[str, float]] = {
    FIJO: {"limited": 50, "regular": 80},
    CORRIDO: {"limited": 50, "regular": 80},
    CENTENA: {"limited": 500, "regular": 800},
    PARLE: {"limited": 900, "regular": 1200},
    TRIPLETA: {"limited": 10000, "regular": 15000},
}


class PriceTableError(ValueError):
    pass


def _multiplier(play_type: str, rates: Mapping[str, Any], field_name: str) -> float:
    if field_name not in rates:
        raise PriceTableError(f"Missing '{field_name}' multiplier for {play_type}")
    value = rates[field_name]
    if isinstance(value, bool):
        raise PriceTableError(f"Invalid '{field_name}' multiplier for {play_type}: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise PriceTableError(f"Invalid '{field_name}' multiplier for {play_type}: {value!r}") from exc
    if not math.isfinite(number) or number < 0:
        raise PriceTableError(f"Invalid '{field_name}' multiplier for {play_type}: {value!r}")
    return number


def build_price_table(raw: Mapping[str, Any]) -> PriceTable:
    if not isinstance(raw, Mapping):
        raise PriceTableError("Price table must be an object keyed by play type")

    known = set(list_play_types())
    table: PriceTable = {}
    for play_type, rates in raw.items():
        if play_type not in known:
            raise PriceTableError(f"Unsupported play type in price table: {play_type}")
        if isinstance(rates, PriceRate):
            rates = {"limited": rates.limited, "regular": rates.regular}
        if not isinstance(rates, Mapping):
            raise PriceTableError(f"Rates for {play_type} must be an object")
        table[play_type] = PriceRate(
            limited=_multiplier(play_type, rates, "limited"),
            regular=_multiplier(play_type, rates, "regular"),
        )
    return table


def reference_price_table() -> PriceTable:
    return build_price_table(REFERENCE_PRICES)


def load_price_table(path: str) -> PriceTable:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, ValueError) as exc:
        raise PriceTableError(f"Could not read price table from {path}") from exc
    return build_price_table(payload)


def price_table_from_env() -> PriceTable:
    path = os.environ.get(PRICE_TABLE_ENV, "").strip()
    if not path:
        return reference_price_table()

    try:
        return load_price_table(path)
    except PriceTableError as exc:
        LOGGER.warning("Falling back to reference prices: %s", exc)
        return reference_price_table()
