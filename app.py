from __future__ import annotations

from dataclasses import asdict
import logging
import os
from typing import Any, Dict, FrozenSet, List, Tuple

from dotenv import load_dotenv
from flask import Flask, request

from bolita_engine import (
    Bet,
    BetInstruction,
    DrawResult,
    GroupTotals,
    PlayRecord,
    PriceTable,
    PriceTableError,
    build_price_table,
    check_instruction_limits,
    evaluate_bet,
    group_settlements,
    index_results,
    limit_key,
    list_play_types,
    parse_con_text,
    parse_result,
    parse_text,
    play_details,
    price_table_from_env,
    summarize,
    usage_from_plays,
)
from bolita_engine.models import number_length
from bolita_engine.statistics import GROUP_KEYS, STATUS_LOST, STATUS_NO_RESULT, STATUS_WON

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
load_dotenv(os.path.join(BASE_DIR, ".env"), override=False)

LOGGER = logging.getLogger(__name__)

app = Flask(__name__)


class PayloadError(ValueError):
    pass


def _json_body() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise PayloadError("Request body must be a JSON object.")
    return payload


def _bad_request(exc: Exception) -> Tuple[Dict[str, str], int]:
    return {"error": str(exc)}, 400


def _price_table(payload: Dict[str, Any]) -> PriceTable:
    raw_prices = payload.get("prices")
    if raw_prices is None:
        return price_table_from_env()
    return build_price_table(raw_prices)


def _limited_sets(payload: Dict[str, Any]) -> Dict[str, FrozenSet[str]]:
    raw = payload.get("limited") or {}
    if not isinstance(raw, dict):
        raise PayloadError("'limited' must map schedule ids to number lists.")
    return {str(schedule_id): frozenset(str(n) for n in numbers or []) for schedule_id, numbers in raw.items()}


def _play_record(row: Any) -> PlayRecord:
    if not isinstance(row, dict):
        raise PayloadError("Each play must be a JSON object.")
    try:
        amount = float(row.get("amount") or 0)
        total = row.get("total")
        total = float(total) if total is not None else None
    except (TypeError, ValueError) as exc:
        raise PayloadError(f"Invalid amount in play {row.get('id', '')}".strip()) from exc
    return PlayRecord(
        play_type=str(row.get("play_type") or ""),
        numbers=str(row.get("numbers") or ""),
        amount=amount,
        schedule_id=str(row.get("schedule_id", "")),
        day=str(row.get("day", "")),
        total=total,
        lottery=str(row.get("lottery") or ""),
        schedule=str(row.get("schedule") or ""),
        agent=str(row.get("agent") or ""),
        play_id=str(row.get("id") or ""),
    )


def _play_records(payload: Dict[str, Any]) -> List[PlayRecord]:
    rows = payload.get("plays") or []
    if not isinstance(rows, list):
        raise PayloadError("'plays' must be a list.")
    return [_play_record(row) for row in rows]


def _result_rows(payload: Dict[str, Any]) -> List[Tuple[str, str, str]]:
    rows = payload.get("results") or []
    if not isinstance(rows, list):
        raise PayloadError("'results' must be a list.")
    return [
        (str(row.get("schedule_id", "")), str(row.get("day", "")), row.get("raw"))
        for row in rows
        if isinstance(row, dict)
    ]


def _parse_bet_text(payload: Dict[str, Any]) -> Any:
    syntax = str(payload.get("syntax") or "dash")
    text = payload.get("text") or ""
    if syntax == "con":
        return parse_con_text(text)
    if syntax != "dash":
        raise PayloadError(f"Unsupported syntax: {syntax}")
    return parse_text(text, is_locked=bool(payload.get("locked")))


def _draw_payload(draw: DrawResult) -> Dict[str, Any]:
    return {
        "raw": draw.raw,
        "pick3": draw.pick3,
        "pick4": draw.pick4,
        "fijo": draw.fijo,
        "corridos": list(draw.corridos),
        "centena": draw.centena,
        "parle_winners": sorted(draw.parle_winners),
        "tripleta_winners": sorted(draw.tripleta_winners),
    }


def _group_payload(group: GroupTotals) -> Dict[str, Any]:
    return {
        "key": group.key,
        "label": group.label,
        "collected": group.collected,
        "paid": group.paid,
        "balance": group.balance,
        "plays": group.plays,
    }


def _instructions_payload(instructions: List[BetInstruction]) -> List[Dict[str, Any]]:
    return [{**asdict(item), "meta": dict(item.meta)} for item in instructions]


@app.get("/health")
def health() -> Tuple[Dict[str, str], int]:
    return {"status": "ok"}, 200


@app.get("/api/play-types")
def play_types() -> Tuple[Dict[str, Any], int]:
    return {
        "play_types": [
            {"play_type": play_type, "digits": number_length(play_type)} for play_type in list_play_types()
        ],
        "statuses": [STATUS_WON, STATUS_LOST, STATUS_NO_RESULT],
    }, 200


@app.post("/api/results/parse")
def parse_result_view() -> Tuple[Dict[str, Any], int]:
    try:
        payload = _json_body()
    except PayloadError as exc:
        return _bad_request(exc)
    draw = parse_result(payload.get("raw"))
    return {"result": _draw_payload(draw) if draw else None}, 200


@app.post("/api/bets/parse")
def parse_bets_view() -> Tuple[Dict[str, Any], int]:
    try:
        outcome = _parse_bet_text(_json_body())
    except PayloadError as exc:
        return _bad_request(exc)
    return {
        "instructions": _instructions_payload(outcome.instructions),
        "errors": [asdict(error) for error in outcome.errors],
        "per_lottery_sum": outcome.per_lottery_sum,
    }, 200


@app.post("/api/bets/evaluate")
def evaluate_bet_view() -> Tuple[Dict[str, Any], int]:
    try:
        payload = _json_body()
        prices = _price_table(payload)
        raw_bet = payload.get("bet") or {}
        if not isinstance(raw_bet, dict):
            raise PayloadError("'bet' must be a JSON object.")
        bet = Bet(
            play_type=str(raw_bet.get("play_type") or ""),
            numbers=raw_bet.get("numbers") or "",
            amount=raw_bet.get("amount") or 0,
        )
        raw_limited = payload.get("limited") or []
        if not isinstance(raw_limited, list):
            raise PayloadError("'limited' must be a list of numbers.")
    except (PayloadError, PriceTableError) as exc:
        return _bad_request(exc)

    draw = parse_result(payload.get("result"))
    evaluation = evaluate_bet(bet, draw, frozenset(str(n) for n in raw_limited), prices)
    status = STATUS_NO_RESULT if draw is None else (STATUS_WON if evaluation.has_prize else STATUS_LOST)
    return {"has_prize": evaluation.has_prize, "pay": evaluation.pay, "status": status}, 200


@app.post("/api/stats/<grouping>")
def statistics_view(grouping: str) -> Tuple[Dict[str, Any], int]:
    if grouping not in GROUP_KEYS:
        return {"error": f"Unsupported grouping: {grouping}"}, 404
    try:
        payload = _json_body()
        prices = _price_table(payload)
        records = _play_records(payload)
        results = index_results(_result_rows(payload))
        limited = _limited_sets(payload)
    except (PayloadError, PriceTableError) as exc:
        return _bad_request(exc)

    settlements = play_details(records, results, limited, prices)
    groups = group_settlements(settlements, grouping)
    if grouping == "day":
        groups.sort(key=lambda group: group.key)
    LOGGER.debug("Aggregated %d plays into %d %s groups", len(records), len(groups), grouping)

    return {
        "grouping": grouping,
        "groups": [_group_payload(group) for group in groups],
        "summary": summarize(settlements),
    }, 200


@app.post("/api/limits/check")
def check_limits_view() -> Tuple[Dict[str, Any], int]:
    try:
        payload = _json_body()
        outcome = _parse_bet_text(payload)
        schedules = [str(item) for item in payload.get("schedules") or []]
        per_number = {
            limit_key(str(row.get("schedule_id", "")), str(row.get("play_type", "")), str(row.get("number", ""))): float(
                row.get("limit") or 0
            )
            for row in payload.get("limits") or []
            if isinstance(row, dict)
        }
        agent_limits = {str(key): float(value) for key, value in (payload.get("agent_limits") or {}).items()}
        usage = usage_from_plays(_play_records(payload))
    except (PayloadError, TypeError, ValueError, AttributeError) as exc:
        return _bad_request(exc)

    violations = check_instruction_limits(outcome.instructions, schedules, per_number, agent_limits, usage)
    return {
        "violations": [asdict(item) for item in violations],
        "errors": [asdict(error) for error in outcome.errors],
    }, 200


if __name__ == "__main__":
    host = os.environ.get("HOST", "127.0.0.1")
    try:
        port = int(os.environ.get("PORT", "5000"))
    except ValueError:
        port = 5000
    debug = os.environ.get("FLASK_DEBUG", "").lower() in {"1", "true", "yes", "on"}
    app.run(host=host, port=port, debug=debug)
