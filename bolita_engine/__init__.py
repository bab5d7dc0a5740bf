from .limits import check_instruction_limits, limit_key, usage_from_plays
from .models import (
    CENTENA,
    CORRIDO,
    FIJO,
    PARLE,
    PLAY_TYPES,
    POSICION,
    TRIPLETA,
    Bet,
    BetInstruction,
    DrawResult,
    Evaluation,
    GroupTotals,
    LimitViolation,
    ParseError,
    ParseOutcome,
    PlayRecord,
    PlaySettlement,
    PriceRate,
    PriceTable,
    list_play_types,
)
from .payout import evaluate_bet, round_money
from .pricing import (
    REFERENCE_PRICES,
    PriceTableError,
    build_price_table,
    load_price_table,
    price_table_from_env,
    reference_price_table,
)
from .results import canonical_parle, parse_result, winners_by_type
from .statistics import (
    STATUS_LOST,
    STATUS_NO_RESULT,
    STATUS_WON,
    aggregate,
    collected_amount,
    daily_totals,
    group_settlements,
    index_results,
    play_details,
    settle_play,
    summarize,
)
from .text_parser import BetSyntaxError, parse_con_text, parse_text

__all__ = [
    "CENTENA",
    "CORRIDO",
    "FIJO",
    "PARLE",
    "PLAY_TYPES",
    "POSICION",
    "TRIPLETA",
    "Bet",
    "BetInstruction",
    "BetSyntaxError",
    "DrawResult",
    "Evaluation",
    "GroupTotals",
    "LimitViolation",
    "ParseError",
    "ParseOutcome",
    "PlayRecord",
    "PlaySettlement",
    "PriceRate",
    "PriceTable",
    "PriceTableError",
    "REFERENCE_PRICES",
    "STATUS_LOST",
    "STATUS_NO_RESULT",
    "STATUS_WON",
    "aggregate",
    "build_price_table",
    "canonical_parle",
    "check_instruction_limits",
    "collected_amount",
    "daily_totals",
    "evaluate_bet",
    "group_settlements",
    "index_results",
    "limit_key",
    "list_play_types",
    "load_price_table",
    "parse_con_text",
    "parse_result",
    "parse_text",
    "play_details",
    "price_table_from_env",
    "reference_price_table",
    "round_money",
    "settle_play",
    "summarize",
    "usage_from_plays",
    "winners_by_type",
]
