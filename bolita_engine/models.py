from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Sequence, Tuple, Union

FIJO = "fijo"
CORRIDO = "corrido"
CENTENA = "centena"
PARLE = "parle"
TRIPLETA = "tripleta"
POSICION = "posicion"

PLAY_TYPES: Tuple[str, ...] = (FIJO, CORRIDO, CENTENA, PARLE, TRIPLETA, POSICION)

NUMBER_LENGTHS: Dict[str, int] = {
    FIJO: 2,
    CORRIDO: 2,
    CENTENA: 3,
    PARLE: 4,
    TRIPLETA: 6,
}


@dataclass(frozen=True)
class DrawResult:
    pick3: str
    pick4: str
    fijo: str
    corridos: Tuple[str, str]
    centena: str
    parle_winners: FrozenSet[str]
    tripleta_winners: FrozenSet[str]

    @property
    def raw(self) -> str:
        return f"{self.pick3} {self.pick4}"


@dataclass(frozen=True)
class PriceRate:
    limited: float
    regular: float


PriceTable = Dict[str, PriceRate]


@dataclass(frozen=True)
class Bet:
    play_type: str
    numbers: Union[str, Sequence[str]]
    amount: float


@dataclass(frozen=True)
class Evaluation:
    has_prize: bool
    pay: float


@dataclass(frozen=True)
class BetInstruction:
    play_type: str
    numbers: Tuple[str, ...]
    amount_each: int
    total_per_lottery: int
    line: int
    duplicates: Tuple[str, ...] = ()
    meta: Tuple[Tuple[str, Any], ...] = ()

    @property
    def mode(self) -> str | None:
        return dict(self.meta).get("mode")


@dataclass(frozen=True)
class ParseError:
    line: int
    message: str


@dataclass
class ParseOutcome:
    instructions: List[BetInstruction] = field(default_factory=list)
    errors: List[ParseError] = field(default_factory=list)
    per_lottery_sum: int = 0

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


@dataclass(frozen=True)
class PlayRecord:
    play_type: str
    numbers: str
    amount: float
    schedule_id: str
    day: str
    total: float | None = None
    lottery: str = ""
    schedule: str = ""
    agent: str = ""
    play_id: str = ""

    def as_bet(self) -> Bet:
        return Bet(play_type=self.play_type or POSICION, numbers=self.numbers, amount=self.amount)


@dataclass(frozen=True)
class PlaySettlement:
    record: PlayRecord
    status: str
    has_prize: bool
    pay: float
    collected: float
    result: str | None


@dataclass
class GroupTotals:
    key: str
    label: str = ""
    collected: float = 0.0
    paid: float = 0.0
    plays: int = 0

    @property
    def balance(self) -> float:
        return round(self.collected - self.paid, 2)


@dataclass(frozen=True)
class LimitViolation:
    number: str
    play_type: str
    schedule_id: str
    allowed: float
    used: float
    attempt: float


def number_length(play_type: str) -> int | None:
    return NUMBER_LENGTHS.get(play_type)


def list_play_types() -> List[str]:
    return [FIJO, CORRIDO, CENTENA, PARLE, TRIPLETA]
