import pytest

from bolita_engine.models import ParseOutcome
from bolita_engine.text_parser import parse_con_text, parse_text


def _by_type(outcome, play_type):
    return [item for item in outcome.instructions if item.play_type == play_type]


def test_empty_text_returns_empty_outcome():
    for text in ["", "   \n  ", None]:
        outcome = parse_text(text)
        assert outcome.instructions == []
        assert outcome.errors == []
        assert outcome.per_lottery_sum == 0


def test_fijo_and_corrido_split():
    outcome = parse_text("12 25 -5-3")
    fijo = _by_type(outcome, "fijo")[0]
    corrido = _by_type(outcome, "corrido")[0]
    assert fijo.numbers == ("12", "25")
    assert fijo.amount_each == 5
    assert fijo.total_per_lottery == 10
    assert corrido.numbers == ("12", "25")
    assert corrido.amount_each == 3
    assert corrido.total_per_lottery == 6
    assert outcome.per_lottery_sum == 16
    assert outcome.errors == []


def test_corrido_only_when_fijo_is_zero():
    outcome = parse_text("12,25.30-0-4")
    assert [item.play_type for item in outcome.instructions] == ["corrido"]
    assert outcome.instructions[0].numbers == ("12", "25", "30")


def test_both_amounts_zero_is_an_error():
    outcome = parse_text("12 25 -0-0")
    assert outcome.instructions == []
    assert len(outcome.errors) == 1
    assert "Ambos montos 0" in outcome.errors[0].message

    single = parse_text("12 25 -0")
    assert "Ambos montos 0" in single.errors[0].message


def test_centena_direct_parle_and_tripleta():
    outcome = parse_text("123 555 -20\n1225 3099 -15\n123456 654321 -50")
    centena = _by_type(outcome, "centena")[0]
    parle = _by_type(outcome, "parle")[0]
    tripleta = _by_type(outcome, "tripleta")[0]
    assert centena.numbers == ("123", "555")
    assert centena.amount_each == 20
    assert parle.numbers == ("1225", "3099")
    assert dict(parle.meta) == {"mode": "direct"}
    assert tripleta.amount_each == 50
    assert len(tripleta.numbers) == 2
    assert [item.line for item in outcome.instructions] == [1, 2, 3]
    assert outcome.per_lottery_sum == 40 + 30 + 100


def test_single_amount_types_require_positive_amount():
    outcome = parse_text("123-0\n1234-0\n123456-0")
    assert outcome.instructions == []
    assert [error.message for error in outcome.errors] == [
        "Monto centena debe ser >0",
        "Monto parle debe ser >0",
        "Monto tripleta debe ser >0",
    ]


def test_mixed_lengths_are_rejected():
    outcome = parse_text("12 123 -5")
    assert outcome.instructions == []
    assert len(outcome.errors) == 1
    assert "Longitudes mezcladas" in outcome.errors[0].message


def test_unsupported_length_and_missing_amount():
    outcome = parse_text("12345-5\n12 25\nabc-5")
    assert [(error.line, error.message) for error in outcome.errors] == [
        (1, "Longitud no soportada"),
        (2, "Falta monto (guion)"),
        (3, "Sin números"),
    ]


def test_unlocked_pairs_apply_amount_to_every_pair():
    outcome = parse_text("12*25*30 -90", is_locked=False)
    parle = outcome.instructions[0]
    assert parle.play_type == "parle"
    assert parle.numbers == ("1225", "1230", "2530")
    assert parle.amount_each == 90
    assert parle.total_per_lottery == 270
    assert dict(parle.meta) == {"mode": "pairs"}


def test_locked_pairs_split_amount():
    outcome = parse_text("12*25*30 -90", is_locked=True)
    parle = outcome.instructions[0]
    assert parle.amount_each == 30
    assert parle.total_per_lottery == 90


def test_locked_pairs_floor_the_share():
    outcome = parse_text("12*25*30-100", is_locked=True)
    assert outcome.instructions[0].amount_each == 33
    assert outcome.instructions[0].total_per_lottery == 100


def test_locked_pairs_amount_too_small():
    outcome = parse_text("12*25*30*41-5", is_locked=True)
    assert outcome.instructions == []
    assert outcome.errors[0].message == "Monto insuficiente para repartir entre parle"


def test_pairs_line_errors():
    outcome = parse_text("12*25\n12*-10\n12*25-0\n7*8-10")
    assert [error.message for error in outcome.errors] == [
        "Falta monto parle",
        "Parle requiere >=2 números de 2 dígitos",
        "Monto parle debe ser >0",
    ]
    assert outcome.instructions[0].numbers == ("0708",)


def test_pairs_keep_repeated_base_numbers():
    outcome = parse_text("12*12*30-1")
    assert outcome.instructions[0].numbers == ("1212", "1230", "1230")


def test_errors_do_not_stop_later_lines():
    outcome = parse_text("12 123 -5\n\n\n45-10")
    assert outcome.errors[0].line == 1
    assert outcome.instructions[0].numbers == ("45",)
    assert outcome.instructions[0].line == 2


def test_duplicates_are_flagged_per_play_type():
    outcome = parse_text("12 25-5\n12 40-3\n12-0-2")
    first, second, corrido = outcome.instructions
    assert first.duplicates == ("12",)
    assert second.duplicates == ("12",)
    assert corrido.play_type == "corrido"
    assert corrido.duplicates == ()


def test_duplicates_inside_one_line():
    outcome = parse_text("12 12 30-5")
    assert outcome.instructions[0].duplicates == ("12",)


def test_parsing_is_deterministic():
    text = "12 25 -5-3\n12*25*30-90\n12 123-5"
    assert parse_text(text, is_locked=True) == parse_text(text, is_locked=True)


def test_oversized_amounts_are_line_errors():
    huge = "9" * 5000
    outcome = parse_text(f"12-{huge}\n12*25-{huge}\n45-10")
    assert [(error.line, error.message) for error in outcome.errors] == [
        (1, "Monto inválido"),
        (2, "Monto inválido"),
    ]
    assert [item.numbers for item in outcome.instructions] == [("45",)]


def test_instructions_are_hashable():
    outcome = parse_text("12*25*30-90\n1225-15")
    assert len(set(outcome.instructions)) == 2
    assert [item.mode for item in outcome.instructions] == ["pairs", "direct"]


@pytest.mark.parametrize(
    "text",
    ["-", "*", "con", "\x00\x07", "9" * 5000, "--", "**-", "12*", "\r\n\t", "con con con", "c4xp con", "12 con 5x5"],
)
def test_malformed_text_never_raises(text):
    for outcome in (parse_text(text), parse_text(text, is_locked=True), parse_con_text(text)):
        assert isinstance(outcome, ParseOutcome)
        assert outcome.instructions == [] or outcome.errors == []
