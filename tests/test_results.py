from itertools import product

from bolita_engine.models import CENTENA, CORRIDO, FIJO, PARLE, POSICION, TRIPLETA
from bolita_engine.results import canonical_parle, parse_result, winners_by_type


def test_parse_result_splits_draw_groups():
    draw = parse_result("234 5984")
    assert draw is not None
    assert draw.pick3 == "234"
    assert draw.pick4 == "5984"
    assert draw.fijo == "34"
    assert draw.corridos == ("59", "84")
    assert draw.centena == "234"
    assert draw.raw == "234 5984"


def test_parse_result_parle_winners_are_canonical():
    draw = parse_result("234 5984")
    assert draw.parle_winners == {
        canonical_parle("3459"),
        canonical_parle("3484"),
        canonical_parle("5984"),
    }
    assert "3459" in draw.parle_winners
    assert "5934" not in draw.parle_winners
    assert "5984" in draw.parle_winners
    assert "8459" not in draw.parle_winners


def test_parse_result_parle_winners_collapse():
    # fijo 12, corridos 12/12: every candidate is 1212.
    draw = parse_result("012 1212")
    assert draw.parle_winners == {"1212"}


def test_parse_result_rejects_malformed_input():
    for raw in ["", "234", "2345984", "234  5984", "23 59845", "abc defg", " 234 5984", "234 5984\n", None, 2345984]:
        assert parse_result(raw) is None


def test_canonical_parle_symmetry_and_idempotence():
    for first, second in product(["00", "07", "34", "59", "99"], repeat=2):
        number = first + second
        swapped = second + first
        assert canonical_parle(number) == canonical_parle(swapped)
        assert canonical_parle(canonical_parle(number)) == canonical_parle(number)


def test_canonical_parle_passes_through_other_lengths():
    assert canonical_parle("123") == "123"
    assert canonical_parle("") == ""
    assert canonical_parle(None) == ""


def test_tripleta_winners_distinct_groups():
    draw = parse_result("234 5984")
    assert len(draw.tripleta_winners) == 6
    assert "345984" in draw.tripleta_winners
    assert "845934" in draw.tripleta_winners


def test_tripleta_winners_with_two_equal_groups():
    draw = parse_result("134 3459")
    assert len(draw.tripleta_winners) == 3
    assert draw.tripleta_winners == {"343459", "345934", "593434"}


def test_tripleta_winners_with_all_groups_equal():
    draw = parse_result("777 7777")
    assert draw.tripleta_winners == {"777777"}


def test_winners_by_type():
    draw = parse_result("234 5984")
    assert winners_by_type(draw, FIJO) == {"34"}
    assert winners_by_type(draw, CORRIDO) == {"59", "84"}
    assert winners_by_type(draw, CENTENA) == {"234"}
    assert winners_by_type(draw, PARLE) == draw.parle_winners
    assert winners_by_type(draw, TRIPLETA) == draw.tripleta_winners
    assert winners_by_type(draw, POSICION) == frozenset()
    assert winners_by_type(None, FIJO) == frozenset()
