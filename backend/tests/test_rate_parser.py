import pytest

from htsduty.core.duty import parse_rate
from htsduty.core.duty.rate_parser import KG_PER_LB, normalize_unit, to_specific


def _pairs(parsed):
    return [(c.kind, round(c.value, 6), getattr(c, "per", None)) for c in parsed.components]


def test_free_is_zero_advalorem():
    parsed = parse_rate("Free")
    assert parsed.rate_type == "advalorem"
    assert _pairs(parsed) == [("percentage", 0.0, None)]


def test_free_with_trailing_text():
    assert parse_rate("Free (A+, AU, BH)").rate_type == "advalorem"


def test_simple_percentage():
    parsed = parse_rate("2.5%")
    assert parsed.rate_type == "advalorem"
    assert parsed.components[0].value == pytest.approx(0.025)


def test_footnote_marker_after_percent():
    assert parse_rate("2%*").components[0].value == pytest.approx(0.02)


def test_compound_dollar_per_kg_plus_percent():
    parsed = parse_rate("$1.035/kg + 17.2%")
    assert parsed.rate_type == "compound"
    kinds = {c.kind: c for c in parsed.components}
    assert kinds["percentage"].value == pytest.approx(0.172)
    assert kinds["specific"].value == pytest.approx(1.035)
    assert kinds["specific"].per == "kg"


def test_cents_per_dozen_pairs_becomes_per_pair():
    parsed = parse_rate("20¢/doz. pr.")
    assert parsed.rate_type == "specific"
    (c,) = parsed.components
    assert c.per == "pair"
    assert c.value == pytest.approx(0.2 / 12)


def test_c_per_dozen_pairs_spelled_out():
    (c,) = parse_rate("2 c per doz. pr.").components
    assert c.per == "pair"
    assert c.value == pytest.approx(0.02 / 12)


def test_percent_plus_dollars_per_gross():
    parsed = parse_rate("2% + $0.50/gross")
    assert parsed.rate_type == "compound"
    specific = [c for c in parsed.components if c.kind == "specific"][0]
    assert specific.per == "unit"
    assert specific.value == pytest.approx(0.5 / 144)


def test_pounds_convert_to_kg():
    (c,) = parse_rate("$3/lb").components
    assert c.per == "kg"
    assert c.value == pytest.approx(3 / KG_PER_LB)


def test_cents_per_kg():
    (c,) = parse_rate("1.5¢/kg").components
    assert c.per == "kg"
    assert c.value == pytest.approx(0.015)


def test_dollar_per_each():
    (c,) = parse_rate("$2/each").components
    assert (c.per, c.value) == ("unit", 2.0)


def test_unknown_unit_kept_verbatim():
    (c,) = parse_rate("$2/liter").components
    assert c.per == "liter"


@pytest.mark.parametrize("text", [None, "", "   ", "See headnote 5", "The rate applicable"])
def test_unparseable_returns_none(text):
    assert parse_rate(text) is None


def test_whitespace_collapsed_and_raw_kept():
    raw = "  5%\n  + $1/kg "
    parsed = parse_rate(raw)
    assert parsed.raw == raw
    assert parsed.rate_type == "compound"


def test_normalize_unit():
    assert normalize_unit(" Doz.  Pr. ") == "doz pr"


def test_dozen_alone_stays_dozen():
    assert to_specific(1.2, "doz").per == "dozen"
    assert to_specific(1.2, "doz").value == pytest.approx(1.2)


def test_grams_scale_to_kg():
    c = to_specific(0.002, "g")
    assert c.per == "kg"
    assert c.value == pytest.approx(2.0)
