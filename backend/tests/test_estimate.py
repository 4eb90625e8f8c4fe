import asyncio

import httpx
import pytest
from pydantic import ValidationError

from htsduty.core.estimate import EstimateService
from htsduty.schemas.tariff import EstimateRequest

from fakes import FakeUsitc, always

SLIPPERS = [
    {
        "htsno": "6405.20.30.00",
        "description": "Slippers with uppers of wool felt",
        "general": "2.5% + 20¢/doz. pr.",
    }
]


def estimate(engine, **kwargs):
    return asyncio.run(EstimateService(engine).estimate(EstimateRequest(**kwargs)))


def test_keyword_resolves_top_hit_with_alternates(make_engine, footwear):
    engine = make_engine(FakeUsitc(search_results={"sneakers": footwear}))
    result = estimate(engine, input="sneakers", price=30, qty=2)

    assert result.resolution == "hts"
    assert result.breakdown.hs_code == "6404119000"
    assert result.breakdown.hs_code_formatted == "6404.11.9000"
    assert result.breakdown.product == "sneakers"
    assert result.breakdown.country == "China"
    assert result.rate == pytest.approx(0.2)
    assert result.rate_type == "advalorem"
    assert result.duty == pytest.approx(12.0)
    assert [a.hs_code for a in result.alternates] == ["6404112000", "6404110000", "6404199000"]
    assert result.notes == []
    assert not result.degraded


def test_numeric_input_prefers_first_ten_digit_line(make_engine, footwear):
    engine = make_engine(FakeUsitc(export_records=footwear))
    result = estimate(engine, input="6404.11", price=10)

    assert result.resolution == "numeric"
    assert result.breakdown.hs_code == "6404112000"
    assert result.duty == pytest.approx(4.8)
    assert result.alternates == []


def test_compound_rate_with_quantity(make_engine):
    engine = make_engine(FakeUsitc(search_results={"slippers": SLIPPERS}))
    result = estimate(engine, input="slippers", price=10, qty=24)

    assert result.rate_type == "compound"
    assert result.rate == pytest.approx(0.025)
    assert result.duty == pytest.approx(6.4)
    assert any("specific or compound" in n for n in result.notes)


def test_compound_rate_without_quantity_notes_missing_input(make_engine):
    engine = make_engine(FakeUsitc(search_results={"slippers": SLIPPERS}))
    result = estimate(engine, input="slippers", price=10)

    assert result.duty == pytest.approx(0.25)
    assert any("per pair" in n for n in result.notes)


def test_unparseable_rate_returns_no_duty(make_engine):
    records = [
        {
            "htsno": "9903.88.03.00",
            "description": "Articles the product of China",
            "general": "The duty provided in the applicable subheading",
        }
    ]
    engine = make_engine(FakeUsitc(search_results={"china articles": records}))
    result = estimate(engine, input="china articles", price=100)

    assert result.duty is None
    assert result.rate is None
    assert "HTS General (raw): The duty provided in the applicable subheading" in result.notes


def test_falls_back_to_dictionary_when_upstream_down(make_engine):
    result = estimate(make_engine(always(500, "down")), input="Yoga Mat", price=20)

    assert result.resolution == "dict"
    assert result.duty is None
    assert result.breakdown.hs_code == "9506910000"
    assert result.breakdown.hs_code_formatted == "9506.91.0000"
    assert result.notes[0].startswith('HTS search failed for "Yoga Mat"')
    assert "local dictionary" in result.notes[-1]


def test_nothing_found(make_engine):
    result = estimate(make_engine(FakeUsitc()), input="unobtainium", price=5)
    assert result.resolution == "none"
    assert result.duty is None
    assert result.notes == ["No HTS or dictionary match found."]


def test_numeric_lookup_failure_without_dictionary_hit(make_engine):
    result = estimate(make_engine(always(500, "down")), input="9506.91", price=5)
    assert result.resolution == "none"
    assert result.notes[0].startswith("USITC lookup failed")


def test_degraded_search_is_flagged(make_engine, context, footwear):
    estimate(make_engine(FakeUsitc(search_results={"sneakers": footwear})), input="sneakers")

    async def hang(request):
        await asyncio.sleep(5)
        return httpx.Response(200, json=[])

    result = estimate(make_engine(hang, timeout_s=0.05), input="sneakers", price=10)
    assert result.degraded
    assert result.breakdown.hs_code == "6404119000"
    assert "cached results" in result.notes[-1]


@pytest.mark.parametrize("text", ["", "   "])
def test_empty_input_rejected(make_engine, text):
    with pytest.raises(ValueError):
        estimate(make_engine(FakeUsitc()), input=text)


@pytest.mark.parametrize("field", ["price", "qty", "weight_kg"])
@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
def test_request_rejects_non_finite_numbers(field, value):
    with pytest.raises(ValidationError):
        EstimateRequest(input="sneakers", **{field: value})
