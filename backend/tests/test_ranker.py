import pytest

from htsduty.core.normalization import normalize_item
from htsduty.core.search import RankingWeights, score_item
from htsduty.core.search.ranker import shortness_factor, tokenize, within_one_edit


def item(code, description, notes=None):
    raw = {"htsno": code, "description": description}
    if notes:
        raw["notes"] = notes
    return normalize_item(raw)


def score(it, query, **kwargs):
    return score_item(it, query, [query.lower().split()], **kwargs)


def test_exact_phrase_beats_token_overlap():
    phrase = item("6404.11.90.00", "Running shoes for men")
    scattered = item("6404.19.90.00", "Shoes, running style, men")
    assert score(phrase, "running shoes") > score(scattered, "running shoes")


def test_ten_digit_beats_eight_digit_with_same_text():
    ten = item("6404.11.90.00", "Sneakers of textile")
    eight = item("6404.11.90", "Sneakers of textile")
    assert score(ten, "sneakers") > score(eight, "sneakers")


def test_nesoi_sinks_below_specific_line():
    specific = item("6404.19.90.00", "Sneakers, other")
    catch_all = item("6404.19.90.00", "Sneakers, nesoi")
    assert score(specific, "sneakers") > score(catch_all, "sneakers")


def test_chapter_boost_reorders():
    footwear = item("6404.11.90.00", "Yoga shoes")
    sports = item("9506.91.00.00", "Yoga shoes")
    assert score(footwear, "yoga") == pytest.approx(score(sports, "yoga"))
    assert score(sports, "yoga", chapter_boosts={95: 2.0}) > score(footwear, "yoga")


def test_chapter_boost_lifts_negative_nesoi_score():
    catch_all = item("6404.19.90.00", "Other footwear, nesoi")
    base = score(catch_all, "sneakers")
    assert base < 0
    assert score(catch_all, "sneakers", chapter_boosts={64: 2.0}) > base
    assert score(catch_all, "sneakers", chapter_boosts={64: 0.5}) < base


def test_title_match_outranks_notes_match():
    in_title = item("4202.92.00.00", "Backpacks of textile")
    in_notes = item("4202.92.00.00", "Bags of textile", notes="Includes backpacks")
    assert score(in_title, "backpacks") > score(in_notes, "backpacks")


def test_fuzzy_cap_controls_typo_credit():
    it = item("6404.11.90.00", "Sneakers")
    assert score(it, "sneakrs", fuzzy_edits_cap=1) > score(it, "sneakrs", fuzzy_edits_cap=0)


def test_tie_break_by_last_two_digits():
    a = item("6404.11.90.10", "Sneakers")
    b = item("6404.11.90.20", "Sneakers")
    assert score(b, "sneakers") - score(a, "sneakers") == pytest.approx(0.01)


def test_expanded_variants_add_credit():
    it = item("6404.11.90.00", "Trainers of textile")
    plain = score_item(it, "sneakers", [["sneakers"]])
    expanded = score_item(it, "sneakers", [["sneakers"], ["trainers"]])
    assert expanded > plain


def test_custom_weights():
    it = item("6404.11.90.00", "Sneakers")
    heavy = RankingWeights(exact_phrase=50.0)
    assert score(it, "sneakers", weights=heavy) > score(it, "sneakers")


@pytest.mark.parametrize(
    "a,b,expected",
    [
        ("shoes", "shoes", True),
        ("shoes", "shoe", True),
        ("shoe", "shoes", True),
        ("shoes", "shoed", True),
        ("shoes", "soles", False),
        ("sneakrs", "sneakers", True),
        ("shoes", "sole", False),
        ("boots", "bats", False),
        ("a", "abc", False),
    ],
)
def test_within_one_edit(a, b, expected):
    assert within_one_edit(a, b) is expected


def test_shortness_factor_clamped():
    assert shortness_factor(0) == pytest.approx(1.15)
    assert shortness_factor(100) == pytest.approx(0.7)
    assert shortness_factor(3) == pytest.approx(1.05)


def test_tokenize_strips_punctuation():
    assert tokenize("T-shirts, of cotton; knitted") == ["t", "shirts", "of", "cotton", "knitted"]
