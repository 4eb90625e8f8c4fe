from htsduty.core.search import expand_query
from htsduty.data.hs_dictionary import lookup_hs


def test_typo_corrected_then_expanded():
    assert expand_query("  Snekaers ") == [
        "sneakers",
        "trainers",
        "running shoes",
        "athletic shoes",
        "tennis shoes",
    ]


def test_unknown_term_passes_through_lowercased():
    assert expand_query("Ceramic Mug") == ["ceramic mug"]


def test_no_duplicates_and_original_first():
    variants = expand_query("trainers")
    assert variants[0] == "trainers"
    assert len(variants) == len(set(variants))


def test_lookup_exact_key():
    hit = lookup_hs("Yoga Mat")
    assert hit == {
        "key": "yoga mat",
        "code": "950691",
        "description": "Articles and equipment for general physical exercise (incl. mats)",
    }


def test_lookup_alias():
    assert lookup_hs("tshirts")["key"] == "t-shirt"


def test_lookup_longest_contained_key():
    assert lookup_hs("blue cotton t-shirt for kids")["key"] == "t-shirt"


def test_lookup_miss():
    assert lookup_hs("quantum flux capacitor") is None
    assert lookup_hs("") is None
