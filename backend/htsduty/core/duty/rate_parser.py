"""Parser for the HTS "General rate of duty" column.

Rate text is legal prose, not a grammar anyone enforces: "Free",
"2.5%", "2%*", "$1.035/kg + 17.2%", "20¢/doz. pr.", "2 c per doz. pr.",
"2% + $0.50/gross". The parser runs several independent pattern passes
over the text and collects every component it recognizes, converting
units onto a small canonical basis (kg, pair, unit, dozen).
"""

import re
from typing import Callable

from htsduty.schemas.tariff import (
    ParsedRate,
    PercentageComponent,
    RateComponent,
    SpecificComponent,
)

KG_PER_LB = 0.45359237

_FREE_RE = re.compile(r"^free\b", re.IGNORECASE)

# Footnote marks after the sign ("2%*", "2%†") don't matter for the match.
_PERCENT_RE = re.compile(r"(\d+(?:\.\d+)?)\s*%")

_UNIT = r"([A-Za-z.\s0-9]+)\b"

# (pattern, divisor applied to the number before unit mapping)
_AMOUNT_PASSES: list[tuple[re.Pattern, float]] = [
    (re.compile(r"\$?\s*(\d+(?:\.\d+)?)\s*/\s*" + _UNIT, re.IGNORECASE), 1.0),
    (re.compile(r"\$\s*(\d+(?:\.\d+)?)\s*per\s*" + _UNIT, re.IGNORECASE), 1.0),
    (re.compile(r"(\d+(?:\.\d+)?)\s*c\s*(?:per|/)\s*" + _UNIT, re.IGNORECASE), 100.0),
    (re.compile(r"(\d+(?:\.\d+)?)\s*¢\s*/\s*" + _UNIT, re.IGNORECASE), 100.0),
]

_DOZEN_RE = re.compile(r"\b(doz|dozen|dz)\b")
_PAIR_RE = re.compile(r"\b(pair|pairs|pr|prs)\b")


def _has(pattern: str) -> Callable[[str], bool]:
    compiled = re.compile(pattern)
    return lambda unit: compiled.search(unit) is not None


# Ordered unit rules: (matches, canonical unit, value multiplier).
# Priority matters. "doz pr" also satisfies the pair-only and dozen-only
# rules, so the combined dozen-pair rule has to be tried before both.
_UNIT_RULES: list[tuple[Callable[[str], bool], str, float]] = [
    (_has(r"\bkgs?\b"), "kg", 1.0),
    (_has(r"\bg(?:rams?)?\b"), "kg", 1000.0),
    (_has(r"\b(?:lb|lbs|pound|pounds)\b"), "kg", 1.0 / KG_PER_LB),
    (lambda u: bool(_DOZEN_RE.search(u) and _PAIR_RE.search(u)), "pair", 1.0 / 12),
    (lambda u: _PAIR_RE.search(u) is not None, "pair", 1.0),
    (lambda u: _DOZEN_RE.search(u) is not None, "dozen", 1.0),
    (_has(r"\bgross\b"), "unit", 1.0 / 144),
    (_has(r"\b(?:no|unit|each|u)\b"), "unit", 1.0),
]


def normalize_unit(unit: str) -> str:
    """Case-fold a unit token and strip periods and extra whitespace."""
    return re.sub(r"\s+", " ", unit.lower().replace(".", "")).strip()


def to_specific(value: float, unit: str) -> SpecificComponent:
    """Map an amount and its normalized unit onto the canonical basis.

    Unrecognized units are kept verbatim so the calculator can flag them.
    """
    for matches, per, factor in _UNIT_RULES:
        if matches(unit):
            return SpecificComponent(value=value * factor, per=per)
    return SpecificComponent(value=value, per=unit)


def classify(components: list[RateComponent]) -> str:
    has_pct = any(c.kind == "percentage" for c in components)
    has_amount = any(c.kind == "specific" for c in components)
    if has_pct and has_amount:
        return "compound"
    if has_pct:
        return "advalorem"
    return "specific"


def parse_rate(raw: str | None) -> ParsedRate | None:
    """Parse general rate text into typed components.

    Returns None when there is no text or nothing recognizable in it.
    """
    if not raw or not raw.strip():
        return None

    text = re.sub(r"\s+", " ", raw).strip()

    if _FREE_RE.match(text):
        return ParsedRate(
            rate_type="advalorem",
            components=[PercentageComponent(value=0.0)],
            raw=raw,
        )

    components: list[RateComponent] = []

    for m in _PERCENT_RE.finditer(text):
        components.append(PercentageComponent(value=float(m.group(1)) / 100))

    for pattern, divisor in _AMOUNT_PASSES:
        for m in pattern.finditer(text):
            value = float(m.group(1)) / divisor
            unit = normalize_unit(m.group(2))
            if not unit:
                continue
            components.append(to_specific(value, unit))

    if not components:
        return None

    return ParsedRate(rate_type=classify(components), components=components, raw=raw)
