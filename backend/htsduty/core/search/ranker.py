"""Relevance scoring for normalized tariff lines.

Scores are only meaningful relative to each other within one search.
Text matching adds, structure multiplies:

    score = phrase + tokens
    score *= ten_digit            (fully specific lines first)
    score -= nesoi                (catch-alls sink, strong matches survive)
    score *= short_desc * shortness
    score *= chapter * chapter_boosts[chapter]   (divides instead when negative)
    score += last_two_digits / 1000   (deterministic tie-break)
"""

import re
from typing import Sequence

from pydantic import BaseModel

from htsduty.schemas.tariff import NormalizedTariffItem


class RankingWeights(BaseModel):
    exact_phrase: float = 5.0
    token_match: float = 1.6
    fuzzy_token: float = 0.6
    title_boost: float = 1.3
    notes_boost: float = 1.05
    ten_digit_boost: float = 1.4
    nesoi_penalty: float = 1.8
    short_desc_boost: float = 0.9
    chapter_boost: float = 1.0


DEFAULT_WEIGHTS = RankingWeights()

_NON_WORD_RE = re.compile(r"[^\w\s]")


def tokenize(text: str) -> list[str]:
    return _NON_WORD_RE.sub(" ", text.lower()).split()


def within_one_edit(a: str, b: str) -> bool:
    """True if a and b differ by at most one insert, delete or substitute.

    Single linear scan; only near-equal lengths are considered.
    """
    if a == b:
        return True
    if abs(len(a) - len(b)) > 1:
        return False

    i = j = edits = 0
    while i < len(a) and j < len(b):
        if a[i] == b[j]:
            i += 1
            j += 1
            continue
        edits += 1
        if edits > 1:
            return False
        if len(a) > len(b):
            i += 1
        elif len(a) < len(b):
            j += 1
        else:
            i += 1
            j += 1
    if i < len(a) or j < len(b):
        edits += 1
    return edits <= 1


def shortness_factor(n_tokens: int) -> float:
    return max(0.7, min(1.15, 1.15 - n_tokens / 30))


def score_item(
    item: NormalizedTariffItem,
    query: str,
    expanded_tokens: Sequence[Sequence[str]],
    fuzzy_edits_cap: int = 1,
    chapter_boosts: dict[int, float] | None = None,
    weights: RankingWeights | None = None,
) -> float:
    """Compute the relevance score of one item for a query."""
    w = weights or DEFAULT_WEIGHTS

    title = item.description.lower()
    notes = (item.notes or "").lower()
    needle = query.strip().lower()

    score = 0.0

    if needle and needle in title:
        score += w.exact_phrase * w.title_boost
    if needle and needle in notes:
        score += w.exact_phrase * (w.notes_boost - 0.3)

    title_tokens = tokenize(title)
    notes_tokens = tokenize(notes)
    title_set = set(title_tokens)
    notes_set = set(notes_tokens)

    for tokens in expanded_tokens:
        for t in tokens:
            if t in title_set:
                score += w.token_match * w.title_boost
            elif t in notes_set:
                score += w.token_match * w.notes_boost
            elif fuzzy_edits_cap > 0 and any(
                within_one_edit(x, t) for x in (*title_tokens, *notes_tokens)
            ):
                score += w.fuzzy_token

    if item.is_ten_digit:
        score *= w.ten_digit_boost
    if item.has_nesoi:
        score -= w.nesoi_penalty

    score *= w.short_desc_boost * shortness_factor(len(title_tokens))

    factor = w.chapter_boost * (chapter_boosts or {}).get(item.chapter, 1.0)
    # A boost above 1 must raise the score even when NESOI pushed it below zero.
    score = score / factor if score < 0 and factor > 0 else score * factor

    score += int(item.code10[-2:]) / 1000
    return score
