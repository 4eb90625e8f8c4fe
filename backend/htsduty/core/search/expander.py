"""Query expansion: fixed typo corrections plus synonym variants."""

from htsduty.data.synonyms import SYNONYMS, TYPOS


def expand_query(query: str) -> list[str]:
    """Expand a search term into lowercase variants, corrected term first.

    Order-preserving and deduplicated; the first occurrence wins.
    """
    base = query.strip().lower()
    corrected = TYPOS.get(base, base)
    variants = [corrected, *SYNONYMS.get(corrected, [])]
    return list(dict.fromkeys(variants))
