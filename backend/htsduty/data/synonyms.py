"""Query expansion tables: synonyms and known typos.

Hand-maintained and intentionally small. Add entries as real queries
show up; keys are lowercase search terms.
"""

# ── Synonyms (term -> related terms, searched in this order) ─────
SYNONYMS: dict[str, list[str]] = {
    "sneakers": ["trainers", "running shoes", "athletic shoes", "tennis shoes"],
    "trainers": ["sneakers", "running shoes", "athletic shoes"],
    "running shoes": ["sneakers", "athletic shoes"],
    "safety footwear": ["protective footwear", "safety shoes", "steel toe"],
    "golf shoes": ["golf footwear", "sports footwear"],
    "work boots": ["safety footwear", "protective footwear"],
    "hoodie": ["hooded sweatshirt", "pullover"],
    "tshirt": ["t-shirt", "tee"],
    "laptop": ["portable computer", "notebook computer"],
    "backpack": ["rucksack"],
}

# ── Typos (misspelling -> correction) ────────────────────────────
TYPOS: dict[str, str] = {
    "snekaers": "sneakers",
    "sneekers": "sneakers",
    "hoody": "hoodie",
    "labtop": "laptop",
}
