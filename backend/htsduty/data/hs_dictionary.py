"""Local HS dictionary: everyday product words -> HS6 headings.

Last-resort resolution when the USITC API can't be reached or has no
hit. Entries carry no duty rate; they only point the user at a heading.
"""

# ── Product dictionary (keyword -> HS6) ──────────────────────────
HS_DICT: dict[str, dict] = {
    # Apparel
    "t-shirt": {"code": "610910", "description": "T-shirts of cotton, knitted or crocheted"},
    "shirt": {"code": "620520", "description": "Men's or boys' shirts of cotton, not knitted"},
    "dress": {"code": "620442", "description": "Women's or girls' dresses of cotton"},
    "jeans": {"code": "620342", "description": "Men's or boys' trousers of cotton"},
    "jacket": {"code": "620193", "description": "Men's or boys' anoraks, windcheaters of man-made fibres"},
    # Footwear
    "shoes": {"code": "640419", "description": "Footwear with outer soles of rubber or plastics"},
    "sneakers": {"code": "640411", "description": "Sports footwear with outer soles of rubber or plastics"},
    "boots": {"code": "640391", "description": "Footwear covering the ankle, leather uppers"},
    "sandals": {"code": "640319", "description": "Footwear with leather uppers, not covering the ankle"},
    # Electronics
    "laptop": {"code": "847130", "description": "Portable digital automatic data processing machines"},
    "mobile phone": {"code": "851712", "description": "Telephones for cellular networks or for other wireless networks"},
    "headphones": {"code": "851830", "description": "Headphones and earphones, whether or not with microphone"},
    "television": {"code": "852872", "description": "Reception apparatus for television"},
    # Bags & accessories
    "handbag": {"code": "420221", "description": "Handbags with outer surface of leather"},
    "backpack": {"code": "420292", "description": "Backpacks with outer surface of textile materials"},
    "wallet": {"code": "420231", "description": "Wallets and purses with outer surface of leather"},
    "belt": {"code": "420330", "description": "Belts of leather or composition leather"},
    # Home
    "ceramic plate": {"code": "691110", "description": "Tableware and kitchenware of porcelain or china"},
    "knife": {"code": "821192", "description": "Knives with fixed blades"},
    "glass cup": {"code": "701337", "description": "Drinking glasses of glass"},
    # Sporting goods
    "yoga mat": {"code": "950691", "description": "Articles and equipment for general physical exercise (incl. mats)"},
    "dumbbell": {"code": "950691", "description": "Weights / dumbbells; equipment for general physical exercise"},
    "kettlebell": {"code": "950691", "description": "Equipment for general physical exercise (weights, kettlebells, etc.)"},
    # Tools
    "hammer": {"code": "820520", "description": "Hammers and sledge hammers"},
    "screwdriver": {"code": "820540", "description": "Screwdrivers"},
    # Toys
    "doll": {"code": "950300", "description": "Dolls representing only human beings"},
    "board game": {"code": "950490", "description": "Articles for arcade, table or parlor games"},
    # Eyewear
    "sunglasses": {"code": "900410", "description": "Sunglasses"},
}

# ── Aliases (variant -> dictionary key) ──────────────────────────
HS_ALIASES: dict[str, str] = {
    "tshirt": "t-shirt",
    "tshirts": "t-shirt",
    "tee": "t-shirt",
    "tees": "t-shirt",
    "shirts": "shirt",
    "trousers": "jeans",
    "trainers": "sneakers",
    "runners": "sneakers",
    "notebook": "laptop",
    "computer": "laptop",
    "phone": "mobile phone",
    "cellphone": "mobile phone",
    "earphones": "headphones",
    "tv": "television",
    "purse": "handbag",
    "rucksack": "backpack",
    "plate": "ceramic plate",
    "mug": "glass cup",
    "yoga mats": "yoga mat",
    "dumbbells": "dumbbell",
    "kettlebells": "kettlebell",
    "toy": "doll",
    "shades": "sunglasses",
    "sunglass": "sunglasses",
}


def lookup_hs(text: str | None) -> dict | None:
    """Resolve free text to a dictionary entry.

    Tries the exact key, then an alias, then the longest dictionary key
    contained in the text. Returns {"key", "code", "description"} or None.
    """
    if not text:
        return None
    t = " ".join(text.lower().split())
    if not t:
        return None

    key = t if t in HS_DICT else HS_ALIASES.get(t)
    if key is None:
        contained = [k for k in HS_DICT if k in t]
        if contained:
            key = max(contained, key=len)
    if key is None:
        return None

    entry = HS_DICT[key]
    return {"key": key, "code": entry["code"], "description": entry["description"]}
